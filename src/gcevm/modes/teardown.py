from enum import Enum

import pydantic

from .. import actions
from ..actions import StateChannel
from ..compute import delete_instance
from ..config import describe_errors
from ..core import STATE_AUTO_DELETE, STATE_INSTANCE
from ..errors import CleanupError, ExecutionError, ValidationError
from ..logger import logger
from ..schemas.compute import InstanceRef


class TeardownPhase(str, Enum):
    IDLE = "idle"
    STATE_READ = "state-read"
    SKIPPED = "skipped"
    DELETING = "deleting"
    DONE = "done"
    FAILED = "failed"


def read_instance_state(state: StateChannel) -> InstanceRef | None:
    raw = state.get(STATE_INSTANCE)
    if not raw:
        return None

    try:
        return InstanceRef.model_validate_json(raw)
    except pydantic.ValidationError as e:
        raise ValidationError("Invalid saved instance state", describe_errors(e)) from e


class TeardownOrchestrator:
    """Deletes the instance created by setup, if asked to."""

    def __init__(self, state: StateChannel) -> None:
        self.state = state
        self.phase = TeardownPhase.IDLE

    def _advance(self, phase: TeardownPhase) -> None:
        logger.debug(f"teardown: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def run(self) -> InstanceRef | None:
        """Returns the deleted instance, or None when there was nothing to do."""
        try:
            return self._run()
        except Exception:
            self._advance(TeardownPhase.FAILED)
            raise

    def _run(self) -> InstanceRef | None:
        # 1. Read what setup left behind
        should_auto_delete = self.state.get(STATE_AUTO_DELETE) == "true"
        if not should_auto_delete:
            self._advance(TeardownPhase.STATE_READ)
            logger.info("auto-delete disabled, instance will not be deleted")
            self._advance(TeardownPhase.SKIPPED)
            return None

        instance = read_instance_state(self.state)
        self._advance(TeardownPhase.STATE_READ)

        # 2. Nothing was named, so nothing was created
        if instance is None:
            logger.info("no instance created, nothing to delete")
            self._advance(TeardownPhase.SKIPPED)
            return None

        # 3. Delete once, no retry
        self._advance(TeardownPhase.DELETING)
        with actions.group("Delete Instance"):
            try:
                delete_instance(instance)
            except ExecutionError as e:
                raise CleanupError(
                    f"Failed to delete instance {instance.name} "
                    f"in {instance.project}/{instance.zone}: {e}"
                ) from e
            logger.info(f"Instance {instance.name} deleted")

        self._advance(TeardownPhase.DONE)
        return instance


def run_teardown(state: StateChannel) -> InstanceRef | None:
    return TeardownOrchestrator(state).run()
