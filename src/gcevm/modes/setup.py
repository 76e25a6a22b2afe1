import time
from collections.abc import Callable, Mapping
from enum import Enum
from typing import Any

from .. import actions, gcloud
from ..actions import RunContext, StateChannel
from ..compute import get_instance_template_url
from ..config import Config, load_config, read_inputs
from ..core import (
    OUTPUT_INSTANCE_IP,
    OUTPUT_INSTANCE_NAME,
    STATE_AUTO_DELETE,
    STATE_INSTANCE,
)
from ..errors import PreconditionError
from ..logger import logger
from ..naming import create_instance_name
from ..retry import create_with_retry
from ..schemas.compute import Instance, InstanceRef


class SetupPhase(str, Enum):
    IDLE = "idle"
    AUTHENTICATED = "authenticated"
    CONFIG_LOADED = "config-loaded"
    TEMPLATE_RESOLVED = "template-resolved"
    NAME_GENERATED = "name-generated"
    STATE_PERSISTED = "state-persisted"
    INSTANCE_PROVISIONING = "instance-provisioning"
    DONE = "done"
    FAILED = "failed"


def ensure_gcloud() -> None:
    if not gcloud.is_installed():
        raise PreconditionError(
            "gcloud is not installed. Install it using google-github-actions/setup-gcloud."
        )
    if not gcloud.is_authenticated():
        raise PreconditionError(
            "Not authenticated with Google Cloud Platform. "
            "Authenticate using google-github-actions/auth."
        )


def persist_state(state: StateChannel, config: Config, ref: InstanceRef) -> None:
    """
    Records what teardown needs. Runs before the create call so an instance
    can be cleaned up even if this process dies mid-creation.
    """
    state.set(STATE_AUTO_DELETE, "true" if config.auto_delete else "false")
    state.set(STATE_INSTANCE, ref.model_dump())


class SetupOrchestrator:
    """Provisions the instance for the main step of the action."""

    def __init__(
        self,
        state: StateChannel,
        inputs: Mapping[str, Any] | None = None,
        context: RunContext | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.state = state
        self.inputs = inputs
        self.context = context
        self.sleep = sleep
        self.phase = SetupPhase.IDLE

    def _advance(self, phase: SetupPhase) -> None:
        logger.debug(f"setup: {self.phase.value} -> {phase.value}")
        self.phase = phase

    def run(self) -> Instance:
        try:
            return self._run()
        except Exception:
            self._advance(SetupPhase.FAILED)
            raise

    def _run(self) -> Instance:
        # 1. Preconditions
        ensure_gcloud()
        context = self.context or RunContext.from_env()
        self._advance(SetupPhase.AUTHENTICATED)

        # 2. Configuration
        inputs = self.inputs if self.inputs is not None else read_inputs()
        config = load_config(inputs, gcloud.read_defaults())
        self._advance(SetupPhase.CONFIG_LOADED)

        # 3. Template
        with actions.group("Retrieve Instance Template"):
            template_url = get_instance_template_url(
                config.source_instance_template, config.project
            )
        self._advance(SetupPhase.TEMPLATE_RESOLVED)

        # 4. Name
        name = create_instance_name(
            config.name_prefix, context.owner, context.repo, context.run_id
        )
        self._advance(SetupPhase.NAME_GENERATED)

        # 5. State for teardown
        ref = InstanceRef(name=name, project=config.project, zone=config.zone)
        persist_state(self.state, config, ref)
        self._advance(SetupPhase.STATE_PERSISTED)

        # 6. Provision
        logger.info(f"Creating instance {name} from template {template_url}")
        self._advance(SetupPhase.INSTANCE_PROVISIONING)
        with actions.group("Create Instance"):
            instance = create_with_retry(
                name,
                template_url,
                config.project,
                config.zone,
                retry_on_failure=config.retry_on_failure,
                retry_count=config.retry_count,
                sleep=self.sleep,
            )

        actions.set_output(OUTPUT_INSTANCE_NAME, instance.name)
        actions.set_output(OUTPUT_INSTANCE_IP, instance.ip)
        logger.info(f"Instance {instance.name} created with IP {instance.ip}")

        self._advance(SetupPhase.DONE)
        return instance


def run_setup(
    state: StateChannel,
    inputs: Mapping[str, Any] | None = None,
    context: RunContext | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Instance:
    return SetupOrchestrator(state, inputs, context, sleep).run()
