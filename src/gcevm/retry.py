import time
from collections.abc import Callable

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from .compute import create_instance
from .core import RETRY_INITIAL_DELAY, RETRY_MAX_DELAY, RETRY_MULTIPLIER
from .errors import ExecutionError
from .logger import logger
from .schemas.compute import Instance


def backoff_ceiling(attempt: int) -> float:
    """
    Upper bound of the wait after the given failed attempt (1-based).
    10s, 30s, 90s, 270s, then capped at 300s.
    """
    return min(RETRY_MAX_DELAY, RETRY_INITIAL_DELAY * RETRY_MULTIPLIER ** (attempt - 1))


# Full jitter: uniform in [0, backoff_ceiling(attempt)]
wait_full_jitter = wait_random_exponential(
    multiplier=RETRY_INITIAL_DELAY, exp_base=RETRY_MULTIPLIER, max=RETRY_MAX_DELAY
)


def _log_failed_attempt(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"Attempt {retry_state.attempt_number} to create instance failed: {exc}. "
        f"Retrying in {delay:.1f}s"
    )


def max_attempts(retry_on_failure: bool, retry_count: int) -> int:
    return retry_count if retry_on_failure else 1


def create_with_retry(
    name: str,
    source_instance_template: str,
    project: str,
    zone: str,
    retry_on_failure: bool,
    retry_count: int,
    sleep: Callable[[float], None] = time.sleep,
) -> Instance:
    """
    Creates the instance, retrying gcloud failures with exponential backoff.
    Only ExecutionError is retried; the last attempt's error is raised.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts(retry_on_failure, retry_count)),
        wait=wait_full_jitter,
        retry=retry_if_exception_type(ExecutionError),
        before_sleep=_log_failed_attempt,
        sleep=sleep,
        reraise=True,
    )
    return retrying(create_instance, name, source_instance_template, project, zone)
