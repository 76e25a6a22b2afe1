import pytest
from tenacity import RetryCallState

from gcevm.errors import ExecutionError, MissingAddressError
from gcevm.retry import (
    backoff_ceiling,
    create_with_retry,
    max_attempts,
    wait_full_jitter,
)
from gcevm.schemas.compute import Instance

INSTANCE = Instance(name="vm-1", project="p", zone="z", ip="34.1.2.3")


def _failure(n):
    return ExecutionError(["compute", "instances", "create", "vm-1"], 1, f"attempt {n}")


def test_backoff_ceiling():
    assert [backoff_ceiling(n) for n in range(1, 7)] == [
        10.0,
        30.0,
        90.0,
        270.0,
        300.0,
        300.0,
    ]


def _retry_state(attempt):
    state = RetryCallState(retry_object=None, fn=None, args=(), kwargs={})
    state.attempt_number = attempt
    return state


def test_wait_full_jitter_within_ceiling():
    for attempt in range(1, 8):
        for _ in range(50):
            delay = wait_full_jitter(_retry_state(attempt))
            assert 0.0 <= delay <= backoff_ceiling(attempt)


def test_wait_full_jitter_samples_whole_range(mocker):
    mock_uniform = mocker.patch("random.uniform", return_value=12.5)

    assert wait_full_jitter(_retry_state(2)) == 12.5
    mock_uniform.assert_called_once_with(0, 30.0)


@pytest.mark.parametrize(
    "retry_on_failure,retry_count,expected", [(False, 5, 1), (False, 1, 1), (True, 3, 3)]
)
def test_max_attempts(retry_on_failure, retry_count, expected):
    assert max_attempts(retry_on_failure, retry_count) == expected


def test_single_attempt_without_retry(mocker):
    mock_create = mocker.patch(
        "gcevm.retry.create_instance", side_effect=_failure(1)
    )
    sleep = mocker.Mock()

    with pytest.raises(ExecutionError):
        create_with_retry("vm-1", "uri://t", "p", "z", False, 5, sleep=sleep)

    assert mock_create.call_count == 1
    sleep.assert_not_called()


def test_retries_until_success(mocker):
    mock_create = mocker.patch(
        "gcevm.retry.create_instance", side_effect=[_failure(1), INSTANCE]
    )
    sleep = mocker.Mock()

    instance = create_with_retry("vm-1", "uri://t", "p", "z", True, 3, sleep=sleep)

    assert instance == INSTANCE
    assert mock_create.call_count == 2
    assert sleep.call_count == 1
    mock_create.assert_called_with("vm-1", "uri://t", "p", "z")


def test_last_error_propagates_after_all_attempts(mocker):
    failures = [_failure(1), _failure(2), _failure(3)]
    mock_create = mocker.patch("gcevm.retry.create_instance", side_effect=failures)
    mocker.patch("random.uniform", side_effect=lambda lo, hi: hi)
    sleep = mocker.Mock()

    with pytest.raises(ExecutionError) as exc_info:
        create_with_retry("vm-1", "uri://t", "p", "z", True, 3, sleep=sleep)

    assert exc_info.value is failures[2]
    assert mock_create.call_count == 3
    assert [c.args[0] for c in sleep.call_args_list] == [10.0, 30.0]


def test_failed_attempts_logged_as_warnings(mocker):
    mocker.patch(
        "gcevm.retry.create_instance", side_effect=[_failure(1), _failure(2), INSTANCE]
    )
    mock_logger = mocker.patch("gcevm.retry.logger")

    create_with_retry("vm-1", "uri://t", "p", "z", True, 5, sleep=mocker.Mock())

    assert mock_logger.warning.call_count == 2
    assert "Attempt 1" in mock_logger.warning.call_args_list[0].args[0]


def test_address_errors_are_not_retried(mocker):
    mock_create = mocker.patch(
        "gcevm.retry.create_instance", side_effect=MissingAddressError("no ip")
    )
    sleep = mocker.Mock()

    with pytest.raises(MissingAddressError):
        create_with_retry("vm-1", "uri://t", "p", "z", True, 5, sleep=sleep)

    assert mock_create.call_count == 1
    sleep.assert_not_called()
