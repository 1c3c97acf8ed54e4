import pytest

from image_update_checker.errors import (
    RegistryAuthenticationError,
    RegistryNotFoundError,
    RegistryServerError,
    RegistryTimeoutError,
    RegistryTooManyRequestsError,
)
from image_update_checker.retry import is_transient, with_retries


def flaky(results):
    """Return an operation that raises or returns ``results`` in order."""
    calls = []

    def operation():
        calls.append(1)
        result = results[len(calls) - 1]
        if isinstance(result, Exception):
            raise result
        return result

    return operation, calls


def test_succeeds_on_third_attempt():
    operation, calls = flaky([RegistryServerError("503", 503), RegistryServerError("503", 503), ["1.2.3"]])

    outcome = with_retries(operation)

    assert outcome.succeeded
    assert outcome.value == ["1.2.3"]
    assert outcome.attempts == 3
    assert len(calls) == 3


def test_exhausted_outcome_carries_last_error():
    error = RegistryServerError("503", 503)
    operation, calls = flaky([error, error, error, ["never"]])

    outcome = with_retries(operation)

    assert outcome.exhausted
    assert outcome.error is error
    assert outcome.attempts == 3
    assert len(calls) == 3
    with pytest.raises(RegistryServerError):
        outcome.unwrap()


def test_non_transient_errors_propagate_immediately():
    operation, calls = flaky([RegistryAuthenticationError("401", 401), ["1.2.3"]])

    with pytest.raises(RegistryAuthenticationError):
        with_retries(operation)
    assert len(calls) == 1


@pytest.mark.parametrize(
    "error, expected",
    [
        (RegistryTimeoutError("timeout"), True),
        (RegistryServerError("502", 502), True),
        (RegistryTooManyRequestsError("429", 429), True),
        (RegistryNotFoundError("404", 404), True),
        (RegistryAuthenticationError("401", 401), False),
        (ValueError("boom"), False),
    ],
)
def test_is_transient(error, expected):
    assert is_transient(error) is expected
