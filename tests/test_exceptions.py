import pytest

from audiobait_client.exceptions import (
    AuthenticationError,
    ConfigurationError,
    DecodeError,
    NotAuthenticatedError,
    OperationError,
    StorageError,
    is_http_client_error,
    is_http_success,
    is_permanent_error,
    temporary_error,
)


def test_none_is_not_permanent():
    assert is_permanent_error(None) is False


@pytest.mark.parametrize(
    "error",
    [ValueError("boom"), OSError("disk"), ConfigurationError("bad config"), KeyError("x")],
)
def test_unclassified_errors_default_to_permanent(error):
    assert is_permanent_error(error) is True


def test_operation_error_flag_is_honoured():
    assert is_permanent_error(OperationError("nope")) is True
    assert is_permanent_error(OperationError("later", permanent=False)) is False


@pytest.mark.parametrize(
    "error",
    [
        AuthenticationError("bad creds"),
        NotAuthenticatedError(),
        DecodeError("decode: junk"),
        StorageError("read-only"),
    ],
)
def test_precondition_and_decode_errors_are_permanent(error):
    assert is_permanent_error(error) is True


def test_temporary_error_keeps_message():
    wrapped = temporary_error(ConnectionRefusedError("connection refused"))

    assert str(wrapped) == "connection refused"
    assert wrapped.permanent is False


def test_temporary_error_without_message_uses_type_name():
    assert str(temporary_error(TimeoutError())) == "TimeoutError"


@pytest.mark.parametrize("status", [200, 201, 204, 299])
def test_http_success_range(status):
    assert is_http_success(status)


@pytest.mark.parametrize("status", [199, 300, 302, 400, 500])
def test_http_failure_statuses(status):
    assert not is_http_success(status)


def test_http_client_error_range():
    assert is_http_client_error(400)
    assert is_http_client_error(499)
    assert not is_http_client_error(399)
    assert not is_http_client_error(500)
