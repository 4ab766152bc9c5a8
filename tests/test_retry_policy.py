import pytest
from sqlalchemy.exc import OperationalError as SAOperationalError

from app.core.errors import ConfigurationError, ErrorKind, classify_error, is_transient_error
from app.database import connect_with_retry


class OperationalError(Exception):
    """Stands in for the raw driver error seen inside ``do_connect``."""


def wrapped(message):
    return SAOperationalError("SELECT 1", {}, Exception(message))


def test_classify_error_kinds():
    assert classify_error(ConfigurationError("x")) is ErrorKind.configuration
    assert classify_error(TimeoutError()) is ErrorKind.timeout
    assert classify_error(wrapped("connection refused")) is ErrorKind.connectivity
    assert classify_error(wrapped("timeout expired")) is ErrorKind.timeout
    assert classify_error(OperationalError("server closed the connection")) is ErrorKind.connectivity
    assert classify_error(ConnectionResetError()) is ErrorKind.connectivity
    assert classify_error(ValueError("boom")) is ErrorKind.unknown


def test_transient_errors():
    assert is_transient_error(wrapped("could not connect to server: Connection refused"))
    assert is_transient_error(OperationalError("timeout expired"))
    assert not is_transient_error(wrapped('password authentication failed for user "postgres"'))
    assert not is_transient_error(OperationalError('database "nope" does not exist'))
    assert not is_transient_error(ValueError("boom"))


def test_retries_transient_failures_then_succeeds():
    attempts = []
    sleeps = []

    def connect():
        attempts.append(1)
        if len(attempts) < 3:
            raise OperationalError("could not connect to server: Connection refused")
        return "connection"

    assert connect_with_retry(connect, 3, 10.0, sleep=sleeps.append) == "connection"
    assert len(attempts) == 3
    assert sleeps == [1.0, 2.0]


def test_gives_up_after_max_retry_count_with_capped_delay():
    attempts = []
    sleeps = []

    def connect():
        attempts.append(1)
        raise OperationalError("timeout expired")

    with pytest.raises(OperationalError):
        connect_with_retry(connect, 3, 1.5, sleep=sleeps.append)
    assert len(attempts) == 4
    assert sleeps == [1.0, 1.5, 1.5]


def test_permanent_failures_are_not_retried():
    sleeps = []

    def connect():
        raise OperationalError("password authentication failed")

    with pytest.raises(OperationalError):
        connect_with_retry(connect, 3, 10.0, sleep=sleeps.append)
    assert sleeps == []
