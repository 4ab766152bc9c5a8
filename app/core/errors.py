# app/core/errors.py

from enum import Enum

from sqlalchemy.exc import DBAPIError, DisconnectionError, InterfaceError, OperationalError


class ConfigurationError(RuntimeError):
    """Missing or unusable configuration; aborts startup."""


class ErrorKind(str, Enum):
    configuration = "configuration"
    connectivity = "connectivity"
    timeout = "timeout"
    unknown = "unknown"


_TIMEOUT_MARKERS = ("timeout", "timed out", "canceling statement")
_PERMANENT_MARKERS = (
    "password authentication failed",
    "authentication failed",
    "no pg_hba.conf entry",
    "does not exist",
    "tenant or user not found",
)


def _message(exc: BaseException) -> str:
    orig = getattr(exc, "orig", None)
    text = str(orig) if orig is not None else str(exc)
    return text.lower()


def classify_error(exc: BaseException) -> ErrorKind:
    if isinstance(exc, ConfigurationError):
        return ErrorKind.configuration
    if isinstance(exc, TimeoutError):
        return ErrorKind.timeout

    connectivity_types = (OperationalError, InterfaceError, DisconnectionError, OSError)
    if isinstance(exc, connectivity_types) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        if any(marker in _message(exc) for marker in _TIMEOUT_MARKERS):
            return ErrorKind.timeout
        return ErrorKind.connectivity

    # Erros crus do driver (fora do wrapper do SQLAlchemy) chegam aqui
    if type(exc).__name__ == "OperationalError":
        if any(marker in _message(exc) for marker in _TIMEOUT_MARKERS):
            return ErrorKind.timeout
        return ErrorKind.connectivity
    return ErrorKind.unknown


def is_transient_error(exc: BaseException) -> bool:
    """Worth retrying: connectivity or timeout, but not bad credentials/targets."""
    if classify_error(exc) not in (ErrorKind.connectivity, ErrorKind.timeout):
        return False
    message = _message(exc)
    return not any(marker in message for marker in _PERMANENT_MARKERS)
