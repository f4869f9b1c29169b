import logging
import sys
from enum import Enum
from functools import wraps
from itertools import chain
from typing import Any, Callable

from loguru import logger
from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure, Result, Success

from settings import get_settings

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function} - {message}"


def configure_logging(level: str | None = None) -> int:
    """
    Replace the loguru sinks with a single stderr sink.

    :param level: Minimum level to emit. Defaults to the configured `log_level`.
    :returns: The id of the installed sink.
    """
    logger.remove()
    return logger.add(
        sys.stderr, level=(level or get_settings().log_level).upper(), format=LOG_FORMAT
    )


def _debug_function_signature(func: Callable[..., Any], *args, **kwargs):
    """Log the function signature of a railway call."""
    signature = ", ".join(
        chain(
            (repr(arg) for arg in args),
            (f"{key}={repr(value)}" for key, value in kwargs.items()),
        )
    )
    logger.debug(f"Calling {func.__name__}({signature})")


class FailureLevel(Enum):
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def log_failure(failure_message: str, failure_level: FailureLevel, error: object) -> None:
    """
    Log a failure: the detail at DEBUG, then `failure_message` at `failure_level`.

    An exception is attached to the DEBUG record, so a wrapped library error
    shows up through its `__cause__` chain.
    """
    exception = error if isinstance(error, BaseException) else None
    logger.opt(exception=exception).debug(f"{failure_message}: {error}")
    match failure_level:
        case FailureLevel.WARNING:
            logger.warning(failure_message)
        case FailureLevel.ERROR:
            logger.error(failure_message)
        case FailureLevel.CRITICAL:
            logger.critical(failure_message)


def _log_io_container(
    result: IOResult,
    failure_message: str,
    success_message: str | None,
    failure_level: FailureLevel,
) -> None:
    match result:
        case IOSuccess():
            if success_message:
                logger.info(success_message)
        case IOFailure(Failure(error)):
            log_failure(failure_message, failure_level, error)


def _log_container(
    result: Result,
    failure_message: str,
    success_message: str | None,
    failure_level: FailureLevel,
) -> None:
    match result:
        case Success():
            if success_message:
                logger.info(success_message)
        case Failure(error):
            log_failure(failure_message, failure_level, error)


def log_railway_function(
    failure_message: str,
    success_message: str | None = None,
    failure_level: FailureLevel = FailureLevel.ERROR,
):
    """
    Log the outcome of a function returning a `Result` or `IOResult` container.

    Successes are logged at INFO with `success_message` (skipped when empty).
    Failures log the underlying error at DEBUG followed by `failure_message`
    at `failure_level`. The container itself is returned unchanged.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if get_settings().verbose:
                _debug_function_signature(func, *args, **kwargs)
            result = func(*args, **kwargs)
            match result:
                case IOResult():
                    _log_io_container(
                        result, failure_message, success_message, failure_level
                    )
                case Result():
                    _log_container(
                        result, failure_message, success_message, failure_level
                    )
            return result

        return wrapper

    return decorator
