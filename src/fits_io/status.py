import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import NoReturn, TypeVar

from astropy.io.fits.verify import VerifyError
from loguru import logger
from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure, Result, Success

from .exceptions import FitsStatusError, IOOperation

T = TypeVar("T")

# Errors the FITS library raises for unreadable, missing or malformed records.
LIBRARY_ERRORS = (OSError, VerifyError, IndexError, KeyError, ValueError, TypeError)


@contextmanager
def status_gate(operation: IOOperation, path: Path | str) -> Iterator[None]:
    """
    Route a FITS library call through a single failure path.

    Any library error raised inside the block is re-raised as
    :class:`FitsStatusError` naming the operation and the file; the original
    exception is kept as ``__cause__``. There is no retry.
    """
    try:
        yield
    except LIBRARY_ERRORS as error:
        logger.debug(f"{operation} {path} failed with {type(error).__name__}: {error}")
        raise FitsStatusError(operation, path, str(error) or type(error).__name__) from error


def exit_on_failure(result: IOResult[T, Exception] | Result[T, Exception]) -> T:
    """
    Unwrap a railway result or terminate the process.

    For hosts that prefer the fatal behaviour: on failure the diagnostic line is
    logged at CRITICAL level and the process exits with status 1.
    """
    match result:
        case IOSuccess(Success(value)) | Success(value):
            return value
        case IOFailure(Failure(error)) | Failure(error):
            _terminate(error)
    raise TypeError(f"Expected a Result or IOResult container, got {type(result).__name__}")


def _terminate(error: Exception) -> NoReturn:
    logger.critical(str(error))
    sys.exit(1)
