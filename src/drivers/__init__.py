"""
Runtime-polymorphic handles over decoded images.

Downstream code receives an :class:`AbstractDriver` and never needs to know
which pixel width or axis count the underlying file had; the concrete
combination is available as ``driver.kind`` when a caller needs to probe it.
"""

from .driver import AbstractDriver, ArrayOperation, Driver, DriverKind, ImageStatistics
from .settings import Settings

__all__ = (
    "AbstractDriver",
    "ArrayOperation",
    "Driver",
    "DriverKind",
    "ImageStatistics",
    "Settings",
)
