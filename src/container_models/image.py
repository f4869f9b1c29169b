"""Image container architecture.

This module defines the in-memory containers the FITS codec reads into and
writes from.

Architecture
------------
::

    +--------------------------------------+
    |           ImageContainer             |
    |--------------------------------------|
    | data          : float32 | float64    |
    | pixel_format  : PixelFormat          |
    | dimensionality: Dimensionality       |
    | extents       : tuple[int, ...]      |
    | size          : int                  |
    | null_mask / null_count               |
    +------------------+-------------------+
                       ^
            +----------+----------+
            |                     |
    +-------+-------+     +-------+-------+
    |    Image1D    |     |    Image2D    |
    |---------------|     |---------------|
    | data: (x,)    |     | data: (y, x)  |
    | allocate(x)   |     | allocate(x, y)|
    +---------------+     +---------------+

- Extents are reported in FITS axis order, fastest-varying axis first, so a
  2-D image of ``x`` columns and ``y`` rows has ``extents == (x, y)`` while its
  buffer has numpy shape ``(y, x)``.
- NaN marks a missing sample. Containers compare by dtype and NaN-aware data
  equality.
"""

from __future__ import annotations

from typing import ClassVar, Self

import numpy as np
from pydantic import model_validator

from .base import ConfigBaseModel, NullMask, SampleBuffer1D, SampleBuffer2D
from .formats import INT_MAX, Dimensionality, PixelFormat


class ImageContainer(ConfigBaseModel):
    dimensionality: ClassVar[Dimensionality]

    @model_validator(mode="after")
    def validate_size(self) -> Self:
        if self.size >= INT_MAX:
            raise ValueError(f"Image holds {self.size} samples, limit is {INT_MAX - 1}")
        return self

    @property
    def pixel_format(self) -> PixelFormat:
        pixel_format = PixelFormat.from_dtype(self.data.dtype)  # type: ignore[attr-defined]
        assert pixel_format is not None, "dtype is checked on validation"
        return pixel_format

    @property
    def size(self) -> int:
        """Total number of samples."""
        return int(self.data.size)  # type: ignore[attr-defined]

    @property
    def extents(self) -> tuple[int, ...]:
        """Axis lengths in FITS order (NAXIS1 first)."""
        return tuple(int(n) for n in reversed(self.data.shape))  # type: ignore[attr-defined]

    @property
    def null_mask(self) -> NullMask:
        """Mask of the missing samples."""
        null_mask = np.isnan(self.data)  # type: ignore[attr-defined]
        null_mask.setflags(write=False)
        return null_mask

    @property
    def null_count(self) -> int:
        return int(np.count_nonzero(self.null_mask))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ImageContainer):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.data.dtype == other.data.dtype  # type: ignore[attr-defined]
            and np.array_equal(self.data, other.data, equal_nan=True)  # type: ignore[attr-defined]
        )


class Image1D(ImageContainer):
    """A 1-D run of float samples. Shape: (x,)"""

    dimensionality: ClassVar[Dimensionality] = Dimensionality.ONE_D

    data: SampleBuffer1D

    @property
    def x(self) -> int:
        return int(self.data.shape[0])

    @classmethod
    def allocate(cls, x: int, pixel_format: PixelFormat) -> Image1D:
        """Allocate an uninitialised buffer of `x` samples."""
        return cls(data=np.empty(x, dtype=pixel_format.dtype))


class Image2D(ImageContainer):
    """A 2-D row-major image of float samples. Shape: (y, x)"""

    dimensionality: ClassVar[Dimensionality] = Dimensionality.TWO_D

    data: SampleBuffer2D

    @property
    def x(self) -> int:
        """The number of columns (NAXIS1)."""
        return int(self.data.shape[1])

    @property
    def y(self) -> int:
        """The number of rows (NAXIS2)."""
        return int(self.data.shape[0])

    @classmethod
    def allocate(cls, x: int, y: int, pixel_format: PixelFormat) -> Image2D:
        """Allocate an uninitialised buffer of `y` rows by `x` columns."""
        return cls(data=np.empty((y, x), dtype=pixel_format.dtype))


CONTAINERS: dict[Dimensionality, type[ImageContainer]] = {
    Dimensionality.ONE_D: Image1D,
    Dimensionality.TWO_D: Image2D,
}
