"""
Closed sets of pixel encodings, axis counts and data-unit kinds.

Each :class:`PixelFormat` carries the three mappings the codec needs: the
library numeric type code, the image bit-depth code (``BITPIX``) and a human
readable label. Adding a format means adding a variant here; the reader and
writer are generic over these traits.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Final, NamedTuple

import numpy as np
from numpy.typing import DTypeLike

INT_MAX: Final[int] = 2**31 - 1


class PixelTraits(NamedTuple):
    dtype: type[np.floating]
    type_code: int  # TFLOAT / TDOUBLE
    bitpix: int  # FLOAT_IMG / DOUBLE_IMG
    label: str


class PixelFormat(Enum):
    FLOAT32 = PixelTraits(np.float32, 42, -32, "32-bit floats")
    FLOAT64 = PixelTraits(np.float64, 82, -64, "64-bit floats")

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value.dtype)

    @property
    def type_code(self) -> int:
        return self.value.type_code

    @property
    def bitpix(self) -> int:
        return self.value.bitpix

    @property
    def label(self) -> str:
        return self.value.label

    @property
    def sentinel(self) -> np.floating:
        """The null value: a quiet NaN of this format's width."""
        return self.value.dtype(np.nan)

    @classmethod
    def from_bitpix(cls, bitpix: int) -> PixelFormat | None:
        return next((fmt for fmt in cls if fmt.bitpix == bitpix), None)

    @classmethod
    def from_dtype(cls, dtype: DTypeLike) -> PixelFormat | None:
        dtype = np.dtype(dtype)
        return next((fmt for fmt in cls if fmt.dtype == dtype.newbyteorder("=")), None)


class Dimensionality(IntEnum):
    ONE_D = 1
    TWO_D = 2

    @classmethod
    def from_naxis(cls, naxis: int) -> Dimensionality | None:
        try:
            return cls(naxis)
        except ValueError:
            return None


class HduKind(IntEnum):
    """Data unit kinds, numbered as the FITS library reports them."""

    IMAGE_HDU = 0
    ASCII_TBL = 1
    BINARY_TBL = 2


def describe_bitpix(bitpix: int) -> str:
    """Render a ``BITPIX`` code, e.g. ``-32`` as "32-bit floats" and ``16`` as "16-bit integers"."""
    if bitpix < 0:
        return f"{-bitpix}-bit floats"
    return f"{bitpix}-bit integers"
