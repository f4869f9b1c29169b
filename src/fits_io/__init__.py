"""
Reading and writing of floating-point FITS images.

This module loads a FITS image whose pixel format and axis count are only known
once the file is opened, and hands it back behind a single
:class:`drivers.AbstractDriver`. The inverse path writes an in-memory container
to a new file.

The module handles two workflows:
1. **Loading**: ``BITPIX`` and ``NAXIS`` select one of four readers
   (float32/float64 by 1-D/2-D); the file is closed as soon as the samples
   are decoded
2. **Saving**: A 1-D or 2-D container is written to a new file as a primary
   image unit

Supported Data
--------------
- ``BITPIX`` -32 (32-bit floats) and -64 (64-bit floats)
- ``NAXIS`` 1 and 2, with every extent at least 1 and the total sample count
  below ``INT_MAX``
- Any image unit selected with the ``file.fits[N]`` syntax; table units are
  rejected
- NaN marks a null sample in both directions

Railway Integration
-------------------
The public operations return ``IOResult`` containers and log their outcome, so
failures propagate as values. Hosts that want a failure to end the process pass
the result through :func:`exit_on_failure`.
"""

from .dispatch import READERS, ImageInfo, from_image, inspect_image
from .exceptions import (
    DimensionBoundsError,
    FitsCodecError,
    FitsStatusError,
    IOOperation,
    StructureError,
    UnexpectedUnitError,
    UnsupportedDimensionalityError,
    UnsupportedPixelFormatError,
)
from .status import exit_on_failure
from .writer import write_image

__all__ = (
    "DimensionBoundsError",
    "exit_on_failure",
    "FitsCodecError",
    "FitsStatusError",
    "from_image",
    "ImageInfo",
    "inspect_image",
    "IOOperation",
    "READERS",
    "StructureError",
    "UnexpectedUnitError",
    "UnsupportedDimensionalityError",
    "UnsupportedPixelFormatError",
    "write_image",
)
