"""
Typed decoders, one per dimensionality.

Each reader takes the open handle from :func:`open_image_for_reading`, checks
the declared extents, allocates a container for the requested pixel format and
fills it from the data unit in one transfer. The handle is closed before the
reader returns, whether or not decoding succeeded.
"""

from typing import TypeVar

import numpy as np
from astropy.io import fits
from loguru import logger

from container_models import Image1D, Image2D, ImageContainer, PixelFormat

from .bounds import verify_dim_1d, verify_dim_2d
from .exceptions import IOOperation
from .opener import ImageHandle
from .status import status_gate

C = TypeVar("C", bound=ImageContainer)


def axis_lengths(header: fits.Header, naxis: int) -> tuple[int, ...]:
    return tuple(int(header[f"NAXIS{axis}"]) for axis in range(1, naxis + 1))


def _decode(handle: ImageHandle, image: C) -> C:
    """Copy the data unit into the allocated buffer, NaN standing in for null samples."""
    with status_gate(IOOperation.READ, handle.path):
        # big-endian file samples become native order on copy
        np.copyto(image.data, handle.hdu.data, casting="same_kind")  # type: ignore[attr-defined]
    if null_count := image.null_count:
        logger.debug(f"{handle.path}: {null_count} of {image.size} samples are null")
    return image


def read_image_data_1d(handle: ImageHandle, pixel_format: PixelFormat) -> Image1D:
    """
    Decode a 1-D data unit.

    :param handle: Open handle positioned on an image unit. Closed on return.
    :param pixel_format: Pixel format of the container to allocate.
    :returns: The populated container.
    :raises FitsStatusError: If the extent cannot be queried or the samples read.
    :raises DimensionBoundsError: If the extent is out of bounds.
    """
    try:
        with status_gate(IOOperation.QUERY, handle.path):
            (x,) = axis_lengths(handle.header, 1)
        verify_dim_1d(x)
        return _decode(handle, Image1D.allocate(x, pixel_format))
    finally:
        handle.close()


def read_image_data_2d(handle: ImageHandle, pixel_format: PixelFormat) -> Image2D:
    """
    Decode a 2-D data unit into a ``(NAXIS2, NAXIS1)`` buffer.

    :param handle: Open handle positioned on an image unit. Closed on return.
    :param pixel_format: Pixel format of the container to allocate.
    :returns: The populated container.
    :raises FitsStatusError: If the extents cannot be queried or the samples read.
    :raises DimensionBoundsError: If the extents are out of bounds.
    """
    try:
        with status_gate(IOOperation.QUERY, handle.path):
            x, y = axis_lengths(handle.header, 2)
        verify_dim_2d(x, y)
        return _decode(handle, Image2D.allocate(x, y, pixel_format))
    finally:
        handle.close()
