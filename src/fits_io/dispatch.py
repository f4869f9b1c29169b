from collections.abc import Callable
from functools import partial
from itertools import product
from pathlib import Path
from typing import TypeAlias

from loguru import logger
from pydantic import BaseModel, ConfigDict
from returns.io import impure_safe

from container_models import Dimensionality, ImageContainer, PixelFormat
from drivers import AbstractDriver, Driver, DriverKind, Settings
from utils.logger import log_railway_function

from .exceptions import (
    IOOperation,
    UnsupportedDimensionalityError,
    UnsupportedPixelFormatError,
)
from .opener import ImageHandle, open_image_for_reading
from .reader import axis_lengths, read_image_data_1d, read_image_data_2d
from .status import status_gate

ImageReader: TypeAlias = Callable[[ImageHandle], ImageContainer]

_READER_PER_DIMENSIONALITY = {
    Dimensionality.ONE_D: read_image_data_1d,
    Dimensionality.TWO_D: read_image_data_2d,
}

READERS: dict[DriverKind, ImageReader] = {
    DriverKind(pixel_format, dimensionality): partial(
        _READER_PER_DIMENSIONALITY[dimensionality], pixel_format=pixel_format
    )
    for pixel_format, dimensionality in product(PixelFormat, Dimensionality)
}


class ImageInfo(BaseModel):
    """Structural metadata of an image unit, read without decoding its samples."""

    path: Path
    index: int
    pixel_format: PixelFormat
    dimensionality: Dimensionality
    extents: tuple[int, ...]

    model_config = ConfigDict(frozen=True)


def resolve_kind(handle: ImageHandle) -> DriverKind:
    """
    Map the unit's ``BITPIX`` and ``NAXIS`` onto the closed set of driver kinds.

    :raises FitsStatusError: If either keyword cannot be read.
    :raises UnsupportedPixelFormatError: If ``BITPIX`` is not a float encoding.
    :raises UnsupportedDimensionalityError: If ``NAXIS`` is not 1 or 2.
    """
    with status_gate(IOOperation.QUERY, handle.path):
        bitpix = int(handle.header["BITPIX"])
    if (pixel_format := PixelFormat.from_bitpix(bitpix)) is None:
        raise UnsupportedPixelFormatError(bitpix)
    with status_gate(IOOperation.QUERY, handle.path):
        naxis = int(handle.header["NAXIS"])
    if (dimensionality := Dimensionality.from_naxis(naxis)) is None:
        raise UnsupportedDimensionalityError(naxis)
    return DriverKind(pixel_format, dimensionality)


@log_railway_function("Failed to load image", "Successfully loaded image")
@impure_safe
def from_image(settings: Settings) -> AbstractDriver:
    """
    Load the image named by ``settings.source`` behind an abstract driver.

    The pixel format and axis count are read from the file; the matching reader
    decodes the samples and the file is closed before this returns.

    :param settings: Settings whose ``source`` names the file, optionally with a
        ``[N]`` data unit selector.
    :returns: ``IOSuccess`` with the driver, or ``IOFailure`` with the
        :class:`FitsCodecError` describing why the file was rejected.
    """
    handle = open_image_for_reading(settings.source)
    try:
        kind = resolve_kind(handle)
        logger.debug(f"Decoding {handle.path} as {kind.pixel_format.label}, {kind.dimensionality}-D")
        image = READERS[kind](handle)
    finally:
        # the reader closes on its own paths, this covers a failed dispatch
        if not handle.closed:
            handle.close()
    return Driver(settings, image)


@log_railway_function("Failed to inspect image")
@impure_safe
def inspect_image(source: Path | str) -> ImageInfo:
    """Read the pixel format, axis count and extents of an image unit without decoding it."""
    handle = open_image_for_reading(source)
    try:
        kind = resolve_kind(handle)
        with status_gate(IOOperation.QUERY, handle.path):
            extents = axis_lengths(handle.header, kind.dimensionality)
    finally:
        handle.close()
    return ImageInfo(
        path=handle.path,
        index=handle.index,
        pixel_format=kind.pixel_format,
        dimensionality=kind.dimensionality,
        extents=extents,
    )
