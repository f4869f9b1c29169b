from pathlib import Path

import numpy as np
from astropy.io import fits
from loguru import logger
from returns.io import impure_safe

from container_models import ImageContainer
from settings import get_settings
from utils.logger import log_railway_function

from .exceptions import IOOperation
from .status import status_gate


def _image_unit(image: ImageContainer) -> fits.PrimaryHDU:
    """Declare a primary image unit with the container's BITPIX and extents."""
    pixel_format = image.pixel_format
    # NaN is the float null, so sentinel samples are written as nulls unchanged
    data = np.ascontiguousarray(image.data, dtype=pixel_format.dtype)  # type: ignore[attr-defined]
    hdu = fits.PrimaryHDU(data=data)
    if hdu.header["BITPIX"] != pixel_format.bitpix:
        raise ValueError(
            f"expected BITPIX {pixel_format.bitpix}, got {hdu.header['BITPIX']}"
        )
    return hdu


def _discard_partial(path: Path) -> None:
    if not get_settings().remove_partial_output:
        logger.warning(f"Leaving partially written file {path}")
        return
    try:
        path.unlink(missing_ok=True)
    except OSError as error:
        # the write failure is the one reported, not this one
        logger.warning(f"Could not remove partially written file {path}: {error}")
        return
    logger.debug(f"Removed partially written file {path}")


@log_railway_function("Failed to write image", "Successfully wrote image")
@impure_safe
def write_image(path: Path | str, image: ImageContainer) -> Path:
    """
    Write a container to a new FITS file as a single primary image unit.

    Existing files are never overwritten. NaN samples are recorded as nulls.
    If writing fails after this call created the file, the partial file is
    removed unless ``remove_partial_output`` is disabled.

    :param path: Path of the file to create.
    :param image: The 1-D or 2-D container to serialize.
    :returns: ``IOSuccess`` with the written path, or ``IOFailure`` with the
        :class:`FitsStatusError` naming the failed step.
    """
    path = Path(path)
    with status_gate(IOOperation.CREATE, path):
        if path.exists():
            raise FileExistsError(f"File {path!s} already exists")
        hdu = _image_unit(image)
    try:
        with status_gate(IOOperation.WRITE, path):
            hdu.writeto(path, output_verify="exception", overwrite=False)
    except BaseException:
        if path.exists():
            _discard_partial(path)
        raise
    logger.debug(
        f"Wrote {image.pixel_format.label} {'x'.join(map(str, image.extents))} to {path}"
        f" with {image.null_count} null samples"
    )
    return path
