import re
from dataclasses import dataclass, field
from pathlib import Path

from astropy.io import fits
from loguru import logger

from container_models import HduKind

from .exceptions import IOOperation, UnexpectedUnitError
from .status import status_gate

# Extended filename syntax selecting a data unit, e.g. "image.fits[1]".
_UNIT_SELECTOR = re.compile(r"^(?P<path>.+)\[(?P<index>\d+)\]$")


@dataclass
class ImageHandle:
    """An open file positioned on an image data unit. Closed by whoever decodes it."""

    path: Path
    hdul: fits.HDUList
    index: int = 0
    closed: bool = field(default=False, init=False)

    @property
    def hdu(self) -> fits.PrimaryHDU | fits.ImageHDU:
        return self.hdul[self.index]

    @property
    def header(self) -> fits.Header:
        return self.hdu.header

    def close(self) -> None:
        with status_gate(IOOperation.CLOSE, self.path):
            self.hdul.close()
        self.closed = True


def split_source(source: Path | str) -> tuple[Path, int]:
    """
    Split a source into the file path and the selected data unit index.

    A trailing ``[N]`` selects data unit ``N`` unless a file with that literal
    name exists. Without a selector the first data unit (index 0) is used.
    """
    text = str(source)
    if not Path(text).exists() and (match := _UNIT_SELECTOR.match(text)):
        return Path(match["path"]), int(match["index"])
    return Path(text), 0


def hdu_kind(hdu: object) -> HduKind | str:
    """The kind of a data unit, or the class name of a kind the codec does not know."""
    match hdu:
        case fits.CompImageHDU() | fits.PrimaryHDU() | fits.ImageHDU():
            return HduKind.IMAGE_HDU
        case fits.TableHDU():
            return HduKind.ASCII_TBL
        case fits.BinTableHDU():
            return HduKind.BINARY_TBL
        case _:
            return type(hdu).__name__


def open_image_for_reading(source: Path | str) -> ImageHandle:
    """
    Open a FITS file read-only and check that the selected data unit holds an image.

    The returned handle is left open; the reader that decodes it closes it.

    :param source: Path of the file, optionally with a ``[N]`` data unit selector.
    :returns: The open handle.
    :raises FitsStatusError: If the file cannot be opened or the unit cannot be read.
    :raises UnexpectedUnitError: If the unit is a table or an unknown kind.
    """
    path, index = split_source(source)
    with status_gate(IOOperation.OPEN, path):
        hdul = fits.open(path, mode="readonly", memmap=False)
    handle = ImageHandle(path=path, hdul=hdul, index=index)
    try:
        with status_gate(IOOperation.QUERY, path):
            kind = hdu_kind(handle.hdu)
        if kind is not HduKind.IMAGE_HDU:
            raise UnexpectedUnitError(kind.name if isinstance(kind, HduKind) else kind)
    except BaseException:
        handle.close()
        raise
    logger.debug(f"Opened {path} data unit {index} for reading")
    return handle
