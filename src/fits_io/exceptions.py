from enum import StrEnum
from pathlib import Path

from container_models.formats import describe_bitpix


class FitsCodecError(Exception):
    """Base class for every failure raised by the FITS codec."""

    def __init__(self, message: str):
        super().__init__(message)


class IOOperation(StrEnum):
    OPEN = "open"
    QUERY = "query"
    READ = "read"
    CREATE = "create"
    WRITE = "write"
    CLOSE = "close"


class FitsStatusError(FitsCodecError):
    """Raised when the FITS library reports a failed I/O operation."""

    def __init__(self, operation: IOOperation, path: Path | str, reason: str):
        self.operation = operation
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"failed to {operation} {self.path}: {reason}")


class StructureError(FitsCodecError):
    """Raised when a file is well formed but not something the codec can handle."""


class UnexpectedUnitError(StructureError):
    def __init__(self, found: str):
        self.found = found
        super().__init__(f"expected IMAGE_HDU, got {found}")


class UnsupportedPixelFormatError(StructureError):
    def __init__(self, bitpix: int):
        self.bitpix = bitpix
        super().__init__(f"unexpected data type: {describe_bitpix(bitpix)}")


class UnsupportedDimensionalityError(StructureError):
    def __init__(self, naxis: int):
        self.naxis = naxis
        super().__init__(
            f"expected 1-dimensional or 2-dimensional data, got {naxis}-dimensional data"
        )


class DimensionBoundsError(FitsCodecError):
    """Raised when declared axis extents are outside ``[1, INT_MAX)``."""

    def __init__(self, extents: tuple[int, ...], problem: str):
        self.extents = extents
        noun = "dimension" if len(extents) == 1 else "dimensions"
        shape = "x".join(str(extent) for extent in extents)
        super().__init__(f"image {noun} {shape} {problem}")
