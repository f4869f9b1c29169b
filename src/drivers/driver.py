"""
Type-erased image drivers.

A :class:`Driver` pairs one :class:`Settings` value with exactly one typed
image container. Callers receive it as :class:`AbstractDriver` and work with it
through capabilities only, never through the concrete pixel type or axis count.
The concrete combination is exposed as a :class:`DriverKind` tag, one per
`(PixelFormat, Dimensionality)` pair:

- `(FLOAT32, ONE_D)` wraps a float32 :class:`Image1D`
- `(FLOAT32, TWO_D)` wraps a float32 :class:`Image2D`
- `(FLOAT64, ONE_D)` wraps a float64 :class:`Image1D`
- `(FLOAT64, TWO_D)` wraps a float64 :class:`Image2D`
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Generic, NamedTuple, TypeAlias, TypeVar

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel
from returns.result import ResultE, safe

from container_models import Dimensionality, ImageContainer, PixelFormat
from utils.logger import log_railway_function

from .settings import Settings

ArrayOperation: TypeAlias = Callable[[NDArray[np.floating]], NDArray]

C = TypeVar("C", bound=ImageContainer)


class DriverKind(NamedTuple):
    pixel_format: PixelFormat
    dimensionality: Dimensionality


class ImageStatistics(BaseModel):
    size: int
    null_count: int
    minimum: float | None
    maximum: float | None
    mean: float | None


class AbstractDriver(ABC):
    """The capability set shared by every driver, independent of pixel type and shape."""

    @property
    @abstractmethod
    def settings(self) -> Settings: ...

    @property
    @abstractmethod
    def image(self) -> ImageContainer: ...

    @property
    @abstractmethod
    def kind(self) -> DriverKind: ...

    @abstractmethod
    def statistics(self) -> ImageStatistics: ...

    @abstractmethod
    def apply(self, operation: ArrayOperation) -> ResultE[AbstractDriver]: ...

    @property
    def pixel_format(self) -> PixelFormat:
        return self.kind.pixel_format

    @property
    def dimensionality(self) -> Dimensionality:
        return self.kind.dimensionality

    @property
    def extents(self) -> tuple[int, ...]:
        return self.image.extents

    @property
    def size(self) -> int:
        return self.image.size

    @property
    def null_count(self) -> int:
        return self.image.null_count

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(source={str(self.settings.source)!r}, "
            f"pixel_format={self.pixel_format.name}, extents={self.extents})"
        )


class Driver(AbstractDriver, Generic[C]):
    """The concrete unit of work: settings plus one exclusively owned container."""

    def __init__(self, settings: Settings, image: C) -> None:
        self._settings = settings
        self._image = image

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def image(self) -> C:
        return self._image

    @property
    def kind(self) -> DriverKind:
        return DriverKind(self._image.pixel_format, self._image.dimensionality)

    def statistics(self) -> ImageStatistics:
        """NaN-aware summary of the samples; the extrema are None when every sample is null."""
        valid = self._image.data[~self._image.null_mask]  # type: ignore[attr-defined]
        if valid.size == 0:
            return ImageStatistics(
                size=self.size, null_count=self.null_count, minimum=None, maximum=None, mean=None
            )
        return ImageStatistics(
            size=self.size,
            null_count=self.null_count,
            minimum=float(valid.min()),
            maximum=float(valid.max()),
            mean=float(valid.mean(dtype=np.float64)),
        )

    @log_railway_function("Failed to apply operation to image", "Successfully applied operation")
    @safe
    def apply(self, operation: ArrayOperation) -> Driver[C]:
        """
        Run an array operation on a copy of the samples.

        The result must keep the image shape; it is converted back to the
        driver's pixel format and wrapped in a new driver with the same
        settings. This driver's buffer is left untouched.

        :param operation: Function taking and returning a sample array.
        :returns: A new driver of the same kind.
        """
        data = np.asarray(
            operation(self._image.data.copy()),  # type: ignore[attr-defined]
            dtype=self.pixel_format.dtype,
        )
        if data.shape != self._image.data.shape:  # type: ignore[attr-defined]
            raise ValueError(
                f"Operation changed the image shape from {self._image.data.shape} to {data.shape}"  # type: ignore[attr-defined]
            )
        return Driver(self._settings, self._image.model_copy(update={"data": data}, deep=False))
