from collections.abc import Sequence
from functools import partial
from typing import Annotated, Any, Self, TypeAlias

import numpy as np
from numpy.typing import DTypeLike, NDArray
from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, PlainSerializer

SUPPORTED_DTYPES: tuple[np.dtype, ...] = (np.dtype(np.float32), np.dtype(np.float64))


class ConfigBaseModel(BaseModel):
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        extra="forbid",
        frozen=True,
        revalidate_instances="always",
    )

    def model_copy(self, *, update: dict[str, Any] | None = None, deep: bool = True) -> Self:
        """Copy the model, validating any updated fields. Arrays are not shared unless `deep` is False."""
        copied = super().model_copy(deep=deep)
        if not update:
            return copied
        return type(self)(**{**dict(copied), **update})


def serialize_ndarray(array_: NDArray[Any]) -> list:
    """Serialize numpy array to a Python list for JSON serialization."""
    return array_.tolist()


def coerce_to_array(dtype: DTypeLike, value: Sequence | NDArray | None) -> NDArray | None:
    """
    Coerce input to dtype numpy array.

    Handles JSON deserialization where Python creates int64 integers by default.
    """
    if isinstance(value, Sequence) and not isinstance(value, str):
        try:
            return np.array(value, dtype=dtype)
        except OverflowError as ofe:
            raise ValueError("Array's value(s) out of range") from ofe

    return value


def validate_shape(n_dims: int, value: NDArray) -> NDArray:
    if (array_dims := len(value.shape)) != n_dims:
        raise ValueError(
            f"Array shape mismatch, expected {n_dims} dimension(s), but got {array_dims}"
        )
    return value


def validate_float_dtype(value: NDArray) -> NDArray:
    """Accept 32- and 64-bit floats only, converting non-native byte order to native."""
    native = value.dtype.newbyteorder("=")
    if native not in SUPPORTED_DTYPES:
        raise ValueError(
            f"Array dtype mismatch, expected float32 or float64, but got {value.dtype}"
        )
    if value.dtype != native:
        return value.astype(native)
    return value


FloatArray: TypeAlias = Annotated[
    NDArray[np.floating],
    BeforeValidator(partial(coerce_to_array, np.float64)),
    AfterValidator(validate_float_dtype),
    PlainSerializer(serialize_ndarray),
]
FloatArray1D: TypeAlias = Annotated[FloatArray, AfterValidator(partial(validate_shape, 1))]
FloatArray2D: TypeAlias = Annotated[FloatArray, AfterValidator(partial(validate_shape, 2))]

SampleBuffer1D = FloatArray1D  # Shape: (x,)
SampleBuffer2D = FloatArray2D  # Shape: (y, x)
NullMask: TypeAlias = NDArray[np.bool_]
