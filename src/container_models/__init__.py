"""
Typed in-memory image containers and their pixel-format traits.

This module provides the Pydantic-based containers the FITS codec decodes into
and encodes from. A container owns exactly one contiguous float buffer whose
dtype is one of the supported :class:`PixelFormat` widths and whose number of
axes matches the container's :class:`Dimensionality`. Missing samples are
stored as NaN.
"""

from .formats import INT_MAX, Dimensionality, HduKind, PixelFormat
from .image import CONTAINERS, Image1D, Image2D, ImageContainer

__all__ = [
    "CONTAINERS",
    "Dimensionality",
    "HduKind",
    "Image1D",
    "Image2D",
    "ImageContainer",
    "INT_MAX",
    "PixelFormat",
]
