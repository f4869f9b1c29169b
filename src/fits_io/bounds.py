"""
Axis extent checks.

Downstream indexing and library calls count samples with 32-bit signed
integers, so every extent and the flattened 2-D sample count must stay below
``INT_MAX``.
"""

from container_models.formats import INT_MAX

from .exceptions import DimensionBoundsError


def verify_dim_1d(x: int) -> None:
    if x < 1:
        raise DimensionBoundsError((x,), "too small")
    if x >= INT_MAX:
        raise DimensionBoundsError((x,), "too large")


def verify_dim_2d(x: int, y: int) -> None:
    if x < 1 or y < 1:
        raise DimensionBoundsError((x, y), "too small")
    # exact in Python ints, no narrowing before the comparison
    if x * y >= INT_MAX:
        raise DimensionBoundsError((x, y), "too large")
