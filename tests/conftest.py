import logging
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import numpy as np
import pytest
from astropy.io import fits
from loguru import logger
from numpy.typing import NDArray

from container_models import Image1D, Image2D
from settings import get_settings

TEST_ROOT = Path(__file__).parent

FitsFactory: TypeAlias = Callable[..., Path]


class PropagateHandler(logging.Handler):
    """Handler that propagates loguru records to standard logging."""

    def emit(self, record: logging.LogRecord) -> None:
        logging.getLogger(record.name).handle(record)


@pytest.fixture
def caplog(caplog):
    """Fixture to enable caplog to capture loguru logs."""
    handler_id = logger.add(PropagateHandler(), format="{message}")
    yield caplog
    logger.remove(handler_id)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Drop the cached codec settings so environment changes in a test take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_fits(tmp_path: Path) -> FitsFactory:
    """Build a factory writing a primary image unit, or a given HDU list, into `tmp_path`."""

    def _write(
        name: str,
        data: NDArray | None = None,
        *,
        hdus: list[fits.ImageHDU | fits.TableHDU | fits.BinTableHDU] | None = None,
    ) -> Path:
        path = tmp_path / name
        hdul = fits.HDUList([fits.PrimaryHDU(data=data), *(hdus or [])])
        hdul.writeto(path)
        return path

    return _write


@pytest.fixture(scope="session")
def samples_2d() -> NDArray[np.float64]:
    """A 3 row by 4 column ramp with two null samples."""
    data = np.arange(12, dtype=np.float64).reshape(3, 4)
    data[0, 1] = np.nan
    data[2, 3] = np.nan
    return data


@pytest.fixture(scope="session")
def samples_1d() -> NDArray[np.float32]:
    data = np.linspace(-1.0, 1.0, 7, dtype=np.float32)
    data[3] = np.nan
    return data


@pytest.fixture
def image_1d(samples_1d: NDArray[np.float32]) -> Image1D:
    return Image1D(data=samples_1d.copy())


@pytest.fixture
def image_2d(samples_2d: NDArray[np.float64]) -> Image2D:
    return Image2D(data=samples_2d.copy())

