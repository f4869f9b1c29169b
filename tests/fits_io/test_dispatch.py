import logging
from collections.abc import Callable
from contextlib import nullcontext
from itertools import product
from pathlib import Path
from re import compile, escape
from types import SimpleNamespace
from unittest.mock import patch

import numpy as np
import pytest
from astropy.io import fits
from numpy.typing import NDArray
from returns.io import IOFailure
from returns.unsafe import unsafe_perform_io

from container_models import Dimensionality, Image1D, Image2D, PixelFormat
from drivers import AbstractDriver, DriverKind, Settings
from fits_io import (
    READERS,
    DimensionBoundsError,
    FitsStatusError,
    UnexpectedUnitError,
    UnsupportedDimensionalityError,
    UnsupportedPixelFormatError,
    from_image,
    inspect_image,
)
from fits_io.dispatch import resolve_kind
from fits_io.opener import ImageHandle, open_image_for_reading
from fits_io.reader import read_image_data_2d

from ..helper_function import unwrap_result


def is_good_fail_logs(message: str, log: str) -> bool:
    log_pattern = compile(rf"DEBUG.*{escape(message)}:[\s\S]*?ERROR.*{escape(message)}")
    return log_pattern.search(log) is not None


def _failure(result) -> Exception:
    assert isinstance(result, IOFailure)
    return unsafe_perform_io(result.failure())


def test_readers_cover_every_kind():
    assert set(READERS) == {
        DriverKind(pixel_format, dimensionality)
        for pixel_format, dimensionality in product(PixelFormat, Dimensionality)
    }


@pytest.mark.parametrize(
    "pixel_format, shape, container",
    [
        pytest.param(PixelFormat.FLOAT32, (5,), Image1D, id="float32 1-D"),
        pytest.param(PixelFormat.FLOAT32, (3, 5), Image2D, id="float32 2-D"),
        pytest.param(PixelFormat.FLOAT64, (5,), Image1D, id="float64 1-D"),
        pytest.param(PixelFormat.FLOAT64, (3, 5), Image2D, id="float64 2-D"),
    ],
)
@pytest.mark.integration
def test_from_image_selects_matching_driver(
    write_fits: Callable[..., Path],
    pixel_format: PixelFormat,
    shape: tuple[int, ...],
    container: type,
):
    # Arrange
    data = np.arange(np.prod(shape), dtype=pixel_format.dtype).reshape(shape)
    path = write_fits("image.fits", data)

    # Act
    driver = unwrap_result(from_image(Settings(source=path)))

    # Assert
    assert isinstance(driver, AbstractDriver)
    assert driver.kind == DriverKind(pixel_format, Dimensionality(len(shape)))
    assert isinstance(driver.image, container)
    assert driver.extents == tuple(reversed(shape))
    np.testing.assert_array_equal(driver.image.data, data)


@pytest.mark.integration
def test_from_image_substitutes_nan_for_nulls(
    write_fits: Callable[..., Path], samples_2d: NDArray[np.float64]
):
    path = write_fits("nulls.fits", samples_2d)

    driver = unwrap_result(from_image(Settings(source=path)))

    assert driver.null_count == 2
    np.testing.assert_array_equal(driver.image.null_mask, np.isnan(samples_2d))


@pytest.mark.integration
def test_from_image_reads_selected_extension(write_fits: Callable[..., Path]):
    data = np.ones((2, 3), dtype=np.float32)
    path = write_fits("extension.fits", hdus=[fits.ImageHDU(data=data)])

    driver = unwrap_result(from_image(Settings(source=f"{path}[1]", threshold=0.5)))

    assert driver.kind == DriverKind(PixelFormat.FLOAT32, Dimensionality.TWO_D)
    assert driver.settings.options == {"threshold": 0.5}


@pytest.fixture
def close_spy():
    """Spy on `ImageHandle.close` while still closing the file."""
    real_close = ImageHandle.close
    with patch.object(ImageHandle, "close", autospec=True, side_effect=real_close) as close:
        yield close


@pytest.mark.integration
class TestFileIsClosed:
    def test_after_successful_decode(self, write_fits: Callable[..., Path], close_spy):
        path = write_fits("closed.fits", np.ones(3))

        _ = unwrap_result(from_image(Settings(source=path)))

        close_spy.assert_called_once()
        assert close_spy.call_args.args[0].closed

    @pytest.mark.parametrize(
        "data, target, side_effect, error_type",
        [
            pytest.param(
                np.zeros((2, 2), dtype=np.uint8), None, None, UnsupportedPixelFormatError,
                id="integer BITPIX",
            ),
            pytest.param(
                np.zeros((2, 2, 2), dtype=np.float32), None, None, UnsupportedDimensionalityError,
                id="three axes",
            ),
            pytest.param(
                np.ones(4, dtype=np.float64),
                "fits_io.reader.verify_dim_1d",
                DimensionBoundsError((4,), "too large"),
                DimensionBoundsError,
                id="bounds violation",
            ),
            pytest.param(
                np.ones(4, dtype=np.float32),
                "fits_io.reader.Image1D.allocate",
                MemoryError("out of memory"),
                MemoryError,
                id="1-D allocation fails",
            ),
            pytest.param(
                np.ones((2, 3), dtype=np.float64),
                "fits_io.reader.Image2D.allocate",
                MemoryError("out of memory"),
                MemoryError,
                id="2-D allocation fails",
            ),
            pytest.param(
                np.ones(4, dtype=np.float32),
                "fits_io.opener.hdu_kind",
                RuntimeError("unreadable unit"),
                RuntimeError,
                id="unit query fails",
            ),
        ],
    )
    def test_after_failure(
        self,
        write_fits: Callable[..., Path],
        close_spy,
        data: NDArray,
        target: str | None,
        side_effect: Exception | None,
        error_type: type[Exception],
    ):
        # Arrange
        path = write_fits("failing.fits", data)
        failure_patch = patch(target, side_effect=side_effect) if target else nullcontext()

        # Act
        with failure_patch:
            error = _failure(from_image(Settings(source=path)))

        # Assert
        assert isinstance(error, error_type)
        close_spy.assert_called_once()
        assert close_spy.call_args.args[0].closed

    def test_reader_closes_when_allocation_fails(self, write_fits: Callable[..., Path]):
        path = write_fits("reader.fits", np.ones((2, 3), dtype=np.float32))
        handle = open_image_for_reading(path)

        with patch("fits_io.reader.Image2D.allocate", side_effect=MemoryError("out of memory")):
            with pytest.raises(MemoryError):
                read_image_data_2d(handle, PixelFormat.FLOAT32)

        assert handle.closed

@pytest.mark.parametrize(
    "dtype, message",
    [
        pytest.param(np.uint8, "unexpected data type: 8-bit integers", id="BITPIX 8"),
        pytest.param(np.int16, "unexpected data type: 16-bit integers", id="BITPIX 16"),
        pytest.param(np.int32, "unexpected data type: 32-bit integers", id="BITPIX 32"),
    ],
)
@pytest.mark.integration
def test_from_image_rejects_integer_images(
    write_fits: Callable[..., Path], dtype: type, message: str
):
    path = write_fits("integers.fits", np.zeros((2, 2), dtype=dtype))

    error = _failure(from_image(Settings(source=path)))

    assert isinstance(error, UnsupportedPixelFormatError)
    assert str(error) == message


@pytest.mark.integration
def test_from_image_rejects_three_axes(write_fits: Callable[..., Path]):
    path = write_fits("cube.fits", np.zeros((2, 2, 2), dtype=np.float32))

    error = _failure(from_image(Settings(source=path)))

    assert isinstance(error, UnsupportedDimensionalityError)
    assert str(error) == "expected 1-dimensional or 2-dimensional data, got 3-dimensional data"


@pytest.mark.integration
def test_from_image_rejects_tables_before_dispatch(write_fits: Callable[..., Path]):
    table = fits.BinTableHDU.from_columns([fits.Column(name="a", format="E", array=np.ones(3))])
    path = write_fits("table.fits", hdus=[table])

    error = _failure(from_image(Settings(source=f"{path}[1]")))

    assert isinstance(error, UnexpectedUnitError)
    assert str(error) == "expected IMAGE_HDU, got BINARY_TBL"


def test_from_image_reports_missing_file(tmp_path: Path):
    error = _failure(from_image(Settings(source=tmp_path / "missing.fits")))

    assert isinstance(error, FitsStatusError)


def test_from_image_logs_on_failure(tmp_path: Path, caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.DEBUG):
        _ = from_image(Settings(source=tmp_path / "missing.fits"))

    assert is_good_fail_logs("Failed to load image", caplog.text), (
        "Logs don't match expected format."
    )


def test_from_image_propagates_bounds_failures(write_fits: Callable[..., Path]):
    path = write_fits("ramp.fits", np.ones(4, dtype=np.float64))

    with patch("fits_io.reader.verify_dim_1d", side_effect=DimensionBoundsError((4,), "too large")):
        error = _failure(from_image(Settings(source=path)))

    assert str(error) == "image dimension 4 too large"


class TestResolveKind:
    @staticmethod
    def _handle(**cards: int) -> SimpleNamespace:
        return SimpleNamespace(path=Path("fake.fits"), header=fits.Header(list(cards.items())))

    def test_maps_float_codes(self):
        handle = self._handle(BITPIX=-64, NAXIS=1)

        assert resolve_kind(handle) == DriverKind(PixelFormat.FLOAT64, Dimensionality.ONE_D)  # type: ignore[arg-type]

    def test_rejects_unknown_float_width(self):
        with pytest.raises(UnsupportedPixelFormatError, match="unexpected data type: 16-bit floats"):
            resolve_kind(self._handle(BITPIX=-16, NAXIS=2))  # type: ignore[arg-type]

    def test_rejects_data_without_axes(self):
        with pytest.raises(UnsupportedDimensionalityError, match="got 0-dimensional data"):
            resolve_kind(self._handle(BITPIX=-32, NAXIS=0))  # type: ignore[arg-type]

    def test_pixel_format_is_checked_before_axis_count(self):
        with pytest.raises(UnsupportedPixelFormatError):
            resolve_kind(self._handle(BITPIX=8, NAXIS=0))  # type: ignore[arg-type]

    def test_missing_keyword_is_a_status_failure(self):
        with pytest.raises(FitsStatusError, match="failed to query fake.fits"):
            resolve_kind(self._handle(NAXIS=2))  # type: ignore[arg-type]


@pytest.mark.integration
def test_inspect_image_reads_header_only(write_fits: Callable[..., Path]):
    path = write_fits("probe.fits", np.zeros((3, 7), dtype=np.float32))

    info = unwrap_result(inspect_image(path))

    assert info.path == path
    assert info.index == 0
    assert info.pixel_format is PixelFormat.FLOAT32
    assert info.dimensionality is Dimensionality.TWO_D
    assert info.extents == (7, 3)


@pytest.mark.integration
def test_inspect_image_rejects_integer_images(write_fits: Callable[..., Path]):
    path = write_fits("integers.fits", np.zeros(3, dtype=np.int16))

    assert isinstance(_failure(inspect_image(path)), UnsupportedPixelFormatError)
