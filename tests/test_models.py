"""Data model invariants and the error hierarchy."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from anysticker.exceptions import (
    DecodeError,
    EncodeError,
    ErrorKind,
    FileSystemError,
    InvalidSizeError,
    NoMatchError,
    StickerError,
    UnsupportedFormatError,
)
from anysticker.models.sticker_model import OutputFormat, ProcessingOptions, ProcessingResult, RasterImage


class TestProcessingOptions:
    @pytest.mark.unit
    @pytest.mark.parametrize("quality", [0, 101, -1])
    def test_quality_out_of_range(self, quality):
        with pytest.raises(ValueError):
            ProcessingOptions(quality=quality)

    @pytest.mark.unit
    def test_workers_must_be_positive(self):
        with pytest.raises(ValueError):
            ProcessingOptions(workers=0)

    @pytest.mark.unit
    def test_output_format_suffixes(self):
        assert OutputFormat.PNG.suffix == ".png"
        assert OutputFormat.WEBP.suffix == ".webp"
        assert OutputFormat.WEBP.pil_format == "WEBP"


class TestRasterImage:
    @pytest.mark.unit
    @pytest.mark.parametrize("shape", [(0, 5, 3), (5, 0, 4)])
    def test_zero_dimension_is_rejected(self, shape):
        with pytest.raises(InvalidSizeError):
            RasterImage(pixels=np.zeros(shape, dtype=np.uint8))

    @pytest.mark.unit
    def test_wrong_dtype_or_rank_is_rejected(self):
        with pytest.raises(ValueError):
            RasterImage(pixels=np.zeros((4, 4, 3), dtype=np.float32))
        with pytest.raises(ValueError):
            RasterImage(pixels=np.zeros((4, 4), dtype=np.uint8))

    @pytest.mark.unit
    def test_pixels_are_read_only(self):
        raster = RasterImage(pixels=np.zeros((2, 2, 3), dtype=np.uint8))
        with pytest.raises(ValueError):
            raster.pixels[0, 0, 0] = 1

    @pytest.mark.unit
    def test_pil_round_trip_modes(self):
        rgba = RasterImage(pixels=np.zeros((3, 5, 4), dtype=np.uint8))
        image = rgba.to_pil()
        assert image.mode == "RGBA"
        assert image.size == (5, 3)
        assert RasterImage.from_pil(image.convert("RGB")).channels == 3


class TestProcessingResult:
    @pytest.mark.unit
    def test_failed_result_always_has_message(self):
        result = ProcessingResult.failed(Path("a"), Path("b"), "", ErrorKind.ENCODE)
        assert result.error == "encode"
        assert not result.success

    @pytest.mark.unit
    def test_ok_result_has_no_error(self):
        result = ProcessingResult.ok(Path("a"), Path("b"))
        assert result.success and result.error == "" and result.error_kind is None


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (DecodeError, ErrorKind.DECODE),
        (UnsupportedFormatError, ErrorKind.UNSUPPORTED_FORMAT),
        (EncodeError, ErrorKind.ENCODE),
        (FileSystemError, ErrorKind.IO),
        (NoMatchError, ErrorKind.NO_MATCH),
        (InvalidSizeError, ErrorKind.INVALID_SIZE),
    ],
)
def test_error_kinds(error, kind):
    assert issubclass(error, StickerError)
    assert error("x").kind is kind


@pytest.mark.unit
def test_builtin_bases_are_kept():
    assert issubclass(FileSystemError, OSError)
    assert issubclass(InvalidSizeError, ValueError)
