"""Расчёт размеров стикера и масштабирование растра.

Политика: длинная сторона всегда приводится ровно к 512 px, короткая
пропорционально, с отбрасыванием дробной части. Маленькие изображения
увеличиваются, а не остаются в исходном размере.
"""
from __future__ import annotations

import logging
from typing import Tuple

from PIL import Image

from anysticker.exceptions import InvalidSizeError
from anysticker.models.sticker_model import STICKER_SIDE, RasterImage

log = logging.getLogger(__name__)


def target_size(width: int, height: int) -> Tuple[int, int]:
    """Возвращает (ширина, высота) стикера для исходных размеров.

    Raises:
        InvalidSizeError: если ширина или высота <= 0.
    """
    if width <= 0 or height <= 0:
        raise InvalidSizeError(f"Недопустимый размер изображения: {width}x{height}")

    # integer arithmetic: floor(512 / r) and floor(512 * r) without float drift
    if width >= height:
        return STICKER_SIDE, max(1, STICKER_SIDE * height // width)
    return max(1, STICKER_SIDE * width // height), STICKER_SIDE


def resize_for_sticker(raster: RasterImage) -> RasterImage:
    """Масштабирует растр под требования стикера фильтром LANCZOS."""
    size = target_size(raster.width, raster.height)
    log.debug("Размер %dx%d -> %dx%d", raster.width, raster.height, size[0], size[1])
    if size == (raster.width, raster.height):
        return raster
    resized = raster.to_pil().resize(size, Image.Resampling.LANCZOS)
    return RasterImage.from_pil(resized, source=raster.source)
