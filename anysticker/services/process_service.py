from __future__ import annotations

import logging

import numpy as np

from anysticker.exceptions import UnsupportedFormatError
from anysticker.models.sticker_model import RasterImage

log = logging.getLogger(__name__)


class ProcessService:
    def ensure_alpha(self, raster: RasterImage) -> RasterImage:
        """
        Гарантирует 4 канала: к RGB добавляется непрозрачная альфа (255),
        RGBA возвращается как есть. Иные раскладки — ошибка.
        """
        if raster.channels == 4:
            return raster
        if raster.channels != 3:
            raise UnsupportedFormatError(f"Неподдерживаемое число каналов: {raster.channels}")

        # split -> добавить плоскость альфы -> merge
        planes = [raster.pixels[:, :, i] for i in range(3)]
        alpha = np.full((raster.height, raster.width), 255, dtype=np.uint8)
        merged = np.stack(planes + [alpha], axis=2)
        log.debug("Добавлен альфа-канал: %dx%d", raster.width, raster.height)
        return RasterImage(pixels=merged, source=raster.source)
