"""Загрузка статичных изображений с диска в `RasterImage`.

Принципы:
- SRP: класс отвечает только за декодирование одного кадра с сохранением альфа-канала.
- LSP/ISP: возвращает `RasterImage` в RGB или RGBA; прочие режимы PIL приводятся здесь.
"""
from __future__ import annotations

import logging
import struct
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from anysticker.exceptions import DecodeError
from anysticker.models.sticker_model import RasterImage

log = logging.getLogger(__name__)

_ALPHA_MODES = {"RGBA", "LA", "PA", "RGBa", "La"}


def normalize_mode(image: Image.Image) -> Image.Image:
    """Приводит изображение PIL к RGB или RGBA, не теряя прозрачность."""
    if image.mode in ("RGB", "RGBA"):
        return image
    if image.mode in _ALPHA_MODES or "transparency" in image.info:
        return image.convert("RGBA")
    if image.mode.startswith("I;16"):
        # 16-bit grayscale: scale down to 8 bits before expanding to RGB
        return image.convert("I").point(lambda value: value / 256).convert("L").convert("RGB")
    return image.convert("RGB")


class ImageService:
    def load_image(self, file_path: str | Path) -> RasterImage:
        """Декодирует файл целиком, сохраняя существующий альфа-канал.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `RasterImage` с 3 (без альфы) или 4 каналами.

        Raises:
            DecodeError: если файла нет, он не распознан как изображение или пуст.
        """
        path = Path(file_path)
        if not path.is_file():
            raise DecodeError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as image:
                image.load()
                if image.width <= 0 or image.height <= 0:
                    raise DecodeError(f"Изображение пусто: {path}")
                normalized = normalize_mode(image)
                raster = RasterImage.from_pil(normalized, source=path)
        except UnidentifiedImageError as exc:
            raise DecodeError(f"Файл не является изображением: {path}") from exc
        except (
            OSError,
            ValueError,
            IndexError,
            RuntimeError,
            SyntaxError,
            struct.error,
            Image.DecompressionBombError,
        ) as exc:
            raise DecodeError(f"Не удалось декодировать {path}: {exc}") from exc

        log.debug("Загружено %s: %dx%d, каналов %d", path, raster.width, raster.height, raster.channels)
        return raster
