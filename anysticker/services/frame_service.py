"""Извлечение одного кадра: напрямую для статики, первый кадр для анимации.

Принципы:
- OCP: стратегии декодирования анимации реализуют протокол `FrameDecoder`;
  цепочка `FrameExtractor` перебирает их по порядку до первого успеха.
- Частичный результат не возвращается: либо `RasterImage`, либо `DecodeError`.
"""
from __future__ import annotations

import logging
import struct
from pathlib import Path
from typing import List, Optional, Protocol, Sequence, Tuple

import imageio.v3 as iio
import numpy as np

from anysticker.exceptions import DecodeError, StickerError
from anysticker.models.sticker_model import RasterImage
from anysticker.services.gif_decoder import frame_to_rgba, read_gif
from anysticker.services.image_service import ImageService

log = logging.getLogger(__name__)


class FrameDecoder(Protocol):
    name: str

    def supports(self, path: Path) -> bool:
        ...

    def decode_first_frame(self, path: Path) -> RasterImage:
        """Возвращает первый кадр или бросает `DecodeError`."""
        ...


def _as_rgb_or_rgba(frame: np.ndarray) -> np.ndarray:
    """Приводит кадр читателя к форме (H, W, 3|4) и dtype uint8."""
    if frame.dtype != np.uint8:
        if np.issubdtype(frame.dtype, np.integer) and frame.dtype.itemsize == 2:
            frame = (frame >> 8).astype(np.uint8)
        else:
            frame = np.clip(frame, 0, 255).astype(np.uint8)
    if frame.ndim == 2:
        return np.repeat(frame[:, :, None], 3, axis=2)
    if frame.ndim != 3:
        raise DecodeError(f"Неожиданная форма кадра: {frame.shape}")
    channels = frame.shape[2]
    if channels == 1:
        return np.repeat(frame, 3, axis=2)
    if channels == 2:
        # gray + alpha
        return np.concatenate([np.repeat(frame[:, :, :1], 3, axis=2), frame[:, :, 1:]], axis=2)
    if channels in (3, 4):
        return frame
    raise DecodeError(f"Неожиданное число каналов кадра: {channels}")


class ImageioFrameDecoder:
    """Универсальный читатель кадров (imageio), читает только кадр с индексом 0."""

    name = "imageio"

    def supports(self, path: Path) -> bool:
        return True

    def decode_first_frame(self, path: Path) -> RasterImage:
        try:
            with iio.imopen(path, "r") as reader:
                frame = reader.read(index=0)
        except IndexError as exc:
            raise DecodeError(f"В файле нет кадров: {path}") from exc
        except Exception as exc:
            # plugins raise a variety of types for unreadable input
            raise DecodeError(f"imageio не открыл {path}: {exc}") from exc

        frame = np.asarray(frame)
        if frame.size == 0:
            raise DecodeError(f"В файле нет кадров: {path}")
        return RasterImage(pixels=np.ascontiguousarray(_as_rgb_or_rgba(frame)), source=path)


class GifFrameDecoder:
    """Собственный разбор GIF для файлов, с которыми не справился общий читатель."""

    name = "gif"

    def supports(self, path: Path) -> bool:
        return path.suffix.lower() == ".gif"

    def decode_first_frame(self, path: Path) -> RasterImage:
        try:
            gif = read_gif(path)
            log.debug("GIF %s: %dx%d, кадров %d", path, gif.width, gif.height, len(gif.frames))
            return RasterImage(pixels=frame_to_rgba(gif, 0), source=path)
        except StickerError:
            raise
        except (IndexError, RuntimeError, ValueError, struct.error) as exc:
            raise DecodeError(f"Не удалось разобрать GIF {path}: {exc}") from exc


def default_strategies() -> List[FrameDecoder]:
    return [ImageioFrameDecoder(), GifFrameDecoder()]


class FrameExtractor:
    """Цепочка стратегий для анимированных файлов плюс прямое чтение статики.

    Args:
        strategies: Декодеры анимации в порядке приоритета.
        image_service: Загрузчик статичных изображений.
    """

    def __init__(
        self,
        strategies: Optional[Sequence[FrameDecoder]] = None,
        image_service: Optional[ImageService] = None,
    ) -> None:
        self._strategies: Tuple[FrameDecoder, ...] = tuple(
            default_strategies() if strategies is None else strategies
        )
        self._image_service = image_service or ImageService()

    @property
    def strategies(self) -> Tuple[FrameDecoder, ...]:
        return self._strategies

    def extract_frame(self, path: str | Path, animated: bool) -> RasterImage:
        """Возвращает единственный кадр для конвейера.

        Raises:
            DecodeError: ни один путь не дал кадра.
        """
        path = Path(path)
        if not animated:
            return self._image_service.load_image(path)
        return self._first_animated_frame(path)

    def _first_animated_frame(self, path: Path) -> RasterImage:
        failures: List[str] = []
        last_error: Optional[DecodeError] = None
        for strategy in self._strategies:
            if not strategy.supports(path):
                continue
            try:
                raster = strategy.decode_first_frame(path)
            except DecodeError as exc:
                log.warning("Стратегия %s не прочитала %s: %s", strategy.name, path, exc)
                failures.append(f"{strategy.name}: {exc}")
                last_error = exc
                continue
            log.info("Первый кадр %s прочитан через %s", path.name, strategy.name)
            return raster

        if last_error is None:
            raise DecodeError(f"Нет подходящего декодера для {path}")
        raise DecodeError(f"{last_error} (попытки: {'; '.join(failures)})") from last_error


def extract_frame(path: str | Path, animated: bool) -> RasterImage:
    return FrameExtractor().extract_frame(path, animated)
