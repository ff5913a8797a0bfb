"""Модели данных конвейера стикеров.

Принципы:
- SRP: только структуры данных и их инварианты, без логики обработки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости; растр
  передаётся от стадии к стадии, а не разделяется между ними.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import numpy as np
from PIL import Image

from anysticker.exceptions import ErrorKind, InvalidSizeError

STICKER_SIDE = 512
PNG_COMPRESS_LEVEL = 9
DEFAULT_QUALITY = 100


class OutputFormat(Enum):
    PNG = ("PNG", ".png")
    WEBP = ("WEBP", ".webp")

    @property
    def pil_format(self) -> str:
        return self.value[0]

    @property
    def suffix(self) -> str:
        return self.value[1]


@dataclass(frozen=True)
class ProcessingOptions:
    """Параметры одного запуска.

    Fields:
        format: Формат вывода (PNG по умолчанию).
        quality: Качество 1..100, учитывается только для WEBP.
        pattern: Маска файлов для пакетного режима (`*` или `*.ext`).
        workers: Размер пула потоков в пакетном режиме; 1 — последовательно.
    """
    format: OutputFormat = OutputFormat.PNG
    quality: int = DEFAULT_QUALITY
    pattern: str = "*"
    workers: int = 1

    def __post_init__(self) -> None:
        if not 1 <= self.quality <= 100:
            raise ValueError(f"Качество должно быть в диапазоне 1..100: {self.quality}")
        if self.workers < 1:
            raise ValueError(f"Число потоков должно быть >= 1: {self.workers}")


@dataclass(frozen=True)
class RasterImage:
    """Декодированный растр формы (H, W, C), dtype uint8, порядок каналов RGB(A).

    Fields:
        pixels: Буфер пикселей; после создания доступен только для чтения.
        source: Файл, из которого получен растр, если известен.
    """
    pixels: np.ndarray
    source: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.pixels.ndim != 3:
            raise ValueError(f"Ожидался массив (H, W, C), получено измерений: {self.pixels.ndim}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"Ожидался dtype uint8, получено: {self.pixels.dtype}")
        height, width, _channels = self.pixels.shape
        if width <= 0 or height <= 0:
            raise InvalidSizeError(f"Пустой растр: {width}x{height}")
        self.pixels.setflags(write=False)

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def channels(self) -> int:
        return int(self.pixels.shape[2])

    @property
    def has_alpha(self) -> bool:
        return self.channels == 4

    @classmethod
    def from_pil(cls, image: Image.Image, source: Optional[Path] = None) -> "RasterImage":
        """Снимает копию пикселей с изображения PIL в режиме RGB или RGBA."""
        if image.mode not in ("RGB", "RGBA"):
            raise ValueError(f"Ожидался режим RGB/RGBA, получено: {image.mode}")
        return cls(pixels=np.array(image, dtype=np.uint8), source=source)

    def to_pil(self) -> Image.Image:
        if self.channels not in (3, 4):
            raise ValueError(f"Нет режима PIL для {self.channels} каналов")
        # (H, W, 3|4) uint8 maps to RGB|RGBA
        return Image.fromarray(np.ascontiguousarray(self.pixels))


@dataclass(frozen=True)
class ProcessingResult:
    """Итог обработки одного файла (или всего пакета при раннем выходе).

    Fields:
        input_path: Исходный файл или каталог.
        output_path: Целевой файл или каталог.
        success: Удалось ли записать стикер.
        error: Текст ошибки; пустая строка тогда и только тогда, когда success.
        error_kind: Вид ошибки; None тогда и только тогда, когда success.
    """
    input_path: Path
    output_path: Path
    success: bool
    error: str = ""
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, input_path: Path, output_path: Path) -> "ProcessingResult":
        return cls(input_path=input_path, output_path=output_path, success=True)

    @classmethod
    def failed(cls, input_path: Path, output_path: Path, error: str, kind: ErrorKind) -> "ProcessingResult":
        return cls(
            input_path=input_path,
            output_path=output_path,
            success=False,
            error=error or kind.value,
            error_kind=kind,
        )
