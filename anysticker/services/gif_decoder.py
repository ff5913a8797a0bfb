"""Низкоуровневый разбор GIF без сторонних декодеров.

Используется как запасной путь, когда универсальный читатель кадров не
справился с файлом. Файл целиком разбирается в таблицу кадров (`GifFile`),
растр первого кадра распаковывается LZW-декодером и переводится из индексов
палитры в непрозрачный RGBA.
"""
from __future__ import annotations

import logging
import struct
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import numpy as np

from anysticker.exceptions import DecodeError

log = logging.getLogger(__name__)

_EXTENSION_INTRODUCER = 0x21
_IMAGE_SEPARATOR = 0x2C
_TRAILER = 0x3B
_MAX_CODE_SIZE = 12
_MAX_TABLE_SIZE = 1 << _MAX_CODE_SIZE

# (first row, step) for each of the four interlace passes
_INTERLACE_PASSES = ((0, 8), (4, 8), (2, 4), (1, 2))


@dataclass(frozen=True)
class GifFrame:
    left: int
    top: int
    width: int
    height: int
    interlaced: bool
    color_table: Optional[bytes]
    min_code_size: int
    data: bytes


@dataclass(frozen=True)
class GifFile:
    width: int
    height: int
    global_color_table: Optional[bytes]
    frames: List[GifFrame] = field(default_factory=list)


class _ByteReader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise DecodeError(f"GIF обрезан: нужно {size} байт по смещению {self._pos}")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.read(1)[0]

    def sub_blocks(self) -> bytes:
        """Склеивает цепочку подблоков до блока нулевой длины."""
        parts = []
        while True:
            size = self.byte()
            if size == 0:
                return b"".join(parts)
            parts.append(self.read(size))


def _color_table_size(packed: int) -> int:
    return 3 * (1 << ((packed & 0x07) + 1))


def parse_gif(data: bytes) -> GifFile:
    """Разбирает байты GIF в таблицу кадров.

    Raises:
        DecodeError: неверная сигнатура, обрезанные данные или неизвестный блок.
    """
    reader = _ByteReader(data)
    signature = reader.read(6)
    if signature not in (b"GIF87a", b"GIF89a"):
        raise DecodeError(f"Неверная сигнатура GIF: {signature!r}")

    width, height, packed, _background, _aspect = struct.unpack("<HHBBB", reader.read(7))
    global_table = reader.read(_color_table_size(packed)) if packed & 0x80 else None

    frames: List[GifFrame] = []
    while not reader.at_end:
        block = reader.byte()
        if block == _TRAILER:
            break
        if block == _EXTENSION_INTRODUCER:
            reader.byte()  # label; graphic control, comments etc. are not needed
            reader.sub_blocks()
            continue
        if block != _IMAGE_SEPARATOR:
            raise DecodeError(f"Неизвестный блок GIF 0x{block:02X}")

        left, top, frame_w, frame_h, frame_packed = struct.unpack("<HHHHB", reader.read(9))
        local_table = reader.read(_color_table_size(frame_packed)) if frame_packed & 0x80 else None
        min_code_size = reader.byte()
        if not 2 <= min_code_size <= 8:
            raise DecodeError(f"Недопустимый размер кода LZW: {min_code_size}")
        frames.append(
            GifFrame(
                left=left,
                top=top,
                width=frame_w,
                height=frame_h,
                interlaced=bool(frame_packed & 0x40),
                color_table=local_table,
                min_code_size=min_code_size,
                data=reader.sub_blocks(),
            )
        )
    else:
        # no trailer: tolerated as long as every frame block was complete
        log.debug("GIF без завершающего блока, кадров: %d", len(frames))

    return GifFile(width=width, height=height, global_color_table=global_table, frames=frames)


def read_gif(path: str | Path) -> GifFile:
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeError(f"Не удалось открыть GIF {path}: {exc}") from exc
    return parse_gif(data)


def lzw_decode(data: bytes, min_code_size: int, pixel_count: int) -> bytes:
    """Распаковывает поток LZW переменной длины кода в индексы палитры.

    Returns:
        Ровно `pixel_count` индексов; лишние данные отбрасываются.

    Raises:
        DecodeError: недопустимый код или данных меньше, чем пикселей.
    """
    clear_code = 1 << min_code_size
    end_code = clear_code + 1
    code_size = min_code_size + 1
    table: List[bytes] = [bytes([i]) for i in range(clear_code)] + [b"", b""]

    out = bytearray()
    prev: Optional[bytes] = None
    bits = 0
    bit_count = 0

    for value in data:
        bits |= value << bit_count
        bit_count += 8
        while bit_count >= code_size:
            code = bits & ((1 << code_size) - 1)
            bits >>= code_size
            bit_count -= code_size

            if code == clear_code:
                code_size = min_code_size + 1
                del table[end_code + 1:]
                prev = None
                continue
            if code == end_code:
                return _checked(out, pixel_count)

            if prev is None:
                if code >= clear_code:
                    raise DecodeError(f"Недопустимый первый код LZW: {code}")
                entry = table[code]
            elif code < len(table):
                entry = table[code]
                if len(table) < _MAX_TABLE_SIZE:
                    table.append(prev + entry[:1])
            elif code == len(table) and len(table) < _MAX_TABLE_SIZE:
                entry = prev + prev[:1]
                table.append(entry)
            else:
                raise DecodeError(f"Недопустимый код LZW: {code}")

            out += entry
            prev = entry
            if len(table) == (1 << code_size) and code_size < _MAX_CODE_SIZE:
                code_size += 1

            if len(out) >= pixel_count:
                return _checked(out, pixel_count)

    return _checked(out, pixel_count)


def _checked(out: bytearray, pixel_count: int) -> bytes:
    if len(out) < pixel_count:
        raise DecodeError(f"Данных кадра не хватает: {len(out)} из {pixel_count} пикселей")
    return bytes(out[:pixel_count])


def deinterlace(indices: np.ndarray) -> np.ndarray:
    """Восстанавливает порядок строк чересстрочного кадра."""
    height = indices.shape[0]
    rows = [row for start, step in _INTERLACE_PASSES for row in range(start, height, step)]
    result = np.empty_like(indices)
    result[rows] = indices
    return result


def frame_to_rgba(gif: GifFile, index: int = 0) -> np.ndarray:
    """Переводит кадр в массив (H, W, 4) с полной непрозрачностью.

    Берётся локальная палитра кадра, при её отсутствии — глобальная.
    Индекс за пределами палитры заменяется на 0.

    Raises:
        DecodeError: кадра нет, он пуст или у него нет палитры.
    """
    if index >= len(gif.frames):
        raise DecodeError(f"В GIF нет кадра {index}, всего кадров: {len(gif.frames)}")
    frame = gif.frames[index]
    if frame.width == 0 or frame.height == 0:
        raise DecodeError(f"Кадр {index} пуст: {frame.width}x{frame.height}")

    table = frame.color_table if frame.color_table is not None else gif.global_color_table
    if table is None:
        raise DecodeError("В GIF нет таблицы цветов")
    palette = np.frombuffer(table, dtype=np.uint8).reshape(-1, 3)

    raw = lzw_decode(frame.data, frame.min_code_size, frame.width * frame.height)
    indices = np.frombuffer(raw, dtype=np.uint8).reshape(frame.height, frame.width)
    if frame.interlaced:
        indices = deinterlace(indices)
    indices = np.where(indices < len(palette), indices, 0)

    rgba = np.empty((frame.height, frame.width, 4), dtype=np.uint8)
    rgba[..., :3] = palette[indices]
    rgba[..., 3] = 255
    return rgba
