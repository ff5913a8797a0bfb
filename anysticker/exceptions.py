"""Иерархия ошибок конвейера стикеров.

Принципы:
- Каждая ошибка несёт `ErrorKind`, чтобы оркестратор мог сложить её в
  `ProcessingResult` без разбора текста сообщения.
- Стадии конвейера бросают только эти типы; исключения библиотек
  оборачиваются через `raise ... from exc`.
"""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    DECODE = "decode"
    UNSUPPORTED_FORMAT = "unsupported_format"
    ENCODE = "encode"
    IO = "io"
    NO_MATCH = "no_match"
    INVALID_SIZE = "invalid_size"


class StickerError(Exception):
    """Базовая ошибка пакета."""

    kind: ErrorKind = ErrorKind.DECODE


class DecodeError(StickerError):
    """Источник не читается, повреждён или пуст."""

    kind = ErrorKind.DECODE


class UnsupportedFormatError(StickerError):
    """Неожиданная раскладка каналов растра."""

    kind = ErrorKind.UNSUPPORTED_FORMAT


class EncodeError(StickerError):
    kind = ErrorKind.ENCODE


class FileSystemError(StickerError, OSError):
    """Не удалось создать или прочитать каталог."""

    kind = ErrorKind.IO


class NoMatchError(StickerError):
    kind = ErrorKind.NO_MATCH


class InvalidSizeError(StickerError, ValueError):
    """Вырожденные размеры (ширина или высота <= 0)."""

    kind = ErrorKind.INVALID_SIZE
