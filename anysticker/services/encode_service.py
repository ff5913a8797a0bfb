"""Запись готового растра в PNG или WEBP.

Файл сначала пишется во временный файл рядом с целью и переносится
`os.replace`, поэтому при ошибке на месте результата не остаётся обрезанного файла.
"""
from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict

from anysticker.models.sticker_model import PNG_COMPRESS_LEVEL, OutputFormat, ProcessingOptions, RasterImage

log = logging.getLogger(__name__)


def save_params(options: ProcessingOptions) -> Dict[str, Any]:
    if options.format is OutputFormat.WEBP:
        return {"quality": options.quality}
    # PNG: максимальное сжатие, quality игнорируется
    return {"compress_level": PNG_COMPRESS_LEVEL}


class EncodeService:
    def save(self, raster: RasterImage, path: str | Path, options: ProcessingOptions) -> bool:
        """Записывает растр в `path` в формате `options.format`.

        Returns:
            True при успехе; False при любой ошибке библиотеки или файловой системы
            (ошибка пишется в лог).
        """
        path = Path(path)
        tmp_name = None
        try:
            image = raster.to_pil()
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
            with os.fdopen(fd, "wb") as fh:
                image.save(fh, format=options.format.pil_format, **save_params(options))
            os.chmod(tmp_name, 0o644)
            os.replace(tmp_name, path)
            tmp_name = None
        except Exception as exc:
            # кодеки PIL бросают разные типы; наружу отдаётся только False
            log.error("Ошибка при сохранении %s: %s", path, exc)
            return False
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
        log.debug("Сохранено %s (%s)", path, options.format.name)
        return True
