"""Контроллер конвейера: оркестрация сервисов для одного файла и каталога.

SOLID:
- SRP: класс связывает стадии конвейера и собирает `ProcessingResult`, сам пиксели не трогает.
- DIP: зависит от сервисов как от ролей; любую стадию можно подменить в конструкторе.
Clean Code:
- Исключения стадий превращаются в результаты только здесь; стадии бросают типизированные ошибки.
"""
from __future__ import annotations

import fnmatch
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from anysticker.exceptions import EncodeError, FileSystemError, NoMatchError, StickerError
from anysticker.models.sticker_model import ProcessingOptions, ProcessingResult
from anysticker.services import format_sniffer
from anysticker.services.encode_service import EncodeService
from anysticker.services.frame_service import FrameExtractor
from anysticker.services.process_service import ProcessService
from anysticker.services.size_service import resize_for_sticker

log = logging.getLogger(__name__)

MSG_OUTPUT_DIR_FAILED = "Не удалось создать выходной каталог"
MSG_LIST_FAILED = "Не удалось прочитать входной каталог"
MSG_NO_MATCHES = "Не найдено файлов, подходящих под маску"


@dataclass(frozen=True)
class BatchSummary:
    total: int
    succeeded: int
    failed: int


def matches_pattern(path: Path, pattern: str) -> bool:
    """Упрощённая маска: `*` — всё, `*.ext` — расширение без учёта регистра.

    Прочие маски сравниваются через `fnmatch` по имени файла без учёта регистра.
    """
    if pattern == "*":
        return True
    if len(pattern) > 2 and pattern.startswith("*.") and not any(ch in pattern[1:] for ch in "*?["):
        return path.suffix.lower() == pattern[1:].lower()
    return fnmatch.fnmatchcase(path.name.lower(), pattern.lower())


def list_matches(directory: str | Path, pattern: str = "*") -> List[Path]:
    """Обычные файлы каталога (без рекурсии), подходящие под маску, по возрастанию пути.

    Raises:
        OSError: каталог не читается.
    """
    directory = Path(directory)
    matches = [entry for entry in directory.iterdir() if entry.is_file() and matches_pattern(entry, pattern)]
    return sorted(matches)


def output_path_for(input_path: Path, output_dir: Path, options: ProcessingOptions) -> Path:
    return output_dir / (input_path.stem + options.format.suffix)


def duplicate_outputs(jobs: Sequence[Tuple[Path, Path]]) -> Dict[Path, List[Path]]:
    """Выходные пути, в которые пишут несколько входных файлов (например, `a.jpg` и `a.png`)."""
    by_target: Dict[Path, List[Path]] = {}
    for source, target in jobs:
        by_target.setdefault(target, []).append(source)
    return {target: sources for target, sources in by_target.items() if len(sources) > 1}


def summarize(results: Sequence[ProcessingResult]) -> BatchSummary:
    succeeded = sum(1 for result in results if result.success)
    return BatchSummary(total=len(results), succeeded=succeeded, failed=len(results) - succeeded)


@dataclass
class StickerController:
    """Прогоняет файлы через конвейер «сниффер -> кадр -> альфа -> размер -> запись».

    Ответственности:
    - Обработка одного файла с результатом вместо исключения.
    - Пакетная обработка каталога с изоляцией ошибок по файлам.
    """
    frame_extractor: FrameExtractor = field(default_factory=FrameExtractor)
    process_service: ProcessService = field(default_factory=ProcessService)
    encode_service: EncodeService = field(default_factory=EncodeService)

    def process_file(
        self,
        input_path: str | Path,
        output_path: str | Path,
        options: ProcessingOptions = ProcessingOptions(),
    ) -> ProcessingResult:
        """Обрабатывает один файл; ошибки любой стадии возвращаются в результате."""
        input_path = Path(input_path)
        output_path = Path(output_path)
        try:
            self._run_pipeline(input_path, output_path, options)
        except StickerError as exc:
            log.error("Ошибка обработки %s: %s", input_path, exc)
            return ProcessingResult.failed(input_path, output_path, str(exc), exc.kind)
        return ProcessingResult.ok(input_path, output_path)

    def _run_pipeline(self, input_path: Path, output_path: Path, options: ProcessingOptions) -> None:
        animated = format_sniffer.is_animated(input_path)
        if animated:
            log.info("Анимированный файл %s: берётся первый кадр", input_path.name)
        else:
            log.info("Обработка изображения %s", input_path.name)

        raster = self.frame_extractor.extract_frame(input_path, animated)
        raster = self.process_service.ensure_alpha(raster)
        raster = resize_for_sticker(raster)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EncodeError(f"Не удалось создать каталог для {output_path}: {exc}") from exc
        if not self.encode_service.save(raster, output_path, options):
            raise EncodeError(f"Не удалось сохранить {output_path}")
        log.info("Сохранено %s (%dx%d)", output_path, raster.width, raster.height)

    def process_directory(
        self,
        input_dir: str | Path,
        output_dir: str | Path,
        options: ProcessingOptions = ProcessingOptions(),
    ) -> List[ProcessingResult]:
        """Обрабатывает все подходящие файлы каталога.

        Returns:
            По одному результату на файл в порядке путей, либо единственный
            неуспешный результат, если не удалось создать выходной каталог,
            прочитать входной или ни один файл не подошёл под маску.
        """
        input_dir = Path(input_dir)
        output_dir = Path(output_dir)
        try:
            files = self._prepare_batch(input_dir, output_dir, options.pattern)
        except StickerError as exc:
            log.error("Пакет %s прерван: %s", input_dir, exc)
            return [ProcessingResult.failed(input_dir, output_dir, str(exc), exc.kind)]

        log.info("Найдено файлов: %d", len(files))
        jobs = [(path, output_path_for(path, output_dir, options)) for path in files]
        for target, sources in duplicate_outputs(jobs).items():
            log.warning(
                "Файлы %s пишут в один и тот же %s; сохранится только один",
                ", ".join(source.name for source in sources),
                target,
            )

        if options.workers == 1:
            results = [self.process_file(src, dst, options) for src, dst in jobs]
        else:
            with ThreadPoolExecutor(max_workers=options.workers) as pool:
                results = list(pool.map(lambda job: self.process_file(job[0], job[1], options), jobs))

        # downstream reports rely on path order
        return sorted(results, key=lambda result: result.input_path)

    def _prepare_batch(self, input_dir: Path, output_dir: Path, pattern: str) -> List[Path]:
        """Создаёт выходной каталог и возвращает список входных файлов.

        Raises:
            FileSystemError: выходной каталог не создан или входной не читается.
            NoMatchError: ни один файл не подошёл под маску.
        """
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(f"{MSG_OUTPUT_DIR_FAILED} {output_dir}: {exc}") from exc

        try:
            files = list_matches(input_dir, pattern)
        except OSError as exc:
            raise FileSystemError(f"{MSG_LIST_FAILED} {input_dir}: {exc}") from exc

        if not files:
            raise NoMatchError(f"{MSG_NO_MATCHES} {pattern!r}: {input_dir}")
        return files
