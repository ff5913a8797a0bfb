"""Точка входа: командная строка AnyToSticker."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from anysticker.controllers.sticker_controller import StickerController, summarize
from anysticker.models.sticker_model import DEFAULT_QUALITY, OutputFormat, ProcessingOptions, ProcessingResult

DEFAULT_OUTPUT = "output"

EPILOG = """\
Примеры:
  anysticker input.jpg
  anysticker input.gif -o sticker.webp --webp -q 90
  anysticker ./images -o ./stickers --webp -p "*.jpg"
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anysticker",
        description="Приводит изображения к требованиям стикеров: длинная сторона 512 px, альфа-канал.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input", help="Файл или каталог с изображениями")
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT, help="Выходной файл или каталог (по умолчанию: output)")
    parser.add_argument("--webp", action="store_true", help="Сохранять в WEBP (по умолчанию PNG)")
    parser.add_argument("-q", "--quality", type=int, default=DEFAULT_QUALITY, help="Качество WEBP 1-100 (по умолчанию 100)")
    parser.add_argument("-p", "--pattern", default="*", help="Маска файлов, например *.jpg (только для каталога)")
    parser.add_argument("-j", "--workers", type=int, default=1, help="Число потоков для каталога (по умолчанию 1)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Подробный лог")
    verbosity.add_argument("--quiet", action="store_true", help="Только предупреждения и ошибки")
    return parser


def options_from_args(args: argparse.Namespace) -> ProcessingOptions:
    return ProcessingOptions(
        format=OutputFormat.WEBP if args.webp else OutputFormat.PNG,
        quality=max(1, min(100, args.quality)),
        pattern=args.pattern,
        workers=max(1, args.workers),
    )


def resolve_output_path(output: str, options: ProcessingOptions, batch: bool) -> Path:
    """Путь вывода: в режиме одного файла без расширения добавляется суффикс формата."""
    path = Path(output)
    if batch or path.suffix:
        return path
    return path.with_name(path.name + options.format.suffix)


def configure_logging(verbose: bool, quiet: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _report_batch(results: List[ProcessingResult], output_dir: Path) -> None:
    for result in results:
        if not result.success:
            print(f"Ошибка обработки: {result.input_path} - {result.error}", file=sys.stderr)
    summary = summarize(results)
    print(
        "\nОбработка завершена!\n"
        f"Всего: {summary.total}\n"
        f"Успешно: {summary.succeeded}\n"
        f"С ошибкой: {summary.failed}\n"
        f"Выходной каталог: {output_dir}"
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Разбирает аргументы и запускает обработку; возвращает код выхода."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Путь не найден: {input_path}", file=sys.stderr)
        return 2

    options = options_from_args(args)
    batch = input_path.is_dir()
    output_path = resolve_output_path(args.output, options, batch)
    controller = StickerController()

    if batch:
        results = controller.process_directory(input_path, output_path, options)
        _report_batch(results, output_path)
        return 0

    result = controller.process_file(input_path, output_path, options)
    if not result.success:
        print(f"Ошибка: {result.error}", file=sys.stderr)
        return 1
    print(f"Обработка завершена! Файл: {result.output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
