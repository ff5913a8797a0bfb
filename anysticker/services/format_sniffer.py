"""Определение анимированных форматов по расширению и заголовку файла.

Принципы:
- OCP: каждая эвристика — отдельная функция-политика в реестре
  `DEFAULT_POLICIES`; более строгую проверку можно подставить, не трогая
  `is_animated`.
- Ошибки чтения не пробрасываются: нечитаемый файл считается статичным.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Mapping, Optional

log = logging.getLogger(__name__)

SniffPolicy = Callable[[Path], bool]

WEBP_HEADER_SIZE = 16
WEBP_MAGIC = b"WEBP"
WEBP_MAGIC_OFFSET = 12


def gif_always_animated(path: Path) -> bool:
    """Любой GIF считается анимированным.

    Число кадров не проверяется: надёжный подсчёт требует полного разбора файла.
    """
    return True


def webp_container_magic(path: Path) -> bool:
    """Проверяет метку `WEBP` по смещению 12 в первых 16 байтах.

    Подтверждает только принадлежность к контейнеру WEBP, а не наличие
    чанков ANIM/ANMF.
    """
    try:
        with open(path, "rb") as fh:
            header = fh.read(WEBP_HEADER_SIZE)
    except OSError as exc:
        log.debug("Не удалось прочитать заголовок %s: %s", path, exc)
        return False
    if len(header) < WEBP_HEADER_SIZE:
        return False
    return header[WEBP_MAGIC_OFFSET:WEBP_MAGIC_OFFSET + len(WEBP_MAGIC)] == WEBP_MAGIC


DEFAULT_POLICIES: Mapping[str, SniffPolicy] = {
    ".gif": gif_always_animated,
    ".webp": webp_container_magic,
}


def is_animated(path: str | Path, policies: Optional[Mapping[str, SniffPolicy]] = None) -> bool:
    """Возвращает True, если файл нужно обрабатывать как анимацию.

    Args:
        path: Путь к файлу.
        policies: Реестр «расширение в нижнем регистре -> политика»;
            по умолчанию `DEFAULT_POLICIES`.

    Returns:
        Результат политики для расширения файла; False для прочих расширений
        и при любой ошибке политики.
    """
    path = Path(path)
    registry = DEFAULT_POLICIES if policies is None else policies
    policy = registry.get(path.suffix.lower())
    if policy is None:
        return False
    try:
        return bool(policy(path))
    except Exception as exc:
        log.warning("Политика %s не смогла проверить %s: %s", getattr(policy, "__name__", policy), path, exc)
        return False
