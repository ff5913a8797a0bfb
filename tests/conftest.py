"""Shared fixtures: images synthesized with Pillow inside `tmp_path`."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence, Tuple

import numpy as np
import pytest
from PIL import Image

from anysticker.models.sticker_model import RasterImage

RED = (255, 0, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def make_image(tmp_path: Path) -> Callable[..., Path]:
    """Writes a solid-color image and returns its path.

    Format is taken from the file suffix, as Pillow does on save.
    """

    def _make(
        name: str,
        size: Tuple[int, int] = (64, 32),
        mode: str = "RGB",
        color=RED,
        directory: Path | None = None,
    ) -> Path:
        target = (directory or tmp_path) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(target)
        return target

    return _make


@pytest.fixture
def make_gif(tmp_path: Path) -> Callable[..., Path]:
    """Writes a palette GIF whose frames are solid palette indices."""

    def _make(
        name: str,
        frame_indices: Sequence[int] = (0, 1),
        size: Tuple[int, int] = (40, 20),
        palette: Sequence[Tuple[int, int, int]] = (RED, BLUE),
    ) -> Path:
        flat = [channel for color in palette for channel in color]
        frames = []
        for index in frame_indices:
            frame = Image.new("P", size, index)
            frame.putpalette(flat)
            frames.append(frame)
        target = tmp_path / name
        frames[0].save(target, save_all=len(frames) > 1, append_images=frames[1:], duration=100, loop=0)
        return target

    return _make


@pytest.fixture
def rgb_raster() -> RasterImage:
    pixels = np.zeros((50, 100, 3), dtype=np.uint8)
    pixels[:, :, 0] = 10
    pixels[:, :, 1] = 20
    pixels[:, :, 2] = 30
    return RasterImage(pixels=pixels)
