"""Command-line entry point."""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from anysticker.main import build_parser, main, options_from_args, resolve_output_path
from anysticker.models.sticker_model import OutputFormat, ProcessingOptions


@pytest.mark.unit
@pytest.mark.parametrize(
    ("output", "fmt", "batch", "expected"),
    [
        ("output", OutputFormat.PNG, False, "output.png"),
        ("output", OutputFormat.WEBP, False, "output.webp"),
        ("sticker.webp", OutputFormat.PNG, False, "sticker.webp"),
        ("dir/name", OutputFormat.PNG, False, "dir/name.png"),
        ("output", OutputFormat.WEBP, True, "output"),
    ],
)
def test_resolve_output_path(output, fmt, batch, expected):
    assert resolve_output_path(output, ProcessingOptions(format=fmt), batch) == Path(expected)


@pytest.mark.unit
def test_quality_and_workers_are_clamped():
    args = build_parser().parse_args(["in.png", "--webp", "-q", "500", "-j", "0"])
    options = options_from_args(args)

    assert options.format is OutputFormat.WEBP
    assert options.quality == 100
    assert options.workers == 1
    assert options_from_args(build_parser().parse_args(["in.png", "-q", "-3"])).quality == 1


@pytest.mark.unit
def test_defaults():
    options = options_from_args(build_parser().parse_args(["in.png"]))
    assert options == ProcessingOptions()


@pytest.mark.integration
def test_single_file_success(make_image, tmp_path, capsys):
    source = make_image("in.png", size=(100, 200))
    target = tmp_path / "sticker"

    assert main([str(source), "-o", str(target)]) == 0
    with Image.open(tmp_path / "sticker.png") as image:
        assert image.size == (256, 512)
    assert "sticker.png" in capsys.readouterr().out


@pytest.mark.integration
def test_single_file_failure_exit_code(tmp_path, capsys):
    source = tmp_path / "bad.jpg"
    source.write_bytes(b"nope")

    assert main([str(source), "-o", str(tmp_path / "bad-out")]) == 1
    assert capsys.readouterr().err
    assert not (tmp_path / "bad-out.png").exists()


@pytest.mark.integration
def test_batch_mode_exits_zero_with_failures(make_image, tmp_path, capsys):
    source = tmp_path / "in"
    make_image("good.png", directory=source)
    (source / "bad.txt").write_text("x")
    output = tmp_path / "out"

    assert main([str(source), "-o", str(output), "--webp", "-q", "70"]) == 0
    captured = capsys.readouterr()
    assert "bad.txt" in captured.err
    assert (output / "good.webp").is_file()


@pytest.mark.integration
def test_missing_input_path(tmp_path, capsys):
    assert main([str(tmp_path / "absent.png")]) == 2
    assert "absent.png" in capsys.readouterr().err
