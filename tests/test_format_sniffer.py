"""Animated-format sniffing policies."""

from __future__ import annotations

import pytest

from anysticker.services.format_sniffer import (
    DEFAULT_POLICIES,
    gif_always_animated,
    is_animated,
    webp_container_magic,
)

# magic checked at byte 12, after the RIFF size and form type
WEBP_HEADER = b"RIFF\x24\x00\x00\x00WEBPWEBP"
STANDARD_VP8_HEADER = b"RIFF\x24\x00\x00\x00WEBPVP8 "


@pytest.mark.unit
@pytest.mark.parametrize("name", ["a.gif", "b.GIF", "c.Gif"])
def test_every_gif_is_animated(tmp_path, make_gif, name):
    path = make_gif(name, frame_indices=(0,))
    assert is_animated(path) is True


@pytest.mark.unit
def test_gif_is_animated_even_when_unreadable(tmp_path):
    assert is_animated(tmp_path / "missing.gif") is True
    empty = tmp_path / "empty.gif"
    empty.write_bytes(b"")
    assert is_animated(empty) is True


@pytest.mark.unit
def test_webp_with_container_magic_is_animated(tmp_path):
    path = tmp_path / "sticker.WEBP"
    path.write_bytes(WEBP_HEADER + b"\x00" * 32)
    assert is_animated(path) is True


@pytest.mark.unit
def test_webp_with_wrong_magic_is_static(tmp_path):
    path = tmp_path / "fake.webp"
    path.write_bytes(b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 32)
    assert is_animated(path) is False


@pytest.mark.unit
def test_short_or_missing_webp_is_static(tmp_path):
    short = tmp_path / "short.webp"
    short.write_bytes(WEBP_HEADER[:15])
    assert is_animated(short) is False
    assert is_animated(tmp_path / "missing.webp") is False


@pytest.mark.unit
@pytest.mark.parametrize("name", ["a.png", "b.jpg", "c", "d.txt"])
def test_other_extensions_are_static(tmp_path, name):
    path = tmp_path / name
    path.write_bytes(WEBP_HEADER + b"\x00" * 32)
    assert is_animated(path) is False


@pytest.mark.unit
def test_policies_can_be_replaced(tmp_path):
    path = tmp_path / "a.gif"
    path.write_bytes(b"GIF89a")
    strict = dict(DEFAULT_POLICIES, **{".gif": lambda _path: False})

    assert is_animated(path, policies=strict) is False


@pytest.mark.unit
def test_failing_policy_means_static(tmp_path):
    def broken(_path):
        raise RuntimeError("boom")

    assert is_animated(tmp_path / "x.gif", policies={".gif": broken}) is False


@pytest.mark.unit
def test_policies_are_registered_by_extension():
    assert DEFAULT_POLICIES[".gif"] is gif_always_animated
    assert DEFAULT_POLICIES[".webp"] is webp_container_magic


@pytest.mark.unit
def test_magic_is_read_at_byte_twelve_only(tmp_path):
    path = tmp_path / "plain.webp"
    path.write_bytes(STANDARD_VP8_HEADER + b"\x00" * 32)
    assert webp_container_magic(path) is False
