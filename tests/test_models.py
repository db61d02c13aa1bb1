"""Tests for domain models (core/models.py).

Coverage:
* Height derivation and frame size.
* RenderConfig validation.
* Settings helpers: glyph ramp resolution, overflow policy fallback.
* Video convenience properties and immutability.
"""

from __future__ import annotations

import dataclasses

import pytest

from serika_cli.core.models import (
    CHARSETS,
    OverflowPolicy,
    RenderConfig,
    Settings,
    derive_height,
)
from serika_cli.exceptions import InvalidSettingError

from conftest import make_video


class TestDeriveHeight:
    @pytest.mark.parametrize(
        ("width", "height"),
        [(80, 24), (120, 37), (160, 49), (100, 30), (4, 1), (3, 0)],
    )
    def test_known_widths(self, width: int, height: int) -> None:
        assert derive_height(width) == height

    def test_matches_float_formula_for_common_widths(self) -> None:
        for width in range(4, 400):
            assert derive_height(width) == int(width * 9 / 16 * 0.55 + 1e-9)


class TestRenderConfig:
    def test_for_width_80(self) -> None:
        config = RenderConfig.for_width(80, CHARSETS["standard"])
        assert (config.width, config.height) == (80, 24)
        assert config.frame_size == 80 * 24 * 3

    def test_zero_height_rejected(self) -> None:
        with pytest.raises(InvalidSettingError):
            RenderConfig.for_width(3, CHARSETS["standard"])

    def test_single_glyph_ramp_rejected(self) -> None:
        with pytest.raises(InvalidSettingError):
            RenderConfig(width=8, height=2, glyph_ramp="#")

    def test_every_charset_is_a_valid_ramp(self) -> None:
        for ramp in CHARSETS.values():
            assert len(ramp) >= 2
            RenderConfig.for_width(80, ramp)

    def test_frozen(self) -> None:
        config = RenderConfig.for_width(80, " .")
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.width = 10  # type: ignore[misc]


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.ascii_mode is False
        assert settings.ascii_width == 80
        assert settings.glyph_ramp == CHARSETS["standard"]
        assert settings.overflow_policy is OverflowPolicy.DROP_OLDEST
        assert settings.auto_merge_audio is True

    def test_unknown_charset_falls_back_to_standard(self) -> None:
        assert Settings(ascii_charset="nope").glyph_ramp == CHARSETS["standard"]

    def test_overflow_policy(self) -> None:
        assert Settings(ascii_overflow="block").overflow_policy is OverflowPolicy.BLOCK
        assert Settings(ascii_overflow="???").overflow_policy is OverflowPolicy.DROP_OLDEST

    def test_render_config(self) -> None:
        config = Settings(ascii_width=120, ascii_charset="blocks").render_config()
        assert (config.width, config.height) == (120, 37)
        assert config.glyph_ramp == CHARSETS["blocks"]


class TestVideo:
    def test_playable_url_prefers_direct_media(self) -> None:
        video = make_video(video_url="https://a/v.mp4", dash_url="https://a/v.mpd")
        assert video.playable_url == "https://a/v.mp4"

    def test_playable_url_falls_back_to_manifest(self) -> None:
        video = make_video(video_url=None, dash_url="https://a/v.mpd")
        assert video.playable_url == "https://a/v.mpd"

    def test_no_url(self) -> None:
        assert make_video(video_url=None, dash_url=None).playable_url is None

    def test_display_author(self) -> None:
        assert make_video(username="bob").display_author == "bob"
        assert make_video(username=None).display_author == "Unknown"
