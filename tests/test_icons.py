"""Tests for status icon rendering."""

import io

import pytest
from PIL import Image

from peekguard.alerts.state_machine import AlertState
from peekguard.ui.icons import BLACK, RED, WHITE, icon_png, render_icon


class TestRenderIcon:
    @pytest.mark.parametrize("state", list(AlertState))
    def test_every_state_renders(self, state):
        img = render_icon(state, size=32)
        assert img.size == (32, 32)
        assert img.mode == "RGBA"

    def test_alert_colors(self):
        # Left of the exclamation mark, inside the circle
        probe = (16, 32)
        assert render_icon(AlertState.STEADY).getpixel(probe) == RED
        assert render_icon(AlertState.FLASHING_ON).getpixel(probe) == RED
        assert render_icon(AlertState.FLASHING_OFF).getpixel(probe) == BLACK
        assert render_icon(AlertState.OFF).getpixel(probe) == WHITE

    def test_corners_are_transparent(self):
        assert render_icon(AlertState.STEADY).getpixel((0, 0))[3] == 0


class TestIconPng:
    def test_png_bytes(self):
        data = icon_png(AlertState.OFF)
        assert data.startswith(b"\x89PNG")
        assert Image.open(io.BytesIO(data)).size == (64, 64)

    def test_flash_phases_differ(self):
        assert icon_png(AlertState.FLASHING_ON) != icon_png(AlertState.FLASHING_OFF)

    def test_cached(self):
        assert icon_png(AlertState.PAUSED) is icon_png(AlertState.PAUSED)
