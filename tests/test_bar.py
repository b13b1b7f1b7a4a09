from __future__ import annotations

import re

import pytest

from drinfo.core.bar import (
    FULL_BLOCK,
    LIGHT_SHADE,
    BarGeometry,
    BarRenderer,
    bg,
    gradient_color,
    layout,
    max_visible_line_length,
    pad_visible,
    visible_length,
)

ANSI = re.compile(r"\x1b\[[0-9;]*m")


def plain(s: str) -> str:
    return ANSI.sub("", s)


class TestGeometry:
    @pytest.mark.parametrize(
        "columns, box, content, bar",
        [
            (80, 64, 60, 58),
            (200, 120, 116, 114),
            (20, 40, 36, 34),
            (50, 40, 36, 34),
        ],
    )
    def test_for_terminal(self, columns, box, content, bar):
        g = BarGeometry.for_terminal(columns)
        assert (g.box_width, g.content_width, g.bar_length) == (box, content, bar)

    def test_bar_length_floor(self):
        g = BarGeometry.for_terminal(10, min_box=8, max_box=8)
        assert g.content_width == 4
        assert g.bar_length == 10


class TestGradient:
    def test_start_is_green(self):
        assert gradient_color(0, 58) == (0, 255, 0)

    def test_end_is_red(self):
        assert gradient_color(57, 58) == (255, 0, 0)

    def test_midpoint_is_yellow(self):
        assert gradient_color(5, 11) == (255, 255, 0)

    def test_truncates(self):
        # 10/57 * 2 * 255 = 89.47...
        assert gradient_color(10, 58) == (89, 255, 0)

    def test_single_cell(self):
        assert gradient_color(0, 1) == (0, 255, 0)


class TestVisibleLength:
    def test_single_styled_glyph(self):
        assert visible_length("\033[31m█\033[0m") == 1

    def test_plain_text(self):
        assert visible_length("hello") == 5

    def test_truecolor_sequences(self):
        s = "\033[48;2;1;2;3m\033[38;2;0;0;255mA\033[0mB"
        assert visible_length(s) == 2

    def test_max_and_pad(self):
        lines = ["ab", "\033[1mabcd\033[0m", ""]
        assert max_visible_line_length(lines) == 4
        assert max_visible_line_length([]) == 0
        assert visible_length(pad_visible("\033[1mab\033[0m", 6)) == 6
        assert pad_visible("abcdef", 3) == "abcdef"


class TestLayout:
    def test_centered_in_filled_region(self):
        lay = layout(50.0, 58)
        assert lay.filled_length == 29
        assert lay.text == "50.0%"
        assert lay.text_start == 12

    def test_left_aligned_when_filled_is_short(self):
        lay = layout(5.0, 58)
        assert lay.filled_length == 2
        assert lay.text_start == 0


class TestRender:
    def renderer(self, columns: int = 80) -> BarRenderer:
        return BarRenderer(BarGeometry.for_terminal(columns))

    def test_empty_bar(self):
        r = self.renderer()
        s = r.render(0.0)
        assert FULL_BLOCK not in s
        assert s.count(LIGHT_SHADE) == r.bar_length
        assert plain(s) == LIGHT_SHADE * r.bar_length

    def test_full_bar(self):
        r = self.renderer()
        s = r.render(100.0)
        assert LIGHT_SHADE not in s
        text = plain(s)
        assert len(text) == r.bar_length
        assert "100.0%" in text
        assert text.count(FULL_BLOCK) == r.bar_length - len("100.0%")

    def test_text_clipped_to_filled_region(self):
        r = self.renderer()
        text = plain(r.render(5.0))
        assert text.startswith("5.")
        assert "5.0%" not in text
        assert text[2:] == LIGHT_SHADE * (r.bar_length - 2)

    def test_text_cell_uses_gradient_background(self):
        r = self.renderer()
        s = r.render(50.0)
        lay = layout(50.0, r.bar_length)
        assert bg(gradient_color(lay.text_start, r.bar_length)) + "\033[38;2;0;0;255m5" in s

    def test_each_cell_resets_style(self):
        r = self.renderer()
        s = r.render(42.0)
        assert s.count("\033[0m") == r.bar_length

    @pytest.mark.parametrize("pct", [0.0, 3.3, 42.0, 99.9, 100.0])
    def test_render_line_width(self, pct):
        r = self.renderer(120)
        line = r.render_line(pct)
        assert visible_length(line) == r.geometry.content_width
