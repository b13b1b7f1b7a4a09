from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

ESC = "\033"
RESET = f"{ESC}[0m"

FULL_BLOCK = "█"
LIGHT_SHADE = "░"

TEXT_FG = (0, 0, 255)
TRACK_BG = (64, 64, 64)
TRACK_FG = (160, 160, 160)

MIN_BAR_LENGTH = 10


def fg(rgb: tuple[int, int, int]) -> str:
    return f"{ESC}[38;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def bg(rgb: tuple[int, int, int]) -> str:
    return f"{ESC}[48;2;{rgb[0]};{rgb[1]};{rgb[2]}m"


def gradient_color(index: int, length: int) -> tuple[int, int, int]:
    """Green -> yellow -> red, linear in RGB, truncated to ints."""
    ratio = index / (length - 1) if length > 1 else 0.0
    if ratio < 0.5:
        return int(ratio * 2 * 255), 255, 0
    return 255, int((1.0 - (ratio - 0.5) * 2) * 255), 0


def visible_length(s: str) -> int:
    """Length of ``s`` ignoring ESC ... m styling runs."""
    n = 0
    in_escape = False
    for ch in s:
        if ch == ESC:
            in_escape = True
        elif in_escape:
            if ch == "m":
                in_escape = False
        else:
            n += 1
    return n


def max_visible_line_length(lines: Iterable[str]) -> int:
    return max((visible_length(line) for line in lines), default=0)


def pad_visible(s: str, width: int) -> str:
    return s + " " * max(0, width - visible_length(s))


@dataclass(frozen=True)
class BarGeometry:
    box_width: int
    content_width: int
    bar_length: int

    @classmethod
    def for_terminal(cls, columns: int, min_box: int = 40, max_box: int = 120) -> "BarGeometry":
        box = columns * 4 // 5
        box = min(box, max_box)
        box = max(box, min_box)
        content = box - 4
        bar = max(content - 2, MIN_BAR_LENGTH)
        return cls(box_width=box, content_width=content, bar_length=bar)


@dataclass(frozen=True)
class BarLayout:
    filled_length: int
    text: str
    text_start: int


def layout(percent: float, bar_length: int) -> BarLayout:
    filled = int(percent / 100.0 * bar_length)
    filled = max(0, min(filled, bar_length))
    text = f"{percent:.1f}%"
    # Centered inside the filled part; never drawn past it.
    text_start = (filled - len(text)) // 2 if filled > len(text) else 0
    return BarLayout(filled_length=filled, text=text, text_start=text_start)


class BarRenderer:
    def __init__(self, geometry: BarGeometry) -> None:
        self.geometry = geometry

    @property
    def bar_length(self) -> int:
        return self.geometry.bar_length

    def render(self, percent: float) -> str:
        n = self.bar_length
        lay = layout(percent, n)
        text_end = lay.text_start + len(lay.text)

        cells: list[str] = []
        for i in range(n):
            if lay.text_start <= i < text_end and i < lay.filled_length:
                color = gradient_color(i, n)
                cells.append(f"{bg(color)}{fg(TEXT_FG)}{lay.text[i - lay.text_start]}{RESET}")
            elif i < lay.filled_length:
                cells.append(f"{fg(gradient_color(i, n))}{FULL_BLOCK}{RESET}")
            else:
                cells.append(f"{bg(TRACK_BG)}{fg(TRACK_FG)}{LIGHT_SHADE}{RESET}")
        return "".join(cells)

    def render_line(self, percent: float) -> str:
        """Bar padded to the content width so every drive block lines up."""
        return pad_visible(self.render(percent), self.geometry.content_width)
