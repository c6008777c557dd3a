"""Phrase-by-phrase text layout with manual line breaks and highlights."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, Optional

from egap.visualizations.base import Canvas, Font


HIGHLIGHT_PADDING = 5
HIGHLIGHT_RISE = 32
HIGHLIGHT_HEIGHT = 46
HIGHLIGHT_ALPHA = 0.35


@dataclass(frozen=True)
class Phrase:
    text: str
    font: Optional[Font] = None
    highlight: bool = False
    newline: bool = False


@dataclass(frozen=True)
class Sentence:
    """An immutable run of phrases; ``add`` returns a new sentence."""

    phrases: tuple[Phrase, ...] = ()

    def add(
        self,
        text: str,
        font: Optional[Font] = None,
        highlight: bool = False,
        newline: bool = False,
    ) -> "Sentence":
        phrase = Phrase(text, font, highlight, newline)
        return replace(self, phrases=self.phrases + (phrase,))

    def __iter__(self) -> Iterator[Phrase]:
        return iter(self.phrases)

    def __len__(self) -> int:
        return len(self.phrases)

    @property
    def lines(self) -> list[str]:
        lines = [""]
        for phrase in self.phrases:
            if phrase.newline:
                lines.append("")
            lines[-1] += phrase.text
        return lines

    @property
    def highlighted(self) -> list[str]:
        return [p.text for p in self.phrases if p.highlight]


class SentenceWriter:
    """
    A text cursor over a canvas.

    Each phrase is drawn where the previous one ended. A newline phrase
    first returns to the starting x and moves down one line gap. The
    font carries over between phrases until a phrase names a new one.
    """

    def __init__(
        self,
        canvas: Canvas,
        x: float,
        y: float,
        font: Font,
        highlight_color: str,
        line_gap: float,
        color: str = "#fff",
    ):
        self.canvas = canvas
        self.x = x
        self.y = y
        self.left = x
        self.font = font
        self.highlight_color = highlight_color
        self.line_gap = line_gap
        self.color = color

    def write(self, phrase: Phrase) -> None:
        if phrase.font is not None:
            self.font = phrase.font
        if phrase.newline:
            self.y += self.line_gap
            self.x = self.left
        width = self.canvas.measure_text(phrase.text, self.font)
        if phrase.highlight:
            self.canvas.fill_rect(
                self.x - HIGHLIGHT_PADDING,
                self.y - HIGHLIGHT_RISE,
                width + 2 * HIGHLIGHT_PADDING,
                HIGHLIGHT_HEIGHT,
                self.highlight_color,
                alpha=HIGHLIGHT_ALPHA,
            )
        if phrase.text:
            self.canvas.fill_text(
                phrase.text, self.x, self.y, self.font, self.color
            )
        self.x += width

    def write_all(self, sentence: Sentence) -> None:
        for phrase in sentence:
            self.write(phrase)
