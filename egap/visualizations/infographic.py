"""
Efficiency gap infographic: one 1200x630 image per delegation.

Layout, top to bottom on the left half: title bar, the narrative sentence,
the vote-share bar, the seat bar with uncontested brackets, footnotes and
the watermark. The right 44% holds the district map. Every position comes
from the constants below, so identical input renders identically.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from egap.computations import format_gap_percent, round_half_up
from egap.geometry import DistrictMap, MapRegion
from egap.models import Delegation, Party
from egap.validate import validate_delegation
from egap.visualizations.base import (
    Canvas,
    Font,
    LinearScale,
    RenderContext,
    brighter,
    darker,
)
from egap.visualizations.sentence import Sentence, SentenceWriter


WIDTH = 1200
HEIGHT = 630
LEFT_MARGIN = 60
GRID = HEIGHT // 10

BACKGROUND = "#292d39"
TEXT_COLOR = "#fff"
DISTRICT_STROKE = "#fff"
ANNOTATION_COLOR = "#ccc"
TITLE_BAR_COLOR = "#000"
TITLE_BAR_HEIGHT = round_half_up(GRID * 1.5)
FADED_ALPHA = 0.35

SENTENCE_X = LEFT_MARGIN
SENTENCE_Y = math.ceil(GRID * 2.375)
SENTENCE_LINE_GAP = 48
FOOTNOTE_X = LEFT_MARGIN * 4
FOOTNOTE_Y = HEIGHT - LEFT_MARGIN * 0.8
FOOTNOTE_UPPER_Y = math.ceil(GRID * 8.5)
FOOTNOTE_LINE_GAP = 18

MAP_WIDTH = WIDTH * 0.44
MAP_HEIGHT = HEIGHT - TITLE_BAR_HEIGHT
MAP_REGION = MapRegion(WIDTH - MAP_WIDTH, GRID * 1.5, MAP_WIDTH, MAP_HEIGHT)
SHADOW_OFFSET = 6

GRAPH_X = LEFT_MARGIN
GRAPH_Y = math.floor(GRID * 4)
GRAPH_WIDTH = WIDTH / 2 - LEFT_MARGIN
GRAPH_HEIGHT = 260
BAR_HEIGHT = round_half_up(GRAPH_HEIGHT * 0.15)
VOTE_BAR_Y = math.floor(GRAPH_Y + GRAPH_HEIGHT / 3)
SEAT_BAR_Y = math.ceil(GRAPH_Y + GRAPH_HEIGHT * 2 / 3)
SEAT_GAP = 4
ANNOTATION_MARGIN = 10

BRACKET_DEPTH = 15
BRACKET_LABEL_OFFSET = 20
BRACKET_LINE_WIDTH = 2
BRACKET_ALPHA = 0.5
UNCONTESTED_LABEL = "uncontested"

WATERMARK_X = LEFT_MARGIN
WATERMARK_Y = HEIGHT - LEFT_MARGIN * 1.1
WATERMARK_ALPHA = 0.6


@dataclass(frozen=True)
class Fonts:
    title: Font
    subtitle: Font
    sentence: Font
    sentence_bold: Font
    annotation: Font
    disclaimer: Font

    @classmethod
    def for_family(cls, family: str) -> "Fonts":
        return cls(
            title=Font(42, bold=True, family=family),
            subtitle=Font(34, family=family),
            sentence=Font(34, family=family),
            sentence_bold=Font(34, bold=True, family=family),
            annotation=Font(20, bold=True, family=family),
            disclaimer=Font(15, family=family),
        )


@dataclass(frozen=True)
class SeatLayout:
    """Horizontal placement of the equal-width seat rectangles."""

    seats: int
    scale: LinearScale
    seat_width: float

    @classmethod
    def for_seats(cls, seats: int) -> "SeatLayout":
        slot = math.floor(GRAPH_WIDTH / seats)
        scale = LinearScale(
            (1, seats),
            (GRAPH_X + 2, GRAPH_X + GRAPH_WIDTH - slot + SEAT_GAP),
        )
        return cls(seats, scale, slot - SEAT_GAP)

    def center(self, position: float) -> float:
        """x of the middle of seat ``position`` (1-based, may be fractional)."""
        return self.scale(position) + self.seat_width / 2


def plural(count: int, word: str) -> str:
    return word if count == 1 else f"{word}s"


def build_main_sentence(
    delegation: Delegation, parties: dict[str, Party], fonts: Fonts
) -> Sentence:
    """
    The headline: who held the efficiency gap advantage and what it was
    worth. Highlights are dropped when any seat went uncontested (the gap
    is then an estimate) or when the advantage rounds to zero seats.
    """
    party = parties[delegation.advantage_party]
    uncontested = delegation.has_uncontested
    emphasize = (
        not uncontested and delegation.efficiency_gap_seats_imputation != 0
    )
    gap = format_gap_percent(delegation.efficiency_gap_imputation)
    extra = abs(delegation.efficiency_gap_seats)

    sentence = (
        Sentence()
        .add("The ", fonts.sentence)
        .add(f"{party.name} Party", fonts.sentence_bold, emphasize)
        .add(" had a", fonts.sentence)
        .add(
            f"{gap} efficiency gap advantage*",
            fonts.sentence_bold, emphasize, newline=True,
        )
        .add("worth ", fonts.sentence, newline=True)
        .add(
            f"{extra} extra {plural(extra, 'seat')}",
            fonts.sentence_bold, emphasize,
        )
        .add(", but some seats" if uncontested else ".", fonts.sentence)
    )
    if uncontested:
        sentence = sentence.add(
            "were left uncontested.**", fonts.sentence, newline=True
        )
    return sentence


def build_explanation_sentence(fonts: Fonts) -> Sentence:
    return (
        Sentence()
        .add(
            " * The \"efficiency gap\" measures how effectively a "
            "party's votes ",
            fonts.disclaimer,
        )
        .add(
            "    are distributed among districts and reveals partisan bias.",
            fonts.disclaimer, newline=True,
        )
    )


def build_disclaimer_sentence(fonts: Fonts) -> Sentence:
    return (
        Sentence()
        .add(
            "** This efficiency gap score assumes an opponent would have won",
            fonts.disclaimer,
        )
        .add(
            "    25% of the vote in uncontested seats.",
            fonts.disclaimer, newline=True,
        )
    )


def draw_bevel(
    canvas: Canvas, x: float, y: float, width: float, height: float,
    color: str,
) -> None:
    """Shadow one pixel left, highlight one pixel right, true colour on top."""
    canvas.fill_rect(x - 1, y, width, height, darker(color))
    canvas.fill_rect(x + 1, y, width, height, brighter(color))
    canvas.fill_rect(x, y, width, height, color)


def draw_map(canvas: Canvas, delegation: Delegation) -> None:
    district_map = DistrictMap(delegation.district_boundaries)
    projection = district_map.fit(MAP_REGION)
    canvas.fill_geometries(
        district_map.pixel_geometries(projection), fill=darker(BACKGROUND)
    )
    raised = projection.offset(-SHADOW_OFFSET, -SHADOW_OFFSET)
    canvas.fill_geometries(
        district_map.pixel_geometries(raised),
        fill=BACKGROUND,
        stroke=DISTRICT_STROKE,
    )


def draw_title(
    canvas: Canvas, delegation: Delegation, context: RenderContext,
    fonts: Fonts,
) -> None:
    canvas.fill_rect(
        0, 0, WIDTH, TITLE_BAR_HEIGHT, TITLE_BAR_COLOR, alpha=FADED_ALPHA
    )
    canvas.fill_text(
        f"{delegation.name} {context.title_suffix}",
        LEFT_MARGIN, GRID, fonts.title, TEXT_COLOR,
    )
    if context.subtitle:
        canvas.fill_text(
            context.subtitle, WIDTH - LEFT_MARGIN, GRID, fonts.subtitle,
            TEXT_COLOR, align="right", alpha=FADED_ALPHA,
        )


def draw_narrative(
    canvas: Canvas, delegation: Delegation, context: RenderContext,
    fonts: Fonts,
) -> None:
    party = context.parties[delegation.advantage_party]
    SentenceWriter(
        canvas, SENTENCE_X, SENTENCE_Y, fonts.sentence, party.color,
        SENTENCE_LINE_GAP, TEXT_COLOR,
    ).write_all(build_main_sentence(delegation, context.parties, fonts))

    uncontested = delegation.has_uncontested
    SentenceWriter(
        canvas, FOOTNOTE_X,
        FOOTNOTE_UPPER_Y if uncontested else FOOTNOTE_Y,
        fonts.disclaimer, ANNOTATION_COLOR, FOOTNOTE_LINE_GAP, TEXT_COLOR,
    ).write_all(build_explanation_sentence(fonts))
    if uncontested:
        SentenceWriter(
            canvas, FOOTNOTE_X, FOOTNOTE_Y, fonts.disclaimer,
            ANNOTATION_COLOR, FOOTNOTE_LINE_GAP, TEXT_COLOR,
        ).write_all(build_disclaimer_sentence(fonts))


def share_percent(part: int, total: int) -> int:
    return round_half_up(part / total * 100)


def draw_vote_bar(
    canvas: Canvas, delegation: Delegation, parties: dict[str, Party],
    fonts: Fonts,
) -> None:
    left_votes, right_votes = delegation.vote_results
    total = left_votes + right_votes
    scale = LinearScale((0, total), (0, GRAPH_WIDTH))
    left, right = parties["left"], parties["right"]
    label_y = VOTE_BAR_Y - ANNOTATION_MARGIN

    if left_votes >= 1:
        draw_bevel(
            canvas, GRAPH_X + 2, VOTE_BAR_Y, scale(left_votes) - 4,
            BAR_HEIGHT, left.color,
        )
        canvas.fill_text(
            f"{share_percent(left_votes, total)}% {left.name} vote",
            GRAPH_X, label_y, fonts.annotation, left.color,
        )
    if right_votes >= 1:
        draw_bevel(
            canvas, GRAPH_X + scale(left_votes) + 3, VOTE_BAR_Y,
            scale(right_votes) - 4, BAR_HEIGHT, right.color,
        )
        canvas.fill_text(
            f"{share_percent(right_votes, total)}% {right.name} vote",
            GRAPH_X + GRAPH_WIDTH, label_y, fonts.annotation, right.color,
            align="right",
        )


def draw_seat_bar(
    canvas: Canvas, delegation: Delegation, parties: dict[str, Party],
    fonts: Fonts,
) -> SeatLayout:
    """
    One rectangle per seat, the left party's wins first. Seats are grouped
    by winner rather than drawn in district order.
    """
    layout = SeatLayout.for_seats(delegation.seats)
    left_seats, right_seats = delegation.seat_results
    left, right = parties["left"], parties["right"]

    for position in range(1, delegation.seats + 1):
        color = left.color if position <= left_seats else right.color
        draw_bevel(
            canvas, layout.scale(position), SEAT_BAR_Y, layout.seat_width,
            BAR_HEIGHT, color,
        )

    label_y = SEAT_BAR_Y - ANNOTATION_MARGIN
    if left_seats >= 1:
        canvas.fill_text(
            f"{left_seats} {left.name} {plural(left_seats, 'seat')} "
            f"({share_percent(left_seats, delegation.seats)}%)",
            GRAPH_X, label_y, fonts.annotation, left.color,
        )
    if right_seats >= 1:
        canvas.fill_text(
            f"{right_seats} {right.name} {plural(right_seats, 'seat')} "
            f"({share_percent(right_seats, delegation.seats)}%)",
            GRAPH_X + GRAPH_WIDTH, label_y, fonts.annotation, right.color,
            align="right",
        )
    return layout


def bracket_spans(
    delegation: Delegation,
) -> list[tuple[float, float, float]]:
    """
    (first seat, last seat, label position) for each uncontested run.

    Seats the left party left open were won by the right, so they sit at
    the right end of the seat bar, and vice versa.
    """
    seats = delegation.seats
    open_left, open_right = delegation.uncontested_seats
    spans = []
    if open_left >= 1:
        spans.append(
            (seats - open_left + 1, seats, seats - (open_left - 1) / 2)
        )
    if open_right >= 1:
        spans.append((1, open_right, 1 + (open_right - 1) / 2))
    return spans


def draw_uncontested_brackets(
    canvas: Canvas, delegation: Delegation, layout: SeatLayout,
    fonts: Fonts,
) -> None:
    top = SEAT_BAR_Y + BAR_HEIGHT + SEAT_GAP
    for first, last, label_at in bracket_spans(delegation):
        x1, x2 = layout.center(first), layout.center(last)
        canvas.stroke_polyline(
            [
                (x1, top),
                (x1, top + BRACKET_DEPTH),
                (x2, top + BRACKET_DEPTH),
                (x2, top),
            ],
            ANNOTATION_COLOR,
            line_width=BRACKET_LINE_WIDTH,
            alpha=BRACKET_ALPHA,
        )
        canvas.fill_text(
            UNCONTESTED_LABEL,
            layout.center(label_at),
            top + BRACKET_LABEL_OFFSET,
            fonts.annotation,
            ANNOTATION_COLOR,
            align="center",
            baseline="hanging",
            alpha=BRACKET_ALPHA,
        )


def draw_watermark(canvas: Canvas, path: Optional[Path]) -> None:
    if path is None:
        return
    if not Path(path).exists():
        raise FileNotFoundError(f"Watermark image not found: {path}")
    canvas.draw_image(path, WATERMARK_X, WATERMARK_Y, alpha=WATERMARK_ALPHA)


def compose_infographic(
    delegation: Delegation,
    context: RenderContext,
    canvas: Optional[Canvas] = None,
) -> Canvas:
    """Draw one delegation's infographic onto ``canvas`` (a new one if None)."""
    validate_delegation(delegation)
    canvas = canvas if canvas is not None else Canvas(WIDTH, HEIGHT)
    fonts = Fonts.for_family(context.font_family)

    canvas.fill_rect(0, 0, WIDTH, HEIGHT, BACKGROUND)
    draw_map(canvas, delegation)
    draw_title(canvas, delegation, context, fonts)
    draw_narrative(canvas, delegation, context, fonts)
    draw_vote_bar(canvas, delegation, context.parties, fonts)
    layout = draw_seat_bar(canvas, delegation, context.parties, fonts)
    draw_uncontested_brackets(canvas, delegation, layout, fonts)
    draw_watermark(canvas, context.watermark_path)
    return canvas


def render_delegation(delegation: Delegation, context: RenderContext) -> Path:
    """Compose and save ``<output_directory>/<delegation name>.png``."""
    canvas = compose_infographic(delegation, context)
    return canvas.save_png(context.output_path(delegation))
