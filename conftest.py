"""Shared fixtures: synthetic delegations and a canvas that records calls."""

from __future__ import annotations

from pathlib import Path

import pytest

from egap.models import Delegation, District, Party
from egap.visualizations.base import RenderContext


def square_feature(
    state: str, district: str, lon: float, lat: float, size: float = 1.0
) -> dict:
    ring = [
        [lon, lat],
        [lon + size, lat],
        [lon + size, lat + size],
        [lon, lat + size],
        [lon, lat],
    ]
    return {
        "type": "Feature",
        "properties": {"state": state, "district": district},
        "geometry": {"type": "Polygon", "coordinates": [ring]},
    }


def make_delegation(
    votes: list[tuple[int, int]],
    name: str = "Testland",
    abbreviation: str = "TL",
) -> Delegation:
    districts = tuple(
        District(
            str(i + 1),
            v,
            square_feature(abbreviation, str(i + 1), -100.0 + i, 40.0),
        )
        for i, v in enumerate(votes)
    )
    return Delegation(name, abbreviation, districts)


class RecordingCanvas:
    """Stands in for Canvas; text is measured at 10 px per character."""

    def __init__(self, width: int = 1200, height: int = 630):
        self.width = width
        self.height = height
        self.calls: list[tuple] = []

    def fill_rect(self, x, y, width, height, color, alpha=1.0):
        self.calls.append(("rect", x, y, width, height, color, alpha))

    def fill_geometries(self, geometries, fill, stroke=None, line_width=1.0):
        self.calls.append(("geometries", list(geometries), fill, stroke))

    def stroke_polyline(self, points, color, line_width=1.0, alpha=1.0):
        self.calls.append(("polyline", list(points), color, alpha))

    def fill_text(
        self, text, x, y, font, color, align="left",
        baseline="alphabetic", alpha=1.0,
    ):
        self.calls.append(
            ("text", text, x, y, font, color, align, baseline, alpha)
        )

    def measure_text(self, text, font):
        return 10.0 * len(text)

    def draw_image(self, path, x, y, alpha=1.0):
        self.calls.append(("image", Path(path), x, y, alpha))

    def of(self, kind: str) -> list[tuple]:
        return [c for c in self.calls if c[0] == kind]

    def texts(self) -> list[str]:
        return [c[1] for c in self.of("text")]


@pytest.fixture
def parties() -> dict[str, Party]:
    return {
        "left": Party("Democratic", "#45bae8"),
        "right": Party("Republican", "#ff595f"),
    }


@pytest.fixture
def context(parties, tmp_path) -> RenderContext:
    return RenderContext(parties=parties, output_directory=tmp_path / "out")


@pytest.fixture
def canvas() -> RecordingCanvas:
    return RecordingCanvas()
