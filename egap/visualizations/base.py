"""Drawing surface, fonts, colours and shared context for infographics."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Literal, Optional, Sequence

import numpy as np
from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.colors import to_hex, to_rgb
from matplotlib.figure import Figure
from matplotlib.font_manager import FontProperties
from matplotlib.image import imread
from matplotlib.patches import PathPatch, Rectangle
from matplotlib.path import Path as MplPath
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from egap.models import Delegation, Party


DPI = 100
# d3-color's darker()/brighter() step
COLOR_STEP = 0.7

Align = Literal["left", "right", "center"]
Baseline = Literal["alphabetic", "hanging"]


def darker(color: str, k: float = 1) -> str:
    factor = COLOR_STEP ** k
    return to_hex(tuple(c * factor for c in to_rgb(color)))


def brighter(color: str, k: float = 1) -> str:
    factor = (1 / COLOR_STEP) ** k
    return to_hex(tuple(min(c * factor, 1.0) for c in to_rgb(color)))


class LinearScale:
    """d3-style linear scale; a zero-width domain maps to the midpoint."""

    def __init__(
        self, domain: tuple[float, float], output: tuple[float, float]
    ):
        self.domain = domain
        self.output = output

    def __call__(self, value: float) -> float:
        d0, d1 = self.domain
        r0, r1 = self.output
        t = 0.5 if d1 == d0 else (value - d0) / (d1 - d0)
        return r0 + t * (r1 - r0)


@dataclass(frozen=True)
class Font:
    size: int
    bold: bool = False
    family: str = "DejaVu Sans"

    def properties(self, dpi: int = DPI) -> FontProperties:
        return FontProperties(
            family=self.family,
            weight="bold" if self.bold else "normal",
            size=self.size * 72 / dpi,
        )


@dataclass(frozen=True)
class RenderContext:
    """Run-wide, read-only inputs shared by every infographic."""

    parties: dict[str, Party]
    output_directory: Path
    title_suffix: str = "Congressional Delegation"
    subtitle: str = "(elected 2016)"
    watermark_path: Optional[Path] = None
    font_family: str = "DejaVu Sans"

    @classmethod
    def from_config(
        cls, config: dict, parties: dict[str, Party]
    ) -> "RenderContext":
        watermark = config.get("watermark_path")
        return cls(
            parties=parties,
            output_directory=Path(config["output_directory"]),
            title_suffix=config["title_suffix"],
            subtitle=config["subtitle"],
            watermark_path=Path(watermark) if watermark else None,
            font_family=config["font_family"],
        )

    def output_path(self, delegation: Delegation) -> Path:
        return self.output_directory / f"{delegation.name}.png"


def _geometry_path(geometries: Iterable[BaseGeometry]) -> MplPath:
    rings = []
    for geometry in geometries:
        for polygon in getattr(geometry, "geoms", [geometry]):
            if polygon.geom_type != "Polygon":
                continue
            polygon = orient(polygon)
            for ring in (polygon.exterior, *polygon.interiors):
                coords = np.asarray(ring.coords)[:, :2]
                rings.append(MplPath(coords, closed=True))
    return MplPath.make_compound_path(*rings)


class Canvas:
    """
    A fixed-size raster drawn in pixel coordinates, origin at the top left.

    Draw calls are painted in the order they are made, like an HTML canvas.
    Sizes (fonts, line widths) are given in pixels.
    """

    def __init__(self, width: int, height: int, dpi: int = DPI):
        self.width = width
        self.height = height
        self.dpi = dpi
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        self._agg = FigureCanvasAgg(self.figure)
        self.ax = self.figure.add_axes((0, 0, 1, 1))
        self.ax.set_xlim(0, width)
        self.ax.set_ylim(height, 0)
        self.ax.set_autoscale_on(False)
        self.ax.axis("off")
        self._order = 0

    def _next_z(self) -> int:
        self._order += 1
        return self._order

    def _points(self, pixels: float) -> float:
        return pixels * 72 / self.dpi

    def fill_rect(
        self,
        x: float,
        y: float,
        width: float,
        height: float,
        color: str,
        alpha: float = 1.0,
    ) -> None:
        self.ax.add_patch(Rectangle(
            (x, y), width, height,
            facecolor=color, edgecolor="none", linewidth=0,
            alpha=alpha, zorder=self._next_z(),
        ))

    def fill_geometries(
        self,
        geometries: Sequence[BaseGeometry],
        fill: str,
        stroke: Optional[str] = None,
        line_width: float = 1.0,
    ) -> None:
        path = _geometry_path(geometries)
        if not len(path.vertices):
            return
        self.ax.add_patch(PathPatch(
            path,
            facecolor=fill,
            edgecolor=stroke or "none",
            linewidth=self._points(line_width) if stroke else 0,
            zorder=self._next_z(),
        ))

    def stroke_polyline(
        self,
        points: Sequence[tuple[float, float]],
        color: str,
        line_width: float = 1.0,
        alpha: float = 1.0,
    ) -> None:
        xs, ys = zip(*points)
        self.ax.plot(
            xs, ys,
            color=color, linewidth=self._points(line_width),
            alpha=alpha, solid_joinstyle="miter",
            zorder=self._next_z(),
        )

    def fill_text(
        self,
        text: str,
        x: float,
        y: float,
        font: Font,
        color: str,
        align: Align = "left",
        baseline: Baseline = "alphabetic",
        alpha: float = 1.0,
    ) -> None:
        self.ax.text(
            x, y, text,
            fontproperties=font.properties(self.dpi),
            color=color,
            alpha=alpha,
            ha=align,
            va="baseline" if baseline == "alphabetic" else "top",
            zorder=self._next_z(),
        )

    def measure_text(self, text: str, font: Font) -> float:
        if not text:
            return 0.0
        renderer = self._agg.get_renderer()
        width, _, _ = renderer.get_text_width_height_descent(
            text, font.properties(self.dpi), ismath=False
        )
        return width

    def draw_image(
        self, path: str | Path, x: float, y: float, alpha: float = 1.0
    ) -> None:
        image = imread(path)
        height, width = image.shape[:2]
        self.ax.imshow(
            image,
            extent=(x, x + width, y + height, y),
            alpha=alpha,
            aspect="auto",
            interpolation="nearest",
            zorder=self._next_z(),
        )

    def to_array(self) -> np.ndarray:
        """RGBA pixels, shape (height, width, 4)."""
        self._agg.draw()
        return np.asarray(self._agg.buffer_rgba()).copy()

    def save_png(self, path: str | Path) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self.figure.savefig(path, format="png", dpi=self.dpi)
        return path
