"""
Map fitting for district boundary collections.

Boundaries arrive as a GeoJSON FeatureCollection in lon/lat. They are
projected with an Albers equal-area conic whose central meridian is the
collection's centroid longitude, then scaled and translated into a pixel
region whose y axis grows downward.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

import geopandas as gpd
import numpy as np
from shapely.geometry.base import BaseGeometry


EPSG_WGS84: int = 4_326
# WGS 84 / NSIDC EASE-Grid 2.0 Global, cylindrical equal-area
EPSG_EQUAL_AREA: int = 6_933
STANDARD_PARALLELS: tuple[float, float] = (29.5, 45.5)
ORIGIN_LATITUDE: float = 37.5
FILL_RATIO: float = 0.9


@dataclass(frozen=True)
class MapRegion:
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class MapProjection:
    crs: str
    scale: float
    translate: tuple[float, float]

    @property
    def matrix(self) -> list[float]:
        """Affine matrix in shapely's [a, b, d, e, xoff, yoff] order."""
        tx, ty = self.translate
        return [self.scale, 0.0, 0.0, -self.scale, tx, ty]

    def offset(self, dx: float, dy: float) -> "MapProjection":
        tx, ty = self.translate
        return replace(self, translate=(tx + dx, ty + dy))


def albers_crs(central_meridian: float) -> str:
    lat_1, lat_2 = STANDARD_PARALLELS
    return (
        f"+proj=aea +lat_1={lat_1} +lat_2={lat_2} +lat_0={ORIGIN_LATITUDE} "
        f"+lon_0={central_meridian} +x_0=0 +y_0=0 +datum=WGS84 +units=m "
        "+no_defs"
    )


class DistrictMap:
    """Projection queries over one delegation's district boundaries."""

    def __init__(self, boundaries: dict):
        self.frame = gpd.GeoDataFrame.from_features(
            boundaries["features"], crs=EPSG_WGS84
        )

    def centroid(self) -> tuple[float, float]:
        """
        (lon, lat) of the districts' area-weighted centroid on the sphere.

        District centroids are averaged as unit vectors, so a delegation
        on both sides of the antimeridian centres near 180° rather than 0°.
        """
        equal_area = self.frame.to_crs(EPSG_EQUAL_AREA).geometry
        weights = equal_area.area.to_numpy()
        points = equal_area.centroid.to_crs(EPSG_WGS84)
        lon = np.radians(points.x.to_numpy())
        lat = np.radians(points.y.to_numpy())
        x = np.sum(weights * np.cos(lat) * np.cos(lon))
        y = np.sum(weights * np.cos(lat) * np.sin(lon))
        z = np.sum(weights * np.sin(lat))
        return (
            float(np.degrees(np.arctan2(y, x))),
            float(np.degrees(np.arctan2(z, np.hypot(x, y)))),
        )

    def projected(self, crs: str) -> gpd.GeoSeries:
        return self.frame.to_crs(crs).geometry

    def bounds(self, crs: str) -> tuple[float, float, float, float]:
        minx, miny, maxx, maxy = self.projected(crs).total_bounds
        return float(minx), float(miny), float(maxx), float(maxy)

    def fit(self, region: MapRegion) -> MapProjection:
        """
        Scale and centre the districts inside ``region``.

        The collection is rotated to its own centroid longitude first so
        delegations far from the usual Albers meridian (or straddling the
        antimeridian) are not sheared. The scale leaves a 10% margin.
        """
        crs = albers_crs(self.centroid()[0])
        minx, miny, maxx, maxy = self.bounds(crs)
        ratios = [
            extent / span
            for extent, span in (
                (region.width, maxx - minx),
                (region.height, maxy - miny),
            )
            if span > 0
        ]
        if not ratios:
            raise ValueError("District boundaries have no extent to fit")
        scale = FILL_RATIO * min(ratios)
        translate = (
            region.x + (region.width - scale * (minx + maxx)) / 2,
            region.y + (region.height + scale * (miny + maxy)) / 2,
        )
        return MapProjection(crs, scale, translate)

    def pixel_geometries(
        self, projection: MapProjection
    ) -> list[BaseGeometry]:
        pixels = self.projected(projection.crs).affine_transform(
            projection.matrix
        )
        return [g for g in pixels if g is not None and not g.is_empty]
