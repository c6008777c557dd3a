"""Tests for projecting and fitting district boundaries into pixel space."""

import pytest
from shapely.ops import unary_union

from conftest import square_feature
from egap.geometry import DistrictMap, MapProjection, MapRegion, albers_crs


def collection(*features):
    return {"type": "FeatureCollection", "features": list(features)}


ROW = collection(
    square_feature("TL", "1", -100.0, 40.0),
    square_feature("TL", "2", -99.0, 40.0),
    square_feature("TL", "3", -98.0, 40.0),
)


def test_centroid_longitude_is_collection_middle():
    lon, lat = DistrictMap(ROW).centroid()
    assert lon == pytest.approx(-98.5, abs=1e-6)
    assert 40.0 < lat < 41.0


def test_albers_crs_rotates_to_meridian():
    crs = albers_crs(-98.5)
    assert "+proj=aea" in crs
    assert "+lon_0=-98.5" in crs
    assert "+lat_1=29.5" in crs and "+lat_2=45.5" in crs


@pytest.mark.parametrize(
    "region",
    [MapRegion(0, 0, 100, 100), MapRegion(672, 94.5, 528, 535)],
)
def test_fit_centres_and_fills_ninety_percent(region):
    district_map = DistrictMap(ROW)
    projection = district_map.fit(region)
    shapes = unary_union(district_map.pixel_geometries(projection))
    minx, miny, maxx, maxy = shapes.bounds
    assert (minx + maxx) / 2 == pytest.approx(region.x + region.width / 2)
    assert (miny + maxy) / 2 == pytest.approx(region.y + region.height / 2)
    fill = max((maxx - minx) / region.width, (maxy - miny) / region.height)
    assert fill == pytest.approx(0.9)


def test_north_is_up():
    stacked = collection(
        square_feature("TL", "south", -100.0, 40.0),
        square_feature("TL", "north", -100.0, 41.0),
    )
    district_map = DistrictMap(stacked)
    south, north = district_map.pixel_geometries(
        district_map.fit(MapRegion(0, 0, 200, 200))
    )
    assert north.centroid.y < south.centroid.y


def test_offset_shifts_translation_only():
    projection = MapProjection("+proj=aea", 2.0, (10.0, 20.0))
    moved = projection.offset(-6, -6)
    assert moved.translate == (4.0, 14.0)
    assert moved.scale == projection.scale
    assert projection.translate == (10.0, 20.0)
    assert moved.matrix == [2.0, 0.0, 0.0, -2.0, 4.0, 14.0]


def test_offset_moves_pixels():
    district_map = DistrictMap(ROW)
    projection = district_map.fit(MapRegion(0, 0, 100, 100))
    base = district_map.pixel_geometries(projection)[0]
    raised = district_map.pixel_geometries(projection.offset(-6, -6))[0]
    assert raised.bounds[0] == pytest.approx(base.bounds[0] - 6)
    assert raised.bounds[1] == pytest.approx(base.bounds[1] - 6)


def test_fit_spans_antimeridian():
    """Districts on both sides of 180° stay together after rotation."""
    aleutians = collection(
        square_feature("AK", "1", 178.0, 51.0),
        square_feature("AK", "2", -180.0, 51.0),
    )
    district_map = DistrictMap(aleutians)
    lon, _ = district_map.centroid()
    assert abs(lon) == pytest.approx(179.5, abs=0.05)

    region = MapRegion(0, 0, 100, 100)
    west, east = district_map.pixel_geometries(district_map.fit(region))
    # Three degrees of longitude end to end, one of them the gap
    assert east.distance(west) < west.bounds[2] - west.bounds[0] + 1
