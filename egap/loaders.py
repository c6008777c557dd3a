from __future__ import annotations

import re
from pathlib import Path

import geopandas as gpd
import pandas as pd

from egap.models import (
    REQUIRED_COLUMNS,
    Delegation,
    District,
    ElectionResults,
    Party,
)
from egap.validate import IngestionError


EPSG_WGS84: int = 4_326
VOTE_PATTERN = re.compile(r"\d+")

BoundaryIndex = dict[tuple[str, str], dict]


def read_results(path: str | Path, columns: dict) -> list[dict]:
    """Read the results CSV as raw strings, one dict per row."""
    df = pd.read_csv(path, dtype=str, keep_default_na=False)
    wanted = [columns[c] for c in REQUIRED_COLUMNS]
    missing = [c for c in wanted if c not in df.columns]
    if missing:
        raise IngestionError(
            f"{Path(path).name} is missing columns: {', '.join(missing)} "
            f"(found: {', '.join(df.columns)})"
        )
    return df.to_dict("records")


def read_boundaries(path: str | Path) -> gpd.GeoDataFrame:
    """Read district boundaries in lon/lat (EPSG:4326)."""
    gdf = gpd.read_file(path)
    if gdf.crs is None:
        return gdf.set_crs(EPSG_WGS84)
    if gdf.crs.to_epsg() != EPSG_WGS84:
        gdf = gdf.to_crs(EPSG_WGS84)
    return gdf


def index_boundaries(
    boundaries: gpd.GeoDataFrame, columns: dict
) -> BoundaryIndex:
    """
    Key boundary features by (delegation id, district id).

    Identifiers are compared as strings. When two features share a key the
    first one wins.
    """
    delegation_col = columns["delegation_identifier"]
    district_col = columns["district_identifier"]
    missing = [
        c for c in (delegation_col, district_col)
        if c not in boundaries.columns
    ]
    if missing:
        raise IngestionError(
            f"Boundary features lack properties: {', '.join(missing)}"
        )
    index: BoundaryIndex = {}
    for feature in boundaries.iterfeatures(na="null"):
        props = feature["properties"]
        key = (str(props[delegation_col]), str(props[district_col]))
        index.setdefault(key, feature)
    return index


def find_boundary(
    index: BoundaryIndex, delegation_id: str, district_id: str
) -> dict:
    feature = index.get((delegation_id, district_id))
    if feature is None:
        raise IngestionError(
            "no boundary feature found", delegation_id, district_id
        )
    return feature


def parse_votes(
    raw: str, delegation_id: str, district_id: str, party: str
) -> int:
    """
    Parse a vote count such as "12345" or "12,345".

    Anything else, including blanks and negative numbers, is an error
    rather than a zero: zero means the party did not contest the seat.
    """
    text = str(raw).strip().replace(",", "")
    if not VOTE_PATTERN.fullmatch(text):
        raise IngestionError(
            f"malformed {party} vote count {raw!r}",
            delegation_id,
            district_id,
        )
    return int(text)


def build_election_results(
    rows: list[dict], index: BoundaryIndex, config: dict
) -> ElectionResults:
    """Group result rows into delegations, in first-seen order."""
    columns = config["columns"]
    grouped: dict[str, tuple[str, list[District]]] = {}
    for row in rows:
        delegation_id = row[columns["delegation_identifier"]]
        district_id = row[columns["district_identifier"]]
        if delegation_id not in grouped:
            grouped[delegation_id] = (row[columns["delegation_name"]], [])
        votes = (
            parse_votes(
                row[columns["left_votes"]],
                delegation_id, district_id, "left",
            ),
            parse_votes(
                row[columns["right_votes"]],
                delegation_id, district_id, "right",
            ),
        )
        if sum(votes) == 0:
            raise IngestionError(
                "no votes recorded for either party",
                delegation_id,
                district_id,
            )
        boundary = find_boundary(index, delegation_id, district_id)
        grouped[delegation_id][1].append(
            District(district_id, votes, boundary)
        )

    delegations = [
        Delegation(name, delegation_id, tuple(districts))
        for delegation_id, (name, districts) in grouped.items()
    ]
    parties = config["parties"]
    return ElectionResults.from_parties(
        Party(parties["left"]["name"], parties["left"]["color"]),
        Party(parties["right"]["name"], parties["right"]["color"]),
        delegations,
    )


def load_election_results(config: dict) -> ElectionResults:
    rows = read_results(config["results_path"], config["columns"])
    print(f"  → {len(rows)} result rows from {config['results_path']}")
    boundaries = read_boundaries(config["boundaries_path"])
    print(
        f"  → {len(boundaries)} boundary features "
        f"from {config['boundaries_path']}"
    )
    index = index_boundaries(boundaries, config["columns"])
    return build_election_results(rows, index, config)
