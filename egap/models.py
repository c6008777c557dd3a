from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

import numpy as np

from egap.computations import gap_seats, impute_votes


LEFT_COLOR = "#45bae8"
RIGHT_COLOR = "#ff595f"

REQUIRED_KEYS = (
    "results_path",
    "boundaries_path",
    "output_directory",
    "columns",
    "parties",
)
REQUIRED_COLUMNS = (
    "delegation_identifier",
    "delegation_name",
    "district_identifier",
    "left_votes",
    "right_votes",
)
DEFAULTS: dict = {
    "title_suffix": "Congressional Delegation",
    "subtitle": "(elected 2016)",
    "watermark_path": None,
    "font_family": "DejaVu Sans",
    "workers": 1,
}


def load_config(path: str | Path = "config.json") -> dict:
    """
    Load the run configuration from a JSON file.

    Optional keys are filled from DEFAULTS and party colors fall back to
    LEFT_COLOR / RIGHT_COLOR. Relative paths are left as written; they
    resolve against the working directory.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config = json.load(f)

    missing = [k for k in REQUIRED_KEYS if k not in config]
    if missing:
        raise ValueError(
            f"{config_path}: missing required keys: {', '.join(missing)}"
        )
    columns = config["columns"]
    missing = [c for c in REQUIRED_COLUMNS if not columns.get(c)]
    if missing:
        raise ValueError(
            f"{config_path}: missing column bindings: {', '.join(missing)}"
        )
    parties = config["parties"]
    for side, color in (("left", LEFT_COLOR), ("right", RIGHT_COLOR)):
        party = parties.get(side)
        if not party or not party.get("name"):
            raise ValueError(f"{config_path}: parties.{side}.name is required")
        party.setdefault("color", color)

    for key, value in DEFAULTS.items():
        config.setdefault(key, value)
    return config


PartySide = Literal["left", "right"]


@dataclass(frozen=True)
class Party:
    name: str
    color: str


@dataclass(frozen=True)
class District:
    """One seat: its (left, right) vote tallies and its boundary feature."""

    identifier: str
    votes: tuple[int, int]
    boundary: dict

    # Index of the winning party; 0=left, 1=right. Ties go to the right.
    @property
    def result(self) -> int:
        return 0 if self.votes[0] > self.votes[1] else 1

    # Negative margins are left victories
    @property
    def margin(self) -> int:
        return self.votes[1] - self.votes[0]


@dataclass(frozen=True)
class Delegation:
    """
    Districts sharing a jurisdiction, in input order.

    Every metric is recomputed from ``districts`` on access. Margins are
    signed toward the right party: negative values favor the left.
    Delegations with no districts or no votes are not valid inputs to the
    ratio metrics; see ``egap.validate.validate_delegation``.
    """

    name: str
    abbreviation: str
    districts: tuple[District, ...] = field(default_factory=tuple)

    def _vote_matrix(self, imputed: bool = False) -> np.ndarray:
        rows = [
            impute_votes(d.votes) if imputed else d.votes
            for d in self.districts
        ]
        return np.array(rows, dtype=np.int64).reshape(-1, 2)

    @property
    def seats(self) -> int:
        return len(self.districts)

    @property
    def seat_results(self) -> tuple[int, int]:
        counts = np.bincount(
            np.array([d.result for d in self.districts], dtype=np.int64),
            minlength=2,
        )
        return int(counts[0]), int(counts[1])

    @property
    def vote_results(self) -> tuple[int, int]:
        left, right = self._vote_matrix().sum(axis=0)
        return int(left), int(right)

    @property
    def vote_results_imputation(self) -> tuple[int, int]:
        """Vote totals as if every seat had been contested."""
        left, right = self._vote_matrix(imputed=True).sum(axis=0)
        return int(left), int(right)

    @property
    def uncontested_seats(self) -> tuple[int, int]:
        """Seats each party left uncontested (recorded zero votes)."""
        matrix = self._vote_matrix()
        left, right = (matrix == 0).sum(axis=0)
        return int(left), int(right)

    @property
    def has_uncontested(self) -> bool:
        return any(self.uncontested_seats)

    @property
    def votes(self) -> int:
        return sum(self.vote_results)

    @property
    def votes_imputation(self) -> int:
        return sum(self.vote_results_imputation)

    @property
    def seat_margin(self) -> float:
        return self.seat_results[1] / self.seats - 0.5

    @property
    def vote_margin(self) -> float:
        return self.vote_results[1] / self.votes - 0.5

    @property
    def vote_margin_imputation(self) -> float:
        return self.vote_results_imputation[1] / self.votes_imputation - 0.5

    @property
    def efficiency_gap(self) -> float:
        return self.seat_margin - 2 * self.vote_margin

    # Imputation changes vote shares only; seat counts stay actual
    @property
    def efficiency_gap_imputation(self) -> float:
        return self.seat_margin - 2 * self.vote_margin_imputation

    @property
    def efficiency_gap_seats(self) -> int:
        return gap_seats(self.efficiency_gap, self.seats, self.seat_results)

    @property
    def efficiency_gap_seats_imputation(self) -> int:
        return gap_seats(
            self.efficiency_gap_imputation, self.seats, self.seat_results
        )

    @property
    def advantage_party(self) -> PartySide:
        return "left" if self.efficiency_gap_imputation <= 0 else "right"

    @property
    def district_boundaries(self) -> dict:
        """GeoJSON FeatureCollection of district boundaries, in order."""
        return {
            "type": "FeatureCollection",
            "features": [d.boundary for d in self.districts],
        }


@dataclass(frozen=True)
class ElectionResults:
    """Two parties and the delegations they contested."""

    parties: dict[str, Party]
    delegations: tuple[Delegation, ...] = field(default_factory=tuple)

    @classmethod
    def from_parties(
        cls,
        left: Party,
        right: Party,
        delegations: list[Delegation] | tuple[Delegation, ...],
    ) -> "ElectionResults":
        return cls({"left": left, "right": right}, tuple(delegations))

    def party(self, index: int) -> Party:
        return self.parties["left" if index == 0 else "right"]
