import csv
import json
import math
from pathlib import Path


# Share of the new two-way total assumed for a party that fielded no
# candidate: V / 3 against V is 1/4 of V + V / 3.
IMPUTATION_FACTOR = 1 / 3

SUMMARY_COLUMNS = [
    "name", "abbreviation", "seats",
    "left_seats", "right_seats",
    "left_votes", "right_votes",
    "left_uncontested", "right_uncontested",
    "seat_margin", "vote_margin", "vote_margin_imputation",
    "efficiency_gap", "efficiency_gap_imputation",
    "efficiency_gap_seats", "efficiency_gap_seats_imputation",
    "advantage_party",
]


def round_half_up(value: float) -> int:
    """Round the way JavaScript's Math.round does: halves go toward +inf."""
    return math.floor(value + 0.5)


def impute_votes(votes: tuple[int, int]) -> tuple[int, int]:
    """
    Fill in an uncontested district's missing vote count.

    A zero count means the party fielded no candidate. It is replaced by a
    third of the opponent's votes, so the absent party ends up with 25% of
    the imputed two-way total.
    """
    left, right = votes
    return (
        left if left > 0 else round_half_up(right * IMPUTATION_FACTOR),
        right if right > 0 else round_half_up(left * IMPUTATION_FACTOR),
    )


def gap_seats(
    gap: float, seats: int, seat_results: tuple[int, int]
) -> int:
    """
    Convert an efficiency gap into an unsigned number of seats.

    One-seat delegations never carry a seat advantage. Otherwise the
    result is capped at the number of seats the benefitting party won.
    """
    if seats == 1:
        return 0
    raw = round_half_up(abs(gap * seats))
    if raw == 0:
        return 0
    benefitting = 0 if gap < 0 else 1
    return min(raw, seat_results[benefitting])


def format_gap_percent(gap: float) -> str:
    tenths = round_half_up(abs(gap) * 1000)
    if tenths % 10 == 0:
        return f"{tenths // 10}%"
    return f"{tenths / 10}%"


def summary_row(delegation) -> dict:
    seat_results = delegation.seat_results
    vote_results = delegation.vote_results
    uncontested = delegation.uncontested_seats
    return {
        "name": delegation.name,
        "abbreviation": delegation.abbreviation,
        "seats": delegation.seats,
        "left_seats": seat_results[0],
        "right_seats": seat_results[1],
        "left_votes": vote_results[0],
        "right_votes": vote_results[1],
        "left_uncontested": uncontested[0],
        "right_uncontested": uncontested[1],
        "seat_margin": round(delegation.seat_margin, 4),
        "vote_margin": round(delegation.vote_margin, 4),
        "vote_margin_imputation": round(
            delegation.vote_margin_imputation, 4
        ),
        "efficiency_gap": round(delegation.efficiency_gap, 4),
        "efficiency_gap_imputation": round(
            delegation.efficiency_gap_imputation, 4
        ),
        "efficiency_gap_seats": delegation.efficiency_gap_seats,
        "efficiency_gap_seats_imputation": (
            delegation.efficiency_gap_seats_imputation
        ),
        "advantage_party": delegation.advantage_party,
    }


def export_summary_csv(
    rows: list[dict], output_path: str | Path = "out/efficiency_gap.csv"
) -> Path:
    """Write one row of metrics per delegation to a CSV file."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(
            f, fieldnames=SUMMARY_COLUMNS, extrasaction="ignore"
        )
        writer.writeheader()
        writer.writerows(rows)
    print(f"[ok] Exported {len(rows)} delegations to {output_path}")
    return output_path


def export_summary_json(
    rows: list[dict], output_path: str | Path = "out/efficiency_gap.json"
) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    gaps = [r["efficiency_gap_imputation"] for r in rows]
    payload = {
        "delegations": rows,
        "totals": {
            "delegations": len(rows),
            "seats": sum(r["seats"] for r in rows),
            "left_advantage": sum(
                1 for r in rows if r["advantage_party"] == "left"
            ),
            "right_advantage": sum(
                1 for r in rows if r["advantage_party"] == "right"
            ),
            "largest_gap": max(gaps, key=abs) if gaps else None,
        },
    }
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    print(f"[ok] Wrote summary metrics to {output_path}")
    return output_path
