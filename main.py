#!/usr/bin/env python3
"""
Efficiency Gap Infographics

Reads per-district two-party election results and district boundaries,
groups districts into delegations, scores each delegation's efficiency gap
(with uncontested races imputed), and draws one shareable infographic per
delegation.

Inputs (see config.json):
- results CSV, one row per district
- boundary file (GeoJSON or anything geopandas reads)

Outputs:
- <output_directory>/<delegation name>.png - one infographic per delegation
- <output_directory>/efficiency_gap.csv - metrics per delegation
- <output_directory>/efficiency_gap.json - metrics plus run totals
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from functools import partial
from multiprocessing import Pool
from pathlib import Path
from textwrap import dedent
from typing import Literal, Optional

from egap.computations import (
    export_summary_csv,
    export_summary_json,
    round_half_up,
    summary_row,
)
from egap.loaders import load_election_results
from egap.models import Delegation, ElectionResults, load_config
from egap.validate import DegenerateDelegationError, validate_delegation
from egap.visualizations import RenderContext, render_delegation
from egap.visualizations.infographic import plural


@dataclass(frozen=True)
class RenderOutcome:
    name: str
    status: Literal["ok", "skipped", "failed"]
    path: Optional[Path] = None
    message: str = ""


def print_banner(config: dict) -> None:
    print(dedent(f"""
    ===============================
    Reporting Efficiency Gap Scores
    ===============================
    Election results: {config['results_path']}
    District boundaries: {config['boundaries_path']}

    Infographics being added to `{config['output_directory']}`
    """))


def load_results_helper(config: dict) -> ElectionResults:
    print("\n[2/4] Loading election results and boundaries…")
    results = load_election_results(config)
    seats = sum(d.seats for d in results.delegations)
    print(
        f"  Built {len(results.delegations)} delegations "
        f"({seats} seats)"
    )
    return results


def render_one(
    delegation: Delegation, context: RenderContext
) -> RenderOutcome:
    """Render one delegation; failures become outcomes, not exceptions."""
    try:
        path = render_delegation(delegation, context)
    except DegenerateDelegationError as e:
        return RenderOutcome(delegation.name, "skipped", message=e.reason)
    except Exception as e:  # pylint: disable=broad-exception-caught
        return RenderOutcome(
            delegation.name, "failed", message=f"{type(e).__name__}: {e}"
        )
    return RenderOutcome(delegation.name, "ok", path=path)


def render_all(
    results: ElectionResults, context: RenderContext, workers: int = 1
) -> list[RenderOutcome]:
    """Render every delegation, in parallel when ``workers`` > 1."""
    count = len(results.delegations)
    print(f"\n[3/4] Rendering {count} {plural(count, 'infographic')}…")
    render = partial(render_one, context=context)
    if workers > 1:
        with Pool(processes=workers) as pool:
            outcomes = pool.map(render, results.delegations)
    else:
        outcomes = [render(d) for d in results.delegations]

    # Outcomes come back in input order; names need not be unique
    for delegation, outcome in zip(results.delegations, outcomes):
        if outcome.status == "ok":
            gap = round_half_up(delegation.efficiency_gap_imputation * 100)
            print(f"{outcome.name}: {gap / 100:g}")
        elif outcome.status == "skipped":
            print(f"[skip] {outcome.name}: {outcome.message}", file=sys.stderr)
        else:
            print(f"[error] {outcome.name}: {outcome.message}", file=sys.stderr)
    return outcomes


def valid_delegations(results: ElectionResults) -> list[Delegation]:
    valid = []
    for delegation in results.delegations:
        try:
            valid.append(validate_delegation(delegation))
        except DegenerateDelegationError:
            continue
    return valid


def export_outputs(
    results: ElectionResults, output_directory: Path
) -> list[Path]:
    print("\n[4/4] Exporting summary metrics…")
    rows = [summary_row(d) for d in valid_delegations(results)]
    return [
        export_summary_csv(rows, output_directory / "efficiency_gap.csv"),
        export_summary_json(rows, output_directory / "efficiency_gap.json"),
    ]


def main(config_path: str = "config.json") -> int:
    """Main pipeline orchestration."""
    print(f"\n[1/4] Loading configuration from {config_path}…")
    config = load_config(config_path)
    print_banner(config)
    results = load_results_helper(config)
    context = RenderContext.from_config(config, results.parties)
    outcomes = render_all(results, context, int(config["workers"]))
    exported = export_outputs(results, context.output_directory)

    rendered = [o for o in outcomes if o.status == "ok"]
    problems = [o for o in outcomes if o.status != "ok"]
    print("\n" + "=" * 60)
    print(
        f"✓ Rendered {len(rendered)}/{len(outcomes)} infographics "
        f"into {context.output_directory}"
    )
    for path in exported:
        print(f"  - {path}")
    if problems:
        print(f"  {len(problems)} delegations skipped or failed (see above)")
    print("=" * 60)
    return 1 if problems else 0


if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:2]))
