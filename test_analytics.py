"""
Tests for the delegation metrics.

Covers seat/vote tallies, uncontested-race imputation, the efficiency gap
and its seat equivalent, and JavaScript-compatible rounding.
"""

import pytest

from conftest import make_delegation, square_feature
from egap.computations import (
    format_gap_percent,
    gap_seats,
    impute_votes,
    round_half_up,
    summary_row,
)
from egap.models import District, ElectionResults, Party


BOUNDARY = square_feature("TL", "1", -100.0, 40.0)

SAMPLE_VOTES = [
    [(60, 40), (55, 45), (30, 70)],
    [(0, 100)],
    [(51, 49), (51, 49), (51, 49), (51, 49), (10, 18)],
    [(51, 49), (1, 99), (1, 99), (1, 99)],
    [(0, 1200), (800, 0), (430, 512), (977, 976), (5, 5)],
    [(120, 80), (70, 130), (0, 45), (300, 1)],
]


def test_round_half_up_matches_math_round():
    """Halves round toward positive infinity, like Math.round."""
    assert round_half_up(2.5) == 3
    assert round_half_up(0.5) == 1
    assert round_half_up(-2.5) == -2
    assert round_half_up(1.49) == 1
    assert round_half_up(33.333) == 33


def test_tie_goes_to_right_party():
    assert District("1", (100, 100), BOUNDARY).result == 1
    assert District("2", (101, 100), BOUNDARY).result == 0
    assert District("3", (99, 100), BOUNDARY).result == 1


def test_margin_is_signed_toward_right():
    assert District("1", (60, 40), BOUNDARY).margin == -20
    assert District("2", (40, 60), BOUNDARY).margin == 20


@pytest.mark.parametrize("votes", SAMPLE_VOTES)
def test_results_sum_to_totals(votes):
    delegation = make_delegation(votes)
    assert sum(delegation.seat_results) == delegation.seats
    assert sum(delegation.vote_results) == delegation.votes
    assert sum(delegation.vote_results_imputation) == (
        delegation.votes_imputation
    )


@pytest.mark.parametrize("votes", SAMPLE_VOTES)
def test_gap_seats_never_exceed_benefitting_party_seats(votes):
    delegation = make_delegation(votes)
    for gap, extra in (
        (delegation.efficiency_gap, delegation.efficiency_gap_seats),
        (
            delegation.efficiency_gap_imputation,
            delegation.efficiency_gap_seats_imputation,
        ),
    ):
        benefitting = 0 if gap < 0 else 1
        assert 0 <= extra <= delegation.seat_results[benefitting]


def test_scenario_three_contested_districts():
    delegation = make_delegation([(60, 40), (55, 45), (30, 70)])
    assert delegation.seat_results == (2, 1)
    assert delegation.vote_results == (145, 155)
    assert delegation.seat_margin == pytest.approx(-1 / 6)
    assert delegation.vote_margin == pytest.approx(1 / 60)
    assert delegation.efficiency_gap == pytest.approx(-0.2)
    assert delegation.efficiency_gap_seats == 1
    assert delegation.advantage_party == "left"


def test_scenario_single_uncontested_district():
    delegation = make_delegation([(0, 100)])
    assert delegation.uncontested_seats == (1, 0)
    assert delegation.vote_results_imputation == (33, 100)
    assert delegation.efficiency_gap_seats == 0
    assert delegation.efficiency_gap_seats_imputation == 0


def test_scenario_balanced_votes_lopsided_seats():
    delegation = make_delegation(
        [(51, 49), (51, 49), (51, 49), (51, 49), (10, 18)]
    )
    assert delegation.seat_results == (4, 1)
    assert delegation.vote_margin == pytest.approx(0)
    assert delegation.efficiency_gap == pytest.approx(-0.3)
    assert delegation.efficiency_gap_seats == 2


def test_gap_seats_clamped_to_seats_won():
    """A 2-seat advantage is capped at the single seat the left won."""
    delegation = make_delegation([(51, 49), (1, 99), (1, 99), (1, 99)])
    assert delegation.efficiency_gap == pytest.approx(-0.48)
    assert round_half_up(abs(delegation.efficiency_gap * 4)) == 2
    assert delegation.seat_results[0] == 1
    assert delegation.efficiency_gap_seats == 1


@pytest.mark.parametrize(
    "votes",
    [[(10, 90)], [(90, 10)], [(50, 50)], [(0, 1000)], [(999, 0)]],
)
def test_single_seat_never_has_gap_seats(votes):
    delegation = make_delegation(votes)
    assert delegation.efficiency_gap_seats == 0
    assert delegation.efficiency_gap_seats_imputation == 0


def test_gap_seats_zero_when_rounding_to_zero():
    assert gap_seats(0.04, 10, (5, 5)) == 0
    assert gap_seats(-0.049, 10, (5, 5)) == 0
    assert gap_seats(0.05, 10, (5, 5)) == 1


@pytest.mark.parametrize("opponent,expected", [(90, 30), (100, 33), (101, 34)])
def test_imputation_is_a_third_of_opponent_votes(opponent, expected):
    assert impute_votes((0, opponent)) == (expected, opponent)
    assert impute_votes((opponent, 0)) == (opponent, expected)


def test_imputed_share_is_a_quarter_of_new_total():
    left, right = impute_votes((0, 300))
    assert left / (left + right) == 0.25


def test_imputation_noop_without_uncontested_seats():
    delegation = make_delegation([(60, 40), (55, 45), (30, 70), (7, 3)])
    assert delegation.uncontested_seats == (0, 0)
    assert not delegation.has_uncontested
    assert delegation.vote_results_imputation == delegation.vote_results
    assert delegation.efficiency_gap_imputation == (
        delegation.efficiency_gap
    )


def test_imputation_uses_actual_seats():
    delegation = make_delegation([(0, 120), (48, 52), (90, 10), (101, 0)])
    assert delegation.uncontested_seats == (1, 1)
    assert delegation.vote_results_imputation == (40 + 48 + 90 + 101,
                                                  120 + 52 + 10 + 34)
    expected = delegation.seat_margin - 2 * (
        delegation.vote_results_imputation[1]
        / delegation.votes_imputation - 0.5
    )
    assert delegation.efficiency_gap_imputation == pytest.approx(expected)


def test_zero_gap_favors_left_in_narrative():
    delegation = make_delegation([(60, 40), (40, 60)])
    assert delegation.efficiency_gap_imputation == 0
    assert delegation.advantage_party == "left"


def test_district_boundaries_keep_order():
    delegation = make_delegation([(1, 2), (3, 4), (5, 6)])
    collection = delegation.district_boundaries
    assert collection["type"] == "FeatureCollection"
    assert [
        f["properties"]["district"] for f in collection["features"]
    ] == ["1", "2", "3"]


def test_election_results_party_indexing():
    left, right = Party("Blue", "#00f"), Party("Red", "#f00")
    results = ElectionResults.from_parties(left, right, [])
    assert results.party(0) is left
    assert results.party(1) is right
    assert results.parties == {"left": left, "right": right}
    assert results.delegations == ()


def test_format_gap_percent():
    assert format_gap_percent(-0.2) == "20%"
    assert format_gap_percent(0.1234) == "12.3%"
    assert format_gap_percent(0.0) == "0%"
    assert format_gap_percent(-0.0678) == "6.8%"


def test_summary_row_fields():
    row = summary_row(make_delegation([(60, 40), (55, 45), (30, 70)]))
    assert row["seats"] == 3
    assert (row["left_seats"], row["right_seats"]) == (2, 1)
    assert (row["left_votes"], row["right_votes"]) == (145, 155)
    assert row["efficiency_gap"] == pytest.approx(-0.2)
    assert row["efficiency_gap_seats"] == 1
    assert row["advantage_party"] == "left"


def test_district_requires_boundary():
    with pytest.raises(TypeError):
        District("1", (60, 40))  # pylint: disable=no-value-for-parameter
