import pytest

from cupscoring.errors import IncompleteHole, MalformedHole
from cupscoring.holes import (
    ALL_TIED,
    TIED,
    TWO_TIED_LOW,
    TWO_TIED_SECOND,
    UNDECIDED,
    WON,
    classify_hole,
    rank_sides,
    require_outcome,
    side_labels,
)
from cupscoring.models import Hole, SideScore, net_score


def scored(number, **values):
    return Hole(number, scores={side: SideScore(score=value) for side, value in values.items()})


def test_two_way_lower_score_wins():
    outcome = classify_hole(scored(1, A=4, B=5), 2)
    assert outcome.kind == WON
    assert outcome.winner == "A"
    assert outcome.ranking == (("A",), ("B",))


def test_two_way_equal_scores_tie():
    outcome = classify_hole(scored(2, A=4, B=4), 2)
    assert outcome.kind == TIED
    assert outcome.winner is None


def test_null_score_is_undecided_not_error():
    hole = Hole(3, scores={"A": SideScore(score=4), "B": SideScore()})
    outcome = classify_hole(hole, 2)
    assert outcome.kind == UNDECIDED
    assert not outcome.decided


def test_empty_hole_is_undecided():
    assert classify_hole(Hole(4), 3).kind == UNDECIDED


def test_require_outcome_names_missing_sides():
    hole = Hole(5, scores={"A": SideScore(score=4), "B": SideScore(), "C": SideScore()})
    with pytest.raises(IncompleteHole) as excinfo:
        require_outcome(hole, 3)
    assert excinfo.value.missing == ("B", "C")
    assert excinfo.value.hole_number == 5


def test_three_way_single_low_with_two_tied_behind():
    outcome = classify_hole(scored(1, A=5, B=3, C=5), 3)
    assert outcome.kind == WON
    assert outcome.winner == "B"
    assert outcome.tie == TWO_TIED_SECOND
    assert outcome.ranking == (("B",), ("A", "C"))


def test_three_way_two_tied_low_has_no_winner():
    outcome = classify_hole(scored(1, A=3, B=3, C=5), 3)
    assert outcome.kind == TIED
    assert outcome.winner is None
    assert outcome.tie == TWO_TIED_LOW


def test_three_way_all_tied():
    outcome = classify_hole(scored(1, A=4, B=4, C=4), 3)
    assert outcome.kind == TIED
    assert outcome.tie == ALL_TIED


def test_three_way_strict_ranking():
    outcome = classify_hole(scored(1, A=5, B=3, C=4), 3)
    assert outcome.winner == "B"
    assert outcome.tie is None
    assert outcome.ranking == (("B",), ("C",), ("A",))


def test_score_for_side_outside_match_is_malformed():
    with pytest.raises(MalformedHole) as excinfo:
        classify_hole(scored(7, A=4, B=5, C=3), 2, match_id=12)
    assert excinfo.value.match_id == 12
    assert excinfo.value.hole_number == 7


def test_missing_side_entry_is_malformed():
    with pytest.raises(MalformedHole):
        classify_hole(scored(7, A=4, B=5), 3)


def test_better_ball_and_net_strokes():
    hole = Hole(
        1,
        scores={
            "A": SideScore(player_scores=(5, None, 4)),
            "B": SideScore(strokes=6, handicap_strokes=1),
        },
    )
    outcome = classify_hole(hole, 2)
    assert outcome.winner == "A"


def test_net_score():
    assert net_score(5, 1) == 4
    assert net_score(5) == 5
    assert net_score(None, 1) is None
    assert net_score(5, -2) == 5
    assert SideScore(strokes=5, handicap_strokes=-2).effective == 5


def test_rank_sides_groups_equal_scores():
    assert rank_sides({"C": 4, "A": 4, "B": 2}) == (("B",), ("A", "C"))


def test_side_labels_rejects_other_counts():
    assert side_labels(3) == ("A", "B", "C")
    with pytest.raises(ValueError):
        side_labels(4)
