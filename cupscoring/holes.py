"""Per-hole match-play outcomes for two- and three-sided matches."""

from dataclasses import dataclass

from cupscoring.errors import IncompleteHole, MalformedHole
from cupscoring.models import Hole

SIDE_LABELS = ("A", "B", "C")

UNDECIDED = "undecided"
WON = "won"
TIED = "tied"

ALL_TIED = "all_tied"
TWO_TIED_LOW = "two_tied_low"
TWO_TIED_SECOND = "two_tied_second"


@dataclass(frozen=True)
class HoleOutcome:
    number: int
    kind: str
    winner: str | None = None
    ranking: tuple[tuple[str, ...], ...] = ()
    tie: str | None = None

    @property
    def decided(self) -> bool:
        return self.kind != UNDECIDED


def side_labels(side_count: int) -> tuple[str, ...]:
    if side_count not in (2, 3):
        raise ValueError(f"A match has 2 or 3 sides, not {side_count}")
    return SIDE_LABELS[:side_count]


def _check_sides(hole: Hole, labels: tuple[str, ...], match_id: int | None) -> None:
    extra = sorted(side for side in hole.scores if side not in labels)
    if extra:
        raise MalformedHole(match_id, hole.number, f"score entered for side {', '.join(extra)} not in match")
    missing = [side for side in labels if side not in hole.scores]
    if missing and hole.scores:
        raise MalformedHole(match_id, hole.number, f"no entry for side {', '.join(missing)}")


def rank_sides(scores: dict[str, int]) -> tuple[tuple[str, ...], ...]:
    """Group sides by score, lowest (best) first."""
    groups: dict[int, list[str]] = {}
    for side in sorted(scores):
        groups.setdefault(scores[side], []).append(side)
    return tuple(tuple(groups[value]) for value in sorted(groups))


def _outcome(number: int, ranking: tuple[tuple[str, ...], ...], side_count: int) -> HoleOutcome:
    low = ranking[0]
    if len(low) == side_count:
        return HoleOutcome(number, TIED, ranking=ranking, tie=ALL_TIED)
    if len(low) > 1:
        return HoleOutcome(number, TIED, ranking=ranking, tie=TWO_TIED_LOW)
    tie = TWO_TIED_SECOND if side_count == 3 and len(ranking) == 2 else None
    return HoleOutcome(number, WON, winner=low[0], ranking=ranking, tie=tie)


def classify_hole(hole: Hole, side_count: int, match_id: int | None = None) -> HoleOutcome:
    """
    Classify one hole as undecided, won by a single side, or tied.

    Lower score wins. Incomplete holes are undecided rather than an error;
    a side-count mismatch between the hole and the match raises MalformedHole.
    """
    labels = side_labels(side_count)
    _check_sides(hole, labels, match_id)
    values = {side: hole.scores[side].effective if side in hole.scores else None for side in labels}
    if any(value is None for value in values.values()):
        return HoleOutcome(hole.number, UNDECIDED)
    return _outcome(hole.number, rank_sides(values), side_count)


def require_outcome(hole: Hole, side_count: int, match_id: int | None = None) -> HoleOutcome:
    outcome = classify_hole(hole, side_count, match_id)
    if not outcome.decided:
        missing = tuple(
            side
            for side in side_labels(side_count)
            if side not in hole.scores or hole.scores[side].effective is None
        )
        raise IncompleteHole(hole.number, missing)
    return outcome
