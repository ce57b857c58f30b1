"""
Match-play state for a single match.

Status is never read from storage: it is derived from the hole rows every
time, so a corrected score on any hole is reflected on the next call.
"""

import logging
from dataclasses import dataclass, field

from cupscoring.errors import AmbiguousResult, Finding, MalformedHole
from cupscoring.holes import WON, HoleOutcome, classify_hole, rank_sides
from cupscoring.models import (
    BYE,
    COMPLETED,
    IN_PROGRESS,
    MATCH_STATUS_LABELS,
    SCHEDULED,
    Match,
)

logger = logging.getLogger(__name__)

WIN = "win"
HALVED = "halved"
SPLIT = "split"
BYE_RESULT = "bye"


@dataclass(frozen=True)
class MatchResult:
    kind: str
    label: str
    winners: tuple[str, ...] = ()
    tied: tuple[str, ...] = ()
    losers: tuple[str, ...] = ()
    holes_up: int = 0
    holes_remaining: int = 0
    clinched: bool = False

    def outcome_for(self, side: str) -> str:
        if side in self.winners:
            return "win"
        if side in self.tied:
            return "tie"
        return "loss"


@dataclass(frozen=True)
class MatchState:
    match_id: int
    status: str
    side_labels: tuple[str, ...]
    holes_won: dict[str, int] = field(default_factory=dict)
    holes_halved: int = 0
    holes_played: int = 0
    holes_remaining: int = 0
    leaders: tuple[str, ...] = ()
    lead: int = 0
    dormie: bool = False
    strokes: dict[str, int | None] = field(default_factory=dict)
    outcomes: tuple[HoleOutcome, ...] = ()
    result: MatchResult | None = None
    findings: tuple[Finding, ...] = ()

    @property
    def status_label(self) -> str:
        return MATCH_STATUS_LABELS.get(self.status, self.status)

    @property
    def is_final(self) -> bool:
        return self.status in (COMPLETED, BYE)

    def require_result(self) -> MatchResult:
        if self.result is None:
            raise AmbiguousResult(self.match_id, self.status)
        return self.result

    def provisional_result(self) -> MatchResult | None:
        """The final result, or the current leader's standing while in progress."""
        if self.result is not None:
            return self.result
        if self.status != IN_PROGRESS:
            return None
        ranking = rank_sides({side: -won for side, won in self.holes_won.items()})
        return _result(ranking, self.lead, self.holes_remaining, clinched=False)


def _result(
    ranking: tuple[tuple[str, ...], ...],
    lead: int,
    remaining: int,
    clinched: bool,
) -> MatchResult:
    leaders = ranking[0]
    trailing = tuple(side for group in ranking[1:] for side in group)
    if not trailing:
        return MatchResult(HALVED, "AS", tied=leaders, holes_remaining=remaining)
    if len(leaders) > 1:
        return MatchResult(
            SPLIT,
            f"{'/'.join(leaders)} AS",
            tied=leaders,
            losers=trailing,
            holes_up=lead,
            holes_remaining=remaining,
        )
    label = f"{lead}&{remaining}" if clinched and remaining else f"{lead}up"
    return MatchResult(
        WIN,
        label,
        winners=leaders,
        losers=trailing,
        holes_up=lead,
        holes_remaining=remaining,
        clinched=clinched and remaining > 0,
    )


def _played_holes(match: Match) -> tuple[list[tuple[HoleOutcome, dict]], list[Finding]]:
    played: list[tuple[HoleOutcome, dict]] = []
    findings: list[Finding] = []
    seen: set[int] = set()
    side_count = len(match.side_labels)
    for hole in sorted(match.holes, key=lambda item: item.number):
        try:
            if not 1 <= hole.number <= match.hole_count:
                raise MalformedHole(match.id, hole.number, f"hole number outside 1..{match.hole_count}")
            if hole.number in seen:
                raise MalformedHole(match.id, hole.number, "duplicate hole number")
            seen.add(hole.number)
            outcome = classify_hole(hole, side_count, match.id)
        except MalformedHole as exc:
            logger.warning("Skipping hole: %s", exc)
            findings.append(Finding.from_error(exc))
            continue
        if outcome.decided:
            played.append((outcome, hole.scores))
    return played, findings


def _stroke_totals(match: Match, played: list[tuple[HoleOutcome, dict]]) -> dict[str, int | None]:
    totals: dict[str, int | None] = {side: None for side in match.side_labels}
    for _, scores in played:
        strokes = [scores[side].strokes for side in match.side_labels]
        if any(value is None for value in strokes):
            continue
        for side, value in zip(match.side_labels, strokes):
            totals[side] = (totals[side] or 0) + value
    return totals


def compute_match(match: Match) -> MatchState:
    """
    Fold a match's hole rows into its status and, once decided, its result.

    Never raises on bad hole data: malformed holes are skipped and reported in
    ``findings``, unplayed holes are simply absent from the tally.
    """
    if match.is_bye:
        return MatchState(
            match_id=match.id,
            status=BYE,
            side_labels=match.side_labels,
            result=MatchResult(BYE_RESULT, "Bye", winners=match.side_labels),
        )

    played, findings = _played_holes(match)
    holes_won = {side: 0 for side in match.side_labels}
    halved = 0
    for outcome, _ in played:
        if outcome.kind == WON:
            holes_won[outcome.winner] += 1
        else:
            halved += 1

    holes_played = len(played)
    remaining = max(match.hole_count - holes_played, 0)
    ranking = rank_sides({side: -won for side, won in holes_won.items()})
    leaders = ranking[0]
    lead = holes_won[leaders[0]] - holes_won[ranking[1][0]] if len(ranking) > 1 else 0
    clinched = len(leaders) == 1 and lead > remaining

    if holes_played == 0:
        status = SCHEDULED
    elif holes_played >= match.hole_count or clinched:
        status = COMPLETED
    else:
        status = IN_PROGRESS

    result = _result(ranking, lead, remaining, clinched) if status == COMPLETED else None
    return MatchState(
        match_id=match.id,
        status=status,
        side_labels=match.side_labels,
        holes_won=holes_won,
        holes_halved=halved,
        holes_played=holes_played,
        holes_remaining=remaining,
        leaders=leaders if holes_played else (),
        lead=lead,
        dormie=status == IN_PROGRESS and len(leaders) == 1 and 0 < lead == remaining,
        strokes=_stroke_totals(match, played),
        outcomes=tuple(outcome for outcome, _ in played),
        result=result,
        findings=tuple(findings),
    )


def describe_state(state: MatchState, names: dict[str, str] | None = None) -> str:
    names = names or {}

    def label(side: str) -> str:
        return names.get(side, side)

    def joined(sides: tuple[str, ...]) -> str:
        return " & ".join(label(side) for side in sides)

    if state.status == SCHEDULED:
        return "Not started"
    if state.status == BYE:
        return f"{joined(state.side_labels)} advances on a bye"
    if state.status == IN_PROGRESS:
        if state.lead == 0:
            text = f"All square thru {state.holes_played}"
        elif len(state.leaders) > 1:
            text = f"{joined(state.leaders)} level, {state.lead} ahead thru {state.holes_played}"
        else:
            text = f"{joined(state.leaders)} {state.lead}up thru {state.holes_played}"
        return f"{text} (dormie)" if state.dormie else text

    result = state.require_result()
    if result.kind == WIN:
        return f"{joined(result.winners)} wins {result.label}"
    if result.kind == SPLIT:
        return f"{joined(result.tied)} halved, {joined(result.losers)} {result.holes_up} down"
    return "Match halved (AS)"
