"""
Division standings.

Standings are a disposable projection: every call rebuilds every team's line
from the full set of matches and holes. Nothing is patched incrementally.
"""

import logging
from dataclasses import dataclass, field

from cupscoring.errors import Finding, InconsistentTeamReference
from cupscoring.holes import WON
from cupscoring.match_state import MatchState, compute_match
from cupscoring.models import BYE, COMPLETED, IN_PROGRESS, SCHEDULED, Match, Team, session_order
from cupscoring.points import (
    PointTable,
    ScoredMatch,
    allocate_division,
    default_point_table,
    max_points_available,
)

logger = logging.getLogger(__name__)

RESULT_CODES = {"win": "W", "loss": "L", "tie": "H"}
RECENT_RESULTS = 5


@dataclass(frozen=True)
class Standing:
    team_id: int
    team_name: str
    division: str
    seed: int
    points: float
    matches_played: int
    matches_won: int
    matches_lost: int
    matches_halved: int
    matches_in_progress: int
    holes_won: int
    holes_lost: int
    total_strokes: int | None
    strokes_differential: int
    sessions_played: int
    max_points: float
    recent_results: str
    position: int
    position_change: str

    @property
    def hole_differential(self) -> int:
        return self.holes_won - self.holes_lost


@dataclass(frozen=True)
class StandingsReport:
    division: str
    standings: tuple[Standing, ...]
    match_states: dict[int, MatchState] = field(default_factory=dict)
    findings: tuple[Finding, ...] = ()


def _empty_stat(team: Team) -> dict:
    return {
        "team_id": team.id,
        "team_name": team.name,
        "division": team.division,
        "seed": team.seed,
        "points": 0.0,
        "matches_won": 0,
        "matches_lost": 0,
        "matches_halved": 0,
        "matches_in_progress": 0,
        "holes_won": 0,
        "holes_lost": 0,
        "total_strokes": None,
        "strokes_differential": 0,
        "sessions": set(),
        "results": [],
    }


def _match_order(match: Match) -> tuple:
    return (session_order(match.session), match.game_number, match.id)


def _check_references(match: Match, team_ids: set[int]) -> None:
    seen: set[int] = set()
    for side in match.side_labels:
        team_id = match.team_for(side)
        if team_id is None:
            raise InconsistentTeamReference(match.id, None, f"side {side} has no team")
        if team_id not in team_ids:
            raise InconsistentTeamReference(match.id, team_id, f"not a {match.division} team")
        if team_id in seen:
            raise InconsistentTeamReference(match.id, team_id, "team appears on two sides")
        seen.add(team_id)


def _record_match(stats: dict[int, dict], match: Match, state: MatchState) -> None:
    teams = {side: match.team_for(side) for side in match.side_labels}

    if state.is_final:
        result = state.require_result()
        for side, team_id in teams.items():
            kind = result.outcome_for(side)
            entry = stats[team_id]
            entry[{"win": "matches_won", "loss": "matches_lost", "tie": "matches_halved"}[kind]] += 1
            entry["results"].append(RESULT_CODES[kind])
    elif state.status == IN_PROGRESS:
        for team_id in teams.values():
            stats[team_id]["matches_in_progress"] += 1
            stats[team_id]["results"].append("P")

    if state.status != SCHEDULED:
        for team_id in teams.values():
            stats[team_id]["sessions"].add(match.session)

    for outcome in state.outcomes:
        if outcome.kind != WON:
            continue
        for side, team_id in teams.items():
            stats[team_id]["holes_won" if side == outcome.winner else "holes_lost"] += 1

    for side, team_id in teams.items():
        own = state.strokes.get(side)
        if own is None:
            continue
        entry = stats[team_id]
        entry["total_strokes"] = (entry["total_strokes"] or 0) + own
        for other in teams:
            theirs = state.strokes.get(other)
            if other != side and theirs is not None:
                entry["strokes_differential"] += own - theirs


def _rank_key(entry: dict) -> tuple:
    strokes = entry["total_strokes"]
    return (
        -entry["points"],
        -entry["matches_won"],
        -(entry["holes_won"] - entry["holes_lost"]),
        strokes is None,
        strokes or 0,
        entry["seed"],
        entry["team_id"],
    )


def _position_change(team_id: int, position: int, previous: dict[int, int] | None) -> str:
    if previous is None:
        return "same"
    before = previous.get(team_id)
    if before is None:
        return "new"
    if position < before:
        return "up"
    if position > before:
        return "down"
    return "same"


def compute_standings(
    division: str,
    teams: list[Team],
    matches: list[Match],
    table: PointTable | None = None,
    previous: dict[int, int] | None = None,
    live: bool = False,
) -> StandingsReport:
    """
    Rebuild the standings for one division from its teams and matches.

    Matches with a missing or foreign team reference are reported in
    ``findings`` and left out; the rest of the division is still ranked.
    With ``live`` set, in-progress matches contribute provisional points
    based on who currently leads.
    """
    table = table or default_point_table()
    division_teams = [team for team in teams if team.division == division]
    stats = {team.id: _empty_stat(team) for team in division_teams}
    findings: list[Finding] = []
    scored: list[ScoredMatch] = []
    states: dict[int, MatchState] = {}

    for match in sorted((m for m in matches if m.division == division), key=_match_order):
        try:
            _check_references(match, set(stats))
        except InconsistentTeamReference as exc:
            logger.warning("Excluding match from %s standings: %s", division, exc)
            findings.append(Finding.from_error(exc))
            continue
        state = compute_match(match)
        states[match.id] = state
        findings.extend(state.findings)
        scored.append(ScoredMatch(match, state))
        _record_match(stats, match, state)

    allocation = allocate_division(division, scored, table, live=live)
    for team_id, value in allocation.points.items():
        stats[team_id]["points"] = round(value, 2)

    ordered = sorted(stats.values(), key=_rank_key)
    team_lookup = {team.id: team for team in division_teams}
    standings = []
    for position, entry in enumerate(ordered, 1):
        played = entry["matches_won"] + entry["matches_lost"] + entry["matches_halved"]
        standings.append(
            Standing(
                team_id=entry["team_id"],
                team_name=entry["team_name"],
                division=entry["division"],
                seed=entry["seed"],
                points=entry["points"],
                matches_played=played,
                matches_won=entry["matches_won"],
                matches_lost=entry["matches_lost"],
                matches_halved=entry["matches_halved"],
                matches_in_progress=entry["matches_in_progress"],
                holes_won=entry["holes_won"],
                holes_lost=entry["holes_lost"],
                total_strokes=entry["total_strokes"],
                strokes_differential=entry["strokes_differential"],
                sessions_played=len(entry["sessions"]),
                max_points=max_points_available(team_lookup[entry["team_id"]], table),
                recent_results="".join(reversed(entry["results"]))[:RECENT_RESULTS],
                position=position,
                position_change=_position_change(entry["team_id"], position, previous),
            )
        )
    return StandingsReport(division, tuple(standings), states, tuple(findings))


def tournament_progress(matches: list[Match]) -> dict[str, int]:
    progress = {"total": len(matches), SCHEDULED: 0, IN_PROGRESS: 0, COMPLETED: 0, BYE: 0}
    for match in matches:
        progress[compute_match(match).status] += 1
    return progress
