"""
Points allocation from match results.

The point table is configuration, keyed by (division, session, result kind).
Each division also declares whether points accrue per match, or whether a
team's matches in a session are first reduced to one session outcome that is
then mapped once through the table.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel

from cupscoring.errors import UnknownPointsRow
from cupscoring.match_state import MatchResult, MatchState
from cupscoring.models import (
    DIVISIONS,
    SESSION_MATCH_TYPES,
    SESSIONS,
    Match,
    Team,
    session_order,
)

logger = logging.getLogger(__name__)

PER_MATCH = "per_match"
PER_SESSION = "per_session"
DUPLICATE = "duplicate"
SPLIT_TIE = "split"
RESULT_KINDS = ("win", "tie", "loss")
PLAYERS_PER_SIDE = {"4BBB": 2, "Foursomes": 2, "Singles": 1}

_FOURBALL = {"win": 5, "tie": 2.5}
_SINGLES = {"win": 3, "tie": 1.5}
_FOURSOMES_UPPER = {"win": 3, "tie": 1.5}
_FOURSOMES_LOWER = {"win": 4, "tie": 2}


def _division_defaults(foursomes: dict) -> dict:
    return {
        "aggregation": PER_SESSION,
        "three_way_tie": DUPLICATE,
        "sessions": {
            "fri_am_4bbb": _FOURBALL,
            "fri_pm_foursomes": foursomes,
            "sat_am_4bbb": _FOURBALL,
            "sat_pm_foursomes": foursomes,
            "sun_singles": _SINGLES,
        },
    }


DEFAULT_POINT_TABLE = {
    "divisions": {
        "Trophy": _division_defaults(_FOURSOMES_UPPER),
        "Shield": _division_defaults(_FOURSOMES_UPPER),
        "Plaque": _division_defaults(_FOURSOMES_UPPER),
        "Bowl": _division_defaults(_FOURSOMES_LOWER),
        "Mug": _division_defaults(_FOURSOMES_LOWER),
    }
}


class PointsRowConfig(BaseModel):
    win: float
    tie: float
    loss: float = 0.0


class DivisionConfig(BaseModel):
    aggregation: Literal["per_match", "per_session"] = PER_SESSION
    three_way_tie: Literal["duplicate", "split"] = DUPLICATE
    sessions: dict[str, PointsRowConfig]


class PointTableConfig(BaseModel):
    divisions: dict[str, DivisionConfig]


@dataclass(frozen=True)
class PointsRow:
    win: float
    tie: float
    loss: float = 0.0

    def value(self, kind: str) -> float:
        return {"win": self.win, "tie": self.tie, "loss": self.loss}[kind]


@dataclass(frozen=True)
class DivisionRules:
    aggregation: str = PER_SESSION
    three_way_tie: str = DUPLICATE


class PointTable:
    def __init__(
        self,
        rows: dict[tuple[str, str], PointsRow],
        rules: dict[str, DivisionRules] | None = None,
    ):
        self.rows = dict(rows)
        self.rules = dict(rules or {})

    @classmethod
    def from_config(cls, data: dict) -> "PointTable":
        """Build a table from a mapping and check every division/session row is present."""
        config = PointTableConfig.model_validate(data)
        rows: dict[tuple[str, str], PointsRow] = {}
        rules: dict[str, DivisionRules] = {}
        for division, entry in config.divisions.items():
            if division not in DIVISIONS:
                raise ValueError(f"Unknown division in point table: {division}")
            rules[division] = DivisionRules(entry.aggregation, entry.three_way_tie)
            for session, row in entry.sessions.items():
                if session not in SESSIONS:
                    raise ValueError(f"Unknown session in point table: {division}/{session}")
                rows[(division, session)] = PointsRow(row.win, row.tie, row.loss)
        table = cls(rows, rules)
        table.validate()
        return table

    def validate(self, divisions: tuple[str, ...] = DIVISIONS) -> None:
        for division, rules in self.rules.items():
            if rules.three_way_tie == SPLIT_TIE and rules.aggregation != PER_MATCH:
                raise ValueError(f"{division}: three_way_tie 'split' requires aggregation 'per_match'")
        for division in divisions:
            for session in SESSIONS:
                if (division, session) not in self.rows:
                    raise UnknownPointsRow(division, session)

    def row(self, division: str, session: str) -> PointsRow:
        try:
            return self.rows[(division, session)]
        except KeyError:
            raise UnknownPointsRow(division, session) from None

    def value(self, division: str, session: str, kind: str) -> float:
        if kind not in RESULT_KINDS:
            raise UnknownPointsRow(division, session, kind)
        return self.row(division, session).value(kind)

    def rules_for(self, division: str) -> DivisionRules:
        return self.rules.get(division, DivisionRules())


def default_point_table() -> PointTable:
    return PointTable.from_config(DEFAULT_POINT_TABLE)


def load_point_table(path: str | Path | None = None) -> PointTable:
    if not path:
        return default_point_table()
    with Path(path).open("r", encoding="utf-8") as handle:
        data = json.load(handle)
    logger.info("Loaded point table from %s", path)
    return PointTable.from_config(data)


@dataclass(frozen=True)
class ScoredMatch:
    match: Match
    state: MatchState

    def result(self, live: bool = False) -> MatchResult | None:
        return self.state.provisional_result() if live else self.state.result


@dataclass(frozen=True)
class Allocation:
    points: dict[int, float] = field(default_factory=dict)
    session_outcomes: dict[int, dict[str, str]] = field(default_factory=dict)


def match_outcomes(match: Match, result: MatchResult) -> dict[int, str]:
    outcomes: dict[int, str] = {}
    for side in match.side_labels:
        team_id = match.team_for(side)
        if team_id is not None:
            outcomes[team_id] = result.outcome_for(side)
    return outcomes


def allocate_match(match: Match, result: MatchResult, table: PointTable) -> dict[int, float]:
    """Points per team for a single match, ignoring session aggregation."""
    row = table.row(match.division, match.session)
    split_ties = match.is_three_way and table.rules_for(match.division).three_way_tie == SPLIT_TIE
    points: dict[int, float] = {}
    for team_id, kind in match_outcomes(match, result).items():
        if kind == "tie" and split_ties:
            value = row.win / len(result.tied)
        else:
            value = row.value(kind)
        points[team_id] = points.get(team_id, 0.0) + value
    return points


def _session_kind(wins: int, losses: int) -> str:
    if wins > losses:
        return "win"
    if losses > wins:
        return "loss"
    return "tie"


def allocate_division(
    division: str,
    scored: list[ScoredMatch],
    table: PointTable,
    live: bool = False,
) -> Allocation:
    rules = table.rules_for(division)
    for entry in scored:
        table.row(division, entry.match.session)

    decided: list[tuple[Match, MatchResult]] = []
    for entry in scored:
        result = entry.result(live)
        if result is not None:
            decided.append((entry.match, result))
    points: dict[int, float] = {}

    if rules.aggregation == PER_MATCH:
        for match, result in decided:
            for team_id, value in allocate_match(match, result, table).items():
                points[team_id] = points.get(team_id, 0.0) + value
        return Allocation(points)

    session_outcomes: dict[int, dict[str, str]] = {}

    tallies: dict[tuple[int, str], dict[str, int]] = {}
    for match, result in decided:
        for team_id, kind in match_outcomes(match, result).items():
            tally = tallies.setdefault((team_id, match.session), {"win": 0, "tie": 0, "loss": 0})
            tally[kind] += 1

    for team_id, session in sorted(tallies, key=lambda key: (session_order(key[1]), key[0])):
        tally = tallies[(team_id, session)]
        kind = _session_kind(tally["win"], tally["loss"])
        session_outcomes.setdefault(team_id, {})[session] = kind
        points[team_id] = points.get(team_id, 0.0) + table.value(division, session, kind)
    return Allocation(points, session_outcomes)


def max_points_available(team: Team, table: PointTable) -> float:
    """Best case total for a team if it wins everything it plays."""
    rules = table.rules_for(team.division)
    total = 0.0
    for session in SESSIONS:
        win = table.row(team.division, session).win
        if rules.aggregation == PER_SESSION:
            total += win
            continue
        config = team.sessions.get(session)
        if config is None:
            continue
        playing = max(config.players - config.resting, 0)
        total += win * (playing // PLAYERS_PER_SIDE[SESSION_MATCH_TYPES[session]])
    return total
