"""
Turn raw store rows into the immutable models the scoring pipeline reads.

Rows come from free-form data entry, so a bad row is reported as a finding
and skipped instead of failing the whole snapshot.
"""

import logging
from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, ValidationError, field_validator

from cupscoring.errors import Finding
from cupscoring.models import (
    DIVISIONS,
    MATCH_TYPES,
    SESSIONS,
    Bye,
    Hole,
    Match,
    SessionConfig,
    SideScore,
    Team,
    ThreeWay,
    TwoWay,
)

logger = logging.getLogger(__name__)

SESSION_ALIASES = {
    "friAM4BBB": "fri_am_4bbb",
    "friPMFoursomes": "fri_pm_foursomes",
    "satAM4BBB": "sat_am_4bbb",
    "satPMFoursomes": "sat_pm_foursomes",
    "sunSingles": "sun_singles",
}
# (weekday, half of day, match type) as stored by the scoring app
DATED_SESSIONS = {
    (4, "AM", "4BBB"): "fri_am_4bbb",
    (4, "PM", "Foursomes"): "fri_pm_foursomes",
    (5, "AM", "4BBB"): "sat_am_4bbb",
    (5, "PM", "Foursomes"): "sat_pm_foursomes",
    (6, "AM", "Singles"): "sun_singles",
    (6, "PM", "Singles"): "sun_singles",
}
SIDE_PREFIXES = {"A": "team_a", "B": "team_b", "C": "team_c"}


def resolve_session(session: str, match_date: date | None = None, match_type: str | None = None) -> str:
    if session in SESSIONS:
        return session
    if session in SESSION_ALIASES:
        return SESSION_ALIASES[session]
    half = (session or "").strip().upper()
    if match_date is not None and match_type:
        resolved = DATED_SESSIONS.get((match_date.weekday(), half, match_type))
        if resolved:
            return resolved
    raise ValueError(f"Cannot resolve session {session!r} (date={match_date}, type={match_type})")


class TeamRow(BaseModel):
    id: int
    name: str = ""
    division: str
    seed: int = 0
    points_per_match: dict[str, float] = {}
    players_per_session: dict[str, int] = {}
    resting_per_session: dict[str, int] = {}

    @field_validator("division")
    @classmethod
    def known_division(cls, value: str) -> str:
        if value not in DIVISIONS:
            raise ValueError(f"unknown division {value!r}")
        return value


class MatchRow(BaseModel):
    id: int
    division: str
    session: str
    match_type: str | None = None
    match_date: date | None = None
    team_a_id: int | None = None
    team_b_id: int | None = None
    team_c_id: int | None = None
    is_three_way: bool = False
    is_bye: bool = False
    status: str = "scheduled"
    game_number: int = 0
    hole_count: int = 18

    @field_validator("division")
    @classmethod
    def known_division(cls, value: str) -> str:
        if value not in DIVISIONS:
            raise ValueError(f"unknown division {value!r}")
        return value

    @field_validator("match_type")
    @classmethod
    def known_type(cls, value: str | None) -> str | None:
        if value is not None and value not in MATCH_TYPES:
            raise ValueError(f"unknown match type {value!r}")
        return value


class HoleRow(BaseModel):
    match_id: int | None = None
    hole_number: int
    par: int = 4
    status: str = "not-started"
    team_a_score: int | None = None
    team_b_score: int | None = None
    team_c_score: int | None = None
    team_a_strokes: int | None = None
    team_b_strokes: int | None = None
    team_c_strokes: int | None = None
    team_a_handicap_strokes: int = 0
    team_b_handicap_strokes: int = 0
    team_c_handicap_strokes: int = 0
    team_a_player_scores: list[int | None] | None = None
    team_b_player_scores: list[int | None] | None = None
    team_c_player_scores: list[int | None] | None = None

    def side_score(self, side: str) -> SideScore:
        prefix = SIDE_PREFIXES[side]
        players = getattr(self, f"{prefix}_player_scores") or []
        return SideScore(
            score=getattr(self, f"{prefix}_score"),
            strokes=getattr(self, f"{prefix}_strokes"),
            handicap_strokes=getattr(self, f"{prefix}_handicap_strokes"),
            player_scores=tuple(players),
        )

    def has_entry(self, side: str) -> bool:
        prefix = SIDE_PREFIXES[side]
        return any(
            getattr(self, f"{prefix}_{name}") is not None
            for name in ("score", "strokes", "player_scores")
        )


@dataclass(frozen=True)
class Snapshot:
    teams: tuple[Team, ...]
    matches: tuple[Match, ...]
    findings: tuple[Finding, ...] = ()

    def division_teams(self, division: str) -> list[Team]:
        return [team for team in self.teams if team.division == division]

    def division_matches(self, division: str) -> list[Match]:
        return [match for match in self.matches if match.division == division]


def _invalid(findings: list[Finding], kind: str, message: str, **ids) -> None:
    logger.warning("Skipping %s row: %s", kind, message)
    findings.append(Finding(kind=f"Invalid{kind.capitalize()}Row", message=message, **ids))


def _hole_row(findings: list[Finding], raw, match_id: int | None = None) -> HoleRow | None:
    if isinstance(raw, dict):
        match_id = raw.get("match_id", match_id)
        hole_number = raw.get("hole_number")
    else:
        hole_number = None
    try:
        return HoleRow.model_validate(raw)
    except ValidationError as exc:
        if not isinstance(hole_number, int):
            hole_number = None
        _invalid(findings, "hole", str(exc), match_id=match_id, hole_number=hole_number)
        return None


def build_team(row: TeamRow) -> Team:
    configured = set(row.points_per_match) | set(row.players_per_session) | set(row.resting_per_session)
    configured = {SESSION_ALIASES.get(key, key) for key in configured}
    if configured and configured != set(SESSIONS):
        raise ValueError(f"team {row.id} session configuration must cover exactly {', '.join(SESSIONS)}")

    def lookup(values: dict, session: str, default):
        for key, value in values.items():
            if SESSION_ALIASES.get(key, key) == session:
                return value
        return default

    sessions: dict[str, SessionConfig] = {}
    for session in SESSIONS if configured else ():
        sessions[session] = SessionConfig(
            points_per_win=lookup(row.points_per_match, session, 0.0),
            players=lookup(row.players_per_session, session, 0),
            resting=lookup(row.resting_per_session, session, 0),
        )
    return Team(id=row.id, name=row.name or f"Team {row.id}", division=row.division, seed=row.seed, sessions=sessions)


def _sides(row: MatchRow) -> TwoWay | ThreeWay | Bye:
    if row.is_bye:
        return Bye(row.team_a_id if row.team_a_id is not None else row.team_b_id)
    if row.is_three_way or row.team_c_id is not None:
        return ThreeWay(row.team_a_id, row.team_b_id, row.team_c_id)
    return TwoWay(row.team_a_id, row.team_b_id)


def build_hole(row: HoleRow, labels: tuple[str, ...]) -> Hole:
    """
    Sides that belong to the match are always present (possibly with null
    scores); any other side is present only when something was entered for it.
    """
    scores = {side: row.side_score(side) for side in labels}
    for side in SIDE_PREFIXES:
        if side not in labels and row.has_entry(side):
            scores[side] = row.side_score(side)
    return Hole(number=row.hole_number, par=row.par, status=row.status, scores=scores)


def build_match(row: MatchRow, holes: list[HoleRow]) -> Match:
    session = resolve_session(row.session, row.match_date, row.match_type)
    sides = _sides(row)
    return Match(
        id=row.id,
        division=row.division,
        session=session,
        sides=sides,
        holes=tuple(build_hole(hole, sides.labels) for hole in holes),
        match_type=row.match_type,
        hole_count=row.hole_count,
        status=row.status,
        game_number=row.game_number,
    )


def load_snapshot(data: dict) -> Snapshot:
    """
    Build a snapshot from ``{"teams": [...], "matches": [...], "holes": [...]}``.

    Hole rows may also be nested under each match as ``"holes"``.
    """
    findings: list[Finding] = []

    teams: list[Team] = []
    for raw in data.get("teams") or []:
        try:
            teams.append(build_team(TeamRow.model_validate(raw)))
        except (ValidationError, ValueError) as exc:
            _invalid(findings, "team", str(exc), team_id=raw.get("id") if isinstance(raw, dict) else None)

    holes_by_match: dict[int, list[HoleRow]] = {}
    for raw in data.get("holes") or []:
        hole = _hole_row(findings, raw)
        if hole is None:
            continue
        if hole.match_id is None:
            _invalid(findings, "hole", f"hole {hole.hole_number} has no match_id", hole_number=hole.hole_number)
            continue
        holes_by_match.setdefault(hole.match_id, []).append(hole)

    matches: list[Match] = []
    for raw in data.get("matches") or []:
        match_id = raw.get("id") if isinstance(raw, dict) else None
        try:
            row = MatchRow.model_validate(raw)
            nested = []
            for raw_hole in raw.get("holes") or []:
                hole = _hole_row(findings, raw_hole, match_id=row.id)
                if hole is not None:
                    nested.append(hole)
            matches.append(build_match(row, nested + holes_by_match.pop(row.id, [])))
        except (ValidationError, ValueError) as exc:
            holes_by_match.pop(match_id, None)
            _invalid(findings, "match", str(exc), match_id=match_id)

    for match_id in sorted(holes_by_match):
        _invalid(findings, "hole", f"holes reference unknown match {match_id}", match_id=match_id)

    return Snapshot(tuple(teams), tuple(matches), tuple(findings))
