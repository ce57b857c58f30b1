import logging
from dataclasses import asdict

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from cupscoring.db import fetch_match_rows, load_division_snapshot
from cupscoring.errors import UnknownPointsRow
from cupscoring.match_state import MatchState, compute_match, describe_state
from cupscoring.models import DIVISIONS, SESSION_LABELS, Match, match_display
from cupscoring.settings import load_settings, point_table_for
from cupscoring.snapshot import Snapshot, load_snapshot
from cupscoring.standings import StandingsReport, compute_standings, tournament_progress

logger = logging.getLogger(__name__)

app = FastAPI()
settings = load_settings()
point_table = point_table_for(settings)


class MatchPayload(BaseModel):
    match: dict
    holes: list[dict] = []


class StandingsPayload(BaseModel):
    teams: list[dict] = []
    matches: list[dict] = []
    holes: list[dict] = []
    previous: dict[int, int] | None = None


def _state_payload(match: Match, state: MatchState, team_names: dict[int, str] | None = None) -> dict:
    names = {
        side: (team_names or {}).get(team_id, f"Team {team_id}")
        for side, team_id in match.sides.teams().items()
    }
    return {
        **asdict(state),
        "division": match.division,
        "session": match.session,
        "session_label": SESSION_LABELS.get(match.session, match.session),
        "format": match.format,
        "display": match_display(match, team_names),
        "status_label": state.status_label,
        "description": describe_state(state, names),
    }


def _report_payload(report: StandingsReport, snapshot: Snapshot) -> dict:
    team_names = {team.id: team.name for team in snapshot.teams}
    matches = {match.id: match for match in snapshot.division_matches(report.division)}
    return {
        "division": report.division,
        "standings": [asdict(entry) for entry in report.standings],
        "matches": [
            _state_payload(matches[match_id], state, team_names)
            for match_id, state in report.match_states.items()
        ],
        "progress": tournament_progress(list(matches.values())),
        "findings": [asdict(finding) for finding in snapshot.findings + report.findings],
    }


def _standings_for(division: str, snapshot: Snapshot, previous: dict[int, int] | None, live: bool) -> dict:
    if division not in DIVISIONS:
        raise HTTPException(status_code=404, detail=f"Unknown division {division}")
    try:
        report = compute_standings(
            division,
            snapshot.division_teams(division),
            snapshot.division_matches(division),
            point_table,
            previous=previous,
            live=live,
        )
    except UnknownPointsRow as exc:
        logger.error("Point table is missing a row: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))
    return _report_payload(report, snapshot)


def _single_match(snapshot: Snapshot):
    if not snapshot.matches:
        detail = [asdict(finding) for finding in snapshot.findings]
        return JSONResponse({"error": "Invalid match", "details": detail}, status_code=422)
    match = snapshot.matches[0]
    state = compute_match(match)
    payload = _state_payload(match, state)
    payload["findings"] = [asdict(finding) for finding in snapshot.findings + state.findings]
    return payload


@app.post("/api/matches/compute")
async def api_compute_match(request: Request):
    try:
        payload = MatchPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)
    snapshot = load_snapshot({"matches": [{**payload.match, "holes": payload.holes}]})
    return _single_match(snapshot)


@app.post("/api/standings/{division}")
async def api_compute_standings(division: str, request: Request, live: bool = False):
    try:
        payload = StandingsPayload.model_validate(await request.json())
    except ValidationError as exc:
        return JSONResponse({"error": "Invalid payload", "details": exc.errors()}, status_code=422)
    snapshot = load_snapshot(payload.model_dump(exclude={"previous"}))
    return _standings_for(division, snapshot, payload.previous, live)


@app.get("/api/matches/{match_id}")
async def api_match(match_id: int):
    rows = fetch_match_rows(settings.database_url, match_id)
    if rows is None:
        raise HTTPException(status_code=404, detail="Match not found")
    return _single_match(load_snapshot(rows))


@app.get("/api/standings/{division}")
async def api_standings(division: str, live: bool = False):
    if division not in DIVISIONS:
        raise HTTPException(status_code=404, detail=f"Unknown division {division}")
    snapshot = load_division_snapshot(settings.database_url, division)
    return _standings_for(division, snapshot, None, live)


@app.get("/api/point-table")
async def api_point_table():
    return {
        division: {
            "rules": asdict(point_table.rules_for(division)),
            "sessions": {
                session: asdict(row)
                for (row_division, session), row in point_table.rows.items()
                if row_division == division
            },
        }
        for division in DIVISIONS
    }
