from datetime import date

import pytest

from cupscoring.holes import UNDECIDED, classify_hole
from cupscoring.match_state import compute_match
from cupscoring.models import SESSIONS, ThreeWay, TwoWay
from cupscoring.snapshot import load_snapshot, resolve_session

FRIDAY = date(2024, 3, 1)
SUNDAY = date(2024, 3, 3)


def test_resolve_session_accepts_every_encoding():
    assert resolve_session("sat_pm_foursomes") == "sat_pm_foursomes"
    assert resolve_session("friAM4BBB") == "fri_am_4bbb"
    assert resolve_session("AM", FRIDAY, "4BBB") == "fri_am_4bbb"
    assert resolve_session("pm", FRIDAY, "Foursomes") == "fri_pm_foursomes"
    assert resolve_session("PM", SUNDAY, "Singles") == "sun_singles"


def test_resolve_session_rejects_unknown():
    with pytest.raises(ValueError):
        resolve_session("AM", FRIDAY, "Singles")
    with pytest.raises(ValueError):
        resolve_session("evening")


def test_load_snapshot_builds_teams_matches_and_holes():
    data = {
        "teams": [
            {"id": 1, "name": "Royal", "division": "Trophy", "seed": 1},
            {"id": 2, "name": "Muthaiga", "division": "Trophy", "seed": 2},
        ],
        "matches": [
            {
                "id": 10,
                "division": "Trophy",
                "session": "AM",
                "match_type": "4BBB",
                "match_date": "2024-03-01",
                "team_a_id": 1,
                "team_b_id": 2,
                "holes": [{"hole_number": 1, "team_a_score": 4, "team_b_score": 5}],
            }
        ],
        "holes": [{"match_id": 10, "hole_number": 2, "team_a_strokes": 5, "team_b_strokes": 5}],
    }
    snapshot = load_snapshot(data)
    assert snapshot.findings == ()
    assert [team.name for team in snapshot.division_teams("Trophy")] == ["Royal", "Muthaiga"]
    match = snapshot.matches[0]
    assert match.session == "fri_am_4bbb"
    assert match.sides == TwoWay(1, 2)
    assert [hole.number for hole in match.holes] == [1, 2]
    state = compute_match(match)
    assert state.holes_won == {"A": 1, "B": 0}
    assert state.holes_halved == 1


def test_side_without_entry_is_present_but_null():
    snapshot = load_snapshot(
        {
            "matches": [
                {
                    "id": 3,
                    "division": "Bowl",
                    "session": "sun_singles",
                    "team_a_id": 1,
                    "team_b_id": 2,
                    "holes": [{"hole_number": 1, "team_a_score": 4}],
                }
            ]
        }
    )
    hole = snapshot.matches[0].holes[0]
    assert set(hole.scores) == {"A", "B"}
    assert hole.scores["B"].score is None
    assert classify_hole(hole, 2).kind == UNDECIDED


def test_entry_for_side_outside_match_surfaces_as_malformed_hole():
    snapshot = load_snapshot(
        {
            "matches": [
                {
                    "id": 4,
                    "division": "Mug",
                    "session": "sun_singles",
                    "team_a_id": 1,
                    "team_b_id": 2,
                    "holes": [{"hole_number": 1, "team_a_score": 4, "team_b_score": 4, "team_c_score": 3}],
                }
            ]
        }
    )
    state = compute_match(snapshot.matches[0])
    assert state.holes_played == 0
    assert state.findings[0].kind == "MalformedHole"


def test_three_way_and_bye_rows():
    snapshot = load_snapshot(
        {
            "matches": [
                {"id": 1, "division": "Plaque", "session": "sun_singles", "team_a_id": 1, "team_b_id": 2, "team_c_id": 3},
                {"id": 2, "division": "Plaque", "session": "sun_singles", "team_a_id": 4, "is_bye": True},
            ]
        }
    )
    three_way, bye = snapshot.matches
    assert three_way.sides == ThreeWay(1, 2, 3)
    assert bye.is_bye
    assert compute_match(bye).status == "bye"


def test_bad_rows_become_findings():
    snapshot = load_snapshot(
        {
            "teams": [
                {"id": 1, "name": "Royal", "division": "Trophy"},
                {"id": 2, "name": "Nowhere", "division": "Cup"},
                {"id": 3, "division": "Trophy", "points_per_match": {"fri_am_4bbb": 5}},
            ],
            "matches": [{"id": 9, "division": "Trophy", "session": "evening", "team_a_id": 1, "team_b_id": 2}],
            "holes": [
                {"match_id": 9, "hole_number": 1, "team_a_score": 4, "team_b_score": 4},
                {"match_id": 77, "hole_number": 1},
            ],
        }
    )
    assert [team.id for team in snapshot.teams] == [1]
    assert snapshot.matches == ()
    kinds = [(finding.kind, finding.team_id or finding.match_id) for finding in snapshot.findings]
    assert kinds == [
        ("InvalidTeamRow", 2),
        ("InvalidTeamRow", 3),
        ("InvalidMatchRow", 9),
        ("InvalidHoleRow", 77),
    ]


def test_team_session_configuration():
    snapshot = load_snapshot(
        {
            "teams": [
                {
                    "id": 1,
                    "division": "Trophy",
                    "points_per_match": {session: 5 for session in SESSIONS},
                    "players_per_session": {session: 8 for session in SESSIONS},
                    "resting_per_session": {"sunSingles": 2},
                }
            ]
        }
    )
    team = snapshot.teams[0]
    assert team.name == "Team 1"
    assert team.sessions["sun_singles"].resting == 2
    assert team.sessions["sat_am_4bbb"].players == 8
    assert team.sessions["sat_am_4bbb"].resting == 0


def test_bad_nested_hole_is_skipped_and_match_kept():
    holes = [{"hole_number": number, "team_a_score": 3, "team_b_score": 4} for number in range(1, 11)]
    holes.append({"hole_number": 11, "team_a_score": "x", "team_b_score": 4})
    snapshot = load_snapshot(
        {
            "matches": [
                {
                    "id": 8,
                    "division": "Trophy",
                    "session": "sat_am_4bbb",
                    "team_a_id": 1,
                    "team_b_id": 2,
                    "holes": holes,
                }
            ]
        }
    )
    assert [match.id for match in snapshot.matches] == [8]
    assert len(snapshot.matches[0].holes) == 10
    assert [(finding.kind, finding.match_id, finding.hole_number) for finding in snapshot.findings] == [
        ("InvalidHoleRow", 8, 11)
    ]
    assert compute_match(snapshot.matches[0]).result.label == "10&8"
