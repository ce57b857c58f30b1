import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from cupscoring.db import load_division_snapshot
from cupscoring.match_state import compute_match, describe_state
from cupscoring.models import DIVISIONS, find_match
from cupscoring.settings import load_settings, point_table_for
from cupscoring.snapshot import Snapshot, load_snapshot
from cupscoring.standings import compute_standings, tournament_progress


def load_source(division: str, snapshot_path: Path | None) -> Snapshot:
    if snapshot_path:
        data = json.loads(snapshot_path.read_text(encoding="utf-8"))
        return load_snapshot(data)
    return load_division_snapshot(load_settings().database_url, division)


def export_standings(snapshot: Snapshot, division: str, live: bool = False) -> dict:
    table = point_table_for(load_settings())
    matches = snapshot.division_matches(division)
    report = compute_standings(division, snapshot.division_teams(division), matches, table, live=live)
    return {
        "division": division,
        "live": live,
        "standings": [asdict(entry) for entry in report.standings],
        "progress": tournament_progress(matches),
        "findings": [asdict(finding) for finding in snapshot.findings + report.findings],
    }


def export_match(snapshot: Snapshot, match_id: int) -> dict:
    match = find_match(match_id, list(snapshot.matches))
    if match is None:
        raise SystemExit(f"Match {match_id} is not in the snapshot.")
    state = compute_match(match)
    return {**asdict(state), "description": describe_state(state)}


def main() -> None:
    parser = argparse.ArgumentParser(description="Recompute division standings from hole scores.")
    parser.add_argument("--division", "-d", required=True, choices=DIVISIONS)
    parser.add_argument(
        "--snapshot",
        "-s",
        type=Path,
        help="JSON file with teams, matches and holes (defaults to DATABASE_URL).",
    )
    parser.add_argument("--live", action="store_true", help="Count in-progress matches at their current lead.")
    parser.add_argument("--match", "-m", type=int, help="Only show the state of one match.")
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        help="Path to write the JSON export (defaults to stdout).",
    )
    args = parser.parse_args()

    snapshot = load_source(args.division, args.snapshot)
    if args.match is not None:
        result = export_match(snapshot, args.match)
    else:
        result = export_standings(snapshot, args.division, args.live)
    payload = json.dumps(result, default=str, indent=2)

    if args.output:
        args.output.write_text(payload, encoding="utf-8")
        print(f"Standings saved to {args.output}")
    else:
        print(payload)


if __name__ == "__main__":
    main()
