import psycopg

from cupscoring.snapshot import Snapshot, load_snapshot

TEAM_COLUMNS = (
    "id",
    "name",
    "division",
    "seed",
    "points_per_match",
    "players_per_session",
    "resting_per_session",
)
MATCH_COLUMNS = (
    "id",
    "division",
    "session",
    "match_type",
    "match_date",
    "team_a_id",
    "team_b_id",
    "team_c_id",
    "is_three_way",
    "is_bye",
    "status",
    "game_number",
)
HOLE_COLUMNS = (
    "match_id",
    "hole_number",
    "par",
    "status",
    "team_a_score",
    "team_b_score",
    "team_c_score",
    "team_a_strokes",
    "team_b_strokes",
    "team_c_strokes",
)


def _row_to_dict(columns: tuple[str, ...], row: tuple) -> dict:
    # NULL columns fall back to the row model defaults
    return {column: value for column, value in zip(columns, row) if value is not None}


def _fetch_teams(cur: psycopg.Cursor, division: str) -> list[dict]:
    cur.execute(
        f"""
        select {", ".join(TEAM_COLUMNS)}
        from teams
        where division = %s
        order by seed, id;
        """,
        (division,),
    )
    return [_row_to_dict(TEAM_COLUMNS, row) for row in cur.fetchall()]


def _fetch_matches(cur: psycopg.Cursor, division: str) -> list[dict]:
    cur.execute(
        f"""
        select {", ".join(MATCH_COLUMNS)}
        from matches
        where division = %s
        order by match_date, game_number, id;
        """,
        (division,),
    )
    return [_row_to_dict(MATCH_COLUMNS, row) for row in cur.fetchall()]


def _fetch_holes(cur: psycopg.Cursor, match_ids: list[int]) -> list[dict]:
    if not match_ids:
        return []
    cur.execute(
        f"""
        select {", ".join(HOLE_COLUMNS)}
        from holes
        where match_id = any(%s)
        order by match_id, hole_number;
        """,
        (match_ids,),
    )
    return [_row_to_dict(HOLE_COLUMNS, row) for row in cur.fetchall()]


def fetch_division_rows(database_url: str, division: str) -> dict:
    """Read teams, matches and holes for a division inside one read-only transaction."""
    with psycopg.connect(database_url) as conn:
        conn.read_only = True
        conn.isolation_level = psycopg.IsolationLevel.REPEATABLE_READ
        with conn.cursor() as cur:
            teams = _fetch_teams(cur, division)
            matches = _fetch_matches(cur, division)
            holes = _fetch_holes(cur, [match["id"] for match in matches])
    return {"teams": teams, "matches": matches, "holes": holes}


def fetch_match_rows(database_url: str, match_id: int) -> dict | None:
    with psycopg.connect(database_url) as conn:
        conn.read_only = True
        with conn.cursor() as cur:
            cur.execute(
                f"""
                select {", ".join(MATCH_COLUMNS)}
                from matches
                where id = %s;
                """,
                (match_id,),
            )
            row = cur.fetchone()
            if not row:
                return None
            holes = _fetch_holes(cur, [match_id])
    return {"teams": [], "matches": [_row_to_dict(MATCH_COLUMNS, row)], "holes": holes}


def load_division_snapshot(database_url: str, division: str) -> Snapshot:
    return load_snapshot(fetch_division_rows(database_url, division))
