from dataclasses import dataclass, field

DIVISIONS = ("Trophy", "Shield", "Plaque", "Bowl", "Mug")
SESSIONS = (
    "fri_am_4bbb",
    "fri_pm_foursomes",
    "sat_am_4bbb",
    "sat_pm_foursomes",
    "sun_singles",
)
SESSION_MATCH_TYPES = {
    "fri_am_4bbb": "4BBB",
    "fri_pm_foursomes": "Foursomes",
    "sat_am_4bbb": "4BBB",
    "sat_pm_foursomes": "Foursomes",
    "sun_singles": "Singles",
}
SESSION_LABELS = {
    "fri_am_4bbb": "Friday AM 4BBB",
    "fri_pm_foursomes": "Friday PM Foursomes",
    "sat_am_4bbb": "Saturday AM 4BBB",
    "sat_pm_foursomes": "Saturday PM Foursomes",
    "sun_singles": "Sunday Singles",
}
MATCH_TYPES = ("4BBB", "Foursomes", "Singles")

SCHEDULED = "scheduled"
IN_PROGRESS = "in-progress"
COMPLETED = "completed"
BYE = "bye"
MATCH_STATUS_LABELS = {
    SCHEDULED: "Scheduled",
    IN_PROGRESS: "In progress",
    COMPLETED: "Completed",
    BYE: "Bye",
}
HOLE_STATUSES = ("not-started", "in-progress", "completed")


def net_score(strokes: int | None, handicap_strokes: int = 0) -> int | None:
    if strokes is None:
        return None
    return strokes - max(handicap_strokes, 0)


@dataclass(frozen=True)
class SessionConfig:
    points_per_win: float
    players: int
    resting: int = 0


@dataclass(frozen=True)
class Team:
    id: int
    name: str
    division: str
    seed: int = 0
    sessions: dict[str, SessionConfig] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class SideScore:
    """One side's entry on a hole.

    ``score`` is the net match-play score. When it has not been entered the
    better ball of ``player_scores`` is used, then ``strokes`` less any
    handicap strokes the side receives on the hole.
    """

    score: int | None = None
    strokes: int | None = None
    handicap_strokes: int = 0
    player_scores: tuple[int | None, ...] = ()

    @property
    def effective(self) -> int | None:
        if self.score is not None:
            return self.score
        entered = [value for value in self.player_scores if value is not None]
        if entered:
            return min(entered)
        return net_score(self.strokes, self.handicap_strokes)


@dataclass(frozen=True)
class Hole:
    number: int
    par: int = 4
    status: str = "not-started"
    scores: dict[str, SideScore] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class TwoWay:
    a: int | None
    b: int | None

    labels = ("A", "B")

    def teams(self) -> dict[str, int | None]:
        return {"A": self.a, "B": self.b}


@dataclass(frozen=True)
class ThreeWay:
    a: int | None
    b: int | None
    c: int | None

    labels = ("A", "B", "C")

    def teams(self) -> dict[str, int | None]:
        return {"A": self.a, "B": self.b, "C": self.c}


@dataclass(frozen=True)
class Bye:
    team: int | None

    labels = ("A",)

    def teams(self) -> dict[str, int | None]:
        return {"A": self.team}


MatchSides = TwoWay | ThreeWay | Bye


@dataclass(frozen=True)
class Match:
    id: int
    division: str
    session: str
    sides: MatchSides
    holes: tuple[Hole, ...] = ()
    match_type: str | None = None
    hole_count: int = 18
    status: str = SCHEDULED
    game_number: int = 0

    @property
    def format(self) -> str:
        return self.match_type or SESSION_MATCH_TYPES.get(self.session, "Singles")

    @property
    def is_three_way(self) -> bool:
        return isinstance(self.sides, ThreeWay)

    @property
    def is_bye(self) -> bool:
        return isinstance(self.sides, Bye)

    @property
    def side_labels(self) -> tuple[str, ...]:
        return self.sides.labels

    def team_for(self, side: str) -> int | None:
        return self.sides.teams().get(side)


def session_order(session: str) -> int:
    return SESSIONS.index(session) if session in SESSIONS else len(SESSIONS)


def match_display(match: Match, team_names: dict[int, str] | None = None) -> str:
    names = team_names or {}
    labels = [
        names.get(team_id, f"Team {team_id}") if team_id is not None else "TBD"
        for team_id in match.sides.teams().values()
    ]
    if match.is_bye:
        return f"Division {match.division}: {labels[0]} (bye)"
    return f"Division {match.division}: {' vs '.join(labels)}"


def find_match(match_id: int | None, matches: list[Match]) -> Match | None:
    if match_id is None:
        return None
    for match in matches:
        if match.id == match_id:
            return match
    return None
