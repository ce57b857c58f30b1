from dataclasses import dataclass


class ScoringError(Exception):
    pass


class MalformedHole(ScoringError):
    def __init__(self, match_id: int | None, hole_number: int | None, reason: str):
        super().__init__(f"Match {match_id} hole {hole_number}: {reason}")
        self.match_id = match_id
        self.hole_number = hole_number
        self.reason = reason


class IncompleteHole(ScoringError):
    def __init__(self, hole_number: int | None, missing: tuple[str, ...]):
        super().__init__(f"Hole {hole_number} has no score for side(s) {', '.join(missing)}")
        self.hole_number = hole_number
        self.missing = missing


class AmbiguousResult(ScoringError):
    def __init__(self, match_id: int | None, status: str):
        super().__init__(f"Match {match_id} has no result while {status}")
        self.match_id = match_id
        self.status = status


class UnknownPointsRow(ScoringError):
    def __init__(self, division: str, session: str, kind: str | None = None):
        row = f"{division}/{session}" + (f"/{kind}" if kind else "")
        super().__init__(f"No points configured for {row}")
        self.division = division
        self.session = session
        self.kind = kind


class InconsistentTeamReference(ScoringError):
    def __init__(self, match_id: int | None, team_id: int | None, reason: str = "unknown team"):
        super().__init__(f"Match {match_id} references team {team_id}: {reason}")
        self.match_id = match_id
        self.team_id = team_id
        self.reason = reason


@dataclass(frozen=True)
class Finding:
    """A non-fatal data defect that was isolated and skipped."""

    kind: str
    message: str
    match_id: int | None = None
    hole_number: int | None = None
    team_id: int | None = None

    @classmethod
    def from_error(cls, exc: ScoringError) -> "Finding":
        return cls(
            kind=type(exc).__name__,
            message=str(exc),
            match_id=getattr(exc, "match_id", None),
            hole_number=getattr(exc, "hole_number", None),
            team_id=getattr(exc, "team_id", None),
        )
