import pytest

from cupscoring.models import Bye, Hole, Match, SideScore, Team, ThreeWay, TwoWay


def _hole(number: int, code: str, labels: tuple[str, ...]) -> Hole:
    # A/B/C: that side wins the hole, H: halved, ".": nothing entered yet
    if code == ".":
        return Hole(number, scores={side: SideScore() for side in labels})
    scores = {}
    for side in labels:
        value = 4 if code == "H" or side != code else 3
        scores[side] = SideScore(score=value, strokes=value)
    return Hole(number, status="completed", scores=scores)


def build_match(
    match_id: int = 1,
    holes: str = "",
    teams: tuple = (1, 2),
    division: str = "Trophy",
    session: str = "fri_am_4bbb",
    hole_count: int = 18,
    game_number: int = 0,
) -> Match:
    if len(teams) == 1:
        sides = Bye(teams[0])
    elif len(teams) == 3:
        sides = ThreeWay(*teams)
    else:
        sides = TwoWay(*teams)
    return Match(
        id=match_id,
        division=division,
        session=session,
        sides=sides,
        holes=tuple(_hole(number, code, sides.labels) for number, code in enumerate(holes, 1)),
        hole_count=hole_count,
        game_number=game_number,
    )


@pytest.fixture
def make_match():
    return build_match


@pytest.fixture
def make_teams():
    def _make(*ids, division="Trophy"):
        return [Team(id=team_id, name=f"Team {team_id}", division=division, seed=team_id) for team_id in ids]

    return _make
