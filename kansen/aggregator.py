"""Aggregation helpers for attendance statistics."""
from __future__ import annotations

from typing import Iterable, List, Optional

from .models import AttendanceSummary, GameRecord, VisitRecord


def team_result(game: GameRecord, team: str) -> Optional[str]:
    """Return ``"win"``, ``"loss"`` or ``"draw"`` for *team*, or ``None``.

    ``None`` means the team did not play in *game* or the score is unknown.
    """

    if not game.is_final or not game.involves(team):
        return None
    if team == game.home_team:
        ours, theirs = game.home_score, game.away_score
    else:
        ours, theirs = game.away_score, game.home_score
    if ours > theirs:
        return "win"
    if ours < theirs:
        return "loss"
    return "draw"


def filter_visits(
    visits: Iterable[VisitRecord],
    *,
    season: Optional[int] = None,
    team: Optional[str] = None,
    opponent: Optional[str] = None,
) -> List[VisitRecord]:
    selected: List[VisitRecord] = []
    for visit in visits:
        game = visit.game
        if game is None:
            continue
        if season is not None and game.date.year != season:
            continue
        if team and not game.involves(team):
            continue
        if opponent and not game.involves(opponent):
            continue
        selected.append(visit)
    return selected


def summarize_attendance(
    visits: Iterable[VisitRecord],
    team: str,
    *,
    season: Optional[int] = None,
    opponent: Optional[str] = None,
) -> AttendanceSummary:
    selected = filter_visits(visits, season=season, team=team, opponent=opponent)
    wins = losses = draws = pending = 0
    for visit in selected:
        outcome = team_result(visit.game, team)
        if outcome == "win":
            wins += 1
        elif outcome == "loss":
            losses += 1
        elif outcome == "draw":
            draws += 1
        else:
            pending += 1
    return AttendanceSummary(
        team=team,
        season=season,
        games=len(selected),
        wins=wins,
        losses=losses,
        draws=draws,
        pending=pending,
    )
