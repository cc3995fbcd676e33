"""Data models for attended games."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

CENTRAL_LEAGUE = ("巨人", "阪神", "中日", "DeNA", "広島", "ヤクルト")
PACIFIC_LEAGUE = ("オリックス", "ソフトバンク", "楽天", "ロッテ", "西武", "日本ハム")
NPB_TEAMS = CENTRAL_LEAGUE + PACIFIC_LEAGUE


def is_known_team(name: str) -> bool:
    return name in NPB_TEAMS


def make_game_code(game_date: date, home_team: str, away_team: str) -> str:
    """Return the identity key for a game.

    The key depends only on the date and the two team names, so a game keeps
    its key while scores and pitchers are filled in on later scrapes.
    """

    return f"{game_date.isoformat()}-{home_team}-{away_team}"


@dataclass(frozen=True)
class GameRecord:
    """One scheduled or played game as listed on the schedule page.

    ``None`` marks a value that is not known yet (unplayed game, score not
    published, no decision).
    """

    game_code: str
    date: date
    home_team: str
    away_team: str
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    stadium: Optional[str] = None
    winning_pitcher: Optional[str] = None
    losing_pitcher: Optional[str] = None

    @property
    def is_final(self) -> bool:
        return self.home_score is not None and self.away_score is not None

    def involves(self, team: str) -> bool:
        return team in (self.home_team, self.away_team)

    def as_row(self) -> dict:
        return {
            "game_code": self.game_code,
            "date": self.date,
            "home_team": self.home_team,
            "away_team": self.away_team,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "stadium": self.stadium,
            "winning_pitcher": self.winning_pitcher,
            "losing_pitcher": self.losing_pitcher,
        }


@dataclass(frozen=True)
class VisitRecord:
    """A personal note that the user attended (or watched) a game."""

    id: int
    game_id: Optional[int]
    place: str
    memo: Optional[str] = None
    created_at: Optional[datetime] = None
    game: Optional[GameRecord] = field(default=None, repr=False)


@dataclass(frozen=True)
class AttendanceSummary:
    """Win/loss record of one team across the games the user attended."""

    team: str
    season: Optional[int]
    games: int
    wins: int
    losses: int
    draws: int
    pending: int

    @property
    def decisions(self) -> int:
        return self.wins + self.losses

    @property
    def winning_percentage(self) -> Optional[float]:
        if self.decisions == 0:
            return None
        return round(self.wins / self.decisions, 3)

    @property
    def formatted_percentage(self) -> str:
        """Percentage in box-score style, e.g. ``.667``."""

        if self.decisions == 0:
            return ".000"
        text = f"{self.wins / self.decisions:.3f}"
        if text.startswith("0."):
            return text[1:]
        return text
