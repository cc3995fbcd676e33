"""Toolkit for scraping NPB schedules and tracking the games you attended."""

from .aggregator import summarize_attendance
from .errors import FetchFailure, InputValidationError, KansenError, PersistenceFailure
from .models import NPB_TEAMS, AttendanceSummary, GameRecord, VisitRecord, make_game_code
from .parser import parse_schedule
from .pipeline import MonthResult, ensure_games_for_date, scrape_date, scrape_season
from .scraper import fetch_schedule
from .store import GameStore

__all__ = [
    "AttendanceSummary",
    "FetchFailure",
    "GameRecord",
    "GameStore",
    "InputValidationError",
    "KansenError",
    "MonthResult",
    "NPB_TEAMS",
    "PersistenceFailure",
    "VisitRecord",
    "ensure_games_for_date",
    "fetch_schedule",
    "make_game_code",
    "parse_schedule",
    "scrape_date",
    "scrape_season",
    "summarize_attendance",
]
