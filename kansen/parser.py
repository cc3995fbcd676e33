"""HTML parsing utilities for NPB monthly schedule pages."""
from __future__ import annotations

import logging
import re
from datetime import date
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup
from bs4.element import Tag

from .models import GameRecord, make_game_code

logger = logging.getLogger(__name__)

ROW_ID_PREFIX = "date"

# "勝：山田" / "敗：佐藤"; the separator is normally a full-width colon.
PITCHER_MARKER = re.compile(r"^(?P<mark>[勝敗])(?:\s*[：:]\s*|\s+)(?P<name>.*)$")
WIN_MARK = "勝"
LOSS_MARK = "敗"


def _is_schedule_row(tag: Tag) -> bool:
    if tag.name != "tr":
        return False
    row_id = tag.get("id")
    return isinstance(row_id, str) and row_id.startswith(ROW_ID_PREFIX)


def _clean(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    text = raw.replace("\xa0", " ").replace("　", " ").strip()
    return text or None


def _cell_text(row: Tag, class_name: str) -> Optional[str]:
    cell = row.find(class_=class_name)
    if cell is None:
        return None
    return _clean(cell.get_text(strip=True))


def as_score(raw: Optional[str]) -> Optional[int]:
    """Return *raw* as a score, or ``None`` when it is blank or not a number."""

    text = _clean(raw)
    if text is None or text in {"-", "—", "*"}:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def row_date(row_id: str, year: int) -> Optional[date]:
    """Rebuild the calendar date from a row id such as ``date0415``.

    The month is read from the id, not from the page that was requested.
    """

    tail = row_id[-4:]
    if len(row_id) < len(ROW_ID_PREFIX) + 4 or not tail.isdigit():
        return None
    try:
        return date(year, int(tail[:2]), int(tail[2:]))
    except ValueError:
        return None


def split_pitchers(row: Tag) -> Tuple[Optional[str], Optional[str]]:
    """Return (winning, losing) pitcher names found in the ``pit`` cells of *row*."""

    winner: Optional[str] = None
    loser: Optional[str] = None
    for cell in row.find_all(class_="pit"):
        text = _clean(cell.get_text(strip=True))
        if text is None:
            continue
        match = PITCHER_MARKER.match(text)
        if not match:
            continue
        name = _clean(match.group("name"))
        if match.group("mark") == WIN_MARK and winner is None:
            winner = name
        elif match.group("mark") == LOSS_MARK and loser is None:
            loser = name
    return winner, loser


def parse_row(row: Tag, *, year: int) -> Optional[GameRecord]:
    """Parse one schedule row, or return ``None`` when it is not a real game."""

    row_id = row.get("id", "")
    game_date = row_date(row_id, year)
    if game_date is None:
        logger.warning("Skipping row with unexpected id %r", row_id)
        return None

    home_team = _cell_text(row, "team1")
    away_team = _cell_text(row, "team2")
    if not home_team or not away_team:
        logger.debug("Skipping row %s without both teams", row_id)
        return None

    winning_pitcher, losing_pitcher = split_pitchers(row)
    return GameRecord(
        game_code=make_game_code(game_date, home_team, away_team),
        date=game_date,
        home_team=home_team,
        away_team=away_team,
        home_score=as_score(_cell_text(row, "score1")),
        away_score=as_score(_cell_text(row, "score2")),
        stadium=_cell_text(row, "place"),
        winning_pitcher=winning_pitcher,
        losing_pitcher=losing_pitcher,
    )


def parse_schedule(
    html: str,
    *,
    year: int,
    target_date: Optional[date] = None,
) -> List[GameRecord]:
    """Extract every game listed on a monthly schedule page.

    Rows are ``<tr>`` elements whose id starts with ``date`` and ends with the
    month and day (``date0415``). Rows without both team names are skipped.
    When *target_date* is given only games on that day are returned. An empty
    list is a normal result (off day, rain-out, month without games).
    """

    doc = BeautifulSoup(html, "lxml")
    games: List[GameRecord] = []
    for row in doc.find_all(_is_schedule_row):
        game = parse_row(row, year=year)
        if game is None:
            continue
        if target_date is not None and game.date != target_date:
            continue
        games.append(game)
    return games
