"""Tabular output helpers for games and visit records."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Union

import pandas as pd

from .models import GameRecord, VisitRecord

GAME_FIELDS = [
    "game_code",
    "date",
    "home_team",
    "away_team",
    "home_score",
    "away_score",
    "stadium",
    "winning_pitcher",
    "losing_pitcher",
]


def games_to_frame(games: Iterable[GameRecord]) -> pd.DataFrame:
    frame = pd.DataFrame.from_records([game.as_row() for game in games], columns=GAME_FIELDS)
    for col in ("home_score", "away_score"):
        frame[col] = frame[col].astype("Int64")
    return frame


def visits_to_frame(visits: Iterable[VisitRecord]) -> pd.DataFrame:
    records = []
    for visit in visits:
        row = {
            "visit_id": visit.id,
            "place": visit.place,
            "memo": visit.memo,
            "created_at": visit.created_at,
        }
        game = visit.game.as_row() if visit.game else dict.fromkeys(GAME_FIELDS)
        row.update(game)
        records.append(row)
    frame = pd.DataFrame.from_records(
        records, columns=["visit_id", "place", "memo", "created_at", *GAME_FIELDS]
    )
    for col in ("home_score", "away_score"):
        frame[col] = frame[col].astype("Int64")
    return frame


def write_excel(
    games: Union[Iterable[GameRecord], pd.DataFrame],
    visits: Union[Iterable[VisitRecord], pd.DataFrame],
    path: Path,
) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)

    games_df = games if isinstance(games, pd.DataFrame) else games_to_frame(games)
    visits_df = visits if isinstance(visits, pd.DataFrame) else visits_to_frame(visits)
    if "created_at" in visits_df:
        # Excel cannot store timezone-aware datetimes.
        visits_df = visits_df.assign(
            created_at=pd.to_datetime(visits_df["created_at"], utc=True).dt.tz_localize(None)
        )

    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        games_df.to_excel(writer, sheet_name="games", index=False)
        visits_df.to_excel(writer, sheet_name="visits", index=False)
