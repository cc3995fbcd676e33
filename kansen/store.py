"""Relational storage for scraped games and personal visit records."""
from __future__ import annotations

import contextlib
import logging
import os
from datetime import date
from typing import Iterable, Iterator, List, Optional, Union

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    and_,
    create_engine,
    delete,
    insert,
    or_,
    select,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import func

from .errors import InputValidationError, PersistenceFailure
from .models import GameRecord, VisitRecord

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = os.getenv("KANSEN_DATABASE_URL", "sqlite:///kansen.db")

metadata = MetaData()

games = Table(
    "games",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("game_code", String, nullable=False, unique=True),
    Column("date", Date, nullable=False, index=True),
    Column("home_team", String, nullable=False),
    Column("away_team", String, nullable=False),
    Column("home_score", Integer, nullable=True),
    Column("away_score", Integer, nullable=True),
    Column("stadium", String, nullable=True),
    Column("winning_pitcher", String, nullable=True),
    Column("losing_pitcher", String, nullable=True),
)

records = Table(
    "records",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("game_id", Integer, ForeignKey("games.id", ondelete="SET NULL"), nullable=True),
    Column("place", String, nullable=False),
    Column("memo", Text, nullable=True),
    Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)

GAME_COLUMNS = (
    "game_code",
    "date",
    "home_team",
    "away_team",
    "home_score",
    "away_score",
    "stadium",
    "winning_pitcher",
    "losing_pitcher",
)
# Everything except the conflict key is refreshed on every upsert.
UPDATED_ON_CONFLICT = tuple(name for name in GAME_COLUMNS if name != "game_code")

_UPSERT_DIALECTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


@contextlib.contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        detail = str(getattr(exc, "orig", None) or exc)
        logger.error("Storage error while %s: %s", action, detail)
        raise PersistenceFailure(f"{action}: {detail}") from exc


def _game_from_mapping(row, prefix: str = "") -> GameRecord:
    return GameRecord(**{name: row[f"{prefix}{name}"] for name in GAME_COLUMNS})


class GameStore:
    """Games and visit records kept in a SQL database.

    The schema is created on first use. SQLite and PostgreSQL are supported;
    both provide the ``ON CONFLICT`` clause the game upsert relies on.
    """

    def __init__(self, database: Union[str, Engine] = DEFAULT_DATABASE_URL) -> None:
        with _storage_errors("opening database"):
            self.engine = create_engine(database) if isinstance(database, str) else database
            metadata.create_all(self.engine)

    # -------------------------
    # Games
    # -------------------------

    def upsert_games(self, batch: Iterable[GameRecord]) -> int:
        """Insert new games and overwrite known ones in a single statement.

        Games are matched on ``game_code``. When a batch names the same game
        twice the last occurrence wins. Returns the number of games written.
        """

        rows = {}
        for game in batch:
            rows[game.game_code] = game.as_row()
        if not rows:
            return 0

        dialect = self.engine.dialect.name
        make_insert = _UPSERT_DIALECTS.get(dialect)
        if make_insert is None:
            raise PersistenceFailure(f"Upsert is not supported on {dialect!r} databases")

        stmt = make_insert(games).values(list(rows.values()))
        stmt = stmt.on_conflict_do_update(
            index_elements=[games.c.game_code],
            set_={name: stmt.excluded[name] for name in UPDATED_ON_CONFLICT},
        )
        with _storage_errors("upserting games"):
            with self.engine.begin() as conn:
                conn.execute(stmt)
        logger.debug("Upserted %d games", len(rows))
        return len(rows)

    def get_game(self, game_code: str) -> Optional[GameRecord]:
        with _storage_errors("loading game"):
            with self.engine.connect() as conn:
                row = conn.execute(select(games).where(games.c.game_code == game_code)).mappings().first()
        return _game_from_mapping(row) if row else None

    def games_on(self, game_date: date) -> List[GameRecord]:
        stmt = select(games).where(games.c.date == game_date).order_by(games.c.id)
        with _storage_errors("loading games"):
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        return [_game_from_mapping(row) for row in rows]

    def list_games(self, *, season: Optional[int] = None) -> List[GameRecord]:
        stmt = select(games).order_by(games.c.date, games.c.id)
        if season is not None:
            stmt = stmt.where(games.c.date.between(date(season, 1, 1), date(season, 12, 31)))
        with _storage_errors("listing games"):
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        return [_game_from_mapping(row) for row in rows]

    def count_games(self) -> int:
        with _storage_errors("counting games"):
            with self.engine.connect() as conn:
                return conn.execute(select(func.count()).select_from(games)).scalar_one()

    def delete_unreferenced_games(self) -> int:
        """Delete games that no visit record points at. Returns the number removed."""

        referenced = select(records.c.game_id).where(records.c.game_id.is_not(None))
        with _storage_errors("deleting unreferenced games"):
            with self.engine.begin() as conn:
                result = conn.execute(delete(games).where(games.c.id.not_in(referenced)))
        removed = result.rowcount or 0
        if removed:
            logger.info("Deleted %d unreferenced games", removed)
        else:
            logger.info("No unreferenced games to delete")
        return removed

    # -------------------------
    # Visit records
    # -------------------------

    def add_visit(
        self,
        game_code: str,
        *,
        place: Optional[str] = None,
        memo: Optional[str] = None,
    ) -> VisitRecord:
        """Record a visit to *game_code*. The place defaults to the game's stadium."""

        with _storage_errors("adding visit"):
            with self.engine.begin() as conn:
                game_id = conn.execute(
                    select(games.c.id).where(games.c.game_code == game_code)
                ).scalar_one_or_none()
                if game_id is None:
                    raise InputValidationError(f"Unknown game {game_code!r}")
                if not place:
                    place = conn.execute(
                        select(games.c.stadium).where(games.c.id == game_id)
                    ).scalar_one_or_none()
                if not place:
                    raise InputValidationError(f"No place given and game {game_code!r} has no stadium")
                result = conn.execute(
                    insert(records).values(game_id=game_id, place=place, memo=memo or None)
                )
                visit_id = result.inserted_primary_key[0]
        logger.info("Recorded visit %s for %s", visit_id, game_code)
        return self.get_visit(visit_id)

    def _visit_query(self):
        game_columns = [games.c[name].label(f"game_{name}") for name in GAME_COLUMNS]
        return select(
            records.c.id,
            records.c.game_id,
            records.c.place,
            records.c.memo,
            records.c.created_at,
            *game_columns,
        ).select_from(records.outerjoin(games, records.c.game_id == games.c.id))

    @staticmethod
    def _visit_from_mapping(row) -> VisitRecord:
        game = _game_from_mapping(row, prefix="game_") if row["game_game_code"] is not None else None
        return VisitRecord(
            id=row["id"],
            game_id=row["game_id"],
            place=row["place"],
            memo=row["memo"],
            created_at=row["created_at"],
            game=game,
        )

    def get_visit(self, visit_id: int) -> Optional[VisitRecord]:
        with _storage_errors("loading visit"):
            with self.engine.connect() as conn:
                row = conn.execute(self._visit_query().where(records.c.id == visit_id)).mappings().first()
        return self._visit_from_mapping(row) if row else None

    def list_visits(
        self,
        *,
        season: Optional[int] = None,
        team: Optional[str] = None,
        opponent: Optional[str] = None,
        newest_first: bool = False,
    ) -> List[VisitRecord]:
        """Return visit records joined with their games, ordered by game date."""

        conditions = []
        if season is not None:
            conditions.append(games.c.date.between(date(season, 1, 1), date(season, 12, 31)))
        for name in (team, opponent):
            if name:
                conditions.append(or_(games.c.home_team == name, games.c.away_team == name))

        stmt = self._visit_query()
        if conditions:
            stmt = stmt.where(and_(*conditions))
        order = games.c.date.desc() if newest_first else games.c.date.asc()
        stmt = stmt.order_by(order, records.c.id)

        with _storage_errors("listing visits"):
            with self.engine.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        return [self._visit_from_mapping(row) for row in rows]

    def delete_visits(self, visit_ids: Iterable[int]) -> int:
        ids = list(visit_ids)
        if not ids:
            return 0
        with _storage_errors("deleting visits"):
            with self.engine.begin() as conn:
                result = conn.execute(delete(records).where(records.c.id.in_(ids)))
        return result.rowcount or 0

    def available_seasons(self) -> List[int]:
        """Years that have at least one visit record, newest first."""

        stmt = (
            select(games.c.date)
            .select_from(records.join(games, records.c.game_id == games.c.id))
            .distinct()
        )
        with _storage_errors("listing seasons"):
            with self.engine.connect() as conn:
                dates = conn.execute(stmt).scalars().all()
        return sorted({value.year for value in dates}, reverse=True)
