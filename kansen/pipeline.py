"""Fetch, extract and store schedule data for a month, a season or a single day."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

import requests

from .errors import FetchFailure, InputValidationError, PersistenceFailure
from .models import GameRecord
from .parser import parse_schedule
from .scraper import DEFAULT_BASE_URL, build_session, fetch_schedule, parse_month, parse_year
from .store import GameStore

logger = logging.getLogger(__name__)

DATE_FORMAT = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass
class MonthResult:
    """Outcome of processing one schedule page."""

    year: int
    month: int
    extracted: int = 0
    reconciled: int = 0
    target_date: Optional[date] = None
    error: Optional[str] = None
    message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def empty(self) -> bool:
        return self.ok and self.extracted == 0


def parse_target_date(raw) -> date:
    """Return *raw* as a date; strings must look like ``YYYY-MM-DD``."""

    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    text = str(raw).strip()
    if not DATE_FORMAT.match(text):
        raise InputValidationError(f"Invalid date {raw!r}. Expected YYYY-MM-DD")
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError as exc:
        raise InputValidationError(f"Invalid date {raw!r}: {exc}") from exc


def process_month(
    year: int,
    month: int,
    *,
    store: GameStore,
    session: Optional[requests.Session] = None,
    target_date: Optional[date] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> MonthResult:
    """Fetch one schedule page, extract its games and upsert them.

    :class:`FetchFailure` and :class:`PersistenceFailure` propagate to the
    caller. Finding no games is reported through ``MonthResult.empty``.
    """

    html = fetch_schedule(year, month, session=session, base_url=base_url)
    found: List[GameRecord] = parse_schedule(html, year=year, target_date=target_date)
    result = MonthResult(year=year, month=month, extracted=len(found), target_date=target_date)

    if not found:
        if target_date is not None:
            logger.warning("No games found for %s in month %02d", target_date, month)
        else:
            logger.warning("No games found for %d-%02d", year, month)
        return result

    logger.info("Found %d games for %d-%02d, upserting", len(found), year, month)
    result.reconciled = store.upsert_games(found)
    logger.info("Games for %d-%02d upserted", year, month)
    return result


def scrape_season(
    year,
    month=None,
    target_date=None,
    *,
    store: GameStore,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> List[MonthResult]:
    """Process one month, or every month of *year* in order.

    A failing month is recorded in its :class:`MonthResult` and the remaining
    months are still processed. When only *target_date* is given the month
    is taken from it; a *target_date* outside *year* is rejected.
    """

    year = parse_year(year)
    target = parse_target_date(target_date) if target_date is not None else None
    if target is not None and target.year != year:
        raise InputValidationError(f"Date {target} is not in season {year}")
    if month is not None:
        months = [parse_month(month)]
    elif target is not None:
        months = [target.month]
    else:
        months = list(range(1, 13))

    if session is None:
        with build_session() as own_session:
            return _scrape_months(year, months, target, store=store, session=own_session, base_url=base_url)
    return _scrape_months(year, months, target, store=store, session=session, base_url=base_url)


def _scrape_months(
    year: int,
    months: List[int],
    target: Optional[date],
    *,
    store: GameStore,
    session: requests.Session,
    base_url: str,
) -> List[MonthResult]:
    results: List[MonthResult] = []
    for current in months:
        try:
            result = process_month(
                year,
                current,
                store=store,
                session=session,
                target_date=target,
                base_url=base_url,
            )
        except FetchFailure as exc:
            logger.error("%s", exc)
            result = MonthResult(
                year=year,
                month=current,
                target_date=target,
                error=type(exc).__name__,
                message=exc.message,
            )
        except PersistenceFailure as exc:
            logger.error("Error upserting games for %d-%02d: %s", year, current, exc.detail)
            result = MonthResult(
                year=year,
                month=current,
                target_date=target,
                error=type(exc).__name__,
                message=exc.detail,
            )
        results.append(result)
    return results


def scrape_date(
    target_date,
    *,
    store: GameStore,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> MonthResult:
    """Fetch and store the games of a single day.

    Unlike :func:`scrape_season` failures are raised, since there is only one
    unit of work to report on.
    """

    target = parse_target_date(target_date)
    logger.info("Scraping games for %s", target)
    return process_month(
        target.year,
        target.month,
        store=store,
        session=session,
        target_date=target,
        base_url=base_url,
    )


def ensure_games_for_date(
    target_date,
    *,
    store: GameStore,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_BASE_URL,
) -> List[GameRecord]:
    """Return the stored games for a day, scraping them first if none are stored."""

    target = parse_target_date(target_date)
    existing = store.games_on(target)
    if existing:
        return existing
    scrape_date(target, store=store, session=session, base_url=base_url)
    return store.games_on(target)
