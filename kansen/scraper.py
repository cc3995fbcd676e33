"""Download monthly schedule pages from the NPB website."""
from __future__ import annotations

import logging
import os
from typing import Optional

import requests

from .errors import FetchFailure, InputValidationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = os.getenv("KANSEN_SCHEDULE_BASE_URL", "https://npb.jp").rstrip("/")
DEFAULT_TIMEOUT_SECONDS = float(os.getenv("KANSEN_HTTP_TIMEOUT", "20"))
USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0 Safari/537.36"
)


def parse_year(raw) -> int:
    try:
        year = int(str(raw).strip())
    except ValueError as exc:
        raise InputValidationError(f"Year must be an integer, got {raw!r}") from exc
    if not 1000 <= year <= 9999:
        raise InputValidationError(f"Year must have four digits, got {raw!r}")
    return year


def parse_month(raw) -> int:
    try:
        month = int(str(raw).strip())
    except ValueError as exc:
        raise InputValidationError(f"Month must be an integer, got {raw!r}") from exc
    if not 1 <= month <= 12:
        raise InputValidationError(f"Month must be between 1 and 12, got {raw!r}")
    return month


def schedule_url(year, month, *, base_url: str = DEFAULT_BASE_URL) -> str:
    """Return the detailed schedule URL for *year* and *month*."""

    return f"{base_url.rstrip('/')}/games/{parse_year(year)}/schedule_{parse_month(month):02d}_detail.html"


def build_session() -> requests.Session:
    """Return a requests session with a browser-like user agent."""

    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    return session


def fetch_schedule(
    year,
    month,
    *,
    session: Optional[requests.Session] = None,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT_SECONDS,
) -> str:
    """Fetch the schedule page for one month and return its HTML.

    Exactly one request is made; transport errors and non-2xx responses are
    raised as :class:`FetchFailure`. A session built here is closed before
    returning.
    """

    url = schedule_url(year, month, base_url=base_url)
    if session is None:
        with build_session() as own_session:
            return fetch_schedule(year, month, session=own_session, base_url=base_url, timeout=timeout)

    logger.info("Fetching schedule: %s", url)
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as exc:
        raise FetchFailure(url, str(exc)) from exc

    # npb.jp serves UTF-8 but does not always say so in the headers.
    if not response.encoding or response.encoding.lower() == "iso-8859-1":
        response.encoding = "utf-8"
    return response.text
