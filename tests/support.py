from typing import Dict, List, Optional

import requests


ROW_TEMPLATE = """
<tr id="date{mmdd}">
  <th class="date">{label}</th>
  <td><div class="team1">{home}</div></td>
  <td><div class="score1">{home_score}</div></td>
  <td>-</td>
  <td><div class="score2">{away_score}</div></td>
  <td><div class="team2">{away}</div></td>
  <td><div class="place">{place}</div></td>
  <td>{pitchers}</td>
</tr>
"""


def schedule_row(
    mmdd: str,
    home: str,
    away: str,
    home_score: str = "",
    away_score: str = "",
    place: str = "東京ドーム",
    pitchers: Optional[List[str]] = None,
) -> str:
    cells = "".join(f'<div class="pit">{text}</div>' for text in (pitchers or []))
    return ROW_TEMPLATE.format(
        mmdd=mmdd,
        label=f"{int(mmdd[:2])}/{int(mmdd[2:])}",
        home=home,
        away=away,
        home_score=home_score,
        away_score=away_score,
        place=place,
        pitchers=cells,
    )


def schedule_page(*rows: str) -> str:
    return (
        '<html><head><meta charset="utf-8"></head><body>'
        '<table class="schedule_detail"><tbody>'
        + "".join(rows)
        + "</tbody></table></body></html>"
    )


class FakeResponse:
    """Decodes its body with ``encoding`` on every ``text`` access, like requests."""

    def __init__(
        self,
        text: str = "",
        status_code: int = 200,
        url: str = "",
        *,
        content: Optional[bytes] = None,
        encoding: Optional[str] = "utf-8",
    ) -> None:
        self.content = text.encode("utf-8") if content is None else content
        self.status_code = status_code
        self.url = url
        self.encoding = encoding

    @property
    def text(self) -> str:
        return self.content.decode(self.encoding or "iso-8859-1", errors="replace")

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error for url: {self.url}")


class FakeSession:
    """Stands in for requests.Session, serving pages by URL."""

    def __init__(self, pages: Optional[Dict[str, object]] = None) -> None:
        self.pages = pages or {}
        self.requested: List[str] = []
        self.closed = False

    def get(self, url: str, timeout=None) -> FakeResponse:
        self.requested.append(url)
        page = self.pages.get(url)
        if isinstance(page, Exception):
            raise page
        if isinstance(page, FakeResponse):
            return page
        if page is None:
            return FakeResponse("Not Found", status_code=404, url=url)
        return FakeResponse(page, url=url)

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeSession":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
