import pytest
import requests

from kansen.errors import FetchFailure, InputValidationError
from kansen.parser import parse_schedule
from kansen.scraper import fetch_schedule, parse_month, parse_year, schedule_url
from support import FakeResponse, FakeSession, schedule_page, schedule_row


def test_schedule_url_pads_month():
    assert (
        schedule_url(2024, 4, base_url="https://npb.example")
        == "https://npb.example/games/2024/schedule_04_detail.html"
    )
    assert schedule_url("2024", "11", base_url="https://npb.example/").endswith("/games/2024/schedule_11_detail.html")


@pytest.mark.parametrize("raw", ["abc", "", "24", "20245", None])
def test_parse_year_rejects_bad_values(raw):
    with pytest.raises(InputValidationError):
        parse_year(raw)


@pytest.mark.parametrize("raw", ["0", "13", "april", 4.5])
def test_parse_month_rejects_bad_values(raw):
    with pytest.raises(InputValidationError):
        parse_month(raw)


def test_invalid_input_makes_no_request():
    session = FakeSession()

    with pytest.raises(InputValidationError):
        fetch_schedule(2024, 13, session=session, base_url="https://npb.example")

    assert session.requested == []


def test_fetch_returns_page_text():
    url = "https://npb.example/games/2024/schedule_04_detail.html"
    session = FakeSession({url: "<html>April</html>"})

    html = fetch_schedule(2024, 4, session=session, base_url="https://npb.example")

    assert html == "<html>April</html>"
    assert session.requested == [url]


def test_http_error_becomes_fetch_failure():
    session = FakeSession()

    with pytest.raises(FetchFailure) as excinfo:
        fetch_schedule(2024, 1, session=session, base_url="https://npb.example")

    assert excinfo.value.url.endswith("schedule_01_detail.html")
    assert "404" in excinfo.value.message


def test_transport_error_becomes_fetch_failure():
    url = "https://npb.example/games/2024/schedule_05_detail.html"
    session = FakeSession({url: requests.ConnectionError("Name or service not known")})

    with pytest.raises(FetchFailure) as excinfo:
        fetch_schedule(2024, 5, session=session, base_url="https://npb.example")

    assert "Name or service not known" in str(excinfo.value)


@pytest.mark.parametrize("declared", ["ISO-8859-1", None])
def test_page_without_charset_is_decoded_as_utf8(declared):
    url = "https://npb.example/games/2024/schedule_04_detail.html"
    body = schedule_page(schedule_row("0414", "巨人", "阪神", "3", "2", place="東京ドーム"))
    response = FakeResponse(content=body.encode("utf-8"), encoding=declared, url=url)
    session = FakeSession({url: response})

    html = fetch_schedule(2024, 4, session=session, base_url="https://npb.example")

    assert "巨人" in html
    [game] = parse_schedule(html, year=2024)
    assert (game.home_team, game.away_team, game.stadium) == ("巨人", "阪神", "東京ドーム")


def test_declared_charset_is_respected():
    url = "https://npb.example/games/2024/schedule_04_detail.html"
    response = FakeResponse(content="<p>楽天</p>".encode("shift_jis"), encoding="shift_jis", url=url)

    html = fetch_schedule(2024, 4, session=FakeSession({url: response}), base_url="https://npb.example")

    assert html == "<p>楽天</p>"


def test_own_session_is_closed(monkeypatch):
    url = "https://npb.example/games/2024/schedule_04_detail.html"
    session = FakeSession({url: "<html>April</html>"})
    monkeypatch.setattr("kansen.scraper.build_session", lambda: session)

    fetch_schedule(2024, 4, base_url="https://npb.example")

    assert session.requested == [url]
    assert session.closed


def test_supplied_session_is_left_open():
    url = "https://npb.example/games/2024/schedule_04_detail.html"
    session = FakeSession({url: "<html>April</html>"})

    fetch_schedule(2024, 4, session=session, base_url="https://npb.example")

    assert not session.closed
