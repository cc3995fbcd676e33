from datetime import date

import pytest

from kansen.aggregator import filter_visits, summarize_attendance, team_result
from kansen.models import GameRecord, VisitRecord, make_game_code


def make_visit(visit_id, game_date, home, away, home_score=None, away_score=None):
    game = GameRecord(
        game_code=make_game_code(game_date, home, away),
        date=game_date,
        home_team=home,
        away_team=away,
        home_score=home_score,
        away_score=away_score,
    )
    return VisitRecord(id=visit_id, game_id=visit_id, place="甲子園", game=game)


def test_summary_counts_home_and_away_results():
    visits = [
        make_visit(1, date(2024, 4, 1), "阪神", "巨人", 3, 1),
        make_visit(2, date(2024, 5, 1), "巨人", "阪神", 5, 0),
        make_visit(3, date(2024, 6, 1), "阪神", "中日", 2, 2),
        make_visit(4, date(2024, 7, 1), "阪神", "広島"),
        make_visit(5, date(2024, 8, 1), "広島", "阪神", 1, 4),
        make_visit(6, date(2024, 8, 2), "巨人", "中日", 1, 4),
    ]

    summary = summarize_attendance(visits, "阪神", season=2024)

    assert summary.games == 5
    assert summary.wins == 2
    assert summary.losses == 1
    assert summary.draws == 1
    assert summary.pending == 1
    assert summary.winning_percentage == pytest.approx(0.667)
    assert summary.formatted_percentage == ".667"


def test_summary_respects_season_and_opponent():
    visits = [
        make_visit(1, date(2023, 4, 1), "阪神", "巨人", 3, 1),
        make_visit(2, date(2024, 4, 1), "阪神", "巨人", 0, 1),
        make_visit(3, date(2024, 4, 2), "阪神", "DeNA", 9, 1),
    ]

    summary = summarize_attendance(visits, "阪神", season=2024, opponent="巨人")

    assert summary.games == 1
    assert summary.losses == 1
    assert summary.formatted_percentage == ".000"


def test_percentage_formats():
    perfect = summarize_attendance([make_visit(1, date(2024, 4, 1), "西武", "楽天", 2, 0)], "西武")
    nothing = summarize_attendance([], "西武")

    assert perfect.formatted_percentage == "1.000"
    assert nothing.winning_percentage is None
    assert nothing.formatted_percentage == ".000"


def test_team_result_ignores_other_teams_and_unplayed_games():
    played = make_visit(1, date(2024, 4, 1), "ロッテ", "日本ハム", 1, 2).game
    unplayed = make_visit(2, date(2024, 4, 2), "ロッテ", "日本ハム").game

    assert team_result(played, "日本ハム") == "win"
    assert team_result(played, "ロッテ") == "loss"
    assert team_result(played, "西武") is None
    assert team_result(unplayed, "ロッテ") is None


def test_filter_skips_visits_without_game():
    orphan = VisitRecord(id=9, game_id=None, place="自宅")

    assert filter_visits([orphan]) == []
