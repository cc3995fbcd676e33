from datetime import date

from kansen.export import games_to_frame, visits_to_frame
from kansen.models import GameRecord, VisitRecord


def test_frames_keep_unknown_scores_as_missing():
    played = GameRecord("2024-04-14-巨人-阪神", date(2024, 4, 14), "巨人", "阪神", 3, 2, "東京ドーム")
    upcoming = GameRecord("2024-04-16-巨人-阪神", date(2024, 4, 16), "巨人", "阪神")

    frame = games_to_frame([played, upcoming])

    assert list(frame["game_code"]) == [played.game_code, upcoming.game_code]
    assert frame.loc[0, "home_score"] == 3
    assert frame["home_score"].isna().tolist() == [False, True]


def test_visit_frame_includes_game_columns():
    game = GameRecord("2024-04-14-巨人-阪神", date(2024, 4, 14), "巨人", "阪神", 3, 2, "東京ドーム")
    visits = [
        VisitRecord(id=1, game_id=1, place="東京ドーム", memo="雨", game=game),
        VisitRecord(id=2, game_id=None, place="自宅"),
    ]

    frame = visits_to_frame(visits)

    assert list(frame["visit_id"]) == [1, 2]
    assert frame.loc[0, "away_team"] == "阪神"
    assert frame["home_team"].isna().tolist() == [False, True]
