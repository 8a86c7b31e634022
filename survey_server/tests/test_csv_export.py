"""CSV export and video card helpers."""

import csv
import io

from recommender.models import RecommendationResult, Video
from survey_server.utils import csv_filename, result_cards, rows_to_csv


def test_header_from_first_row_and_value_encoding():
    rows = [
        {"id": "1", "video_id": "v1", "is_recommended": True, "session_id": None, "n": 3},
        {"id": "2", "video_id": "v2, with comma", "is_recommended": False, "session_id": "s1", "n": 0},
    ]
    text = rows_to_csv(rows)
    lines = text.splitlines()
    assert lines[0] == "id,video_id,is_recommended,session_id,n"
    assert lines[1] == "1,v1,true,null,3"

    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[2] == ["2", "v2, with comma", "false", "s1", "0"]


def test_nested_values_are_json_encoded():
    text = rows_to_csv([{"session_id": "s1", "selected_videos": ["A", "C"]}])
    parsed = list(csv.reader(io.StringIO(text)))
    assert parsed[1] == ["s1", '["A", "C"]']


def test_empty_rows():
    assert rows_to_csv([]) == ""


def test_filename():
    assert csv_filename("sessions") == "sessions_analytics.csv"


def test_result_cards_mark_only_the_recommended_prefix():
    videos = [Video(id=f"v{i}", title=f"T{i}", thumbnail_url="t", description="d") for i in range(4)]
    result = RecommendationResult(user_id="u1", videos=videos, recommended_count=2)
    cards = result_cards(result)
    assert [c.is_recommended for c in cards] == [True, True, False, False]
    assert [c.position for c in cards] == [1, 2, 3, 4]
    assert cards[0].thumbnail == "t"
