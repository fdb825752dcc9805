import datetime
import itertools
from types import SimpleNamespace

import pytest

from learning_engine.scoring import score_content

NOW = datetime.datetime(2025, 1, 15, 12, 0, 0)


def _item(**overrides):
    fields = {
        "topicId": "topic-1",
        "topic": SimpleNamespace(name="Geography"),
        "difficulty": "beginner",
        "type": "quiz",
        "rating": None,
        "createdAt": NOW - datetime.timedelta(days=30),
        "estimatedMinutes": 20,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


def _interest(strength, topic_id="topic-1"):
    return SimpleNamespace(topicId=topic_id, strength=strength)


def _prefs(difficulty=None, style=None, daily_goal=None):
    return SimpleNamespace(
        difficultyLevel=difficulty, learningStyle=style, dailyGoalMinutes=daily_goal
    )


def test_all_signals_scenario_scores_65_with_reasons_in_rule_order():
    item = _item(
        difficulty="intermediate",
        rating=4.5,
        createdAt=NOW - datetime.timedelta(days=3),
        estimatedMinutes=10,
    )
    result = score_content(
        item, [_interest(0.5)], _prefs(difficulty="intermediate", daily_goal=30), NOW
    )

    assert result.score == pytest.approx(65)
    assert result.reasons == [
        "Matches your interest in Geography",
        "Matches your preferred difficulty level",
        "Highly rated content",
        "Recently added content",
        "Perfect length for your learning sessions",
    ]
    assert result.reason == ", ".join(result.reasons)


def test_no_interests_no_preferences_scores_zero():
    result = score_content(_item(), [], None, NOW)

    assert result.score == 0
    assert result.reasons == []
    assert result.reason == ""


@pytest.mark.parametrize("strength", [0.1, 0.25, 0.5, 0.73, 1.0])
def test_interest_bonus_is_strength_times_40(strength):
    result = score_content(_item(), [_interest(strength)], None, NOW)

    assert result.score == pytest.approx(strength * 40)


def test_interest_in_other_topic_does_not_count():
    result = score_content(_item(), [_interest(0.9, topic_id="topic-2")], None, NOW)

    assert result.score == 0


def test_learning_style_matches():
    visual = score_content(_item(type="video"), [], _prefs(style="visual"), NOW)
    reading = score_content(_item(type="article"), [], _prefs(style="reading"), NOW)
    mismatch = score_content(_item(type="article"), [], _prefs(style="visual"), NOW)
    auditory = score_content(_item(type="video"), [], _prefs(style="auditory"), NOW)

    assert visual.score == 15
    assert visual.reasons == ["Visual content matches your learning style"]
    assert reading.score == 15
    assert reading.reasons == ["Reading content matches your learning style"]
    assert mismatch.score == 0
    assert auditory.score == 0


def test_quality_requires_rating_above_four():
    assert score_content(_item(rating=4.0), [], None, NOW).score == 0
    assert score_content(_item(rating=4.01), [], None, NOW).score == 10


def test_recency_window_is_seven_days():
    six_days = _item(createdAt=NOW - datetime.timedelta(days=6, hours=23))
    seven_days = _item(createdAt=NOW - datetime.timedelta(days=7))

    assert score_content(six_days, [], None, NOW).reasons == ["Recently added content"]
    assert score_content(seven_days, [], None, NOW).score == 0


def test_recency_accepts_timezone_aware_now():
    item = _item(createdAt=NOW - datetime.timedelta(days=1))
    aware_now = NOW.replace(tzinfo=datetime.timezone.utc)

    assert score_content(item, [], None, aware_now).score == 5


def test_recency_depends_on_evaluation_time():
    item = _item(createdAt=NOW - datetime.timedelta(days=3))
    later = NOW + datetime.timedelta(days=10)

    assert score_content(item, [], None, NOW).score == 5
    assert score_content(item, [], None, later).score == 0


@pytest.mark.parametrize(
    "minutes,expected",
    [(5, 10), (10, 10), (15, 10), (4, 0), (16, 0)],
)
def test_session_fit_within_five_minutes_of_a_third_of_daily_goal(minutes, expected):
    item = _item(estimatedMinutes=minutes)

    result = score_content(item, [], _prefs(daily_goal=30), NOW)

    assert result.score == expected


def test_session_fit_skipped_without_daily_goal():
    item = _item(estimatedMinutes=0)

    assert score_content(item, [], _prefs(daily_goal=None), NOW).score == 0
    assert score_content(item, [], _prefs(daily_goal=0), NOW).score == 0


def test_score_stays_within_bounds_for_every_rule_combination():
    for strength, difficulty, style, rating, days, goal in itertools.product(
        [None, 0.0, 0.5, 1.0],
        [None, "beginner"],
        [None, "visual"],
        [None, 3.0, 5.0],
        [1, 30],
        [None, 60],
    ):
        item = _item(
            type="video",
            rating=rating,
            createdAt=NOW - datetime.timedelta(days=days),
        )
        interests = [] if strength is None else [_interest(strength)]
        result = score_content(item, interests, _prefs(difficulty, style, goal), NOW)

        assert 0 <= result.score <= 100


def test_everything_triggered_caps_at_100():
    item = _item(
        type="video",
        rating=5.0,
        createdAt=NOW - datetime.timedelta(days=1),
        estimatedMinutes=20,
    )
    result = score_content(
        item, [_interest(1.0)], _prefs("beginner", "visual", 60), NOW
    )

    assert result.score == 100
    assert len(result.reasons) == 6
