"""
Heuristic content scoring.

Each rule below is checked on its own and adds a fixed number of points plus
a human-readable reason. Reasons keep rule order. The recency rule depends on
``now``, so callers pass the evaluation time explicitly; the same inputs
scored on different days can differ.
"""

import datetime
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

INTEREST_WEIGHT = 40
DIFFICULTY_POINTS = 20
LEARNING_STYLE_POINTS = 15
QUALITY_POINTS = 10
QUALITY_MIN_RATING = 4.0
RECENCY_POINTS = 5
RECENCY_WINDOW = datetime.timedelta(days=7)
SESSION_FIT_POINTS = 10
SESSION_FIT_TOLERANCE_MINUTES = 5
SESSIONS_PER_DAY = 3
MAX_SCORE = 100

# learning style -> (content type, reason)
_STYLE_MATCHES = {
    "visual": ("video", "Visual content matches your learning style"),
    "reading": ("article", "Reading content matches your learning style"),
}


@dataclass
class ScoreResult:
    score: float
    reasons: List[str] = field(default_factory=list)

    @property
    def reason(self) -> str:
        return ", ".join(self.reasons)


def _naive_utc(value: datetime.datetime) -> datetime.datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def score_content(
    item, interests: Sequence, preferences, now: datetime.datetime
) -> ScoreResult:
    """Scores one content item for a user.

    Args:
        item: a Content row (topicId, topic, difficulty, type, rating,
            createdAt, estimatedMinutes).
        interests: the user's UserInterest rows.
        preferences: the user's UserPreferences row, or None.
        now: evaluation time used by the recency rule.
    """
    score = 0.0
    reasons: List[str] = []

    interest = next((i for i in interests if i.topicId == item.topicId), None)
    if interest is not None:
        score += interest.strength * INTEREST_WEIGHT
        topic_name = item.topic.name if item.topic is not None else item.topicId
        reasons.append(f"Matches your interest in {topic_name}")

    difficulty_level: Optional[str] = getattr(preferences, "difficultyLevel", None)
    if difficulty_level is not None and difficulty_level == item.difficulty:
        score += DIFFICULTY_POINTS
        reasons.append("Matches your preferred difficulty level")

    learning_style: Optional[str] = getattr(preferences, "learningStyle", None)
    style_match = _STYLE_MATCHES.get(learning_style)
    if style_match is not None and item.type == style_match[0]:
        score += LEARNING_STYLE_POINTS
        reasons.append(style_match[1])

    if item.rating is not None and item.rating > QUALITY_MIN_RATING:
        score += QUALITY_POINTS
        reasons.append("Highly rated content")

    if item.createdAt is not None:
        age = _naive_utc(now) - _naive_utc(item.createdAt)
        if age < RECENCY_WINDOW:
            score += RECENCY_POINTS
            reasons.append("Recently added content")

    daily_goal: Optional[int] = getattr(preferences, "dailyGoalMinutes", None)
    if daily_goal:
        session_target = daily_goal / SESSIONS_PER_DAY
        if abs(item.estimatedMinutes - session_target) <= SESSION_FIT_TOLERANCE_MINUTES:
            score += SESSION_FIT_POINTS
            reasons.append("Perfect length for your learning sessions")

    return ScoreResult(score=min(score, MAX_SCORE), reasons=reasons)
