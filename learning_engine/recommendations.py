import datetime
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from . import models, store
from .scoring import score_content

logger = logging.getLogger(__name__)

# Candidates fetched per requested slot, leaving room for re-ranking.
OVERFETCH_FACTOR = 2


@dataclass
class Recommendation:
    content: models.Content
    topic: models.Topic
    score: float
    reason: str


def get_recommendations(
    db: Session,
    user_id: str,
    limit: int = 5,
    exclude_completed: bool = True,
    preferred_types: Optional[Iterable[str]] = None,
    now: Optional[datetime.datetime] = None,
) -> List[Recommendation]:
    """
    Personalized recommendations for a user.
    Candidates come from the user's interest topics, best rated first, and are
    re-ranked by the heuristic scorer.
    """
    if limit < 1:
        raise ValueError("limit must be at least 1")
    now = now or models.utcnow()

    # 1. Load what we know about the user.
    preferences = store.get_preferences(db, user_id)
    interests = store.get_interests(db, user_id)
    completed_ids = (
        store.get_completed_content_ids(db, user_id) if exclude_completed else set()
    )

    # 2. Build the candidate filter.
    types = frozenset(preferred_types) if preferred_types else None
    content_filter = store.ContentFilter(
        topic_ids=frozenset(i.topicId for i in interests),
        exclude_ids=frozenset(completed_ids),
        types=types,
    ).validate()

    if content_filter.matches_nothing():
        logger.info(f"No interests recorded for user {user_id}, nothing to recommend")
        return []

    # 3. Over-fetch, score, re-rank. sorted() is stable, so equal scores keep
    # the rating order of the fetch.
    candidates = store.find_content(db, content_filter, limit * OVERFETCH_FACTOR)
    scored = []
    for item in candidates:
        result = score_content(item, interests, preferences, now)
        scored.append(
            Recommendation(
                content=item,
                topic=item.topic,
                score=result.score,
                reason=result.reason,
            )
        )
    scored = sorted(scored, key=lambda rec: rec.score, reverse=True)

    logger.debug(
        f"Scored {len(candidates)} candidates for user {user_id}, "
        f"returning {min(limit, len(scored))}"
    )
    return scored[:limit]
