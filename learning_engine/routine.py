import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from . import store

logger = logging.getLogger(__name__)

MAX_ROUTINE_TOPICS = 3


@dataclass
class RoutineItem:
    topicName: str
    contentTitle: str
    estimatedMinutes: int
    contentId: str


def generate_morning_routine(
    db: Session, user_id: str, total_minutes: int = 25
) -> List[RoutineItem]:
    """
    Packs one item per top interest into a time budget.

    Greedy on purpose: topics are visited strongest first and each takes the
    best-rated item that still fits. A topic with nothing that fits is
    skipped; earlier picks are never revisited.
    """
    if total_minutes < 0:
        raise ValueError("total_minutes must not be negative")

    interests = store.get_interests(db, user_id, by_strength=True)
    routine: List[RoutineItem] = []
    remaining = total_minutes

    for interest in interests[:MAX_ROUTINE_TOPICS]:
        if remaining <= 0:
            break

        content = store.find_best_fitting_content(db, interest.topicId, remaining)
        if content is None:
            logger.debug(
                f"No content of topic {interest.topicId} fits {remaining} minutes"
            )
            continue

        routine.append(
            RoutineItem(
                topicName=interest.topic.name,
                contentTitle=content.title,
                estimatedMinutes=content.estimatedMinutes,
                contentId=content.id,
            )
        )
        remaining -= content.estimatedMinutes

    return routine
