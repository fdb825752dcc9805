import logging
from typing import List

from sqlalchemy.orm import Session

from . import models, store
from .config import settings
from .schemas import PreferencesUpdate

logger = logging.getLogger(__name__)


class UnknownTopicError(LookupError):
    def __init__(self, topic_ids: List[str]):
        self.topic_ids = topic_ids
        super().__init__(f"Unknown topic(s): {', '.join(topic_ids)}")


def save_preferences(
    db: Session, user_id: str, data: PreferencesUpdate
) -> models.UserPreferences:
    """
    Creates or replaces the user's single preferences row.
    Newly selected topics get a starting interest so they show up in
    recommendations right away; existing interests are left untouched.
    """
    known = {
        row.id
        for row in db.query(models.Topic.id)
        .filter(models.Topic.id.in_(data.preferredTopics))
        .all()
    }
    missing = [t for t in data.preferredTopics if t not in known]
    if missing:
        raise UnknownTopicError(missing)

    preferences = store.get_preferences(db, user_id)
    if preferences is None:
        preferences = models.UserPreferences(userId=user_id)
        db.add(preferences)

    preferences.difficultyLevel = (
        data.difficultyLevel.value if data.difficultyLevel else None
    )
    preferences.learningStyle = data.learningStyle.value if data.learningStyle else None
    preferences.dailyGoalMinutes = data.dailyGoalMinutes
    preferences.preferredTopics = list(data.preferredTopics)
    preferences.morningReminder = data.morningReminder
    preferences.reminderTime = data.reminderTime

    starting_strength = min(max(settings.NEW_TOPIC_INTEREST_STRENGTH, 0.0), 1.0)
    interested = {i.topicId for i in store.get_interests(db, user_id)}
    for topic_id in data.preferredTopics:
        if topic_id not in interested:
            db.add(
                models.UserInterest(
                    userId=user_id,
                    topicId=topic_id,
                    strength=starting_strength,
                )
            )

    db.commit()
    db.refresh(preferences)
    logger.info(
        f"Saved preferences for user {user_id} "
        f"with {len(data.preferredTopics)} topic(s)"
    )
    return preferences
