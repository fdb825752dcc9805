"""
Query helpers over the content store.

Every read the recommendation core performs goes through this module, so the
core never builds ad-hoc filters of its own.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set

from sqlalchemy.orm import Session, joinedload

from . import models

CONTENT_TYPES = frozenset(t.value for t in models.ContentType)


class InvalidFilterError(ValueError):
    """Raised when a content filter names values the catalog cannot hold."""


@dataclass(frozen=True)
class ContentFilter:
    """Fixed set of optional constraints applied to a content query.

    ``None`` means "no constraint". An empty ``topic_ids`` set matches
    nothing, which is what a user without interests should get.
    """

    topic_ids: Optional[FrozenSet[str]] = None
    exclude_ids: FrozenSet[str] = field(default_factory=frozenset)
    types: Optional[FrozenSet[str]] = None

    def validate(self) -> "ContentFilter":
        if self.types is not None:
            unknown = sorted(set(self.types) - CONTENT_TYPES)
            if unknown:
                raise InvalidFilterError(
                    f"Unknown content type(s): {', '.join(unknown)}"
                )
        return self

    def matches_nothing(self) -> bool:
        return self.topic_ids is not None and not self.topic_ids

    def apply(self, query):
        if self.topic_ids is not None:
            query = query.filter(models.Content.topicId.in_(self.topic_ids))
        if self.exclude_ids:
            query = query.filter(models.Content.id.notin_(self.exclude_ids))
        if self.types is not None:
            query = query.filter(models.Content.type.in_(self.types))
        return query


def get_preferences(db: Session, user_id: str) -> Optional[models.UserPreferences]:
    return (
        db.query(models.UserPreferences)
        .filter(models.UserPreferences.userId == user_id)
        .first()
    )


def get_interests(
    db: Session, user_id: str, by_strength: bool = False
) -> List[models.UserInterest]:
    """Loads a user's interests together with their topics."""
    query = (
        db.query(models.UserInterest)
        .options(joinedload(models.UserInterest.topic))
        .filter(models.UserInterest.userId == user_id)
    )
    if by_strength:
        query = query.order_by(
            models.UserInterest.strength.desc(), models.UserInterest.createdAt
        )
    return query.all()


def get_interest(
    db: Session, user_id: str, topic_id: str
) -> Optional[models.UserInterest]:
    return (
        db.query(models.UserInterest)
        .filter(
            models.UserInterest.userId == user_id,
            models.UserInterest.topicId == topic_id,
        )
        .first()
    )


def get_completed_content_ids(db: Session, user_id: str) -> Set[str]:
    rows = (
        db.query(models.LearningSession.contentId)
        .filter(
            models.LearningSession.userId == user_id,
            models.LearningSession.completed.is_(True),
        )
        .all()
    )
    return {row.contentId for row in rows}


def find_content(
    db: Session, content_filter: ContentFilter, limit: int
) -> List[models.Content]:
    """Fetches up to ``limit`` items, best rated first, unrated last."""
    content_filter.validate()
    if content_filter.matches_nothing():
        return []
    query = db.query(models.Content).options(joinedload(models.Content.topic))
    query = content_filter.apply(query)
    # Unrated items sort last on every backend, unlike a bare DESC on Postgres
    # which puts NULLs first.
    return (
        query.order_by(models.Content.rating.desc().nulls_last(), models.Content.id)
        .limit(limit)
        .all()
    )


def find_best_fitting_content(
    db: Session, topic_id: str, max_minutes: int
) -> Optional[models.Content]:
    """Highest-rated item of a topic that fits in ``max_minutes``."""
    return (
        db.query(models.Content)
        .filter(
            models.Content.topicId == topic_id,
            models.Content.estimatedMinutes <= max_minutes,
        )
        # Unrated items last, same as find_content.
        .order_by(models.Content.rating.desc().nulls_last(), models.Content.id)
        .first()
    )


def get_topic(db: Session, topic_id: str) -> Optional[models.Topic]:
    return db.query(models.Topic).filter(models.Topic.id == topic_id).first()


def get_content(db: Session, content_id: str) -> Optional[models.Content]:
    return db.query(models.Content).filter(models.Content.id == content_id).first()


def list_topics(db: Session) -> List[models.Topic]:
    return (
        db.query(models.Topic)
        .order_by(models.Topic.category, models.Topic.name)
        .all()
    )


def delete_preferences(db: Session, user_id: str) -> int:
    deleted = (
        db.query(models.UserPreferences)
        .filter(models.UserPreferences.userId == user_id)
        .delete(synchronize_session=False)
    )
    db.commit()
    return deleted
