import logging

from sqlalchemy.orm import Session

from . import models, store
from .interests import update_interest
from .schemas import SessionCreate

logger = logging.getLogger(__name__)


class UnknownContentError(LookupError):
    pass


def record_session(
    db: Session, user_id: str, payload: SessionCreate
) -> models.LearningSession:
    """Stores a learning session and feeds its engagement into the user's interest."""
    content = store.get_content(db, payload.contentId)
    if content is None:
        raise UnknownContentError(f"Unknown content: {payload.contentId}")

    session = models.LearningSession(
        userId=user_id,
        topicId=content.topicId,
        contentId=content.id,
        contentType=content.type,
        durationMinutes=payload.durationMinutes,
        completed=payload.completed,
        score=payload.score,
        engagementScore=payload.engagementScore,
    )
    db.add(session)
    db.commit()
    db.refresh(session)
    logger.info(
        f"Recorded session {session.id} for user {user_id} on content {content.id}"
    )

    if payload.engagementScore is not None:
        update_interest(db, user_id, content.topicId, payload.engagementScore)
        db.refresh(session)

    return session
