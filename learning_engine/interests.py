import logging

from sqlalchemy.orm import Session

from . import models, store

logger = logging.getLogger(__name__)

# Largest step a single engagement event can add to a strength.
MAX_STRENGTH_STEP = 0.1
MIN_NEW_STRENGTH = 0.1


def update_interest(
    db: Session, user_id: str, topic_id: str, engagement_score: float
) -> models.UserInterest:
    """
    Nudges a user's interest in a topic after an engagement event.

    Existing interests grow by at most 0.1 per event, scaled by engagement and
    capped at 1.0. Strength never decreases. A first engagement creates the
    interest at the engagement ratio, with a floor of 0.1.

    Read-modify-write without locking: concurrent updates for the same pair
    are last-write-wins.
    """
    if not 0 <= engagement_score <= 100:
        raise ValueError(
            f"engagement score must be within 0-100, got {engagement_score}"
        )

    ratio = engagement_score / 100
    interest = store.get_interest(db, user_id, topic_id)
    if interest:
        interest.strength = min(interest.strength + ratio * MAX_STRENGTH_STEP, 1.0)
    else:
        interest = models.UserInterest(
            userId=user_id,
            topicId=topic_id,
            strength=max(ratio, MIN_NEW_STRENGTH),
        )
        db.add(interest)

    db.commit()
    db.refresh(interest)
    logger.info(
        f"Updated interest for user {user_id}, topic {topic_id}: "
        f"{interest.strength:.4f}"
    )
    return interest
