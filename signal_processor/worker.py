import json
import logging
import time

import redis
from sqlalchemy.orm import Session

from learning_engine import store
from learning_engine.config import settings
from learning_engine.database import SessionLocal
from learning_engine.interests import update_interest
from learning_engine.schemas import SessionCreate
from learning_engine.sessions import UnknownContentError, record_session

logger = logging.getLogger(__name__)

redis_client = redis.from_url(settings.REDIS_URL)
ENGAGEMENT_QUEUE_KEY = settings.ENGAGEMENT_QUEUE_KEY
ERROR_BACKOFF_SECONDS = 5


def process_engagement_event(db: Session, event) -> bool:
    """Applies one queued event. Returns False when the event was skipped."""
    if not isinstance(event, dict):
        logger.warning(f"Skipping non-object event: {event!r}")
        return False
    event_type = event.get("eventType")
    user_id = event.get("userId")
    data = event.get("data") or {}
    if not isinstance(data, dict):
        logger.warning(f"Skipping event with non-object data: {event}")
        return False

    if event_type == "ENGAGEMENT":
        topic_id = data.get("topicId")
        engagement_score = data.get("engagementScore")
        if not all([user_id, topic_id, engagement_score is not None]):
            logger.warning(f"Skipping invalid event: {event}")
            return False
        if (
            not isinstance(engagement_score, (int, float))
            or not 0 <= engagement_score <= 100
        ):
            logger.warning(f"Skipping event with bad engagement score: {event}")
            return False
        if store.get_topic(db, topic_id) is None:
            logger.warning(f"Topic not found for event: {event}")
            return False
        update_interest(db, user_id, topic_id, engagement_score)
        return True

    if event_type == "LEARNING_SESSION":
        if not user_id:
            logger.warning(f"Skipping invalid event: {event}")
            return False
        try:
            payload = SessionCreate.model_validate(data)
        except ValueError as e:
            logger.warning(f"Skipping invalid session event {event}: {e}")
            return False
        try:
            record_session(db, user_id, payload)
        except UnknownContentError as e:
            logger.warning(f"Skipping session event: {e}")
            return False
        return True

    return False


def main():
    """Main worker loop to process messages from the Redis queue."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Starting Signal Processor Worker on '{ENGAGEMENT_QUEUE_KEY}'...")
    while True:
        db = SessionLocal()
        try:
            # BRPOP blocks until a message arrives; 0 means no timeout.
            # message_tuple is (b'queue_name', b'message_body')
            message_tuple = redis_client.brpop([ENGAGEMENT_QUEUE_KEY], 0)
            event_data = json.loads(message_tuple[1])
            if process_engagement_event(db, event_data):
                logger.info(f"Processed event for user {event_data['userId']}")
        except json.JSONDecodeError as e:
            logger.warning(f"Discarding malformed message: {e}")
        except Exception:
            logger.exception("An error occurred while processing an event")
            db.rollback()
            time.sleep(ERROR_BACKOFF_SECONDS)
        finally:
            db.close()


if __name__ == "__main__":
    main()
