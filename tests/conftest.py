import datetime
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INTERNAL_API_KEY"] = "test-internal-key"

import pytest
from fastapi.testclient import TestClient

from learning_engine import database, models
from learning_engine.main import app, get_now

NOW = datetime.datetime(2025, 1, 15, 12, 0, 0)
API_KEY = "test-internal-key"
USER_ID = "learner@example.com"


@pytest.fixture
def db():
    models.Base.metadata.drop_all(bind=database.engine)
    models.Base.metadata.create_all(bind=database.engine)
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_now] = lambda: NOW
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    return {"X-Internal-API-Key": API_KEY, "X-User-Id": USER_ID}


@pytest.fixture
def make_topic(db):
    def _make_topic(name="Geography", **kwargs):
        category = kwargs.pop("category", "geography")
        topic = models.Topic(name=name, category=category, **kwargs)
        db.add(topic)
        db.commit()
        return topic

    return _make_topic


@pytest.fixture
def make_content(db):
    def _make_content(topic, title="Item", days_old=30, **kwargs):
        fields = {
            "type": "article",
            "difficulty": "beginner",
            "estimatedMinutes": 10,
            "tags": [],
            "createdAt": NOW - datetime.timedelta(days=days_old),
        }
        fields.update(kwargs)
        content = models.Content(topicId=topic.id, title=title, **fields)
        db.add(content)
        db.commit()
        return content

    return _make_content


@pytest.fixture
def make_interest(db):
    def _make_interest(topic, strength, user_id=USER_ID):
        interest = models.UserInterest(
            userId=user_id, topicId=topic.id, strength=strength
        )
        db.add(interest)
        db.commit()
        return interest

    return _make_interest
