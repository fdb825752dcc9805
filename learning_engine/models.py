import datetime
import enum
import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def new_id() -> str:
    return uuid.uuid4().hex


class ContentType(str, enum.Enum):
    ARTICLE = "article"
    VIDEO = "video"
    QUIZ = "quiz"
    INTERACTIVE = "interactive"
    FLASHCARD = "flashcard"


class Difficulty(str, enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class LearningStyle(str, enum.Enum):
    VISUAL = "visual"
    AUDITORY = "auditory"
    READING = "reading"
    MIXED = "mixed"


class Topic(Base):
    __tablename__ = "Topic"
    id = Column(String, primary_key=True, index=True, default=new_id)
    name = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String, nullable=False, default="custom")
    difficulty = Column(String, nullable=False, default=Difficulty.BEGINNER.value)
    estimatedMinutes = Column(Integer, nullable=False, default=10)
    createdAt = Column(DateTime, default=utcnow)
    updatedAt = Column(DateTime, default=utcnow, onupdate=utcnow)


class Content(Base):
    __tablename__ = "Content"
    id = Column(String, primary_key=True, index=True, default=new_id)
    topicId = Column(String, ForeignKey("Topic.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text)
    type = Column(String, nullable=False)
    url = Column(String)
    difficulty = Column(String, nullable=False)
    estimatedMinutes = Column(Integer, nullable=False)
    tags = Column(JSON, nullable=False, default=list)
    # Stored for a future similarity search; scoring never reads it.
    embedding = Column(JSON)
    viewCount = Column(Integer, nullable=False, default=0)
    rating = Column(Float)
    createdAt = Column(DateTime, default=utcnow)
    updatedAt = Column(DateTime, default=utcnow, onupdate=utcnow)
    topic = relationship("Topic")


class UserInterest(Base):
    __tablename__ = "UserInterest"
    __table_args__ = (UniqueConstraint("userId", "topicId"),)
    id = Column(String, primary_key=True, index=True, default=new_id)
    userId = Column(String, index=True, nullable=False)
    topicId = Column(String, ForeignKey("Topic.id"), nullable=False)
    strength = Column(Float, nullable=False, default=0.1)
    preferredContentTypes = Column(JSON, nullable=False, default=list)
    averageSessionLength = Column(Float)
    createdAt = Column(DateTime, default=utcnow)
    updatedAt = Column(DateTime, default=utcnow, onupdate=utcnow)
    topic = relationship("Topic")


class UserPreferences(Base):
    __tablename__ = "UserPreferences"
    id = Column(String, primary_key=True, index=True, default=new_id)
    userId = Column(String, unique=True, index=True, nullable=False)
    difficultyLevel = Column(String)
    learningStyle = Column(String)
    dailyGoalMinutes = Column(Integer)
    preferredTopics = Column(JSON, nullable=False, default=list)
    morningReminder = Column(Boolean, nullable=False, default=False)
    reminderTime = Column(String, nullable=False, default="08:00")
    createdAt = Column(DateTime, default=utcnow)
    updatedAt = Column(DateTime, default=utcnow, onupdate=utcnow)


class LearningSession(Base):
    __tablename__ = "LearningSession"
    id = Column(String, primary_key=True, index=True, default=new_id)
    userId = Column(String, index=True, nullable=False)
    topicId = Column(String, ForeignKey("Topic.id"), nullable=False)
    contentId = Column(String, ForeignKey("Content.id"), nullable=False)
    contentType = Column(String, nullable=False)
    durationMinutes = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    score = Column(Float)
    engagementScore = Column(Float)
    createdAt = Column(DateTime, default=utcnow)
    updatedAt = Column(DateTime, default=utcnow, onupdate=utcnow)
