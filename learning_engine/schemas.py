import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Difficulty, LearningStyle


class TopicSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    category: str
    difficulty: str
    estimatedMinutes: int


class ContentSchema(BaseModel):
    """A catalog item as the dashboard renders it. The embedding is never sent."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    topicId: str
    title: str
    description: Optional[str] = None
    type: str
    url: Optional[str] = None
    difficulty: str
    estimatedMinutes: int
    tags: List[str] = []
    viewCount: int = 0
    rating: Optional[float] = None
    createdAt: Optional[datetime.datetime] = None
    updatedAt: Optional[datetime.datetime] = None


class RecommendationSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content: ContentSchema
    topic: TopicSchema
    score: float
    reason: str


class RecommendationResponse(BaseModel):
    recommendations: List[RecommendationSchema]


class RoutineItemSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    topicName: str
    contentTitle: str
    estimatedMinutes: int
    contentId: str


class RoutineResponse(BaseModel):
    routine: List[RoutineItemSchema]
    totalMinutes: int


class EngagementRequest(BaseModel):
    """Schema for reporting how well a user engaged with a topic."""

    topicId: str
    engagementScore: float = Field(ge=0, le=100)


class InterestSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    topicId: str
    strength: float
    preferredContentTypes: List[str] = []
    averageSessionLength: Optional[float] = None
    topic: Optional[TopicSchema] = None


class InterestListResponse(BaseModel):
    interests: List[InterestSchema]


class PreferencesUpdate(BaseModel):
    difficultyLevel: Optional[Difficulty] = None
    learningStyle: Optional[LearningStyle] = None
    dailyGoalMinutes: Optional[int] = Field(default=None, ge=1, le=24 * 60)
    preferredTopics: List[str] = []
    morningReminder: bool = False
    reminderTime: str = Field(default="08:00", pattern=r"^([01]\d|2[0-3]):[0-5]\d$")

    @field_validator("preferredTopics")
    @classmethod
    def dedupe_topics(cls, v: List[str]) -> List[str]:
        return list(dict.fromkeys(v))


class PreferencesSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    userId: str
    difficultyLevel: Optional[str] = None
    learningStyle: Optional[str] = None
    dailyGoalMinutes: Optional[int] = None
    preferredTopics: List[str] = []
    morningReminder: bool = False
    reminderTime: str = "08:00"


class PreferencesResponse(BaseModel):
    preferences: Optional[PreferencesSchema]


class SessionCreate(BaseModel):
    """Schema for recording a finished (or abandoned) learning session."""

    contentId: str
    durationMinutes: int = Field(default=0, ge=0)
    completed: bool = False
    score: Optional[float] = Field(default=None, ge=0, le=100)
    engagementScore: Optional[float] = Field(default=None, ge=0, le=100)


class SessionSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    userId: str
    topicId: str
    contentId: str
    contentType: str
    durationMinutes: int
    completed: bool
    score: Optional[float] = None
    engagementScore: Optional[float] = None
    createdAt: Optional[datetime.datetime] = None
