import datetime
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config, database, models, schemas, store
from .interests import update_interest
from .preferences import UnknownTopicError, save_preferences
from .recommendations import get_recommendations
from .routine import generate_morning_routine
from .sessions import UnknownContentError, record_session

settings = config.settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create all database tables defined in models.py if they don't exist.
models.Base.metadata.create_all(bind=database.engine)

app = FastAPI(
    title="Personal Learning Engine",
    description=(
        "Ranks learning content and builds morning routines from user interests."
    ),
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error handlers ---
@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Database error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


# --- Dependencies ---
async def verify_api_key(x_internal_api_key: Optional[str] = Header(None)):
    """Dependency to verify the internal API key."""
    if x_internal_api_key != settings.INTERNAL_API_KEY:
        raise HTTPException(status_code=401, detail="Invalid Internal API Key")


async def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    """The opaque user identifier forwarded by the web app's session layer."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Unauthorized")
    return x_user_id.strip()


def get_now() -> datetime.datetime:
    """Evaluation time for scoring; overridden in tests."""
    return models.utcnow()


# --- API Endpoints ---
@app.get("/")
def read_root():
    """A simple health check endpoint."""
    return {"status": "ok", "message": "Learning Engine is running!"}


@app.get(
    "/recommendations",
    response_model=schemas.RecommendationResponse,
    dependencies=[Depends(verify_api_key)],
)
def read_recommendations(
    limit: int = Query(
        settings.DEFAULT_RECOMMENDATION_LIMIT,
        ge=1,
        le=settings.MAX_RECOMMENDATION_LIMIT,
    ),
    excludeCompleted: bool = True,
    types: Optional[str] = None,
    user_id: str = Depends(get_current_user_id),
    now: datetime.datetime = Depends(get_now),
    db: Session = Depends(database.get_db),
):
    """
    Ranked content for the current user.
    `types` is a comma-separated list of content types; blank entries are ignored.
    """
    preferred_types = (
        [t.strip() for t in types.split(",") if t.strip()] if types else None
    )
    try:
        recommendations = get_recommendations(
            db,
            user_id,
            limit=limit,
            exclude_completed=excludeCompleted,
            preferred_types=preferred_types,
            now=now,
        )
    except store.InvalidFilterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception(f"Error fetching recommendations for user {user_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch recommendations")

    return schemas.RecommendationResponse(
        recommendations=[
            schemas.RecommendationSchema.model_validate(rec) for rec in recommendations
        ]
    )


@app.get(
    "/routine",
    response_model=schemas.RoutineResponse,
    dependencies=[Depends(verify_api_key)],
)
def read_morning_routine(
    totalMinutes: int = Query(settings.DEFAULT_ROUTINE_MINUTES, ge=0, le=24 * 60),
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    """Greedy morning routine over the user's three strongest interests."""
    try:
        routine = generate_morning_routine(db, user_id, total_minutes=totalMinutes)
    except Exception:
        logger.exception(f"Error building morning routine for user {user_id}")
        raise HTTPException(status_code=500, detail="Failed to build morning routine")

    return schemas.RoutineResponse(
        routine=[schemas.RoutineItemSchema.model_validate(item) for item in routine],
        totalMinutes=sum(item.estimatedMinutes for item in routine),
    )


@app.get(
    "/interests",
    response_model=schemas.InterestListResponse,
    dependencies=[Depends(verify_api_key)],
)
def read_interests(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    interests = store.get_interests(db, user_id, by_strength=True)
    return {"interests": interests}


@app.post(
    "/interests/engagement",
    response_model=schemas.InterestSchema,
    dependencies=[Depends(verify_api_key)],
)
def report_engagement(
    request: schemas.EngagementRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    """Nudges the user's interest in a topic after an engagement event."""
    if store.get_topic(db, request.topicId) is None:
        raise HTTPException(
            status_code=404, detail=f"Topic not found: {request.topicId}"
        )
    return update_interest(db, user_id, request.topicId, request.engagementScore)


@app.get(
    "/preferences",
    response_model=schemas.PreferencesResponse,
    dependencies=[Depends(verify_api_key)],
)
def read_preferences(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    return {"preferences": store.get_preferences(db, user_id)}


@app.put(
    "/preferences",
    response_model=schemas.PreferencesResponse,
    dependencies=[Depends(verify_api_key)],
)
def update_preferences(
    request: schemas.PreferencesUpdate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    try:
        preferences = save_preferences(db, user_id, request)
    except UnknownTopicError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"preferences": preferences}


@app.delete("/preferences", dependencies=[Depends(verify_api_key)])
def reset_preferences(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    """Removes the user's preferences. Interests are kept."""
    return {"deleted": store.delete_preferences(db, user_id)}


@app.post(
    "/sessions",
    status_code=201,
    response_model=schemas.SessionSchema,
    dependencies=[Depends(verify_api_key)],
)
def create_session(
    request: schemas.SessionCreate,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(database.get_db),
):
    try:
        return record_session(db, user_id, request)
    except UnknownContentError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/topics", dependencies=[Depends(verify_api_key)])
def read_topics(db: Session = Depends(database.get_db)):
    """Topic catalog for the preference picker."""
    return {
        "topics": [
            schemas.TopicSchema.model_validate(topic) for topic in store.list_topics(db)
        ]
    }
