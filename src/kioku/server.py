import logging
import time
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from kioku.application.srs.engine import SRSEngine
from kioku.consts import VERSION
from kioku.domain.constants import DEFAULT_EASE_FACTOR
from kioku.domain.mastery.models import DifficultyRating, MasteryRecord, parse_item_id

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("kioku.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    from kioku.application.config import resolve_config

    config = resolve_config()
    sync_target = config.api_base_url if config.remote_sync_active else "disabled"
    logger.info(
        f"kioku server v{VERSION} serving mastery store {config.store_path} "
        f"(remote sync: {sync_target})"
    )
    yield
    logger.info("kioku server stopped")


app = FastAPI(
    title="kioku server",
    description="Spaced-repetition scheduling API for vocabulary flashcards.",
    version=VERSION,
    lifespan=lifespan,
)

engine = SRSEngine()


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float
    store_path: str
    remote_sync: bool


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Report liveness plus the store and sync settings requests will use.
    """
    from kioku.application.config import resolve_config

    config = resolve_config()
    return HealthResponse(
        status="ok",
        version=VERSION,
        uptime_seconds=time.time() - start_time,
        store_path=str(config.store_path),
        remote_sync=config.remote_sync_active,
    )


@app.get("/version")
async def get_version():
    return {"version": VERSION}


# Mastery state as sent by clients; out-of-range values are clamped by the engine
class RecordModel(BaseModel):
    item_id: int | str
    knowledge_level: int = 0
    ease_factor: float = DEFAULT_EASE_FACTOR
    consecutive_correct: int = 0
    total_reviews: int = 0
    correct_reviews: int = 0
    last_reviewed_at: int | None = None
    next_review_at: int | None = None


class ScheduleRequest(BaseModel):
    record: RecordModel
    rating: DifficultyRating


class ScheduleResponse(BaseModel):
    new_knowledge_level: int
    new_ease_factor: float
    next_interval_seconds: float
    new_consecutive_correct: int
    new_total_reviews: int
    new_correct_reviews: int


@app.post("/schedule", response_model=ScheduleResponse)
async def schedule(req: ScheduleRequest):
    """
    Compute the next mastery state without touching any store.
    """
    record = MasteryRecord(**req.record.model_dump())
    return ScheduleResponse(**asdict(engine.schedule_review(record, req.rating)))


class ReviewRequest(BaseModel):
    rating: DifficultyRating
    store_path: str | None = None
    sync: bool | None = None


class ReviewResponse(BaseModel):
    record: RecordModel
    result: ScheduleResponse
    synced: bool


class StatsResponse(BaseModel):
    knowledge_level: int
    total_reviews: int
    correct_reviews: int
    consecutive_correct: int
    last_reviewed_at: int | None
    accuracy: float
    mastery_level: str


@app.post("/items/{item_id}/review", response_model=ReviewResponse)
async def review_item(item_id: str, req: ReviewRequest):
    """Record an answer: schedule, persist locally, then best-effort sync."""
    from kioku.application.config import resolve_config
    from kioku.application.factory import get_review_service

    try:
        config = resolve_config({"store_path": req.store_path, "sync_enabled": req.sync})
        service = get_review_service(config)
        outcome = await service.record_answer(parse_item_id(item_id), req.rating)
    except Exception as e:
        logger.error(f"Review failed for item {item_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(e)) from e

    return ReviewResponse(
        record=RecordModel(**asdict(outcome.record)),
        result=ScheduleResponse(**asdict(outcome.result)),
        synced=outcome.synced,
    )


@app.get("/items/{item_id}/stats", response_model=StatsResponse)
async def item_stats(item_id: str, store_path: str | None = None):
    from kioku.application.config import resolve_config
    from kioku.application.factory import get_review_service

    try:
        config = resolve_config({"store_path": store_path})
        word_stats = get_review_service(config).get_statistics(parse_item_id(item_id))
    except Exception as e:
        logger.error(f"Stats failed for item {item_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e)) from e

    return StatsResponse(**asdict(word_stats))
