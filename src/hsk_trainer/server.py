import logging
import time
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel

from hsk_trainer.application.config import resolve_config
from hsk_trainer.application.factory import get_progress_store
from hsk_trainer.application.progress_codec import card_state_to_dict
from hsk_trainer.application.review_session import ReviewSession, due_items
from hsk_trainer.application.scheduler import due_skills, now_ms
from hsk_trainer.consts import VERSION
from hsk_trainer.domain.errors import InvalidGradeError, UnknownItemError
from hsk_trainer.infrastructure.vocab_loader import load_vocab

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("hsk_trainer.server")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"hsk-trainer server v{VERSION} starting up...")
    yield
    # Shutdown
    logger.info("hsk-trainer server shutting down...")


app = FastAPI(
    title="hsk-trainer",
    description="Review scheduling API for the HSK writing trainer.",
    version=VERSION,
    lifespan=lifespan,
)


@lru_cache(maxsize=1)
def get_session() -> ReviewSession:
    """One shared session per process; the server is the single writer of progress."""
    config = resolve_config()
    return ReviewSession(
        load_vocab(config.vocab_path),
        get_progress_store(config),
        requeue_offset=config.requeue_offset,
    )


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_seconds: float


class DueItem(BaseModel):
    id: str
    hanzi: str
    pinyin: str
    meaning: str
    due: int
    skills: list[str]


class ReviewRequest(BaseModel):
    item_id: str
    grade: str
    practiced_writing: bool = True
    now: int | None = None


start_time = time.time()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Simple health check to verify server is reachable.
    """
    return HealthResponse(status="ok", version=VERSION, uptime_seconds=time.time() - start_time)


@app.get("/version")
async def get_version():
    return {"version": VERSION}


@app.get("/due", response_model=list[DueItem])
def list_due(session: ReviewSession = Depends(get_session)):
    now = now_ms()
    return [
        DueItem(
            id=item.id,
            hanzi=item.hanzi,
            pinyin=item.pinyin,
            meaning=item.meaning,
            due=state.due,
            skills=[skill.value for skill in due_skills(state, now)],
        )
        for item, state in due_items(session.items, session.progress, now)
    ]


@app.get("/progress/{item_id}")
def get_progress(item_id: str, session: ReviewSession = Depends(get_session)) -> dict[str, Any]:
    try:
        return card_state_to_dict(session.state_for(item_id))
    except UnknownItemError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/review")
def post_review(
    req: ReviewRequest, session: ReviewSession = Depends(get_session)
) -> dict[str, Any]:
    """
    Apply one grade and return the item's new scheduling state.
    """
    try:
        state = session.apply(
            req.item_id,
            req.grade,
            practiced_writing=req.practiced_writing,
            now=req.now,
        )
    except InvalidGradeError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except UnknownItemError as e:
        raise HTTPException(status_code=404, detail=str(e))

    logger.info(f"Reviewed {req.item_id}: {req.grade}")
    return card_state_to_dict(state)
