"""
wordstreak — FastAPI service for the 750 words daily writing streak
"""
import logging
import os
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .errors import NoteLookupError, SettingsStoreError
from .models import CheckResult, StreakView
from .tracker import StreakTracker, build_tracker

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_tracker() -> StreakTracker:
    return build_tracker()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Daily check on startup; a failure here only delays it to the next trigger.
    try:
        state = get_tracker().check()
        logger.info("Startup check done: streak=%d", state.streak_count)
    except (NoteLookupError, SettingsStoreError) as e:
        logger.error("Startup streak check failed: %s", e)
    yield


limiter = Limiter(key_func=get_remote_address)
app = FastAPI(title="wordstreak API", lifespan=lifespan)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("WORDSTREAK_ALLOWED_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)


@app.get("/health")
def health():
    try:
        get_tracker().store.load()
        return {"status": "ok", "store": "ok"}
    except SettingsStoreError as e:
        logger.error("Health check store failure: %s", e)
        raise HTTPException(status_code=503, detail="Settings store unavailable")


# ── Streak ────────────────────────────────────────────────────────────────────

@app.get("/api/streak", response_model=StreakView)
def get_streak():
    """Passive display of the current streak."""
    tracker = get_tracker()
    state = _current_state(tracker)
    return StreakView(
        streak=state.streak_count,
        last_checked_date=state.last_checked_date,
        text=tracker.status_text(),
    )


@app.post("/api/streak/check", response_model=CheckResult)
@limiter.limit("30/minute")
def check_streak(request: Request):
    """Manual trigger: check today's note and report the streak."""
    tracker = get_tracker()
    try:
        message = tracker.trigger()
    except NoteLookupError as e:
        logger.error("Manual check failed, streak left unchanged: %s", e)
        raise HTTPException(status_code=503, detail="Notes unavailable, streak not checked")
    except SettingsStoreError as e:
        logger.error("Manual check could not persist settings: %s", e)
        raise HTTPException(status_code=503, detail="Settings store unavailable")
    state = tracker.current()
    return CheckResult(
        streak=state.streak_count,
        last_checked_date=state.last_checked_date,
        message=message,
    )


# ── Settings ──────────────────────────────────────────────────────────────────

@app.get("/api/settings")
def get_settings():
    """Read-only view of the persisted fields."""
    tracker = get_tracker()
    _current_state(tracker)
    return {"settings": tracker.settings_view()}


# ── Helpers ───────────────────────────────────────────────────────────────────

def _current_state(tracker: StreakTracker):
    try:
        return tracker.current()
    except SettingsStoreError as e:
        logger.error("Could not load streak settings: %s", e)
        raise HTTPException(status_code=503, detail="Settings store unavailable")
