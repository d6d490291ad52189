from typing import Any

from fastapi import APIRouter

from feels.api.deps import AnalyticsDep, CurrentUser
from feels.models import AnalyticsStats, Success, TrackVibe

router = APIRouter()


@router.get("/stats", response_model=AnalyticsStats)
def read_stats(store: AnalyticsDep) -> Any:
    return store.stats()


@router.post("/track-vibe", response_model=Success)
def track_vibe(body: TrackVibe, store: AnalyticsDep, current_user: CurrentUser) -> Any:
    store.track_vibe(preset=body.preset, mood=body.mood)
    return Success(success=True)


@router.post("/track-copy", response_model=Success)
def track_copy(store: AnalyticsDep, current_user: CurrentUser) -> Any:
    store.track_copy()
    return Success(success=True)


@router.post("/reset-daily", response_model=Success)
def reset_daily(store: AnalyticsDep, current_user: CurrentUser) -> Any:
    """
    Zero the daily vibe counter. Meant to be hit by an external daily cron.
    """
    store.reset_daily()
    return Success(success=True)
