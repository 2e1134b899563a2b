from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from scheduleboard.core.config import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    settings = get_settings()
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "optimizer": {
            "max_workers": settings.optimizer_max_workers,
            "max_time_ms": settings.optimizer_max_time_ms,
            "max_permutations": settings.optimizer_max_permutations,
        },
    }
