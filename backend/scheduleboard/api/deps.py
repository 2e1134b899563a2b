from __future__ import annotations

from threading import Lock

from scheduleboard.core.config import Settings, get_settings
from scheduleboard.services.optimizer_jobs import OptimizerJobManager

_manager: OptimizerJobManager | None = None
_manager_lock = Lock()


def get_job_manager() -> OptimizerJobManager:
    global _manager
    with _manager_lock:
        if _manager is None:
            settings: Settings = get_settings()
            _manager = OptimizerJobManager(
                max_workers=settings.optimizer_max_workers,
                retention=settings.optimizer_job_retention,
            )
        return _manager


def shutdown_job_manager() -> None:
    global _manager
    with _manager_lock:
        if _manager is not None:
            _manager.shutdown()
            _manager = None
