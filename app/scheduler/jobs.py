"""
app/scheduler/jobs.py

APScheduler-backed worker pool for capture analysis.

Each enqueued sample becomes a one-off job (run-now date trigger) on a
``BackgroundScheduler`` thread pool, so analyses run off the request
thread and concurrently across samples. Jobs for the same selector triple
may overlap; the stores' atomic upserts keep their counters exact.

Lifecycle
----------
Call ``build_scheduler()`` once to get a configured ``BackgroundScheduler``.
Start it on app boot; shut it down gracefully on app shutdown.
The scheduler is wired into FastAPI via the ``lifespan`` context in main.py.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler

from app.config import get_learning_settings

logger = logging.getLogger(__name__)


class SchedulerTaskExecutor:
    """
    ``AnalysisTaskExecutor`` that submits each task as an immediate
    one-off scheduler job.
    """

    def __init__(self, scheduler: BackgroundScheduler) -> None:
        self._scheduler = scheduler

    def submit(self, task: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        job = self._scheduler.add_job(
            task,
            args=args,
            kwargs=kwargs,
            misfire_grace_time=None,
            coalesce=False,
        )
        logger.debug("Scheduler: queued job id=%s func=%s", job.id, getattr(task, "__name__", task))


def build_scheduler(max_workers: int | None = None) -> BackgroundScheduler:
    """
    Build the analysis scheduler.

    Returns a configured but *not yet started* ``BackgroundScheduler``.
    The caller must call ``.start()`` and ``.shutdown(wait=True)`` at the
    appropriate lifecycle points.
    """
    workers = max_workers or get_learning_settings().analysis_max_workers
    return BackgroundScheduler(
        timezone="UTC",
        executors={"default": ThreadPoolExecutor(max_workers=workers)},
        job_defaults={"coalesce": False, "max_instances": workers},
    )
