"""
In-process sync job queue.

Jobs run one at a time on a single asyncio worker task, in enqueue order.
Nothing is persisted: a restart drops pending jobs and history.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Optional

from pmcopilot.features.sync.sync_contracts import JobDetail, JobStatus, JobSummary, SyncTarget
from pmcopilot.platform.node_codec import new_id
from pmcopilot.platform.observability.smart_logger import SmartLogger

JobRunner = Callable[[Any], Awaitable[Any]]

MAX_HISTORY = 120
LIST_LIMIT = 100


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SyncJob:
    id: str
    type: SyncTarget
    payload: Any
    status: JobStatus
    createdAt: int
    updatedAt: int
    result: Optional[Any] = None
    error: Optional[str] = None

    def summary(self) -> JobSummary:
        return JobSummary(id=self.id, type=self.type, status=self.status, updatedAt=self.updatedAt)

    def detail(self) -> JobDetail:
        return JobDetail(
            id=self.id,
            type=self.type,
            status=self.status,
            updatedAt=self.updatedAt,
            result=self.result,
            error=self.error,
        )


class SyncJobQueue:
    def __init__(self, runners: Mapping[SyncTarget, JobRunner], *, max_history: int = MAX_HISTORY):
        self._runners = dict(runners)
        self._max_history = max_history
        self._jobs: list[SyncJob] = []
        self._worker: Optional[asyncio.Task] = None

    def enqueue(self, job_type: SyncTarget, payload: Any) -> SyncJob:
        """Must be called from inside the running event loop."""
        now = _now_ms()
        job = SyncJob(
            id=new_id()[:12],
            type=job_type,
            payload=payload,
            status=JobStatus.PENDING,
            createdAt=now,
            updatedAt=now,
        )
        self._jobs.append(job)
        if len(self._jobs) > self._max_history:
            del self._jobs[: len(self._jobs) - self._max_history]
        self._ensure_worker()
        return job

    def recent(self, limit: int = LIST_LIMIT) -> list[SyncJob]:
        return self._jobs[-limit:]

    def get(self, job_id: str) -> Optional[SyncJob]:
        return next((j for j in self._jobs if j.id == job_id), None)

    async def wait_idle(self) -> None:
        """Wait until every job enqueued so far has finished."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._drain())

    def _next_pending(self) -> Optional[SyncJob]:
        return next((j for j in self._jobs if j.status == JobStatus.PENDING), None)

    async def _drain(self) -> None:
        while True:
            job = self._next_pending()
            if job is None:
                return
            await self._run(job)

    async def _run(self, job: SyncJob) -> None:
        job.status = JobStatus.RUNNING
        job.updatedAt = _now_ms()
        SmartLogger.log(
            "INFO",
            "Sync job started.",
            category="sync.jobs.run.start",
            params={"job_id": job.id, "type": job.type.value},
        )
        try:
            job.result = await self._runners[job.type](job.payload)
            job.status = JobStatus.DONE
        except Exception as e:
            # A failed job must not stop the worker; the error is kept on the job.
            job.status = JobStatus.ERROR
            job.error = str(e) or type(e).__name__
        finally:
            job.updatedAt = _now_ms()
        SmartLogger.log(
            "INFO" if job.status == JobStatus.DONE else "WARNING",
            "Sync job finished.",
            category="sync.jobs.run.done",
            params={"job_id": job.id, "type": job.type.value, "status": job.status.value, "error": job.error},
        )
