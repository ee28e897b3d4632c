"""
Issue-tracker sync API (feature router)

- Direct issue creation in Linear / Jira
- Queued creation (?queue=1) with job status polling
- Preview of the upstream payloads without creating anything

All routes share a per-client rate limit.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from starlette.requests import Request
from starlette.responses import Response

from pmcopilot.features.sync.issue_trackers import (
    IssueSyncError,
    preview_jira,
    preview_linear,
    run_jira_sync,
    run_linear_sync,
)
from pmcopilot.features.sync.job_queue import SyncJobQueue
from pmcopilot.features.sync.rate_limit import RateLimiter
from pmcopilot.features.sync.sync_contracts import (
    JiraSyncRequest,
    JobAccepted,
    JobDetail,
    JobStatus,
    JobSummary,
    LinearSyncRequest,
    SyncTarget,
)
from pmcopilot.platform.env import SYNC_RATE_LIMIT_MAX, SYNC_RATE_LIMIT_WINDOW_MS
from pmcopilot.platform.observability.request_logging import http_context
from pmcopilot.platform.observability.smart_logger import SmartLogger


async def _linear_job(payload: LinearSyncRequest) -> dict:
    return (await run_linear_sync(payload)).model_dump()


async def _jira_job(payload: JiraSyncRequest) -> dict:
    return (await run_jira_sync(payload)).model_dump()


_job_queue = SyncJobQueue({SyncTarget.LINEAR: _linear_job, SyncTarget.JIRA: _jira_job})
_rate_limiter = RateLimiter(SYNC_RATE_LIMIT_MAX, SYNC_RATE_LIMIT_WINDOW_MS)


def get_job_queue() -> SyncJobQueue:
    return _job_queue


def get_sync_rate_limiter() -> RateLimiter:
    return _rate_limiter


def enforce_sync_rate_limit(
    request: Request,
    response: Response,
    limiter: RateLimiter = Depends(get_sync_rate_limiter),
) -> None:
    limiter(request, response)


router = APIRouter(
    prefix="/api/sync",
    tags=["sync"],
    dependencies=[Depends(enforce_sync_rate_limit)],
)


def _accepted(response: Response, job_id: str, status: JobStatus) -> dict:
    response.status_code = 202
    return JobAccepted(jobId=job_id, status=status).model_dump(mode="json")


def _upstream_failure(request: Request, target: SyncTarget, e: IssueSyncError) -> HTTPException:
    SmartLogger.log(
        "ERROR",
        "Issue sync failed.",
        category=f"api.sync.{target.value}.error",
        params={**http_context(request), "error": {"type": type(e).__name__, "message": str(e)}},
    )
    return HTTPException(status_code=502, detail=str(e))


@router.get("/jobs", response_model=list[JobSummary])
async def list_jobs(queue: SyncJobQueue = Depends(get_job_queue)):
    return [job.summary() for job in queue.recent()]


@router.get("/jobs/{job_id}", response_model=JobDetail)
async def get_job(job_id: str, queue: SyncJobQueue = Depends(get_job_queue)):
    job = queue.get(job_id)
    if job is None:
        raise HTTPException(status_code=404, detail="Not found")
    return job.detail()


@router.post("/linear")
async def sync_linear(
    body: LinearSyncRequest,
    request: Request,
    response: Response,
    queue: bool = Query(default=False),
    jobs: SyncJobQueue = Depends(get_job_queue),
):
    SmartLogger.log(
        "INFO",
        "Linear sync requested.",
        category="api.sync.linear.request",
        params={**http_context(request), "items": len(body.items), "queued": queue},
    )
    if queue:
        job = jobs.enqueue(SyncTarget.LINEAR, body)
        return _accepted(response, job.id, job.status)
    try:
        return (await run_linear_sync(body)).model_dump()
    except IssueSyncError as e:
        raise _upstream_failure(request, SyncTarget.LINEAR, e) from e


@router.post("/linear/preview")
async def preview_linear_issues(body: LinearSyncRequest):
    return preview_linear(body)


@router.post("/jira")
async def sync_jira(
    body: JiraSyncRequest,
    request: Request,
    response: Response,
    queue: bool = Query(default=False),
    jobs: SyncJobQueue = Depends(get_job_queue),
):
    SmartLogger.log(
        "INFO",
        "Jira sync requested.",
        category="api.sync.jira.request",
        params={**http_context(request), "items": len(body.items), "queued": queue},
    )
    if queue:
        job = jobs.enqueue(SyncTarget.JIRA, body)
        return _accepted(response, job.id, job.status)
    try:
        return (await run_jira_sync(body)).model_dump()
    except IssueSyncError as e:
        raise _upstream_failure(request, SyncTarget.JIRA, e) from e


@router.post("/jira/preview")
async def preview_jira_issues(body: JiraSyncRequest):
    return preview_jira(body)
