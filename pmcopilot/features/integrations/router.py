"""
Integration settings API (feature router)

Jira / Linear hints for the single placeholder user.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from starlette.requests import Request

from pmcopilot.features.integrations.integration_contracts import IntegrationConfigUpdate
from pmcopilot.features.integrations.integration_repository import (
    IntegrationConfigRepository,
    get_integration_repository,
)
from pmcopilot.platform.env import DEFAULT_USER_ID
from pmcopilot.platform.observability.request_logging import http_context
from pmcopilot.platform.observability.smart_logger import SmartLogger

router = APIRouter(prefix="/api/integrations", tags=["integrations"])


@router.get("")
async def get_integration_config(repo: IntegrationConfigRepository = Depends(get_integration_repository)):
    """Returns {} until the first save."""
    cfg = repo.get(DEFAULT_USER_ID)
    return cfg.model_dump(mode="json", exclude_none=True) if cfg else {}


@router.put("")
async def save_integration_config(
    body: IntegrationConfigUpdate,
    request: Request,
    repo: IntegrationConfigRepository = Depends(get_integration_repository),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    cfg = repo.upsert(DEFAULT_USER_ID, changes)
    SmartLogger.log(
        "INFO",
        "Integration config upserted.",
        category="api.integrations.save.done",
        params={**http_context(request), "fields": sorted(changes)},
    )
    return cfg.model_dump(mode="json", exclude_none=True)
