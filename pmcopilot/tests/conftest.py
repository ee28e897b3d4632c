"""
Shared fixtures: the app wired to in-memory repositories.

Routes get their storage through FastAPI dependencies, so tests swap the
Neo4j repositories for the dict-backed doubles below via
app.dependency_overrides. No database is needed.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from pmcopilot.features.integrations.integration_contracts import IntegrationConfig
from pmcopilot.features.integrations.integration_repository import get_integration_repository
from pmcopilot.features.prds.prd_contracts import PRD, PRDCreateRequest, RiceScore
from pmcopilot.features.prds.prd_repository import build_new_prd, get_prd_repository
from pmcopilot.features.snapshots.snapshot_repository import build_snapshot_props, get_snapshot_repository
from pmcopilot.features.sync.router import get_job_queue, get_sync_rate_limiter, _jira_job, _linear_job
from pmcopilot.features.sync.job_queue import SyncJobQueue
from pmcopilot.features.sync.rate_limit import RateLimiter
from pmcopilot.features.sync.sync_contracts import SyncTarget
from pmcopilot.features.templates.template_contracts import ExportTemplate
from pmcopilot.features.templates.template_repository import get_template_repository
from pmcopilot.main import create_app
from pmcopilot.platform.node_codec import new_id, utc_now_iso


class InMemoryPRDRepository:
    def __init__(self):
        self.items: dict[str, PRD] = {}

    def list_recent(self, limit: int = 50) -> list[PRD]:
        ordered = sorted(self.items.values(), key=lambda p: p.updatedAt, reverse=True)
        return ordered[:limit]

    def create(self, data: PRDCreateRequest) -> PRD:
        prd = build_new_prd(data)
        self.items[prd.id] = prd
        return prd

    def get(self, prd_id: str) -> Optional[PRD]:
        return self.items.get(prd_id)

    def exists(self, prd_id: str) -> bool:
        return prd_id in self.items

    def update(self, prd_id: str, changes: dict[str, Any]) -> Optional[PRD]:
        prd = self.items.get(prd_id)
        if prd is None:
            return None
        merged = {**prd.model_dump(), **changes, "updatedAt": utc_now_iso()}
        self.items[prd_id] = PRD.model_validate(merged)
        return self.items[prd_id]

    def update_rice(self, prd_id: str, rice_scores: list[RiceScore]) -> Optional[PRD]:
        return self.update(prd_id, {"riceScores": [r.model_dump() for r in rice_scores]})

    def delete(self, prd_id: str) -> bool:
        return self.items.pop(prd_id, None) is not None


class InMemorySnapshotRepository:
    def __init__(self, prds: InMemoryPRDRepository):
        self.prds = prds
        self.rows: list[dict[str, Any]] = []

    def create(self, prd_id, *, form_data, sections, note, template_id):
        if not self.prds.exists(prd_id):
            return None
        props = build_snapshot_props(
            prd_id, form_data=form_data, sections=sections, note=note, template_id=template_id
        )
        self.rows.append(props)
        return dict(props)

    def list_for_prd(self, prd_id: str, limit: int = 100) -> list[dict[str, Any]]:
        rows = [dict(r) for r in self.rows if r["prdId"] == prd_id]
        rows.sort(key=lambda r: r["createdAt"], reverse=True)
        return rows[:limit]


class InMemoryIntegrationRepository:
    def __init__(self):
        self.configs: dict[str, dict[str, Any]] = {}

    def get(self, user_id: str) -> Optional[IntegrationConfig]:
        row = self.configs.get(user_id)
        return IntegrationConfig.model_validate(row) if row else None

    def upsert(self, user_id: str, changes: dict[str, Any]) -> IntegrationConfig:
        now = utc_now_iso()
        row = self.configs.setdefault(user_id, {"userId": user_id, "createdAt": now})
        row.update(changes)
        row["updatedAt"] = now
        return IntegrationConfig.model_validate(row)


class InMemoryTemplateRepository:
    def __init__(self):
        self.rows: dict[str, list[dict[str, Any]]] = {}

    def list_for_user(self, user_id: str) -> list[ExportTemplate]:
        return [ExportTemplate.model_validate(r) for r in self.rows.get(user_id, [])]

    def create(self, user_id: str, name: str, markdown: str) -> ExportTemplate:
        now = utc_now_iso()
        row = {"id": new_id(), "name": name, "markdown": markdown, "createdAt": now, "updatedAt": now}
        self.rows.setdefault(user_id, []).append(row)
        return ExportTemplate.model_validate(row)

    def update(self, user_id: str, template_id: str, changes: dict[str, Any]) -> Optional[ExportTemplate]:
        for row in self.rows.get(user_id, []):
            if row["id"] == template_id:
                row.update(changes)
                row["updatedAt"] = utc_now_iso()
                return ExportTemplate.model_validate(row)
        return None

    def delete(self, user_id: str, template_id: str) -> bool:
        rows = self.rows.get(user_id, [])
        kept = [r for r in rows if r["id"] != template_id]
        self.rows[user_id] = kept
        return len(kept) != len(rows)


@pytest.fixture
def prd_repo():
    return InMemoryPRDRepository()


@pytest.fixture
def snapshot_repo(prd_repo):
    return InMemorySnapshotRepository(prd_repo)


@pytest.fixture
def integration_repo():
    return InMemoryIntegrationRepository()


@pytest.fixture
def template_repo():
    return InMemoryTemplateRepository()


@pytest.fixture
def job_queue():
    """Fresh queue per test; its worker task lives on the test client's event loop."""
    return SyncJobQueue({SyncTarget.LINEAR: _linear_job, SyncTarget.JIRA: _jira_job})


@pytest.fixture
def rate_limiter():
    return RateLimiter(max_requests=20, window_ms=60_000)


@pytest.fixture
def app(prd_repo, snapshot_repo, integration_repo, template_repo, job_queue, rate_limiter):
    """Application without a database connection."""
    application = create_app(init_database=False)
    application.dependency_overrides[get_prd_repository] = lambda: prd_repo
    application.dependency_overrides[get_snapshot_repository] = lambda: snapshot_repo
    application.dependency_overrides[get_integration_repository] = lambda: integration_repo
    application.dependency_overrides[get_template_repository] = lambda: template_repo
    application.dependency_overrides[get_job_queue] = lambda: job_queue
    application.dependency_overrides[get_sync_rate_limiter] = lambda: rate_limiter
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def no_upstream_credentials(monkeypatch):
    """Make sure a developer's .env cannot reach real Linear / Jira / Notion."""
    for key in (
        "LINEAR_API_KEY",
        "JIRA_BASE_URL",
        "JIRA_EMAIL",
        "JIRA_API_TOKEN",
        "NOTION_API_KEY",
        "NOTION_PARENT_PAGE",
        "NOTION_PARENT_DB",
    ):
        monkeypatch.delenv(key, raising=False)
