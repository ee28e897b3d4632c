from __future__ import annotations

from typing import Any, Optional, Protocol

from pmcopilot.features.integrations.integration_contracts import IntegrationConfig
from pmcopilot.platform.neo4j import get_session
from pmcopilot.platform.node_codec import utc_now_iso


class IntegrationConfigRepository(Protocol):
    def get(self, user_id: str) -> Optional[IntegrationConfig]: ...

    def upsert(self, user_id: str, changes: dict[str, Any]) -> IntegrationConfig: ...


class Neo4jIntegrationConfigRepository:
    """One (:IntegrationConfig) per userId, enforced by a uniqueness constraint."""

    def get(self, user_id: str) -> Optional[IntegrationConfig]:
        query = "MATCH (c:IntegrationConfig {userId: $userId}) RETURN c"
        with get_session() as session:
            record = session.run(query, userId=user_id).single()
            return IntegrationConfig.model_validate(dict(record["c"])) if record else None

    def upsert(self, user_id: str, changes: dict[str, Any]) -> IntegrationConfig:
        now = utc_now_iso()
        query = """
        MERGE (c:IntegrationConfig {userId: $userId})
        ON CREATE SET c.createdAt = $now
        SET c += $changes,
            c.updatedAt = $now
        RETURN c
        """
        with get_session() as session:
            record = session.run(query, userId=user_id, changes=changes, now=now).single()
            return IntegrationConfig.model_validate(dict(record["c"]))


def get_integration_repository() -> IntegrationConfigRepository:
    return Neo4jIntegrationConfigRepository()
