from __future__ import annotations

from typing import Any, Optional, Protocol

from pmcopilot.features.templates.template_contracts import ExportTemplate
from pmcopilot.platform.neo4j import get_session
from pmcopilot.platform.node_codec import new_id, utc_now_iso


class ExportTemplateRepository(Protocol):
    def list_for_user(self, user_id: str) -> list[ExportTemplate]: ...

    def create(self, user_id: str, name: str, markdown: str) -> ExportTemplate: ...

    def update(self, user_id: str, template_id: str, changes: dict[str, Any]) -> Optional[ExportTemplate]: ...

    def delete(self, user_id: str, template_id: str) -> bool: ...


class Neo4jExportTemplateRepository:
    """
    Custom templates hang off the user's config:
    (:IntegrationConfig)-[:HAS_TEMPLATE]->(:ExportTemplate).
    The config node is created on first use.
    """

    def list_for_user(self, user_id: str) -> list[ExportTemplate]:
        query = """
        MATCH (:IntegrationConfig {userId: $userId})-[:HAS_TEMPLATE]->(t:ExportTemplate)
        RETURN t
        ORDER BY t.createdAt
        """
        with get_session() as session:
            return [
                ExportTemplate.model_validate(dict(record["t"]))
                for record in session.run(query, userId=user_id)
            ]

    def create(self, user_id: str, name: str, markdown: str) -> ExportTemplate:
        now = utc_now_iso()
        props = {"id": new_id(), "name": name, "markdown": markdown, "createdAt": now, "updatedAt": now}
        query = """
        MERGE (c:IntegrationConfig {userId: $userId})
        ON CREATE SET c.createdAt = $now, c.updatedAt = $now
        CREATE (c)-[:HAS_TEMPLATE]->(t:ExportTemplate)
        SET t = $props
        RETURN t
        """
        with get_session() as session:
            record = session.run(query, userId=user_id, now=now, props=props).single()
            return ExportTemplate.model_validate(dict(record["t"]))

    def update(self, user_id: str, template_id: str, changes: dict[str, Any]) -> Optional[ExportTemplate]:
        query = """
        MATCH (:IntegrationConfig {userId: $userId})-[:HAS_TEMPLATE]->(t:ExportTemplate {id: $id})
        SET t += $changes,
            t.updatedAt = $now
        RETURN t
        """
        with get_session() as session:
            record = session.run(
                query, userId=user_id, id=template_id, changes=changes, now=utc_now_iso()
            ).single()
            return ExportTemplate.model_validate(dict(record["t"])) if record else None

    def delete(self, user_id: str, template_id: str) -> bool:
        query = """
        MATCH (:IntegrationConfig {userId: $userId})-[:HAS_TEMPLATE]->(t:ExportTemplate {id: $id})
        DETACH DELETE t
        RETURN count(*) AS n
        """
        with get_session() as session:
            record = session.run(query, userId=user_id, id=template_id).single()
            return bool(record and record["n"])


def get_template_repository() -> ExportTemplateRepository:
    return Neo4jExportTemplateRepository()
