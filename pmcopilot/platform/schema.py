"""
Neo4j schema bootstrap: uniqueness constraints for every stored label.

Statements use IF NOT EXISTS so running them on every startup is a no-op
once the constraints exist.
"""

from __future__ import annotations

from pmcopilot.platform.neo4j import get_session
from pmcopilot.platform.observability.smart_logger import SmartLogger

SCHEMA_STATEMENTS: list[str] = [
    "CREATE CONSTRAINT prd_id IF NOT EXISTS FOR (p:PRD) REQUIRE p.id IS UNIQUE",
    "CREATE CONSTRAINT snapshot_id IF NOT EXISTS FOR (s:Snapshot) REQUIRE s.id IS UNIQUE",
    "CREATE CONSTRAINT integration_config_user IF NOT EXISTS FOR (c:IntegrationConfig) REQUIRE c.userId IS UNIQUE",
    "CREATE CONSTRAINT export_template_id IF NOT EXISTS FOR (t:ExportTemplate) REQUIRE t.id IS UNIQUE",
    "CREATE INDEX snapshot_prd IF NOT EXISTS FOR (s:Snapshot) ON (s.prdId)",
    "CREATE INDEX prd_updated IF NOT EXISTS FOR (p:PRD) ON (p.updatedAt)",
]


def initialize_schema() -> dict:
    """
    Apply SCHEMA_STATEMENTS.

    Returns:
        {"success_count": int, "error_count": int, "errors": [...]}
    """
    success_count = 0
    errors: list[dict] = []

    with get_session() as session:
        for statement in SCHEMA_STATEMENTS:
            try:
                session.run(statement).consume()
                success_count += 1
            except Exception as e:
                errors.append({"statement": statement, "error": str(e)})

    level = "WARNING" if errors else "INFO"
    SmartLogger.log(
        level,
        "Schema initialized.",
        category="platform.schema.init",
        params={"success_count": success_count, "error_count": len(errors), "errors": errors},
    )
    return {"success_count": success_count, "error_count": len(errors), "errors": errors}
