from __future__ import annotations

from typing import Any, Optional, Protocol

from pmcopilot.features.snapshots.snapshot_codec import SNAPSHOT_SCHEMA_VERSION
from pmcopilot.platform.neo4j import get_session
from pmcopilot.platform.node_codec import new_id, utc_now_iso

StoredSnapshot = dict[str, Any]


class SnapshotRepository(Protocol):
    def create(
        self,
        prd_id: str,
        *,
        form_data: str,
        sections: str,
        note: Optional[str],
        template_id: Optional[str],
    ) -> Optional[StoredSnapshot]:
        """Store an encoded snapshot; None when the PRD does not exist."""
        ...

    def list_for_prd(self, prd_id: str, limit: int = 100) -> list[StoredSnapshot]: ...


def build_snapshot_props(
    prd_id: str,
    *,
    form_data: str,
    sections: str,
    note: Optional[str],
    template_id: Optional[str],
) -> StoredSnapshot:
    props: StoredSnapshot = {
        "id": new_id(),
        "prdId": prd_id,
        "formData": form_data,
        "sections": sections,
        "compressed": True,
        "schemaVersion": SNAPSHOT_SCHEMA_VERSION,
        "createdAt": utc_now_iso(),
    }
    if note is not None:
        props["note"] = note
    if template_id is not None:
        props["templateId"] = template_id
    return props


class Neo4jSnapshotRepository:
    """Snapshots stored as (:Snapshot)-[:SNAPSHOT_OF]->(:PRD). Never updated."""

    def create(
        self,
        prd_id: str,
        *,
        form_data: str,
        sections: str,
        note: Optional[str],
        template_id: Optional[str],
    ) -> Optional[StoredSnapshot]:
        props = build_snapshot_props(
            prd_id, form_data=form_data, sections=sections, note=note, template_id=template_id
        )
        # MATCH first: no PRD, no row, nothing created.
        query = """
        MATCH (p:PRD {id: $prdId})
        CREATE (s:Snapshot)-[:SNAPSHOT_OF]->(p)
        SET s = $props
        RETURN s
        """
        with get_session() as session:
            record = session.run(query, prdId=prd_id, props=props).single()
            return dict(record["s"]) if record else None

    def list_for_prd(self, prd_id: str, limit: int = 100) -> list[StoredSnapshot]:
        query = """
        MATCH (s:Snapshot {prdId: $prdId})
        RETURN s
        ORDER BY s.createdAt DESC
        LIMIT $limit
        """
        with get_session() as session:
            return [dict(record["s"]) for record in session.run(query, prdId=prd_id, limit=limit)]


def get_snapshot_repository() -> SnapshotRepository:
    return Neo4jSnapshotRepository()
