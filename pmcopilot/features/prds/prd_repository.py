from __future__ import annotations

from typing import Any, Optional, Protocol

from pmcopilot.features.prds.prd_contracts import (
    PRD,
    PRD_SCHEMA_VERSION,
    PRDCreateRequest,
    PRDSections,
    RiceScore,
)
from pmcopilot.features.templates.builtin_templates import get_template_by_id
from pmcopilot.platform.neo4j import get_session
from pmcopilot.platform.node_codec import dump_json, load_json, new_id, to_iso, utc_now_iso

# Fields stored as JSON strings on the node.
_JSON_FIELDS = {"sections", "riceScores", "acceptanceCriteria"}


class PRDRepository(Protocol):
    def list_recent(self, limit: int = 50) -> list[PRD]: ...

    def create(self, data: PRDCreateRequest) -> PRD: ...

    def get(self, prd_id: str) -> Optional[PRD]: ...

    def exists(self, prd_id: str) -> bool: ...

    def update(self, prd_id: str, changes: dict[str, Any]) -> Optional[PRD]: ...

    def update_rice(self, prd_id: str, rice_scores: list[RiceScore]) -> Optional[PRD]: ...

    def delete(self, prd_id: str) -> bool: ...


def build_new_prd(data: PRDCreateRequest) -> PRD:
    """
    Apply defaults to a create request.

    Without explicit sections, the referenced template's default sections
    apply (the feature template when no templateId is given).
    """
    now = utc_now_iso()
    sections = data.sections or get_template_by_id(data.templateId).defaultSections.model_copy()
    return PRD(
        id=new_id(),
        title=data.title,
        problem=data.problem,
        solution=data.solution,
        objectives=list(data.objectives),
        userStories=list(data.userStories),
        requirements=list(data.requirements),
        sections=sections,
        templateId=data.templateId,
        schemaVersion=PRD_SCHEMA_VERSION,
        createdAt=now,
        updatedAt=now,
    )


def prd_to_node_props(prd: PRD) -> dict[str, Any]:
    props = prd.model_dump(mode="json", exclude_none=True)
    for key in _JSON_FIELDS:
        props[key] = dump_json(props[key])
    props["createdAt"] = to_iso(prd.createdAt)
    props["updatedAt"] = to_iso(prd.updatedAt)
    return props


def changes_to_node_props(changes: dict[str, Any]) -> dict[str, Any]:
    props: dict[str, Any] = {}
    for key, value in changes.items():
        props[key] = dump_json(value) if key in _JSON_FIELDS else value
    return props


def prd_from_node(node: Any) -> PRD:
    props = dict(node)
    props["sections"] = load_json(props.get("sections"), PRDSections().model_dump())
    props["riceScores"] = load_json(props.get("riceScores"), [])
    props["acceptanceCriteria"] = load_json(props.get("acceptanceCriteria"), [])
    return PRD.model_validate(props)


class Neo4jPRDRepository:
    """PRDs stored as (:PRD) nodes."""

    def list_recent(self, limit: int = 50) -> list[PRD]:
        query = """
        MATCH (p:PRD)
        RETURN p
        ORDER BY p.updatedAt DESC
        LIMIT $limit
        """
        with get_session() as session:
            return [prd_from_node(record["p"]) for record in session.run(query, limit=limit)]

    def create(self, data: PRDCreateRequest) -> PRD:
        prd = build_new_prd(data)
        query = """
        CREATE (p:PRD)
        SET p = $props
        RETURN p
        """
        with get_session() as session:
            record = session.run(query, props=prd_to_node_props(prd)).single()
            return prd_from_node(record["p"])

    def get(self, prd_id: str) -> Optional[PRD]:
        query = "MATCH (p:PRD {id: $id}) RETURN p"
        with get_session() as session:
            record = session.run(query, id=prd_id).single()
            return prd_from_node(record["p"]) if record else None

    def exists(self, prd_id: str) -> bool:
        query = "MATCH (p:PRD {id: $id}) RETURN count(p) AS n"
        with get_session() as session:
            record = session.run(query, id=prd_id).single()
            return bool(record and record["n"])

    def update(self, prd_id: str, changes: dict[str, Any]) -> Optional[PRD]:
        props = changes_to_node_props(changes)
        props["updatedAt"] = utc_now_iso()
        query = """
        MATCH (p:PRD {id: $id})
        SET p += $props
        RETURN p
        """
        with get_session() as session:
            record = session.run(query, id=prd_id, props=props).single()
            return prd_from_node(record["p"]) if record else None

    def update_rice(self, prd_id: str, rice_scores: list[RiceScore]) -> Optional[PRD]:
        return self.update(prd_id, {"riceScores": [r.model_dump(mode="json") for r in rice_scores]})

    def delete(self, prd_id: str) -> bool:
        # Snapshots keep their prdId; only the SNAPSHOT_OF relationship goes away.
        query = """
        MATCH (p:PRD {id: $id})
        DETACH DELETE p
        RETURN count(*) AS n
        """
        with get_session() as session:
            record = session.run(query, id=prd_id).single()
            return bool(record and record["n"])


def get_prd_repository() -> PRDRepository:
    return Neo4jPRDRepository()
