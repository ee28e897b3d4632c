"""
Snapshot payload codec tests: compression, legacy JSON, migrations.
"""

import json

import pytest

from pmcopilot.features.snapshots.snapshot_codec import (
    SNAPSHOT_SCHEMA_VERSION,
    SnapshotDecodeError,
    apply_migrations,
    compress_json,
    decompress_json,
    encode_payload,
    hydrate,
)


def _stored(**overrides):
    form, sections = encode_payload({"title": "T", "userStories": ["s1"]}, {"problem": False})
    row = {
        "id": "snap1",
        "prdId": "prd1",
        "formData": form,
        "sections": sections,
        "compressed": True,
        "schemaVersion": SNAPSHOT_SCHEMA_VERSION,
        "createdAt": "2024-01-01T00:00:00.000+00:00",
    }
    row.update(overrides)
    return row


def test_compressed_payload_is_base64_text():
    """Compressed payloads are ASCII strings that decode to the original value"""
    blob = compress_json({"title": "Ünïcode"})
    assert blob.isascii()
    assert decompress_json(blob) == {"title": "Ünïcode"}


def test_hydrate_compressed_snapshot():
    """Stored rows come back as plain dicts"""
    snap = hydrate(_stored())
    assert snap["formData"] == {"title": "T", "userStories": ["s1"]}
    assert snap["sections"] == {"problem": False}
    assert snap["schemaVersion"] == SNAPSHOT_SCHEMA_VERSION


def test_hydrate_legacy_uncompressed_snapshot():
    """Rows written without compression hold plain JSON"""
    row = _stored(
        compressed=False,
        formData=json.dumps({"title": "old"}),
        sections=json.dumps({}),
        schemaVersion=None,
    )
    snap = hydrate(row)
    assert snap["formData"] == {"title": "old"}
    assert snap["schemaVersion"] == SNAPSHOT_SCHEMA_VERSION


def test_hydrate_corrupt_payload_raises():
    """Corrupt payloads raise SnapshotDecodeError, never a bare decoding error"""
    with pytest.raises(SnapshotDecodeError):
        hydrate(_stored(formData="not-gzip"))
    with pytest.raises(SnapshotDecodeError):
        hydrate(_stored(compressed=False, formData="{broken"))


def test_migrations_walk_versions_in_order():
    """Each registered step runs once, from the stored version upward"""
    calls = []

    def v0_to_v1(snap):
        calls.append(0)
        return {**snap, "formData": {**snap["formData"], "objectives": []}}

    def v1_to_v2(snap):
        calls.append(1)
        return {**snap, "note": snap.get("note") or "migrated"}

    out = apply_migrations(
        {"formData": {"title": "x"}},
        migrations={0: v0_to_v1, 1: v1_to_v2},
        target_version=2,
    )
    assert calls == [0, 1]
    assert out["formData"] == {"title": "x", "objectives": []}
    assert out["note"] == "migrated"
    assert out["schemaVersion"] == 2


def test_migration_gap_stops_walk_but_tags_target():
    """A missing step stops the walk; the result is still tagged"""
    out = apply_migrations({"schemaVersion": 1, "a": 1}, migrations={}, target_version=3)
    assert out == {"schemaVersion": 3, "a": 1}


def test_migrations_do_not_mutate_input():
    """The stored row is left untouched"""
    raw = {"formData": {"title": "x"}}
    apply_migrations(raw, migrations={0: lambda s: {**s, "x": 1}}, target_version=1)
    assert raw == {"formData": {"title": "x"}}
