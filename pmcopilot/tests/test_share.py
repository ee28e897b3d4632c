"""
Share link tests: token alphabet, payload encoding, URL shape.
"""

import re
from urllib.parse import parse_qs, urlparse

from pmcopilot.features.exports.share import (
    SharedPRD,
    build_share_url,
    decode_share_payload,
    encode_share_payload,
    random_token,
)
from pmcopilot.features.prds.prd_contracts import PRDFormData, PRDSections


def _payload(**overrides):
    base = dict(
        prd=PRDFormData(title="Ünïcode PRD", userStories=["As a user, I want & get ?"]),
        sections=PRDSections(objectives=False),
        templateId="experiment",
        ts=1700000000000,
        token="ABCDEFGH23",
    )
    base.update(overrides)
    return SharedPRD(**base)


def test_tokens_use_unambiguous_alphabet():
    """Tokens never contain 0, O, 1 or I and are mostly unique"""
    tokens = [random_token(10) for _ in range(200)]
    assert all(len(t) == 10 for t in tokens)
    assert all(re.fullmatch(r"[A-HJ-NP-Z2-9]+", t) for t in tokens)
    assert len(set(tokens)) >= 195


def test_payload_decodes_back():
    """Encoding is URL safe and reversible"""
    encoded = encode_share_payload(_payload())
    assert re.fullmatch(r"[A-Za-z0-9_-]+", encoded)
    decoded = decode_share_payload(encoded)
    assert decoded == _payload()


def test_corrupt_payload_returns_none():
    """Garbage or foreign JSON is rejected without raising"""
    assert decode_share_payload("%%%not-base64") is None
    assert decode_share_payload("") is None
    wrong_version = encode_share_payload(_payload(v=2))
    assert decode_share_payload(wrong_version) is None


def test_share_url_carries_view_data_and_token():
    """URL query holds view=prd, the payload and the token"""
    url = build_share_url("http://localhost:5173/", _payload())
    query = parse_qs(urlparse(url).query)
    assert url.startswith("http://localhost:5173/?")
    assert query["view"] == ["prd"]
    assert query["token"] == ["ABCDEFGH23"]
    assert decode_share_payload(query["data"][0]).prd.title == "Ünïcode PRD"


def test_share_url_keeps_existing_query():
    """A base URL with its own query string gets the share params appended"""
    url = build_share_url("https://pm.example.com/app?lang=en", _payload())
    assert url.startswith("https://pm.example.com/app?lang=en&view=prd&data=")
    query = parse_qs(urlparse(url).query)
    assert query["lang"] == ["en"]
    assert query["view"] == ["prd"]
    assert decode_share_payload(query["data"][0]) == _payload()
