"""
PRD API tests: CRUD, RICE rows, exports and share links over HTTP.
"""

from urllib.parse import parse_qs, urlparse

from pmcopilot.features.exports.share import decode_share_payload


def _create(client, **body):
    payload = {
        "title": "Checkout v2",
        "problem": "Carts are abandoned.",
        "solution": "One-page checkout.",
        "objectives": ["Reduce abandonment"],
        "userStories": ["As a shopper, I want fewer steps", "As ops, I want alerts"],
        "requirements": ["Support Apple Pay"],
    }
    payload.update(body)
    resp = client.post("/api/prds", json=payload)
    assert resp.status_code == 201
    return resp.json()


def test_create_applies_defaults(client):
    """New PRDs get an id, timestamps, all sections and schema version 1"""
    prd = _create(client)
    assert prd["id"]
    assert prd["schemaVersion"] == 1
    assert prd["createdAt"] == prd["updatedAt"]
    assert all(prd["sections"].values())
    assert prd["riceScores"] == []


def test_create_uses_template_default_sections(client):
    """Without explicit sections the template's defaults apply"""
    prd = _create(client, templateId="experiment")
    assert prd["sections"]["userStories"] is False
    assert prd["sections"]["requirements"] is False
    assert prd["sections"]["problem"] is True


def test_explicit_sections_win_over_template(client):
    """Explicit sections are stored as given"""
    sections = {"problem": True, "solution": False, "objectives": True, "userStories": True, "requirements": True}
    prd = _create(client, templateId="techspec", sections=sections)
    assert prd["sections"] == sections


def test_get_and_missing(client):
    """GET returns the stored PRD; unknown ids are 404"""
    prd = _create(client)
    assert client.get(f"/api/prds/{prd['id']}").json()["title"] == "Checkout v2"
    missing = client.get("/api/prds/does-not-exist")
    assert missing.status_code == 404
    assert missing.json() == {"detail": "Not found"}


def test_list_newest_update_first(client):
    """List is ordered by last update"""
    first = _create(client, title="first")
    second = _create(client, title="second")
    client.put(f"/api/prds/{first['id']}", json={"title": "first (edited)"})
    titles = [p["title"] for p in client.get("/api/prds").json()]
    assert titles[0] == "first (edited)"
    assert set(titles) == {"first (edited)", "second"}
    assert second["id"] in {p["id"] for p in client.get("/api/prds").json()}


def test_put_is_partial(client):
    """Only fields in the body change"""
    prd = _create(client)
    resp = client.put(f"/api/prds/{prd['id']}", json={"problem": "New problem"})
    assert resp.status_code == 200
    updated = resp.json()
    assert updated["problem"] == "New problem"
    assert updated["title"] == "Checkout v2"
    assert updated["userStories"] == prd["userStories"]


def test_put_missing_is_404(client):
    """Updating an unknown PRD is 404"""
    assert client.put("/api/prds/nope", json={"title": "x"}).status_code == 404


def test_put_rejects_wrong_types(client):
    """Malformed bodies fail validation"""
    prd = _create(client)
    assert client.put(f"/api/prds/{prd['id']}", json={"objectives": "not a list"}).status_code == 422


def test_put_rejects_null_fields(client):
    """Explicit nulls are refused and the stored PRD stays readable"""
    prd = _create(client)
    for body in ({"sections": None}, {"title": None}, {"userStories": None, "problem": "x"}):
        resp = client.put(f"/api/prds/{prd['id']}", json=body)
        assert resp.status_code == 422
    stored = client.get(f"/api/prds/{prd['id']}")
    assert stored.status_code == 200
    assert stored.json()["title"] == "Checkout v2"
    assert stored.json()["problem"] == "Carts are abandoned."
    assert client.get("/api/prds").status_code == 200


def test_put_null_template_detaches(client):
    """templateId may be cleared with null"""
    prd = _create(client, templateId="experiment")
    resp = client.put(f"/api/prds/{prd['id']}", json={"templateId": None})
    assert resp.status_code == 200
    assert resp.json()["templateId"] is None
    assert resp.json()["sections"] == prd["sections"]


def test_rice_rows_replace(client):
    """PATCH /rice replaces the prioritization rows"""
    prd = _create(client)
    rows = [{"id": "r1", "name": "Apple Pay", "reach": 100, "impact": 2, "confidence": 0.8, "effort": 4, "rice": 40}]
    resp = client.patch(f"/api/prds/{prd['id']}/rice", json={"riceScores": rows})
    assert resp.status_code == 200
    assert resp.json()["riceScores"][0]["name"] == "Apple Pay"
    assert client.patch("/api/prds/nope/rice", json={"riceScores": []}).status_code == 404


def test_delete(client):
    """Delete removes the PRD; a second delete is 404"""
    prd = _create(client)
    assert client.delete(f"/api/prds/{prd['id']}").json() == {"ok": True}
    assert client.get(f"/api/prds/{prd['id']}").status_code == 404
    assert client.delete(f"/api/prds/{prd['id']}").status_code == 404


def test_markdown_export_download(client):
    """Stored PRD exports as an attachment with only enabled sections"""
    prd = _create(client, templateId="experiment")
    resp = client.get(f"/api/prds/{prd['id']}/export/markdown")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/markdown")
    assert 'filename="Checkout_v2.md"' in resp.headers["content-disposition"]
    assert "## User Stories" not in resp.text
    assert "## Findings" not in resp.text


def test_markdown_export_with_findings(client):
    """Score and gaps query parameters add the Findings block"""
    prd = _create(client)
    resp = client.get(f"/api/prds/{prd['id']}/export/markdown", params={"score": 80, "gaps": ["No metrics"]})
    assert resp.text.endswith("## Findings\nScore: 80/100\n\nGaps:\n- No metrics\n")
    assert client.get(f"/api/prds/{prd['id']}/export/markdown", params={"score": 101}).status_code == 422


def test_unsaved_markdown_export(client):
    """Editor state can be exported without saving"""
    body = {
        "prd": {"title": "Draft", "problem": "p"},
        "sections": {"problem": True, "solution": False, "objectives": False, "userStories": False, "requirements": False},
    }
    resp = client.post("/api/prds/export/markdown", json=body)
    assert resp.status_code == 200
    assert resp.text == "# Draft\n\n## Problem Statement\np\n"


def test_csv_exports(client):
    """Stories and requirements download as numbered CSV tables"""
    prd = _create(client)
    stories = client.get(f"/api/prds/{prd['id']}/export/csv/stories")
    assert stories.headers["content-type"].startswith("text/csv")
    assert stories.text == '#,User Story\n1,"As a shopper, I want fewer steps"\n2,"As ops, I want alerts"\n'
    reqs = client.get(f"/api/prds/{prd['id']}/export/csv/requirements")
    assert reqs.text == "#,Requirement\n1,Support Apple Pay\n"
    assert client.get("/api/prds/nope/export/csv/stories").status_code == 404


def test_html_export(client):
    """HTML export renders a full document"""
    prd = _create(client)
    resp = client.get(f"/api/prds/{prd['id']}/export/html")
    assert resp.headers["content-type"].startswith("text/html")
    assert "<h1>Checkout v2</h1>" in resp.text


def test_share_link(client, monkeypatch):
    """Share links embed the PRD and a 10-character token"""
    monkeypatch.setenv("SHARE_BASE_URL", "https://pm.example.com/")
    prd = _create(client)
    resp = client.post(f"/api/prds/{prd['id']}/share")
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["token"]) == 10
    assert body["url"].startswith("https://pm.example.com/?view=prd&data=")
    shared = decode_share_payload(parse_qs(urlparse(body["url"]).query)["data"][0])
    assert shared.prd.title == "Checkout v2"
    assert shared.token == body["token"]


def test_responses_carry_request_id(client):
    """Every response echoes or assigns X-Request-Id"""
    assert client.get("/api/prds", headers={"X-Request-Id": "abc123"}).headers["x-request-id"] == "abc123"
    assert client.get("/api/prds").headers["x-request-id"]
