import json


def _session(client):
    resp = client.post("/builder/sessions")
    assert resp.status_code == 200
    return resp.json()["session_id"]


def test_options(client):
    body = client.get("/builder/options").json()
    assert [r["name"] for r in body["rarities"]] == ["Common", "Uncommon", "Rare", "Epic", "Legendary"]
    assert "Quest Item" in body["categories"]


def test_create_session_has_starter_pack(client):
    resp = client.post("/builder/sessions")
    state = resp.json()["state"]
    assert state["status"] == "Ready to build a new resource file."
    assert state["simulation_attempts"] == 5
    assert [r["name"] for r in state["resources"]] == ["Iron Ingot", "Void-Silk Thread"]
    assert state["resources"][0]["dropRate"] == 50


def test_draft_edit_and_preview(client):
    sid = _session(client)
    client.patch(f"/builder/sessions/{sid}/draft", json={"field": "quantity_min", "value": "9"})
    client.patch(f"/builder/sessions/{sid}/draft", json={"field": "quantity_max", "value": "2"})
    client.patch(f"/builder/sessions/{sid}/draft", json={"field": "tags_text", "value": "a, b ,, c"})
    preview = client.get(f"/builder/sessions/{sid}/preview").json()
    assert preview["quantityRange"] == {"min": 2, "max": 9}
    assert preview["tags"] == ["a", "b", "c"]


def test_draft_invalid_rarity_is_400(client):
    sid = _session(client)
    resp = client.patch(f"/builder/sessions/{sid}/draft", json={"field": "rarity", "value": "Mythic"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "http_error"


def test_draft_non_string_rarity_is_400(client):
    sid = _session(client)
    resp = client.patch(f"/builder/sessions/{sid}/draft", json={"field": "rarity", "value": ["Rare"]})
    assert resp.status_code == 400
    assert resp.json()["error"] == "http_error"


def test_delete_session(client):
    sid = _session(client)
    resp = client.delete(f"/builder/sessions/{sid}")
    assert resp.status_code == 200
    assert resp.json() == {"session_id": sid, "deleted": True}
    assert client.get(f"/builder/sessions/{sid}").status_code == 404
    assert client.delete(f"/builder/sessions/{sid}").status_code == 404


def test_add_reset_and_summary(client):
    sid = _session(client)
    state = client.post(f"/builder/sessions/{sid}/pack").json()["state"]
    assert state["resources"][0]["name"] == "Arcstone Fragment"
    summary = client.get(f"/builder/sessions/{sid}/summary").json()
    assert summary["resources_count"] == 3
    assert summary["average_value"] == 216.67

    client.patch(f"/builder/sessions/{sid}/draft", json={"field": "name", "value": ""})
    state = client.post(f"/builder/sessions/{sid}/pack").json()["state"]
    assert state["status"] == "Please provide a name before saving the resource."
    assert len(state["resources"]) == 3

    state = client.post(f"/builder/sessions/{sid}/reset").json()["state"]
    assert state["form"]["name"] == "Arcstone Fragment"
    assert state["status"] == "Form reset to defaults."


def test_download_pack(client):
    sid = _session(client)
    resp = client.get(f"/builder/sessions/{sid}/pack/download")
    assert resp.status_code == 200
    assert "resource-pack.json" in resp.headers["content-disposition"]
    assert resp.headers["content-type"].startswith("application/json")
    assert [r["id"] for r in json.loads(resp.content)] == ["iron-ingot", "void-silk"]
    state = client.get(f"/builder/sessions/{sid}").json()["state"]
    assert state["status"] == "Download started for resource-pack.json"


def test_copy_pack_to_storage_clipboard(client, storage_root):
    sid = _session(client)
    state = client.post(f"/builder/sessions/{sid}/pack/copy").json()["state"]
    assert state["status"] == "Resource pack copied to clipboard as JSON."
    copied = json.loads((storage_root / "clipboard" / "resource-pack.json").read_text(encoding="utf-8"))
    assert len(copied) == 2


def test_copy_pack_when_clipboard_disabled(client, monkeypatch):
    monkeypatch.setenv("CLIPBOARD_ENABLED", "0")
    sid = _session(client)
    state = client.post(f"/builder/sessions/{sid}/pack/copy").json()["state"]
    assert state["status"] == "Copy failed. You can still download the JSON file."


def test_simulate(client):
    sid = _session(client)
    state = client.post(f"/builder/sessions/{sid}/simulate", json={"attempts": 20}).json()["state"]
    assert state["simulation_result"].startswith("Drop test (20 rolls): ")
    assert sum(t["count"] for t in state["last_tallies"]) == 20

    state = client.post(f"/builder/sessions/{sid}/simulate", json={"attempts": 0}).json()["state"]
    assert state["simulation_result"] == "Simulation attempts must be at least 1."


def test_simulate_rejects_non_integer_attempts(client):
    sid = _session(client)
    resp = client.post(f"/builder/sessions/{sid}/simulate", json={"attempts": "many"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "validation_error"


def test_unknown_session_returns_envelope(client):
    resp = client.get("/builder/sessions/NOPE", headers={"X-Request-Id": "req-123"})
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "http_error"
    assert body["request_id"] == "req-123"
    assert resp.headers["x-request-id"] == "req-123"
