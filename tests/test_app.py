"""Tests for ui/app.py: HTTP API over the catalog."""

from concurrent.futures import ThreadPoolExecutor

import pytest
from fastapi.testclient import TestClient

import ui.app as app_module
from gtn.ingest import load_catalog
from ui.app import app, get_catalog


@pytest.fixture
def catalog(workspace):
    catalog, _ = load_catalog(workspace / "data.txt")
    app.dependency_overrides[get_catalog] = lambda: catalog
    yield catalog
    app.dependency_overrides.clear()


@pytest.fixture
def client(catalog, monkeypatch):
    monkeypatch.delenv("GTN_USERNAME", raising=False)
    monkeypatch.delenv("GTN_PASSWORD", raising=False)
    return TestClient(app)


def test_healthz(client):
    assert client.get("/healthz").json() == {"ok": "true"}


def test_index_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert "GTN Manager" in r.text
    assert "Write report" in r.text
    assert "PIN is in the drawer" not in r.text


def test_list_items(client):
    items = client.get("/api/items").json()["items"]
    assert len(items) == 9
    assert items[0]["index"] == 0
    assert items[0]["summary"].startswith("Task: Write report")


def test_list_items_filtered(client):
    tasks = client.get("/api/items", params={"family": "task"}).json()["items"]
    assert [t["index"] for t in tasks] == [0, 1, 2]
    notes = client.get("/api/items", params={"kind": "PublicNote"}).json()["items"]
    assert [n["title"] for n in notes] == ["Reading list"]
    assert client.get("/api/items", params={"family": "reminder"}).status_code == 400


def test_protected_note_is_redacted(client):
    notes = client.get("/api/items", params={"kind": "ProtectedNote"}).json()["items"]
    assert notes[0]["description"] == ""
    assert "password" not in notes[0]


def test_create_item(client, catalog):
    r = client.post("/api/items", json={"kind": "Task", "title": "New", "priority": "2", "deadline": "2024-07-01"})
    assert r.status_code == 200
    assert r.json()["item"]["index"] == 9
    assert len(catalog) == 10


def test_create_item_invalid(client, catalog):
    r = client.post("/api/items", json={"kind": "Goal", "title": "Bad", "progress": "3"})
    assert r.status_code == 400
    assert len(catalog) == 9


def test_ordered_tasks(client):
    r = client.get("/api/tasks/ordered", params={"key": "priority"})
    assert [t["priority"] for t in r.json()["tasks"]] == [1, 3, 5]
    r = client.get("/api/tasks/ordered", params={"key": "deadline"})
    assert [t["deadline"] for t in r.json()["tasks"]] == ["2024-05-15", "2024-06-01", "2024-06-30"]


def test_ordered_tasks_bad_key(client):
    assert client.get("/api/tasks/ordered", params={"key": "title"}).status_code == 400


def test_ranked_goals(client):
    goals = client.get("/api/goals/ranked").json()["goals"]
    assert [g["title"] for g in goals] == ["Run a marathon", "Learn Spanish", "Be kinder"]
    assert goals[-1]["progress"] is None


def test_search_notes(client):
    r = client.get("/api/notes/search", params={"q": "apollo"}).json()
    assert r["found"] is True
    assert [n["title"] for n in r["notes"]] == ["Daily Standup"]
    r = client.get("/api/notes/search", params={"q": "xyz"}).json()
    assert r["found"] is False
    assert r["notes"] == []


def test_notes_by_tag(client):
    r = client.get("/api/notes/tag", params={"tag": "urgent"}).json()
    assert [n["title"] for n in r["notes"]] == ["Daily Standup"]
    assert client.get("/api/notes/tag", params={"tag": "nope"}).json()["found"] is False


def test_unlock_note(client):
    r = client.post("/api/notes/4/unlock", json={"password": "wrong"})
    assert r.status_code == 403
    r = client.post("/api/notes/4/unlock", json={"password": "s3cret"})
    assert r.status_code == 200
    assert r.json()["note"]["description"] == "PIN is in the drawer"
    assert "Password Protected" in r.json()["detail"]


def test_unlock_checks_every_request(client):
    assert client.post("/api/notes/4/unlock", json={"password": "s3cret"}).status_code == 200
    r = client.post("/api/notes/4/unlock", json={"password": "WRONG"})
    assert r.status_code == 403
    assert "description" not in r.json()
    assert client.post("/api/notes/4/unlock", json={"password": ""}).status_code == 403


def test_unlock_locks_out_after_attempts(client):
    for _ in range(3):
        assert client.post("/api/notes/4/unlock", json={"password": "wrong"}).status_code == 403
    r = client.post("/api/notes/4/unlock", json={"password": "s3cret"})
    assert r.status_code == 403
    assert r.json()["detail"] == "No access granted"


def test_unlock_errors(client):
    assert client.post("/api/notes/99/unlock", json={"password": "x"}).status_code == 404
    assert client.post("/api/notes/3/unlock", json={"password": "x"}).status_code == 400


def test_save(client, workspace):
    client.post("/api/items", json={"kind": "Note", "title": "Saved", "tags": "t"})
    r = client.post("/api/save")
    assert r.json()["count"] == 10
    assert (workspace / "data.txt").read_text(encoding="utf-8").splitlines()[-1] == "Note,Saved,,t"


def test_basic_auth_required_when_configured(client, monkeypatch):
    monkeypatch.setenv("GTN_USERNAME", "me")
    monkeypatch.setenv("GTN_PASSWORD", "pw")
    assert client.get("/api/items").status_code == 401
    assert client.get("/api/items", auth=("me", "bad")).status_code == 401
    assert client.get("/api/items", auth=("me", "pw")).status_code == 200


def test_unlock_counts_concurrent_failures(client, catalog, workspace):
    (workspace / "config.yaml").write_text("password_attempts: 100\n", encoding="utf-8")

    def attempt(_):
        return client.post("/api/notes/4/unlock", json={"password": "wrong"}).status_code

    with ThreadPoolExecutor(max_workers=8) as pool:
        codes = list(pool.map(attempt, range(40)))

    assert codes == [403] * 40
    assert app_module._gate_for(catalog.get(4)).failures == 40
