from __future__ import annotations

import logging
import os
import secrets
import threading
from typing import Any

from fastapi import Body, Depends, FastAPI, HTTPException, status
from fastapi.responses import HTMLResponse
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from gtn import (
    FAMILY_GOAL,
    FAMILY_KINDS,
    FAMILY_NOTE,
    FAMILY_TASK,
    KIND_LABELS,
    AccessGate,
    Catalog,
    Item,
    create_item,
    data_path,
    full_text_search,
    key_order,
    load_catalog,
    load_settings,
    rank_by_progress,
    save_catalog,
    search_by_tag,
    workspace_root,
)
from gtn.models import PROTECTED_NOTE, Note

logger = logging.getLogger("gtn.ui")


# ── HTML helpers ──────────────────────────────────────────────

def _escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


STYLE = """
body { font-family: system-ui, sans-serif; background: #111418; color: #e6e6e6; margin: 0; }
.container { max-width: 960px; margin: 0 auto; padding: 24px; }
.card { background: #1a1f25; border-radius: 8px; padding: 12px 16px; margin: 12px 0; }
.muted { color: #8a939c; }
.small { font-size: 13px; }
.pill { background: #262d35; border-radius: 999px; padding: 2px 8px; font-size: 12px; }
li { margin: 4px 0; }
"""


# ── Catalog & auth ────────────────────────────────────────────

app = FastAPI(title="GTN Manager", version="0.1.0")

security = HTTPBasic(auto_error=False)

_catalog: Catalog | None = None
_catalog_lock = threading.Lock()
_gates: dict[int, AccessGate] = {}
_gates_lock = threading.Lock()


def get_catalog() -> Catalog:
    """The process-wide catalog, loaded from the workspace data file on first use."""
    global _catalog
    with _catalog_lock:
        if _catalog is None:
            root = workspace_root()
            _catalog, issues = load_catalog(data_path(root))
            for issue in issues:
                logger.warning("Data file: %s", issue)
        return _catalog


def get_current_user(credentials: HTTPBasicCredentials | None = Depends(security)) -> str:
    expected_username = os.environ.get("GTN_USERNAME", "")
    expected_password = os.environ.get("GTN_PASSWORD", "")

    if credentials is None:
        if not expected_username or not expected_password:
            return "guest"
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Basic"},
        )

    if not expected_username or not expected_password:
        return "guest"

    correct_username = secrets.compare_digest(credentials.username.encode("utf-8"), expected_username.encode("utf-8"))
    correct_password = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password.encode("utf-8"))

    if not (correct_username and correct_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

    return credentials.username


def _gate_for(note: Note) -> AccessGate:
    """Failure counter for *note*. Call with ``_gates_lock`` held."""
    gate = _gates.get(id(note))
    if gate is None or gate.note is not note:
        gate = AccessGate(note, load_settings().password_attempts)
        _gates[id(note)] = gate
    return gate


def _item_json(index: int, item: Item) -> dict[str, Any]:
    d = item.to_dict()
    d["index"] = index
    d["summary"] = item.render_summary()
    return d


def _listing(catalog: Catalog, items: list[Item]) -> list[dict[str, Any]]:
    positions = {id(it): i for i, it in catalog.entries()}
    return [_item_json(positions[id(it)], it) for it in items]


# ── Pages ─────────────────────────────────────────────────────

@app.get("/healthz")
def healthz() -> dict[str, str]:
    return {"ok": "true"}


@app.get("/", response_class=HTMLResponse)
def index(catalog: Catalog = Depends(get_catalog), username: str = Depends(get_current_user)) -> HTMLResponse:
    sections = []
    for family, title in ((FAMILY_TASK, "Tasks"), (FAMILY_GOAL, "Goals"), (FAMILY_NOTE, "Notes")):
        items = catalog.filter_by_family(family)
        rows = "".join(
            f'<li><span class="pill">{_escape(KIND_LABELS[it.kind])}</span> {_escape(it.render_summary())}</li>'
            for it in items
        )
        body = f"<ul>{rows}</ul>" if rows else '<div class="muted small">(none yet)</div>'
        sections.append(f'<section class="card"><h2>{title} <span class="muted small">{len(items)}</span></h2>{body}</section>')

    html = f"""<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <title>GTN Manager</title>
  <style>{STYLE}</style>
</head>
<body>
  <div class="container">
    <header>
      <h1>GTN Manager</h1>
      <div class="muted small">{len(catalog)} items · <code>{_escape(str(data_path(workspace_root())))}</code></div>
    </header>
    {''.join(sections)}
  </div>
</body>
</html>"""
    return HTMLResponse(html)


# ── Items ─────────────────────────────────────────────────────

@app.get("/api/items")
def api_list_items(
    family: str | None = None,
    kind: str | None = None,
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """List items, optionally narrowed to a family or a single variant."""
    try:
        if kind:
            items = catalog.filter_by_kind(kind)
        elif family:
            items = catalog.filter_by_family(family)
        else:
            items = catalog.snapshot()
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"items": _listing(catalog, items), "families": {f: list(k) for f, k in FAMILY_KINDS.items()}}


@app.post("/api/items")
def api_create_item(
    payload: dict[str, Any] = Body(...),
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Add a new item."""
    item, errors = create_item(catalog, payload)
    if errors:
        raise HTTPException(status_code=400, detail="; ".join(errors))
    return {"ok": True, "item": _item_json(catalog.index_of(item), item)}


@app.post("/api/save")
def api_save(catalog: Catalog = Depends(get_catalog), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Write the catalog back to the workspace data file."""
    path = data_path(workspace_root())
    count = save_catalog(catalog, path)
    return {"ok": True, "count": count, "path": str(path)}


# ── Engines ───────────────────────────────────────────────────

@app.get("/api/tasks/ordered")
def api_ordered_tasks(
    key: str = "priority",
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Tasks sorted by priority or deadline (stable)."""
    try:
        ordered = key_order(catalog.tasks(), key)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"key": key, "tasks": _listing(catalog, ordered)}


@app.get("/api/goals/ranked")
def api_ranked_goals(catalog: Catalog = Depends(get_catalog), username: str = Depends(get_current_user)) -> dict[str, Any]:
    """Goals by descending progress, non-quantifiable goals last."""
    return {"goals": _listing(catalog, rank_by_progress(catalog.goals()))}


@app.get("/api/notes/search")
def api_search_notes(
    q: str = "",
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Case-insensitive full-text search over notes."""
    found = full_text_search(q, catalog.notes())
    return {"query": q, "found": bool(found), "notes": _listing(catalog, found)}


@app.get("/api/notes/tag")
def api_notes_by_tag(
    tag: str,
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Notes carrying exactly this tag."""
    found = search_by_tag(tag, catalog.notes())
    return {"tag": tag, "found": bool(found), "notes": _listing(catalog, found)}


@app.post("/api/notes/{index}/unlock")
def api_unlock_note(
    index: int,
    payload: dict[str, Any] = Body(...),
    catalog: Catalog = Depends(get_catalog),
    username: str = Depends(get_current_user),
) -> dict[str, Any]:
    """Try a password against a protected note."""
    try:
        item = catalog.get(index)
    except IndexError:
        raise HTTPException(status_code=404, detail=f"Item not found: {index}")
    if item.kind != PROTECTED_NOTE:
        raise HTTPException(status_code=400, detail=f"Item {index} is not a protected note")

    attempt = str(payload.get("password", ""))
    with _gates_lock:
        gate = _gate_for(item)  # type: ignore[arg-type]
        ok = gate.check(attempt)
        left = gate.attempts_left
    if not ok:
        detail = "No access granted" if left == 0 else f"Incorrect password ({left} attempts left)"
        raise HTTPException(status_code=403, detail=detail)
    return {"ok": True, "note": item.to_dict(reveal=True), "detail": item.render_detail()}  # type: ignore[call-arg]


def main() -> None:
    import uvicorn

    uvicorn.run(
        "ui.app:app",
        host=os.environ.get("GTN_HOST", "127.0.0.1"),
        port=int(os.environ.get("GTN_PORT", "8000")),
    )


if __name__ == "__main__":
    main()
