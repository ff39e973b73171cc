#!/usr/bin/env python3
"""GTN Manager TUI: goals, tasks and notes in the terminal, powered by Textual."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, DataTable, Footer, Header, Input, Label, Select, Static

from gtn import (
    FAMILY_GOAL,
    FAMILY_KINDS,
    FAMILY_NOTE,
    FAMILY_TASK,
    KEY_DEADLINE,
    KEY_PRIORITY,
    KIND_LABELS,
    AccessGate,
    Catalog,
    Item,
    Settings,
    create_item,
    data_path,
    full_text_search,
    init_workspace,
    key_order,
    load_catalog,
    load_settings,
    log_path,
    rank_by_progress,
    save_catalog,
    search_by_tag,
    setup_logging,
    workspace_root,
)
from gtn.models import (
    GOAL,
    NON_QUANTIFIABLE_GOAL,
    NOTE,
    PROTECTED_NOTE,
    RECURRING_TASK,
    TASK,
    family_of,
)

logger = logging.getLogger("gtn.cli")

VIEW_ALL = "all"
VIEW_TITLES = {
    VIEW_ALL: "All Items",
    FAMILY_TASK: "Tasks",
    FAMILY_GOAL: "Goals",
    FAMILY_NOTE: "Notes",
}

# Fields shown in the add form for each family; the kind adds its own extras.
FORM_FIELDS = {
    FAMILY_TASK: ["deadline", "priority"],
    FAMILY_NOTE: ["tags"],
    FAMILY_GOAL: ["progress"],
}
KIND_EXTRA_FIELDS = {
    RECURRING_TASK: ["interval"],
    PROTECTED_NOTE: ["password"],
}
FIELD_PLACEHOLDERS = {
    "title": "Title",
    "description": "Description",
    "deadline": "Deadline (YYYY-MM-DD or No Deadline)",
    "priority": "Priority (1-10)",
    "interval": "Recurrence interval (e.g. weekly, monthly)",
    "tags": "Tags (comma-separated)",
    "password": "Password",
    "progress": "Progress (0.0 - 1.0)",
}


# ── Stylesheet ─────────────────────────────────────────────────

CSS = """
Screen {
    background: $surface;
}

#main-layout {
    height: 1fr;
}

#list-pane {
    width: 2fr;
    min-width: 40;
    border-right: tall $primary-background-darken-2;
    padding: 0 1;
}

#detail-pane {
    width: 1fr;
    min-width: 30;
    padding: 0 1;
}

.section-title {
    text-style: bold;
    color: $text;
    margin: 1 0 0 0;
    padding: 0 1;
}

#items-table {
    height: 1fr;
}

#query {
    display: none;
}

#detail {
    padding: 1 1;
}

#status-bar {
    dock: bottom;
    height: 1;
    background: $primary-background;
    color: $text-muted;
    padding: 0 2;
}

.dialog {
    width: 70;
    height: auto;
    padding: 1 2;
    border: thick $primary-background-darken-2;
    background: $surface;
}

PasswordScreen, AddItemScreen {
    align: center middle;
}

.dialog Input {
    margin: 0 0 1 0;
}

.dialog-buttons {
    height: auto;
    align-horizontal: right;
}

.muted {
    color: $text-muted;
}
"""


# ── Modal screens ──────────────────────────────────────────────


class PasswordScreen(ModalScreen[bool]):
    """Ask for a protected note's password until granted or out of attempts."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, gate: AccessGate) -> None:
        super().__init__()
        self.gate = gate

    def compose(self) -> ComposeResult:
        yield Vertical(
            Label(f"Enter password to view {self.gate.note.title}", classes="section-title"),
            Input(password=True, placeholder="password", id="pw-input"),
            Static(f"{self.gate.attempts_left} attempt(s) left", id="pw-status", classes="muted"),
            classes="dialog",
        )

    @on(Input.Submitted, "#pw-input")
    def _on_submit(self, event: Input.Submitted) -> None:
        if self.gate.try_password(event.value):
            self.dismiss(True)
            return
        if self.gate.exhausted:
            self.dismiss(False)
            return
        event.input.value = ""
        self.query_one("#pw-status", Static).update(
            f"Incorrect password. {self.gate.attempts_left} attempt(s) left."
        )

    def action_cancel(self) -> None:
        self.dismiss(False)


class AddItemScreen(ModalScreen["dict[str, Any] | None"]):
    """Form for a new task, goal or note. Dismisses with the raw field mapping."""

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, kind: str) -> None:
        super().__init__()
        self.kind = kind

    def compose(self) -> ComposeResult:
        options = [(KIND_LABELS[k], k) for kinds in FAMILY_KINDS.values() for k in kinds]
        inputs = [
            Input(
                placeholder=FIELD_PLACEHOLDERS[name],
                password=(name == "password"),
                id=f"field-{name}",
            )
            for name in FIELD_PLACEHOLDERS
        ]
        yield Vertical(
            Label("Add item", classes="section-title"),
            Select(options, value=self.kind, allow_blank=False, id="kind-select"),
            *inputs,
            Horizontal(
                Button("Add", variant="primary", id="add"),
                Button("Cancel", id="cancel"),
                classes="dialog-buttons",
            ),
            classes="dialog",
        )

    def on_mount(self) -> None:
        self._sync_fields()

    def _visible_fields(self) -> list[str]:
        family = family_of(self.kind) or FAMILY_TASK
        fields = ["title", "description"] + FORM_FIELDS[family] + KIND_EXTRA_FIELDS.get(self.kind, [])
        if self.kind == NON_QUANTIFIABLE_GOAL:
            fields.remove("progress")
        return fields

    def _sync_fields(self) -> None:
        visible = set(self._visible_fields())
        for name in FIELD_PLACEHOLDERS:
            self.query_one(f"#field-{name}", Input).display = name in visible

    @on(Select.Changed, "#kind-select")
    def _on_kind_change(self, event: Select.Changed) -> None:
        self.kind = str(event.value)
        self._sync_fields()

    @on(Button.Pressed, "#add")
    def _on_add(self) -> None:
        data: dict[str, Any] = {"kind": self.kind}
        for name in self._visible_fields():
            data[name] = self.query_one(f"#field-{name}", Input).value
        self.dismiss(data)

    @on(Button.Pressed, "#cancel")
    def _on_cancel(self) -> None:
        self.action_cancel()

    def action_cancel(self) -> None:
        self.dismiss(None)


# ── Main app ───────────────────────────────────────────────────


class GtnApp(App):
    """Interactive catalog of goals, tasks and notes."""

    TITLE = "GTN Manager"
    CSS = CSS

    BINDINGS = [
        Binding("a", "show_all", "All"),
        Binding("t", "show_tasks", "Tasks"),
        Binding("g", "show_goals", "Goals"),
        Binding("n", "show_notes", "Notes"),
        Binding("v", "cycle_kind", "Variant"),
        Binding("p", "sort_priority", "By priority"),
        Binding("l", "sort_deadline", "By deadline"),
        Binding("r", "rank_goals", "Rank"),
        Binding("slash", "search", "Search"),
        Binding("number_sign", "tag_search", "Tag"),
        Binding("u", "unlock", "Unlock"),
        Binding("plus", "add_item", "Add"),
        Binding("ctrl+s", "save", "Save"),
        Binding("escape", "close_query", "Back", show=False),
        Binding("q", "quit", "Quit"),
    ]

    def __init__(
        self,
        catalog: Catalog,
        settings: Settings | None = None,
        root: Path | None = None,
        issues: list[str] | None = None,
    ) -> None:
        super().__init__()
        self.catalog = catalog
        self.settings = settings or Settings()
        self.root = root
        self.issues = issues or []
        self.view = VIEW_ALL
        self.kind_filter: str | None = None
        self.rows: list[Item] = []
        self.query_mode = "text"
        self._gates: dict[int, AccessGate] = {}

    def compose(self) -> ComposeResult:
        yield Header()
        yield Horizontal(
            Vertical(
                Label("", id="view-title", classes="section-title"),
                Input(id="query"),
                DataTable(id="items-table", cursor_type="row", zebra_stripes=True),
                id="list-pane",
            ),
            VerticalScroll(
                Label("Details", classes="section-title"),
                Static("", id="detail"),
                id="detail-pane",
                can_focus=False,
            ),
            id="main-layout",
        )
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#items-table", DataTable)
        table.add_columns("#", "Kind", "Summary")
        self._refresh_view()
        if self.issues:
            where = log_path(self.root, self.settings) if self.root else "the log"
            self.notify(
                f"{len(self.issues)} record(s) loaded with problems; see {where}",
                title="Data file",
                severity="warning",
            )

    # ── Rendering ──────────────────────────────────────────────

    def _view_items(self) -> list[Item]:
        if self.kind_filter:
            return self.catalog.filter_by_kind(self.kind_filter)
        if self.view == VIEW_ALL:
            return self.catalog.snapshot()
        return self.catalog.filter_by_family(self.view)

    def _view_title(self) -> str:
        if self.kind_filter:
            return f"{KIND_LABELS[self.kind_filter]}s"
        return VIEW_TITLES[self.view]

    def _show(self, items: list[Item], title: str, empty_message: str = "(nothing to show)") -> None:
        self.rows = items
        self.query_one("#view-title", Label).update(f"{title} ({len(items)})")
        table = self.query_one("#items-table", DataTable)
        table.clear()
        positions = {id(it): i for i, it in self.catalog.entries()}
        for item in items:
            index = positions[id(item)]
            table.add_row(str(index), KIND_LABELS[item.kind], item.render_summary(), key=str(index))
        self.query_one("#status-bar", Static).update("" if items else empty_message)
        if not items:
            self.query_one("#detail", Static).update("")

    def _refresh_view(self) -> None:
        self._show(self._view_items(), self._view_title())

    def _highlighted(self) -> Item | None:
        table = self.query_one("#items-table", DataTable)
        if not self.rows or table.cursor_row < 0 or table.cursor_row >= len(self.rows):
            return None
        return self.rows[table.cursor_row]

    def _gate_for(self, item: Item) -> AccessGate:
        index = self.catalog.index_of(item)
        if index not in self._gates:
            self._gates[index] = AccessGate(item, self.settings.password_attempts)  # type: ignore[arg-type]
        return self._gates[index]

    def _show_detail(self, item: Item | None) -> None:
        detail = self.query_one("#detail", Static)
        if item is None:
            detail.update("")
            return
        if item.kind == PROTECTED_NOTE:
            gate = self._gate_for(item)
            if gate.granted:
                detail.update(gate.reveal() or "")
            elif gate.exhausted:
                detail.update(f"{item.render_summary()}\n\nNo access granted.")
            else:
                detail.update(f"{item.render_summary()}\n\nPress u to enter the password.")
            return
        detail.update(item.render_detail())

    @on(DataTable.RowHighlighted, "#items-table")
    def _on_row_highlighted(self, event: DataTable.RowHighlighted) -> None:
        self._show_detail(self._highlighted())

    # ── Views ──────────────────────────────────────────────────

    def _switch_to(self, view: str) -> None:
        self.view = view
        self.kind_filter = None
        self._refresh_view()

    def action_show_all(self) -> None:
        self._switch_to(VIEW_ALL)

    def action_show_tasks(self) -> None:
        self._switch_to(FAMILY_TASK)

    def action_show_goals(self) -> None:
        self._switch_to(FAMILY_GOAL)

    def action_show_notes(self) -> None:
        self._switch_to(FAMILY_NOTE)

    def action_cycle_kind(self) -> None:
        """Step through the variants of the current family (then back to all)."""
        if self.view == VIEW_ALL:
            self.notify("Pick tasks, goals or notes first.", severity="warning")
            return
        cycle: list[str | None] = [None, *FAMILY_KINDS[self.view]]
        self.kind_filter = cycle[(cycle.index(self.kind_filter) + 1) % len(cycle)]
        self._refresh_view()

    # ── Engines ────────────────────────────────────────────────

    def _order_tasks(self, key: str, label: str) -> None:
        if self.view != FAMILY_TASK:
            self._switch_to(FAMILY_TASK)
        ordered = key_order(self._view_items(), key)  # type: ignore[arg-type]
        self._show(ordered, f"{self._view_title()} sorted by {label}")  # type: ignore[arg-type]

    def action_sort_priority(self) -> None:
        self._order_tasks(KEY_PRIORITY, "priority")

    def action_sort_deadline(self) -> None:
        self._order_tasks(KEY_DEADLINE, "deadline")

    def action_rank_goals(self) -> None:
        if self.view != FAMILY_GOAL:
            self._switch_to(FAMILY_GOAL)
        ranked = rank_by_progress(self._view_items())  # type: ignore[arg-type]
        self._show(ranked, f"{self._view_title()} sorted by progress")  # type: ignore[arg-type]

    def _open_query(self, mode: str, placeholder: str) -> None:
        self.query_mode = mode
        query = self.query_one("#query", Input)
        query.placeholder = placeholder
        query.value = ""
        query.display = True
        query.focus()

    def action_search(self) -> None:
        self._open_query("text", "Search text (all fields, any case)")

    def action_tag_search(self) -> None:
        self._open_query("tag", "Exact tag")

    def action_close_query(self) -> None:
        query = self.query_one("#query", Input)
        if query.display:
            query.display = False
            self.query_one("#items-table", DataTable).focus()

    @on(Input.Submitted, "#query")
    def _on_query(self, event: Input.Submitted) -> None:
        text = event.value
        self.action_close_query()
        if self.query_mode == "tag":
            tag = text.strip()
            found = search_by_tag(tag, self.catalog.notes())
            self._show(found, f"Notes tagged {tag!r}", "No notes found with that tag.")  # type: ignore[arg-type]
            return
        found = full_text_search(text, self._view_items())
        self._show(found, f"{self._view_title()} matching {text!r}", "No matching items found.")

    # ── Access & mutation ──────────────────────────────────────

    def action_unlock(self) -> None:
        item = self._highlighted()
        if item is None or item.kind != PROTECTED_NOTE:
            self.notify("Highlight a protected note first.", severity="warning")
            return
        gate = self._gate_for(item)
        if gate.granted or gate.exhausted:
            self._show_detail(item)
            return

        def _done(granted: bool | None) -> None:
            if granted:
                self.notify(f"Access granted to: {item.title}")
            elif gate.exhausted:
                self.notify("No access granted.", severity="error")
            self._show_detail(item)

        self.push_screen(PasswordScreen(gate), _done)

    def action_add_item(self) -> None:
        kind = self.kind_filter or {FAMILY_GOAL: GOAL, FAMILY_NOTE: NOTE}.get(self.view, TASK)

        def _done(data: dict[str, Any] | None) -> None:
            if data is None:
                return
            item, errors = create_item(self.catalog, data)
            if errors:
                self.notify("; ".join(errors), title="Not added", severity="error")
                return
            self.notify(f"{KIND_LABELS[item.kind]} added: {item.title}")
            self._refresh_view()

        self.push_screen(AddItemScreen(kind), _done)

    def action_save(self) -> None:
        if self.root is None:
            self.notify("No workspace to save to.", severity="warning")
            return
        path = data_path(self.root, self.settings)
        try:
            count = save_catalog(self.catalog, path)
        except OSError as e:
            logger.exception("Save failed")
            self.notify(f"Error: {e}", title="Save failed", severity="error")
            return
        self.notify(f"Saved {count} items to {path}")


# ── Entry point ────────────────────────────────────────────────


def main() -> None:
    root = workspace_root()
    try:
        init_workspace(root)
    except OSError as e:
        print(f"Workspace not usable: {root} ({e})")
        print("Set GTN_ROOT to a writable directory.")
        sys.exit(1)

    settings = load_settings(root)
    setup_logging(settings, root)
    catalog, issues = load_catalog(data_path(root, settings))

    app = GtnApp(catalog, settings, root, issues)
    app.run()


if __name__ == "__main__":
    main()
