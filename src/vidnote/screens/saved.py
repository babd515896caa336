"""Saved notes screen: list saved timelines, reopen, copy, re-export."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Button, Static

from vidnote.config import load_config
from vidnote.errors import ValidationError
from vidnote.export import export_notes, transport_from_config
from vidnote.output import copy_to_clipboard, list_saved, load_notes
from vidnote.screens.annotate import AnnotateScreen
from vidnote.screens.base import BackScreen


class SavedNotesScreen(BackScreen):
    """List saved timelines; each row can be reopened, copied, or sent to the webhook."""

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._paths: dict[str, Path] = {}

    def compose(self):
        with Vertical(classes="screen-frame"):
            with Horizontal(classes="top-bar compact"):
                yield Static("vidnote", classes="brand")
                yield Static("", classes="spacer-row")
                yield Static("Saved notes", classes="top-bar-section")
            with Vertical(classes="screen-body"):
                with ScrollableContainer(id="saved-list", classes="scroll-fill"):
                    pass  # filled in on_mount
            yield Button("^c Back Home", id="btn-back", classes="btn secondary inline")

    def on_mount(self) -> None:
        self._refresh()

    def _refresh(self) -> None:
        folder = load_config().get("save_folder") or "~/vidnote"
        container = self.query_one("#saved-list", ScrollableContainer)
        container.remove_children()
        self._paths.clear()

        paths = list_saved(folder)
        if not paths:
            container.mount(Static("No saved notes yet. Annotate a video and press ^s to see them here."))
            return

        for i, path in enumerate(paths):
            mtime = datetime.fromtimestamp(path.stat().st_mtime)
            key = f"r{i}"
            self._paths[key] = path
            container.mount(SavedRow(key=key, path=path, date_str=mtime.strftime("%d-%m-%Y")))

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id or ""
        if bid == "btn-back":
            self.action_back()
            return
        action, _, key = bid.partition("-")
        path = self._paths.get(key)
        if path is None:
            return
        if not path.exists():
            self.notify("File not found", severity="error")
            return
        if action == "copy":
            text = path.read_text(encoding="utf-8", errors="replace")
            if copy_to_clipboard(text):
                self.notify("Copied to clipboard")
            else:
                self.notify("Could not copy to clipboard", severity="error")
        elif action == "send":
            self._send(path)
        elif action == "open":
            self._open(path)

    def _open(self, path: Path) -> None:
        try:
            video, mode, notes = load_notes(path)
        except ValueError as exc:
            self.notify(f"Cannot open {path.name}: {exc}", severity="error")
            return
        self.app.push_screen(AnnotateScreen(video, mode, notes=notes))

    def _send(self, path: Path) -> None:
        try:
            video, mode, notes = load_notes(path)
            transport = transport_from_config(load_config())
        except (ValueError, ValidationError) as exc:
            self.notify(f"Cannot send {path.name}: {exc}", severity="error")
            return
        self.notify(f"Sending {path.name}...")
        self.run_worker(lambda: self._run_send(video, mode, notes, transport, path.name), thread=True)

    def _run_send(self, video, mode, notes, transport, name: str) -> None:
        try:
            ok = export_notes(video, mode, notes, transport)
        except ValidationError as exc:
            self.app.call_from_thread(self.notify, f"Cannot send {name}: {exc}", severity="error")
            return
        if ok:
            self.app.call_from_thread(self.notify, f"Sent {name}")
        else:
            self.app.call_from_thread(self.notify, f"Failed to send {name}", severity="error")


class SavedRow(Horizontal):
    """One saved file: date, filename, copy and send buttons."""

    def __init__(self, key: str, path: Path, date_str: str, **kwargs) -> None:
        super().__init__(classes="saved-row", **kwargs)
        self.key = key
        self.path = path
        self.date_str = date_str

    def compose(self):
        yield Static(f"{self.date_str}   {self.path.name}", classes="saved-label")
        yield Button("Open", id=f"open-{self.key}", classes="btn secondary inline saved-open")
        yield Button("Copy", id=f"copy-{self.key}", classes="btn secondary inline saved-copy")
        yield Button("Send", id=f"send-{self.key}", classes="btn secondary inline saved-send")
