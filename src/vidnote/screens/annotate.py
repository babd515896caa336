"""Annotate screen: playback clock, mark, notes timeline, export/save."""

from __future__ import annotations

import subprocess

from rich.text import Text
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import Screen
from textual.widgets import Button, Input, OptionList, Static
from textual.widgets.option_list import Option

from vidnote.config import load_config
from vidnote.errors import ValidationError
from vidnote.export import Transport, export_notes, transport_from_config
from vidnote.notes import AnalysisMode, Note, NoteTimeline, format_timestamp
from vidnote.output import copy_to_clipboard, save_notes
from vidnote.playback import PlaybackClock, is_muted, launch_player, shows_video, stop_player
from vidnote.screens.base import ANNOTATE_BINDINGS
from vidnote.screens.modals import ConfirmDiscardScreen, ModeSelectScreen
from vidnote.sources import VideoDescriptor

_MODE_COLOURS = {
    AnalysisMode.BODY: "magenta",
    AnalysisMode.LINGUISTIC: "cyan",
    AnalysisMode.FULL: "white",
}


def render_note(note: Note) -> Text:
    line = Text()
    line.append(f"{format_timestamp(note.timestamp):>6}  ", style="bold")
    line.append(f"{note.mode.value:<10} ", style=_MODE_COLOURS[note.mode])
    line.append(note.text)
    return line


class AnnotateScreen(Screen[None]):
    """Annotate one video. The timeline is discarded when the screen closes."""

    BINDINGS = [*ANNOTATE_BINDINGS, Binding("escape", "cancel_mark", "Cancel mark", show=False)]

    def __init__(
        self,
        video: VideoDescriptor,
        mode: AnalysisMode = AnalysisMode.FULL,
        notes: list[Note] | None = None,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.video = video
        self.mode = AnalysisMode.parse(mode)
        self.timeline = NoteTimeline()
        if notes:
            self.timeline.restore(notes)
        self.clock = PlaybackClock(on_mark=self._on_mark)
        self._exporting = False
        self._unsaved = False
        self._player: subprocess.Popen | None = None

    def compose(self):
        with Vertical(classes="screen-frame"):
            with Horizontal(classes="top-bar compact"):
                yield Static("vidnote", classes="brand")
                yield Static("", id="status-text")
                yield Static("", classes="spacer-row")
                yield Static("Annotate", classes="top-bar-section")
            with Vertical(classes="screen-body"):
                yield Static(self.video.title, id="video-bar", markup=False)
                yield Static("", id="mode-bar")
                with Vertical(id="notes-container"):
                    yield OptionList(id="notes-list")
                    yield Static("", id="pending-bar")
                    yield Input(placeholder="Mark a moment first (^t)", id="note-input", disabled=True)
            with Horizontal(classes="screen-body-footer"):
                yield Button("^t Mark", id="btn-mark", classes="btn primary inline hug-row")
                yield Static("", classes="spacer-row")
                yield Button("^k Play", id="btn-play", classes="btn secondary inline")
                yield Static("", classes="spacer-row")
                yield Button("^e Export", id="btn-export", classes="btn secondary inline", disabled=True)
                yield Static("", classes="spacer-row")
                yield Button("^s Save", id="btn-save", classes="btn secondary inline", disabled=True)
                yield Static("", classes="spacer-row")
                yield Button("^o Player", id="btn-player", classes="btn secondary inline")
                yield Static("", classes="spacer-row")
                yield Button("^c Back", id="btn-back", classes="btn danger inline")

    def on_mount(self) -> None:
        self._render_mode()
        self._render_pending()
        self._render_notes()
        self._update_status()
        self.set_interval(0.2, self._update_status)

    # -- rendering --------------------------------------------------------

    def _update_status(self) -> None:
        if self._player is not None and self._player.poll() is not None:
            self._player = None
        icon = "▶" if self.clock.playing else "⏸"
        status = f"  {icon}  {format_timestamp(self.clock.position)}  |  {len(self.timeline)} notes"
        try:
            self.query_one("#status-text", Static).update(status)
            self.query_one("#btn-play", Button).label = "^k Pause" if self.clock.playing else "^k Play"
        except Exception:
            pass

    def _render_mode(self) -> None:
        audio = "muted" if is_muted(self.mode) else "audible"
        picture = "picture on" if shows_video(self.mode) else "picture hidden"
        self.query_one("#mode-bar", Static).update(f"Mode: {self.mode.label} ({audio}, {picture})")

    def _render_pending(self) -> None:
        inp = self.query_one("#note-input", Input)
        pending = self.timeline.pending
        if pending is None:
            self.query_one("#pending-bar", Static).update("Press ^t to mark the current position.")
            inp.placeholder = "Mark a moment first (^t)"
            inp.disabled = True
            return
        at = format_timestamp(pending.position)
        self.query_one("#pending-bar", Static).update(f"Note at {at}: type and press Enter (esc cancels).")
        inp.placeholder = f"Add note at {at}..."
        inp.disabled = False
        inp.focus()

    def _render_notes(self) -> None:
        notes_list = self.query_one("#notes-list", OptionList)
        notes_list.clear_options()
        notes_list.add_options([Option(render_note(n), id=str(n.id)) for n in self.timeline.notes])
        has_notes = len(self.timeline) > 0
        self.query_one("#btn-export", Button).disabled = self._exporting or not has_notes
        self.query_one("#btn-save", Button).disabled = not has_notes

    # -- marks and notes --------------------------------------------------

    def _on_mark(self, position: float) -> None:
        self.timeline.mark(position)
        self._render_pending()

    def action_mark(self) -> None:
        self.clock.request_mark()

    def action_cancel_mark(self) -> None:
        if self.timeline.awaiting_text:
            self.timeline.cancel()
            self.query_one("#note-input", Input).value = ""
            self._render_pending()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if not event.value.strip():
            return
        before = len(self.timeline)
        self.timeline.submit(event.value, self.mode)
        if len(self.timeline) == before:
            return
        self._unsaved = True
        event.input.value = ""
        self._render_notes()
        self._render_pending()

    def action_delete_note(self) -> None:
        notes_list = self.query_one("#notes-list", OptionList)
        index = notes_list.highlighted
        if index is None:
            self.notify("Highlight a note to delete.", severity="warning")
            return
        option = notes_list.get_option_at_index(index)
        self.timeline.delete_note(int(option.id))
        self._unsaved = True
        self._render_notes()

    # -- playback ---------------------------------------------------------

    def action_toggle_play(self) -> None:
        self.clock.toggle()
        self._update_status()

    def action_nudge(self, delta: float) -> None:
        self.clock.nudge(float(delta))
        self._update_status()

    def action_open_player(self) -> None:
        cfg = load_config()
        stop_player(self._player)
        self._player = None
        try:
            self._player = launch_player(
                cfg.get("player_command") or "mpv",
                self.video.url or self.video.watch_url,
                self.mode,
                start=self.clock.position,
            )
        except FileNotFoundError:
            self.notify(f"Player not found: {cfg.get('player_command')}", severity="error")
            return
        except (OSError, ValueError) as exc:
            self.notify(f"Could not start player: {exc}", severity="error")
            return
        self.clock.play()
        self._update_status()

    def action_change_mode(self) -> None:
        self.app.push_screen(ModeSelectScreen(self.mode), self._on_mode_selected)

    def _on_mode_selected(self, mode: AnalysisMode | None) -> None:
        if mode is None or mode is self.mode:
            return
        self.mode = mode
        self._render_mode()
        self.notify(f"New notes use {mode.label}. Reopen the player to apply its mute policy.")

    # -- export and save --------------------------------------------------

    def action_export(self) -> None:
        if self._exporting:
            self.notify("Export already in progress.", severity="warning")
            return
        notes = self.timeline.notes
        if not notes:
            self.notify("No notes to export!", severity="warning")
            return
        try:
            transport = transport_from_config(load_config())
        except ValidationError as exc:
            self.notify(f"Cannot export: {exc}. Set it in Preferences.", severity="error")
            return

        self._exporting = True
        self.query_one("#btn-export", Button).label = "Exporting..."
        self.query_one("#btn-export", Button).disabled = True
        mode = self.mode
        self.run_worker(lambda: self._run_export(transport, mode, notes), thread=True)

    def _run_export(self, transport: Transport, mode: AnalysisMode, notes: list[Note]) -> None:
        try:
            ok = export_notes(self.video, mode, notes, transport)
        except ValidationError as exc:
            self.app.call_from_thread(self._export_done, False, str(exc))
            return
        self.app.call_from_thread(self._export_done, ok, None)

    def _export_done(self, ok: bool, error: str | None) -> None:
        self._exporting = False
        try:
            self.query_one("#btn-export", Button).label = "^e Export"
        except Exception:
            pass
        if ok:
            self._unsaved = False
            self.notify("Notes exported successfully.")
        else:
            self.notify(
                error or "Failed to export notes. Please check your webhook configuration.",
                severity="error",
            )
        self._render_notes()

    def action_save(self) -> None:
        notes = self.timeline.notes
        if not notes:
            self.notify("No notes to save.", severity="warning")
            return
        cfg = load_config()
        try:
            path = save_notes(self.video, self.mode, notes, cfg.get("save_folder") or "~/vidnote")
        except OSError as exc:
            self.notify(f"Could not save notes: {exc}", severity="error")
            return
        self._unsaved = False
        self.notify(f"Saved: {path.name}")
        if cfg.get("auto_clipboard"):
            if copy_to_clipboard(path.read_text(encoding="utf-8")):
                self.notify("Copied to clipboard")

    # -- leaving ----------------------------------------------------------

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id
        if bid == "btn-mark":
            self.action_mark()
        elif bid == "btn-play":
            self.action_toggle_play()
        elif bid == "btn-export":
            self.action_export()
        elif bid == "btn-save":
            self.action_save()
        elif bid == "btn-player":
            self.action_open_player()
        elif bid == "btn-back":
            self.action_back()

    def action_back(self) -> None:
        if self._unsaved and len(self.timeline) > 0:
            self.app.push_screen(ConfirmDiscardScreen(len(self.timeline)), self._on_discard_confirmed)
            return
        self._close()

    def _on_discard_confirmed(self, confirmed: bool) -> None:
        if confirmed:
            self._close()

    def _close(self) -> None:
        stop_player(self._player)
        self._player = None
        self.clock.pause()
        self.timeline.clear()
        self.dismiss(None)
