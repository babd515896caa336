"""Tests for annotate screen marking, export guards, and leaving."""

from unittest.mock import Mock

import pytest

pytest.importorskip("textual")

from vidnote.notes import AnalysisMode, Note
from vidnote.screens import annotate
from vidnote.screens.annotate import AnnotateScreen, render_note
from vidnote.sources import VideoDescriptor

VIDEO = VideoDescriptor(id="dQw4w9WgXcQ", title="Interview")


def _screen(mode: AnalysisMode = AnalysisMode.BODY) -> AnnotateScreen:
    screen = AnnotateScreen(VIDEO, mode)
    screen.notify = Mock()
    screen._render_pending = Mock()
    screen._render_notes = Mock()
    screen._render_mode = Mock()
    return screen


def test_mark_holds_current_position() -> None:
    screen = _screen()
    screen.clock.seek(42)
    screen.action_mark()
    assert screen.timeline.pending.position == 42
    screen._render_pending.assert_called_once_with()


def test_export_with_no_notes_warns() -> None:
    screen = _screen()
    screen.run_worker = Mock()
    screen.action_export()
    screen.notify.assert_called_once_with("No notes to export!", severity="warning")
    screen.run_worker.assert_not_called()


def test_export_while_in_flight_is_ignored() -> None:
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen._exporting = True
    screen.run_worker = Mock()
    screen.action_export()
    screen.run_worker.assert_not_called()
    assert screen.notify.call_args.kwargs["severity"] == "warning"


def test_export_without_webhook_notifies_error(monkeypatch) -> None:
    monkeypatch.setattr(annotate, "load_config", lambda: {"webhook_url": None})
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen.run_worker = Mock()
    screen.action_export()
    screen.run_worker.assert_not_called()
    assert screen.notify.call_args.kwargs["severity"] == "error"
    assert screen._exporting is False


def test_export_starts_thread_worker(monkeypatch) -> None:
    monkeypatch.setattr(annotate, "load_config", lambda: {"webhook_url": "https://hooks.example/x"})
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen.run_worker = Mock()
    screen.query_one = Mock()
    screen.action_export()
    assert screen._exporting is True
    assert screen.run_worker.call_args.kwargs["thread"] is True


def test_export_done_failure_keeps_notes() -> None:
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen._exporting = True
    screen._unsaved = True
    screen._export_done(False, None)
    assert screen._exporting is False
    assert screen._unsaved is True
    assert len(screen.timeline) == 1
    assert screen.notify.call_args.kwargs["severity"] == "error"


def test_export_done_success_marks_clean() -> None:
    screen = _screen()
    screen._exporting = True
    screen._unsaved = True
    screen._export_done(True, None)
    assert screen._unsaved is False
    screen.notify.assert_called_once_with("Notes exported successfully.")


def test_back_when_clean_clears_timeline() -> None:
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen.clock.play()
    screen.dismiss = Mock()
    screen.action_back()
    assert len(screen.timeline) == 0
    assert screen.clock.playing is False
    screen.dismiss.assert_called_once_with(None)


def test_discard_declined_keeps_notes() -> None:
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen.dismiss = Mock()
    screen._on_discard_confirmed(False)
    assert len(screen.timeline) == 1
    screen.dismiss.assert_not_called()


def test_discard_confirmed_clears_notes() -> None:
    screen = _screen()
    screen.timeline.add_note(3.0, "smiles", AnalysisMode.BODY)
    screen.dismiss = Mock()
    screen._on_discard_confirmed(True)
    assert len(screen.timeline) == 0


def test_mode_change_applies_to_new_notes() -> None:
    screen = _screen(AnalysisMode.BODY)
    screen._on_mode_selected(AnalysisMode.LINGUISTIC)
    assert screen.mode is AnalysisMode.LINGUISTIC
    screen._render_mode.assert_called_once_with()


def test_mode_change_cancelled() -> None:
    screen = _screen(AnalysisMode.BODY)
    screen._on_mode_selected(None)
    assert screen.mode is AnalysisMode.BODY
    screen.notify.assert_not_called()


def test_render_note_line() -> None:
    screen = _screen()
    note = screen.timeline.add_note(65.0, "crosses arms", AnalysisMode.BODY)[0]
    assert render_note(note).plain.startswith("  1:05  body")


def test_reopened_timeline_keeps_saved_notes() -> None:
    saved = [
        Note(id=4, timestamp=30.0, text="second", mode=AnalysisMode.FULL),
        Note(id=2, timestamp=5.0, text="first", mode=AnalysisMode.FULL),
    ]
    screen = AnnotateScreen(VIDEO, AnalysisMode.FULL, notes=saved)
    assert [n.text for n in screen.timeline.notes] == ["first", "second"]
    new = screen.timeline.add_note(40.0, "third", AnalysisMode.FULL)[-1]
    assert new.id == 5


def test_open_player_keeps_handle_and_replaces_previous(monkeypatch) -> None:
    monkeypatch.setattr(annotate, "load_config", lambda: {"player_command": "mpv"})
    first, second = Mock(), Mock()
    first.poll.return_value = None
    second.poll.return_value = None
    launched = iter([first, second])
    monkeypatch.setattr(annotate, "launch_player", lambda *args, **kwargs: next(launched))
    screen = _screen()
    screen.query_one = Mock()

    screen.action_open_player()
    assert screen._player is first
    screen.action_open_player()

    first.terminate.assert_called_once_with()
    assert screen._player is second


def test_close_stops_player() -> None:
    screen = _screen()
    player = Mock()
    player.poll.return_value = None
    screen._player = player
    screen.dismiss = Mock()
    screen._close()
    player.terminate.assert_called_once_with()
    assert screen._player is None


def test_status_tick_reaps_exited_player() -> None:
    screen = _screen()
    player = Mock()
    player.poll.return_value = 0
    screen._player = player
    screen.query_one = Mock()
    screen._update_status()
    assert screen._player is None
