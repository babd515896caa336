"""Tests for home screen URL submission while videos are loading."""

from unittest.mock import Mock

import pytest

pytest.importorskip("textual")

from vidnote.notes import AnalysisMode
from vidnote.screens.home import HomeScreen


def _screen() -> HomeScreen:
    screen = HomeScreen(mode=AnalysisMode.FULL)
    screen.notify = Mock()
    screen.query_one = Mock()
    screen.run_worker = Mock()
    return screen


def _submitted(value: str) -> Mock:
    event = Mock()
    event.value = value
    event.input.value = value
    return event


def test_url_kept_while_fetch_in_progress() -> None:
    screen = _screen()
    screen._fetching = True
    event = _submitted("https://youtu.be/dQw4w9WgXcQ")

    screen.on_input_submitted(event)

    assert event.input.value == "https://youtu.be/dQw4w9WgXcQ"
    screen.run_worker.assert_not_called()
    assert screen.notify.call_args.kwargs["severity"] == "warning"


def test_url_cleared_once_fetch_starts() -> None:
    screen = _screen()
    event = _submitted("https://youtu.be/dQw4w9WgXcQ")

    screen.on_input_submitted(event)

    assert event.input.value == ""
    assert screen._fetching is True
    assert screen.run_worker.call_args.kwargs["thread"] is True
    screen.notify.assert_not_called()


def test_blank_url_ignored() -> None:
    screen = _screen()
    screen.on_input_submitted(_submitted("   "))
    screen.run_worker.assert_not_called()
