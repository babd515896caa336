"""Textual TUI app for annotating videos.

Layout (annotate screen):
┌─────────────────────────────────────────────┐
│  vidnote  ▶  1:23  |  3 notes      Annotate │
│  Interview with the suspect, part 2         │
│  Mode: Body Language (muted, picture on)    │
├─────────────────────────────────────────────┤
│    0:12  body       looks away              │
│    1:05  body       crosses arms            │
│  Note at 1:23: type and press Enter         │
│  > _                                        │
├─────────────────────────────────────────────┤
│  ^t Mark  ^k Play  ^e Export  ^s Save  ...  │
└─────────────────────────────────────────────┘
"""

from __future__ import annotations

from textual.app import App

from vidnote.notes import AnalysisMode
from vidnote.screens.annotate import AnnotateScreen
from vidnote.screens.help_screen import HelpScreen
from vidnote.screens.home import (
    HomeHelpRequest,
    HomeOpenVideo,
    HomePreferencesRequest,
    HomeSavedRequest,
    HomeScreen,
)
from vidnote.screens.preferences import PreferencesScreen
from vidnote.screens.saved import SavedNotesScreen


class VidnoteApp(App[None]):
    """Main TUI application."""

    TITLE = "vidnote"

    CSS = """
    .screen-frame {
        height: 1fr;
    }

    .top-bar {
        width: 100%;
        padding: 0 1;
        background: $accent;
        color: $text;
    }

    .top-bar.compact {
        height: 1;
        margin-bottom: 1;
    }

    .top-bar.hero {
        height: auto;
        margin-bottom: 1;
    }

    .brand {
        width: auto;
        text-style: bold;
    }

    .top-bar-section {
        width: auto;
        color: $text-muted;
    }

    #status-text {
        width: auto;
    }

    .spacer-row, .row-spacer {
        width: 1fr;
    }

    .spacer {
        height: 1fr;
    }

    .screen-body {
        height: 1fr;
        padding: 0 1;
    }

    .screen-body-subtitle {
        color: $text-muted;
    }

    .screen-body-footer {
        dock: bottom;
        height: auto;
        padding: 0 1;
    }

    .row {
        height: auto;
    }

    #url-input {
        width: 1fr;
    }

    #videos-status, #mode-label, #mode-bar {
        color: $text-muted;
    }

    #videos-list, #notes-list {
        height: 1fr;
    }

    #video-bar {
        text-style: bold;
    }

    #notes-container {
        height: 1fr;
    }

    #pending-bar {
        height: 1;
        color: $warning;
    }

    #note-input {
        margin-top: 1;
    }

    .saved-row {
        height: auto;
    }

    .saved-label {
        width: 1fr;
    }

    .scroll-fill {
        height: 1fr;
    }

    #mode-select-container, #discard-confirm-container {
        align: center middle;
        width: 60;
        height: auto;
        background: $surface;
        border: tall $accent;
        padding: 1 2;
    }

    #mode-select-title, #discard-confirm-message {
        text-align: center;
        margin-bottom: 1;
    }
    """

    def __init__(self, mode: AnalysisMode | None = None, url: str | None = None) -> None:
        super().__init__()
        self.start_mode = mode
        self.start_url = url

    def on_mount(self) -> None:
        self.push_screen(HomeScreen(mode=self.start_mode, initial_url=self.start_url))

    def on_home_open_video(self, message: HomeOpenVideo) -> None:
        self.push_screen(AnnotateScreen(message.video, message.mode))

    def on_home_saved_request(self, message: HomeSavedRequest) -> None:
        self.push_screen(SavedNotesScreen())

    def on_home_preferences_request(self, message: HomePreferencesRequest) -> None:
        self.push_screen(PreferencesScreen())

    def on_home_help_request(self, message: HomeHelpRequest) -> None:
        self.push_screen(HelpScreen())
