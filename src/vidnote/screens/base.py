"""Shared bindings, brand, and base screen for the vidnote TUI."""

from __future__ import annotations

from pyfiglet import Figlet
from textual.binding import Binding
from textual.screen import Screen


BACK_BINDINGS = [
    Binding("escape", "back", "Back"),
    Binding("ctrl+c", "back", "Back", key_display="^c", priority=True),
]

ANNOTATE_BINDINGS = [
    Binding("ctrl+t", "mark", "Mark", key_display="^t", priority=True),
    Binding("ctrl+k", "toggle_play", "Play/Pause", key_display="^k", priority=True),
    Binding("ctrl+left", "nudge(-5)", "-5s", key_display="^←"),
    Binding("ctrl+right", "nudge(5)", "+5s", key_display="^→"),
    Binding("ctrl+e", "export", "Export", key_display="^e"),
    Binding("ctrl+s", "save", "Save", key_display="^s"),
    Binding("ctrl+d", "delete_note", "Delete note", key_display="^d"),
    Binding("ctrl+o", "open_player", "Open player", key_display="^o"),
    Binding("ctrl+g", "change_mode", "Mode", key_display="^g"),
    Binding("ctrl+c", "back", "Back", key_display="^c", priority=True),
]

HOME_BINDINGS = [
    Binding("ctrl+g", "change_mode", "Mode", key_display="^g"),
    Binding("ctrl+r", "reload", "Reload", key_display="^r"),
    Binding("ctrl+n", "saved", "Saved notes", key_display="^n"),
    Binding("ctrl+p", "preferences", "Preferences", key_display="^p"),
    Binding("f1", "help", "Help"),
    Binding("ctrl+c", "quit", "Quit", key_display="^c", priority=True),
]


def render_brand() -> str:
    """Render the brand title as ASCII art."""
    try:
        return Figlet(font="small").renderText("vidnote").rstrip()
    except Exception:
        return "vidnote"


class BackScreen(Screen[None]):
    """Screen that provides escape -> back and pushes Home when stack is empty."""

    BINDINGS = BACK_BINDINGS

    def action_back(self) -> None:
        self.app.pop_screen()
        if len(self.app.screen_stack) <= 1:
            from vidnote.screens.home import HomeScreen
            self.app.push_screen(HomeScreen())
