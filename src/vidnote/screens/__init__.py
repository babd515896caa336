"""TUI screens: Home, Annotate, Saved notes, Preferences, Help."""

from vidnote.screens.annotate import AnnotateScreen
from vidnote.screens.base import BackScreen
from vidnote.screens.home import HomeScreen

__all__ = [
    "AnnotateScreen",
    "BackScreen",
    "HomeScreen",
]
