"""Help screen: same content as vidnote --help, plus the annotate keys."""

from __future__ import annotations

from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Button, Static

from vidnote.config import load_config
from vidnote.screens.base import ANNOTATE_BINDINGS, BackScreen


def keys_text() -> str:
    lines = ["Annotate screen keys:", ""]
    for binding in ANNOTATE_BINDINGS:
        lines.append(f"  {binding.key_display or binding.key:<6} {binding.description}")
    lines.append(f"  {'esc':<6} Cancel the pending mark")
    return "\n".join(lines)


class HelpScreen(BackScreen):
    """Show vidnote --help content; Back to Home."""

    def compose(self):
        with Vertical(classes="screen-frame"):
            with Horizontal(classes="top-bar compact"):
                yield Static("vidnote", classes="brand")
                yield Static("", classes="spacer-row")
                yield Static("Help", classes="top-bar-section")
            with Vertical(classes="screen-body"):
                with ScrollableContainer(id="help-scroll", classes="scroll-fill"):
                    yield Static("", id="help-text", markup=False)
                yield Button("Back to Home", id="btn-back", classes="btn secondary")

    def on_mount(self) -> None:
        from vidnote.cli import get_help_text
        prog = load_config().get("command_alias") or "vidnote"
        text = get_help_text(prog_name=prog) + "\n\n" + keys_text()
        self.query_one("#help-text", Static).update(text)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "btn-back":
            self.action_back()
