"""Modal screens: analysis mode picker, discard confirmation."""

from __future__ import annotations

from textual.binding import Binding
from textual.containers import Vertical
from textual.screen import ModalScreen
from textual.widgets import Label, OptionList
from textual.widgets.option_list import Option

from vidnote.notes import AnalysisMode


class ModeSelectScreen(ModalScreen[AnalysisMode | None]):
    """Pick the analysis mode stamped onto new notes."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("ctrl+c", "cancel", "Cancel", priority=True),
    ]

    def __init__(self, current: AnalysisMode) -> None:
        super().__init__()
        self.current = current

    def compose(self):
        options = []
        for mode in AnalysisMode:
            marker = " ◄" if mode is self.current else ""
            options.append(Option(f"{mode.label}{marker}", id=mode.value))

        yield Vertical(
            Label("Analysis mode:", id="mode-select-title"),
            OptionList(*options, id="mode-list"),
            id="mode-select-container",
        )

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(AnalysisMode(event.option.id))

    def action_cancel(self) -> None:
        self.dismiss(None)


class ConfirmDiscardScreen(ModalScreen[bool]):
    """Ask before dropping unsaved notes (leaving the video or switching it)."""

    BINDINGS = [
        Binding("escape", "no", "No"),
        Binding("y", "yes", "Yes"),
        Binding("n", "no", "No"),
        Binding("ctrl+c", "yes", "Yes", priority=True),
    ]

    def __init__(self, note_count: int) -> None:
        super().__init__()
        self.note_count = note_count

    def compose(self):
        noun = "note" if self.note_count == 1 else "notes"
        yield Vertical(
            Label(
                f"Discard {self.note_count} unsaved {noun}? They are not kept when the video changes.",
                id="discard-confirm-message",
            ),
            OptionList(
                Option("Yes, discard notes", id="yes"),
                Option("No, keep annotating", id="no"),
                id="discard-confirm-list",
            ),
            id="discard-confirm-container",
        )

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option.id == "yes":
            self.dismiss(True)
        else:
            self.dismiss(False)

    def action_yes(self) -> None:
        self.dismiss(True)

    def action_no(self) -> None:
        self.dismiss(False)
