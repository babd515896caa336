"""Preferences: webhook, YouTube API key, channels, player, save folder."""

from __future__ import annotations

from textual.containers import Horizontal, ScrollableContainer, Vertical
from textual.widgets import Button, Input, Static, Switch

from vidnote.config import load_config, save_config
from vidnote.platform_setup import run_all_checks
from vidnote.screens.base import BackScreen


def _split_list(value: str) -> list[str]:
    return [part for part in value.replace(",", " ").split() if part]


class PreferencesScreen(BackScreen):
    """Edit the settings most users need; everything else lives in config.json."""

    def compose(self):
        cfg = load_config()
        with Vertical(classes="screen-frame"):
            with Horizontal(classes="top-bar compact"):
                yield Static("vidnote", classes="brand")
                yield Static("", classes="spacer-row")
                yield Static("Preferences", classes="top-bar-section")
            with ScrollableContainer(classes="screen-body"):
                yield Static("Webhook URL (receives exported notes):")
                yield Input(value=cfg.get("webhook_url") or "", id="webhook-input", placeholder="https://...")
                yield Static("YouTube Data API key (optional):")
                yield Input(value=cfg.get("youtube_api_key") or "", id="api-key-input", password=True)
                yield Static("Channel ids (space or comma separated):")
                yield Input(value=" ".join(cfg.get("channel_ids") or []), id="channels-input")
                yield Static("Player command:")
                yield Input(value=cfg.get("player_command") or "mpv", id="player-input", placeholder="mpv")
                yield Static("Save folder for annotated notes:")
                yield Input(value=cfg.get("save_folder") or "~/vidnote", id="save-input", placeholder="~/vidnote")
                yield Static("Copy saved notes to clipboard:")
                yield Switch(value=bool(cfg.get("auto_clipboard")), id="clipboard-switch")
                yield Static("", id="checks-text", classes="screen-body-subtitle")
            with Horizontal(classes="screen-body-footer"):
                yield Button("esc Back to home", id="btn-back", classes="btn secondary inline hug-row")
                yield Static("", classes="spacer-row")
                yield Button("Check setup", id="btn-check", classes="btn secondary inline hug-row")
                yield Static("", classes="spacer-row")
                yield Button("Save", id="btn-save", classes="btn primary inline hug-row")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id
        if bid == "btn-back":
            self.action_back()
        elif bid == "btn-check":
            self._run_checks()
        elif bid == "btn-save":
            self._save()

    def _save(self) -> None:
        cfg = load_config()
        cfg["webhook_url"] = self.query_one("#webhook-input", Input).value.strip() or None
        cfg["youtube_api_key"] = self.query_one("#api-key-input", Input).value.strip() or None
        cfg["channel_ids"] = _split_list(self.query_one("#channels-input", Input).value)
        cfg["player_command"] = self.query_one("#player-input", Input).value.strip() or "mpv"
        cfg["save_folder"] = self.query_one("#save-input", Input).value.strip() or "~/vidnote"
        cfg["auto_clipboard"] = bool(self.query_one("#clipboard-switch", Switch).value)
        save_config(cfg)
        self.notify("Preferences saved")

    def _run_checks(self) -> None:
        lines = []
        for name, ok, msg in run_all_checks(load_config()):
            icon = "[green]OK[/green]" if ok else "[red]MISSING[/red]"
            lines.append(f"[{icon}] {name}: {msg}")
        self.query_one("#checks-text", Static).update("\n".join(lines))
