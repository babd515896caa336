"""Home screen: pick a video (list or pasted URL) and an analysis mode."""

from __future__ import annotations

from rich.text import Text
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.screen import Screen
from textual.widgets import Button, Input, OptionList, Static
from textual.widgets.option_list import Option

from vidnote import __version__
from vidnote.config import load_config
from vidnote.errors import SourceUnavailableError
from vidnote.notes import AnalysisMode
from vidnote.screens.base import HOME_BINDINGS, render_brand
from vidnote.screens.modals import ModeSelectScreen
from vidnote.sources import (
    VideoDescriptor,
    default_providers,
    fetch_videos,
    request_from_config,
)


class HomeOpenVideo(Message):
    """User picked a video to annotate."""

    def __init__(self, video: VideoDescriptor, mode: AnalysisMode) -> None:
        super().__init__()
        self.video = video
        self.mode = mode


class HomeSavedRequest(Message):
    """User requested Saved notes from Home."""


class HomePreferencesRequest(Message):
    """User requested Preferences from Home."""


class HomeHelpRequest(Message):
    """User requested Help from Home."""


def _render_video(video: VideoDescriptor) -> Text:
    line = Text()
    date = video.published_at.strftime("%Y-%m-%d") if video.published_at else "          "
    line.append(f"{date}  ", style="dim")
    line.append(video.title)
    line.append(f"  [{video.source.value}]", style="dim")
    return line


class HomeScreen(Screen[None]):
    """Video list, URL box, mode picker."""

    BINDINGS = HOME_BINDINGS

    def __init__(self, mode: AnalysisMode | None = None, initial_url: str | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        try:
            self.mode = AnalysisMode.parse(mode or load_config().get("default_mode"))
        except ValueError:
            self.mode = AnalysisMode.FULL
        self.initial_url = initial_url
        self.videos: list[VideoDescriptor] = []
        self._fetching = False

    def compose(self):
        with Vertical(classes="screen-frame"):
            with Vertical(classes="top-bar hero"):
                with Horizontal(classes="version-row"):
                    yield Static(f"v{__version__}", classes="version home-version")
                with Horizontal(classes="title-row"):
                    yield Static(render_brand(), classes="brand home-brand")
                with Horizontal(classes="subtitle-row"):
                    yield Static("Mark the moment, write it down", classes="tagline home-tagline")
            with Vertical(classes="screen-body"):
                with Horizontal(classes="row"):
                    yield Input(placeholder="Paste a YouTube URL and press Enter", id="url-input")
                    yield Button("^g Mode", id="btn-mode", classes="btn secondary inline hug-row")
                yield Static("", id="mode-label")
                yield Static("Loading videos...", id="videos-status")
                yield OptionList(id="videos-list")
            with Horizontal(classes="screen-body-footer"):
                yield Button("^r Reload", id="btn-reload", classes="btn secondary inline")
                yield Static("", classes="row-spacer")
                yield Button("^n Saved notes", id="btn-saved", classes="btn secondary inline")
                yield Static("", classes="row-spacer")
                yield Button("^p Preferences", id="btn-preferences", classes="btn secondary inline")
                yield Static("", classes="row-spacer")
                yield Button("^c Quit", id="btn-quit", classes="btn danger inline")

    def on_mount(self) -> None:
        self._render_mode()
        if self.initial_url:
            url, self.initial_url = self.initial_url, None
            self._load(url=url, open_first=True)
        else:
            self._load()

    def _render_mode(self) -> None:
        self.query_one("#mode-label", Static).update(f"Mode: {self.mode.label}")

    # -- loading ----------------------------------------------------------

    def _load(self, url: str | None = None, open_first: bool = False) -> bool:
        """Start a fetch in a worker. False if one is already running."""
        if self._fetching:
            return False
        self._fetching = True
        self.query_one("#videos-status", Static).update("Loading video..." if url else "Loading videos...")
        self.run_worker(lambda: self._fetch(url, open_first), thread=True, exclusive=True)
        return True

    def _fetch(self, url: str | None, open_first: bool) -> None:
        cfg = load_config()
        try:
            videos = fetch_videos(request_from_config(cfg, url=url), default_providers(cfg))
        except SourceUnavailableError as exc:
            self.app.call_from_thread(self._load_failed, str(exc))
            return
        self.app.call_from_thread(self._loaded, videos, url is not None, open_first)

    def _loaded(self, videos: list[VideoDescriptor], from_url: bool, open_first: bool) -> None:
        self._fetching = False
        if from_url:
            # A pasted URL goes to the top of the list.
            known = {v.id for v in videos}
            self.videos = videos + [v for v in self.videos if v.id not in known]
        else:
            self.videos = videos
        self._render_videos()
        self.query_one("#videos-status", Static).update(f"{len(self.videos)} videos")
        if (open_first or from_url) and videos:
            self._open(videos[0])

    def _load_failed(self, message: str) -> None:
        self._fetching = False
        self.query_one("#videos-status", Static).update(f"Error loading videos: {message}")
        self.notify(message, severity="error")

    def _render_videos(self) -> None:
        videos_list = self.query_one("#videos-list", OptionList)
        videos_list.clear_options()
        videos_list.add_options([Option(_render_video(v), id=v.id) for v in self.videos])

    # -- actions ----------------------------------------------------------

    def _open(self, video: VideoDescriptor) -> None:
        self.post_message(HomeOpenVideo(video, self.mode))

    def on_input_submitted(self, event: Input.Submitted) -> None:
        url = event.value.strip()
        if not url:
            return
        if not self._load(url=url):
            self.notify("Still loading videos, try again in a moment.", severity="warning")
            return
        event.input.value = ""

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        for video in self.videos:
            if video.id == event.option.id:
                self._open(video)
                return

    def on_button_pressed(self, event: Button.Pressed) -> None:
        bid = event.button.id
        if bid == "btn-mode":
            self.action_change_mode()
        elif bid == "btn-reload":
            self.action_reload()
        elif bid == "btn-saved":
            self.action_saved()
        elif bid == "btn-preferences":
            self.action_preferences()
        elif bid == "btn-quit":
            self.action_quit()

    def action_change_mode(self) -> None:
        self.app.push_screen(ModeSelectScreen(self.mode), self._on_mode_selected)

    def _on_mode_selected(self, mode: AnalysisMode | None) -> None:
        if mode is not None:
            self.mode = mode
            self._render_mode()

    def action_reload(self) -> None:
        self._load()

    def action_saved(self) -> None:
        self.post_message(HomeSavedRequest())

    def action_preferences(self) -> None:
        self.post_message(HomePreferencesRequest())

    def action_help(self) -> None:
        self.post_message(HomeHelpRequest())

    def action_quit(self) -> None:
        self.app.exit()
