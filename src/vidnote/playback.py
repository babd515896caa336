"""Playback position tracking, mark requests, and the external player.

The terminal cannot render video, so the annotate screen drives a
``PlaybackClock`` alongside an external player (mpv by default). Marks are
delivered through a callback handed to the clock.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from pathlib import Path
from typing import Callable

from vidnote.notes import AnalysisMode

logger = logging.getLogger(__name__)

MarkCallback = Callable[[float], None]


def is_muted(mode: AnalysisMode) -> bool:
    """Body mode is watched without sound; the other modes are audible."""
    return AnalysisMode.parse(mode) is AnalysisMode.BODY


def shows_video(mode: AnalysisMode) -> bool:
    """Linguistic mode hides the picture."""
    return AnalysisMode.parse(mode) is not AnalysisMode.LINGUISTIC


class PlaybackClock:
    """Tracks the playback position of the video being annotated."""

    def __init__(
        self,
        on_mark: MarkCallback | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_mark = on_mark
        self._clock = clock
        self._offset = 0.0
        self._started_at: float | None = None

    @property
    def playing(self) -> bool:
        return self._started_at is not None

    @property
    def position(self) -> float:
        if self._started_at is None:
            return self._offset
        return self._offset + (self._clock() - self._started_at)

    def play(self) -> None:
        if self._started_at is None:
            self._started_at = self._clock()

    def pause(self) -> None:
        if self._started_at is not None:
            self._offset = self.position
            self._started_at = None

    def toggle(self) -> bool:
        """Play if paused, pause if playing. Returns the new playing state."""
        if self.playing:
            self.pause()
        else:
            self.play()
        return self.playing

    def seek(self, seconds: float) -> None:
        self._offset = max(0.0, float(seconds))
        if self._started_at is not None:
            self._started_at = self._clock()

    def nudge(self, delta: float) -> None:
        self.seek(self.position + delta)

    def request_mark(self) -> float:
        """Capture the current position and hand it to the mark callback."""
        position = self.position
        if self._on_mark is not None:
            self._on_mark(position)
        return position


def player_command(template: str, url: str, mode: AnalysisMode, start: float = 0.0) -> list[str]:
    """Build the argv for the external player.

    mpv gets flags enforcing the mode's mute policy and a start position;
    other players get the URL appended as-is.
    """
    args = shlex.split(template or "mpv")
    if Path(args[0]).name == "mpv":
        if is_muted(mode):
            args.append("--mute=yes")
        else:
            args.append("--mute=no")
        if not shows_video(mode):
            args.append("--no-video")
        if start > 0:
            args.append(f"--start={int(start)}")
    args.append(url)
    return args


def launch_player(template: str, url: str, mode: AnalysisMode, start: float = 0.0) -> subprocess.Popen:
    """Start the external player. FileNotFoundError if the binary is missing."""
    cmd = player_command(template, url, mode, start)
    logger.info("Launching player: %s", " ".join(cmd))
    return subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)


def stop_player(proc: subprocess.Popen | None, timeout: float = 3.0) -> None:
    """Terminate *proc* if it is still running and reap it."""
    if proc is None or proc.poll() is not None:
        return
    logger.info("Stopping player (pid %s)", proc.pid)
    proc.terminate()
    try:
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning("Player did not exit after %.0fs, killing it", timeout)
        proc.kill()
        proc.wait()
