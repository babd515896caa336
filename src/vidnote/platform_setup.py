"""Environment checks: external player, clipboard, webhook and API configuration."""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from typing import Any

logger = logging.getLogger(__name__)


def _run(cmd: list[str]) -> tuple[int, str]:
    try:
        result = subprocess.run(cmd, capture_output=True, text=True, timeout=10)
        return result.returncode, result.stdout.strip()
    except FileNotFoundError:
        return -1, ""
    except subprocess.TimeoutExpired:
        return -2, ""


def check_player(command: str = "mpv") -> tuple[bool, str]:
    """Check that the configured player binary is on PATH."""
    try:
        binary = shlex.split(command or "mpv")[0]
    except (ValueError, IndexError):
        return False, f"Invalid player command: {command!r}"
    if not shutil.which(binary):
        return False, (
            f"'{binary}' not found. Install mpv (e.g. 'brew install mpv' or 'apt install mpv'),\n"
            "or set player_command in the config."
        )
    code, out = _run([binary, "--version"])
    first_line = out.splitlines()[0] if code == 0 and out else binary
    return True, f"Player available: {first_line}"


def check_clipboard() -> tuple[bool, str]:
    """Check that pyperclip has a working clipboard backend."""
    try:
        import pyperclip
        pyperclip.paste()
        return True, "Clipboard is available."
    except Exception as exc:
        return False, f"Clipboard unavailable: {exc}"


def check_webhook(cfg: dict[str, Any]) -> tuple[bool, str]:
    url = (cfg.get("webhook_url") or "").strip()
    if not url:
        return False, "webhook_url is not set. Exports are disabled until it is configured."
    if not url.startswith(("http://", "https://")):
        return False, f"webhook_url does not look like an HTTP URL: {url}"
    return True, f"Webhook configured: {url}"


def check_api_key(cfg: dict[str, Any]) -> tuple[bool, str]:
    if cfg.get("youtube_api_key"):
        return True, "YouTube API key configured."
    return False, "No YouTube API key. Videos are listed from channel feeds and pasted URLs only."


def run_all_checks(cfg: dict[str, Any]) -> list[tuple[str, bool, str]]:
    """Run environment checks. Returns list of (check_name, passed, message)."""
    results: list[tuple[str, bool, str]] = []

    ok, msg = check_player(cfg.get("player_command") or "mpv")
    results.append(("Player", ok, msg))

    ok, msg = check_clipboard()
    results.append(("Clipboard", ok, msg))

    ok, msg = check_webhook(cfg)
    results.append(("Webhook", ok, msg))

    ok, msg = check_api_key(cfg)
    results.append(("YouTube API", ok, msg))

    return results
