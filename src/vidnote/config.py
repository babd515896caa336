"""Load, save, and validate the JSON config at ~/.config/vidnote/config.json."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "vidnote"
CONFIG_PATH = CONFIG_DIR / "config.json"

# Environment variables that win over the file.
ENV_OVERRIDES = {
    "webhook_url": "VIDNOTE_WEBHOOK_URL",
    "youtube_api_key": "YOUTUBE_API_KEY",
}

DEFAULTS: dict[str, dict[str, Any]] = {
    "webhook_url": {
        "value": None,
        "description": "Webhook that receives exported notes. Must answer {\"success\": true}.",
    },
    "youtube_api_key": {
        "value": None,
        "description": "YouTube Data API key. null = skip the API and use channel feeds.",
    },
    "channel_ids": {
        "value": [],
        "description": "YouTube channel ids listed on the home screen.",
    },
    "feed_urls": {
        "value": [],
        "description": "Extra Atom/RSS feed URLs to list videos from.",
    },
    "video_ids": {
        "value": [],
        "description": "Specific video ids to always list.",
    },
    "default_mode": {
        "value": "full",
        "description": "Analysis mode at startup: body, linguistic, or full.",
    },
    "save_folder": {
        "value": "~/vidnote",
        "description": "Folder where annotated timelines are saved as Markdown.",
    },
    "player_command": {
        "value": "mpv",
        "description": "External player used to watch videos. Mode flags are added for mpv.",
    },
    "auto_clipboard": {
        "value": False,
        "description": "Copy the saved Markdown to the clipboard after saving.",
    },
    "command_alias": {
        "value": "vidnote",
        "description": "Command name shown in help messages.",
    },
}


def _ensure_dir() -> None:
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)


def load_config() -> dict[str, Any]:
    """Return a flat dict of {key: value} from the config file, merged with defaults."""
    values: dict[str, Any] = {k: v["value"] for k, v in DEFAULTS.items()}

    if CONFIG_PATH.exists():
        try:
            raw = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
            for key, entry in raw.items():
                if key.startswith("_"):
                    continue
                if isinstance(entry, dict) and "value" in entry:
                    values[key] = entry["value"]
                else:
                    values[key] = entry
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Could not read config at %s: %s", CONFIG_PATH, exc)

    for key, env_name in ENV_OVERRIDES.items():
        env_value = os.environ.get(env_name)
        if env_value:
            values[key] = env_value

    return values


def save_config(values: dict[str, Any]) -> None:
    """Write current values back to the config file, preserving descriptions."""
    _ensure_dir()
    data: dict[str, Any] = {
        "_description": "vidnote configuration. Edit values below; descriptions are for reference."
    }
    for key, meta in DEFAULTS.items():
        data[key] = {
            "value": values.get(key, meta["value"]),
            "description": meta["description"],
        }
    CONFIG_PATH.write_text(
        json.dumps(data, indent=4, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    CONFIG_PATH.chmod(0o600)  # holds the API key and webhook URL
    logger.info("Config saved to %s", CONFIG_PATH)


def get(key: str) -> Any:
    """Convenience: load config and return one value."""
    return load_config()[key]


def init_config_if_missing() -> bool:
    """Create default config file if it doesn't exist. Return True if created."""
    if CONFIG_PATH.exists():
        return False
    defaults = {k: v["value"] for k, v in DEFAULTS.items()}
    save_config(defaults)
    return True
