"""Local save of annotated timelines: Markdown with YAML front matter, clipboard.

The front matter carries the full note list so a saved file can be loaded
back and exported later.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

import yaml

from vidnote.notes import AnalysisMode, Note, NoteTimeline, format_timestamp
from vidnote.sources import VideoDescriptor

logger = logging.getLogger(__name__)


def build_markdown(
    video: VideoDescriptor,
    mode: AnalysisMode,
    notes: list[Note],
) -> str:
    """Build a Markdown string with YAML front matter for an annotated video."""
    now = datetime.now()
    mode = AnalysisMode.parse(mode)

    front_matter: dict = {
        "title": video.title,
        "date": now.isoformat(timespec="seconds"),
        "mode": mode.value,
        "note_count": len(notes),
        "video": video.to_dict(),
        "notes": [note.to_dict() for note in notes],
    }

    lines = ["---"]
    lines.append(yaml.safe_dump(front_matter, default_flow_style=False, sort_keys=False, allow_unicode=True).strip())
    lines.append("---")
    lines.append("")
    lines.append(f"# {video.title}")
    lines.append("")
    lines.append(f"{video.url or video.watch_url}")
    lines.append("")
    lines.append(f"## Notes ({mode.label})")
    lines.append("")

    if notes:
        for note in notes:
            lines.append(f"- [{format_timestamp(note.timestamp)}] ({note.mode.value}) {note.text}")
    else:
        lines.append("_No notes._")
    lines.append("")

    return "\n".join(lines)


def save_notes(
    video: VideoDescriptor,
    mode: AnalysisMode,
    notes: list[Note],
    folder: str | Path,
) -> Path:
    """Write the timeline to ``<folder>/<date>_<video id>.md`` and return the path."""
    folder = Path(folder).expanduser().resolve()
    folder.mkdir(parents=True, exist_ok=True)

    stem = f"{datetime.now().strftime('%Y-%m-%d_%H-%M-%S')}_{video.id}"
    md_path = folder / f"{stem}.md"
    md_path.write_text(build_markdown(video, mode, notes), encoding="utf-8")
    md_path.chmod(0o600)  # owner read/write only
    logger.info("Notes saved: %s", md_path)
    return md_path


def load_notes(path: str | Path) -> tuple[VideoDescriptor, AnalysisMode, list[Note]]:
    """Read a file written by save_notes back into (video, mode, notes).

    Raises ValueError when the file has no vidnote front matter or its
    notes are malformed.
    """
    text = Path(path).read_text(encoding="utf-8")
    if not text.startswith("---"):
        raise ValueError(f"{path}: missing front matter")
    end = text.find("\n---", 3)
    if end == -1:
        raise ValueError(f"{path}: unterminated front matter")

    try:
        meta = yaml.safe_load(text[3:end]) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"{path}: invalid front matter: {exc}") from exc
    if not isinstance(meta, dict) or "video" not in meta:
        raise ValueError(f"{path}: not a vidnote file")

    try:
        video = VideoDescriptor.from_dict(meta["video"] or {})
        mode = AnalysisMode.parse(meta.get("mode"))
        notes = [Note.from_dict(item) for item in meta.get("notes") or []]
        # Validates timestamps and ids the same way a live timeline does.
        NoteTimeline().restore(notes)
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"{path}: invalid note data: {exc}") from exc
    notes.sort(key=lambda n: n.timestamp)
    return video, mode, notes


def list_saved(folder: str | Path) -> list[Path]:
    """Saved timelines in *folder*, newest first."""
    folder = Path(folder).expanduser().resolve()
    if not folder.exists():
        return []
    return sorted(folder.glob("*.md"), key=lambda p: p.stat().st_mtime, reverse=True)


def copy_to_clipboard(text: str) -> bool:
    """Copy text to system clipboard. Returns True on success."""
    try:
        import pyperclip
        pyperclip.copy(text)
        logger.info("Notes copied to clipboard.")
        return True
    except Exception as exc:
        logger.warning("Could not copy to clipboard: %s", exc)
        return False
