"""Note timeline for the active video.

Notes are attached to playback positions (seconds into the video) and the
timeline always keeps them in ascending timestamp order. Marking a moment
and typing its text are two steps: ``mark()`` holds a pending position,
``submit()`` turns it into a note.
"""

from __future__ import annotations

import bisect
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator


class AnalysisMode(str, Enum):
    BODY = "body"
    LINGUISTIC = "linguistic"
    FULL = "full"

    @property
    def label(self) -> str:
        return _MODE_LABELS[self]

    @classmethod
    def parse(cls, value: str | AnalysisMode | None) -> AnalysisMode:
        """Return the mode for *value*; None gives FULL."""
        if value is None:
            return cls.FULL
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown analysis mode {value!r} (expected one of: {valid})") from None


_MODE_LABELS = {
    AnalysisMode.BODY: "Body Language",
    AnalysisMode.LINGUISTIC: "Linguistic",
    AnalysisMode.FULL: "Full Analysis",
}


@dataclass
class Note:
    id: int
    timestamp: float  # seconds into the video
    text: str
    mode: AnalysisMode

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "text": self.text,
            "mode": self.mode.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Note:
        return cls(
            id=int(data["id"]),
            timestamp=float(data["timestamp"]),
            text=str(data["text"]),
            mode=AnalysisMode.parse(data.get("mode")),
        )


@dataclass(frozen=True)
class PendingMark:
    """A captured playback position waiting for its note text."""

    position: float


def format_timestamp(seconds: float) -> str:
    """Format *seconds* as ``m:ss``, truncating fractional seconds."""
    mins, secs = divmod(int(seconds), 60)
    return f"{mins}:{secs:02d}"


def _check_position(value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0:
        raise ValueError(f"Timestamp must be a finite, non-negative number of seconds, got {value!r}")
    return value


@dataclass
class NoteTimeline:
    """Time-ordered notes for the currently active video."""

    _notes: list[Note] = field(default_factory=list)
    _keys: list[float] = field(default_factory=list)
    _next_id: int = 1
    _pending: PendingMark | None = None

    def mark(self, position: float) -> PendingMark:
        """Capture *position* for the next note. A second mark replaces the first."""
        self._pending = PendingMark(_check_position(position))
        return self._pending

    def cancel(self) -> None:
        self._pending = None

    @property
    def pending(self) -> PendingMark | None:
        return self._pending

    @property
    def awaiting_text(self) -> bool:
        return self._pending is not None

    def add_note(self, timestamp: float, text: str, mode: AnalysisMode) -> list[Note]:
        """Insert a note, keeping ascending timestamp order.

        Empty or whitespace-only *text* is ignored. Notes with equal
        timestamps keep their insertion order.
        """
        text = text.strip()
        if not text:
            return self.notes
        timestamp = _check_position(timestamp)
        note = Note(id=self._next_id, timestamp=timestamp, text=text, mode=AnalysisMode.parse(mode))
        self._next_id += 1
        pos = bisect.bisect_right(self._keys, timestamp)
        self._keys.insert(pos, timestamp)
        self._notes.insert(pos, note)
        return self.notes

    def submit(self, text: str, mode: AnalysisMode) -> list[Note]:
        """Turn the pending mark into a note. Stays pending if *text* is empty."""
        if self._pending is None or not text.strip():
            return self.notes
        notes = self.add_note(self._pending.position, text, mode)
        self._pending = None
        return notes

    def delete_note(self, note_id: int) -> None:
        for i, note in enumerate(self._notes):
            if note.id == note_id:
                del self._notes[i]
                del self._keys[i]
                return

    def restore(self, notes: list[Note]) -> None:
        """Replace the timeline with previously saved *notes*.

        Raises ValueError for an invalid timestamp or a repeated id; the
        timeline is left untouched in that case.
        """
        seen: set[int] = set()
        for note in notes:
            _check_position(note.timestamp)
            if note.id in seen:
                raise ValueError(f"Duplicate note id {note.id}")
            seen.add(note.id)
        self.clear()
        ordered = sorted(notes, key=lambda n: n.timestamp)
        self._notes = list(ordered)
        self._keys = [n.timestamp for n in ordered]
        self._next_id = max([self._next_id, *(n.id + 1 for n in ordered)])

    def clear(self) -> None:
        self._notes.clear()
        self._keys.clear()
        self._pending = None

    @property
    def notes(self) -> list[Note]:
        return list(self._notes)

    def __len__(self) -> int:
        return len(self._notes)

    def __iter__(self) -> Iterator[Note]:
        return iter(self.notes)
