"""Export pipeline: snapshot the note timeline and POST it to a webhook.

Key rule: the payload is built from the timeline before any network call,
and each export makes exactly one delivery attempt.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import requests

from vidnote.errors import TransportError, ValidationError
from vidnote.notes import AnalysisMode, Note
from vidnote.sources import VideoDescriptor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExportPayload:
    video_title: str
    video_url: str
    mode: AnalysisMode
    notes: tuple[tuple[float, str], ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "videoTitle": self.video_title,
            "videoUrl": self.video_url,
            "mode": self.mode.value,
            "notes": [{"timestamp": ts, "text": text} for ts, text in self.notes],
        }


class Transport(Protocol):
    def send(self, payload: dict[str, Any]) -> None:
        """Deliver *payload*; raise TransportError on any failure."""


def build_payload(
    video: VideoDescriptor | None,
    mode: AnalysisMode,
    notes: list[Note],
) -> ExportPayload:
    """Build the export envelope; raise ValidationError if preconditions fail."""
    if video is None or not video.id or not video.title:
        raise ValidationError("invalid video data")
    if not notes:
        raise ValidationError("no notes to export")

    return ExportPayload(
        video_title=video.title,
        video_url=video.url or video.watch_url,
        mode=AnalysisMode.parse(mode),
        notes=tuple((note.timestamp, note.text) for note in notes),
    )


def export_notes(
    video: VideoDescriptor | None,
    mode: AnalysisMode,
    notes: list[Note],
    transport: Transport,
) -> bool:
    """Send the notes to *transport* once. Returns True on success.

    ValidationError propagates without any call to *transport*; delivery
    failures are logged and reported as False.
    """
    payload = build_payload(video, mode, notes).to_dict()
    logger.info(
        "Exporting %d notes for %r (mode=%s)",
        len(payload["notes"]),
        payload["videoTitle"],
        payload["mode"],
    )
    try:
        transport.send(payload)
    except TransportError as exc:
        logger.error("Export failed: %s", exc)
        return False
    logger.info("Export delivered")
    return True


class WebhookTransport:
    """POST the payload as JSON; the sink must answer ``{"success": true}``."""

    def __init__(
        self,
        url: str,
        session: requests.Session | None = None,
        timeout: float | None = None,
    ) -> None:
        self.url = url
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, payload: dict[str, Any]) -> None:
        try:
            resp = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            raise TransportError(f"Webhook request failed: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok:
            detail = body.get("error") if isinstance(body, dict) else None
            raise TransportError(
                detail or f"Webhook responded with status: {resp.status_code}",
                status_code=resp.status_code,
            )
        if not isinstance(body, dict) or body.get("success") is not True:
            logger.debug("Webhook response without success flag: %r", body)
            raise TransportError("Webhook indicated failure in response", status_code=resp.status_code)


def transport_from_config(cfg: dict[str, Any], session: requests.Session | None = None) -> WebhookTransport:
    url = (cfg.get("webhook_url") or "").strip()
    if not url:
        raise ValidationError("webhook URL not configured")
    return WebhookTransport(url, session=session)
