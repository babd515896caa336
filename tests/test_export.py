"""Tests for the export pipeline and webhook transport."""

from unittest.mock import Mock

import pytest
import requests

from vidnote.errors import TransportError, ValidationError
from vidnote.export import (
    WebhookTransport,
    build_payload,
    export_notes,
    transport_from_config,
)
from vidnote.notes import AnalysisMode, NoteTimeline
from vidnote.sources import VideoDescriptor


def _video(**overrides) -> VideoDescriptor:
    fields = {"id": "dQw4w9WgXcQ", "title": "Interview part 1", "url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ"}
    fields.update(overrides)
    return VideoDescriptor(**fields)


def _timeline() -> NoteTimeline:
    tl = NoteTimeline()
    tl.add_note(12.5, "pauses", AnalysisMode.BODY)
    tl.add_note(3.0, "smiles", AnalysisMode.BODY)
    return tl


def _response(status: int = 200, body=None, json_error: bool = False) -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    if json_error:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


class RecordingTransport:
    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[dict] = []
        self.error = error

    def send(self, payload: dict) -> None:
        self.calls.append(payload)
        if self.error:
            raise self.error


class TestBuildPayload:
    def test_shape(self):
        payload = build_payload(_video(), AnalysisMode.BODY, _timeline().notes).to_dict()
        assert payload == {
            "videoTitle": "Interview part 1",
            "videoUrl": "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "mode": "body",
            "notes": [
                {"timestamp": 3.0, "text": "smiles"},
                {"timestamp": 12.5, "text": "pauses"},
            ],
        }

    def test_note_ids_and_modes_not_forwarded(self):
        payload = build_payload(_video(), AnalysisMode.FULL, _timeline().notes).to_dict()
        for note in payload["notes"]:
            assert set(note) == {"timestamp", "text"}

    def test_url_falls_back_to_watch_url(self):
        payload = build_payload(_video(url=""), AnalysisMode.FULL, _timeline().notes)
        assert payload.video_url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

    def test_missing_video_id(self):
        with pytest.raises(ValidationError, match="invalid video data"):
            build_payload(_video(id=""), AnalysisMode.FULL, _timeline().notes)

    def test_missing_video(self):
        with pytest.raises(ValidationError, match="invalid video data"):
            build_payload(None, AnalysisMode.FULL, _timeline().notes)

    def test_no_notes(self):
        with pytest.raises(ValidationError, match="no notes to export"):
            build_payload(_video(), AnalysisMode.FULL, [])


class TestExportNotes:
    def test_zero_notes_makes_no_call(self):
        transport = RecordingTransport()
        with pytest.raises(ValidationError):
            export_notes(_video(), AnalysisMode.FULL, [], transport)
        assert len(transport.calls) == 0

    def test_invalid_video_makes_no_call(self):
        transport = RecordingTransport()
        with pytest.raises(ValidationError):
            export_notes(_video(title=""), AnalysisMode.FULL, _timeline().notes, transport)
        assert transport.calls == []

    def test_success_sends_once(self):
        transport = RecordingTransport()
        assert export_notes(_video(), AnalysisMode.LINGUISTIC, _timeline().notes, transport) is True
        assert len(transport.calls) == 1
        assert transport.calls[0]["mode"] == "linguistic"

    def test_transport_error_is_false_and_timeline_unchanged(self):
        tl = _timeline()
        before = tl.notes
        transport = RecordingTransport(error=TransportError("boom", status_code=500))
        assert export_notes(_video(), AnalysisMode.FULL, tl.notes, transport) is False
        assert len(transport.calls) == 1
        assert tl.notes == before

    def test_payload_is_snapshot_before_send(self):
        tl = _timeline()

        class MutatingTransport(RecordingTransport):
            def send(self, payload):
                tl.add_note(1.0, "added while in flight", AnalysisMode.FULL)
                super().send(payload)

        transport = MutatingTransport()
        export_notes(_video(), AnalysisMode.FULL, tl.notes, transport)
        assert [n["text"] for n in transport.calls[0]["notes"]] == ["smiles", "pauses"]
        assert len(tl) == 3


class TestWebhookTransport:
    def test_posts_json(self):
        session = Mock()
        session.post.return_value = _response(200, {"success": True})
        WebhookTransport("https://hooks.example/abc", session=session).send({"a": 1})
        session.post.assert_called_once_with("https://hooks.example/abc", json={"a": 1}, timeout=None)

    def test_success_false(self):
        session = Mock()
        session.post.return_value = _response(200, {"success": False})
        with pytest.raises(TransportError):
            WebhookTransport("https://hooks.example/abc", session=session).send({})

    def test_missing_success_flag(self):
        session = Mock()
        session.post.return_value = _response(200, {"status": "ok"})
        with pytest.raises(TransportError):
            WebhookTransport("https://hooks.example/abc", session=session).send({})

    def test_http_500(self):
        session = Mock()
        session.post.return_value = _response(500, {"error": "Zapier responded with status: 500"})
        with pytest.raises(TransportError) as excinfo:
            WebhookTransport("https://hooks.example/abc", session=session).send({})
        assert excinfo.value.status_code == 500
        assert "500" in str(excinfo.value)

    def test_non_json_body(self):
        session = Mock()
        session.post.return_value = _response(200, json_error=True)
        with pytest.raises(TransportError):
            WebhookTransport("https://hooks.example/abc", session=session).send({})

    def test_network_error(self):
        session = Mock()
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(TransportError, match="refused"):
            WebhookTransport("https://hooks.example/abc", session=session).send({})

    def test_export_with_http_500_is_false(self):
        session = Mock()
        session.post.return_value = _response(500, None)
        transport = WebhookTransport("https://hooks.example/abc", session=session)
        assert export_notes(_video(), AnalysisMode.FULL, _timeline().notes, transport) is False
        assert session.post.call_count == 1


class TestTransportFromConfig:
    def test_missing_url(self):
        with pytest.raises(ValidationError, match="webhook URL not configured"):
            transport_from_config({"webhook_url": None})

    def test_builds_transport(self):
        transport = transport_from_config({"webhook_url": " https://hooks.example/x "})
        assert transport.url == "https://hooks.example/x"
