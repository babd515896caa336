"""Tests for notes module."""

import math

import pytest

from vidnote.notes import AnalysisMode, Note, NoteTimeline, format_timestamp


class TestAddNote:
    def test_notes_sorted_regardless_of_insertion_order(self):
        tl = NoteTimeline()
        for ts in [12.5, 3.0, 40.0]:
            tl.add_note(ts, f"at {ts}", AnalysisMode.FULL)
        assert [n.timestamp for n in tl.notes] == [3.0, 12.5, 40.0]

    def test_many_random_timestamps_stay_sorted(self):
        tl = NoteTimeline()
        stamps = [7.0, 0.0, 99.9, 3.3, 3.3, 50.0, 1.0, 75.5, 20.0]
        for ts in stamps:
            tl.add_note(ts, "x", AnalysisMode.BODY)
        assert [n.timestamp for n in tl.notes] == sorted(stamps)

    def test_equal_timestamps_keep_insertion_order(self):
        tl = NoteTimeline()
        tl.add_note(5.0, "first", AnalysisMode.FULL)
        tl.add_note(1.0, "earlier", AnalysisMode.FULL)
        tl.add_note(5.0, "second", AnalysisMode.FULL)
        assert [n.text for n in tl.notes] == ["earlier", "first", "second"]

    def test_returns_snapshot(self):
        tl = NoteTimeline()
        snapshot = tl.add_note(1.0, "a", AnalysisMode.FULL)
        snapshot.clear()
        assert len(tl) == 1

    def test_text_is_trimmed_and_mode_stamped(self):
        tl = NoteTimeline()
        tl.add_note(2.0, "  looks away  ", AnalysisMode.BODY)
        note = tl.notes[0]
        assert note.text == "looks away"
        assert note.mode is AnalysisMode.BODY

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_blank_text_is_ignored(self, text):
        tl = NoteTimeline()
        tl.add_note(1.0, "kept", AnalysisMode.FULL)
        tl.add_note(2.0, text, AnalysisMode.FULL)
        assert len(tl) == 1

    @pytest.mark.parametrize("ts", [-1.0, math.inf, math.nan])
    def test_invalid_timestamp_rejected(self, ts):
        tl = NoteTimeline()
        with pytest.raises(ValueError):
            tl.add_note(ts, "bad", AnalysisMode.FULL)
        assert len(tl) == 0

    def test_timestamp_not_clamped(self):
        tl = NoteTimeline()
        tl.add_note(100000.0, "way past the end", AnalysisMode.FULL)
        assert tl.notes[0].timestamp == 100000.0

    def test_ids_are_unique(self):
        tl = NoteTimeline()
        for i in range(5):
            tl.add_note(float(i), "n", AnalysisMode.FULL)
        assert len({n.id for n in tl.notes}) == 5


class TestDeleteNote:
    def test_delete_existing(self):
        tl = NoteTimeline()
        tl.add_note(1.0, "a", AnalysisMode.FULL)
        tl.add_note(2.0, "b", AnalysisMode.FULL)
        target = tl.notes[0].id
        tl.delete_note(target)
        assert [n.text for n in tl.notes] == ["b"]

    def test_delete_missing_is_noop(self):
        tl = NoteTimeline()
        tl.add_note(1.0, "a", AnalysisMode.FULL)
        before = tl.notes
        tl.delete_note(9999)
        assert tl.notes == before

    def test_sorted_after_delete_and_add(self):
        tl = NoteTimeline()
        tl.add_note(10.0, "a", AnalysisMode.FULL)
        tl.add_note(20.0, "b", AnalysisMode.FULL)
        tl.delete_note(tl.notes[0].id)
        tl.add_note(15.0, "c", AnalysisMode.FULL)
        tl.add_note(5.0, "d", AnalysisMode.FULL)
        assert [n.timestamp for n in tl.notes] == [5.0, 15.0, 20.0]


class TestPendingMark:
    def test_mark_does_not_mutate_timeline(self):
        tl = NoteTimeline()
        mark = tl.mark(12.0)
        assert mark.position == 12.0
        assert tl.awaiting_text
        assert len(tl) == 0

    def test_last_mark_wins(self):
        tl = NoteTimeline()
        tl.mark(5.0)
        tl.mark(8.0)
        tl.submit("note", AnalysisMode.FULL)
        assert tl.notes[0].timestamp == 8.0

    def test_submit_returns_to_idle(self):
        tl = NoteTimeline()
        tl.mark(3.0)
        tl.submit("crosses arms", AnalysisMode.BODY)
        assert not tl.awaiting_text
        assert tl.pending is None
        assert tl.notes[0].text == "crosses arms"

    def test_submit_blank_text_stays_pending(self):
        tl = NoteTimeline()
        tl.mark(3.0)
        tl.submit("   ", AnalysisMode.FULL)
        assert tl.awaiting_text
        assert len(tl) == 0

    def test_submit_without_mark_is_noop(self):
        tl = NoteTimeline()
        tl.submit("orphan", AnalysisMode.FULL)
        assert len(tl) == 0

    def test_cancel(self):
        tl = NoteTimeline()
        tl.mark(3.0)
        tl.cancel()
        assert not tl.awaiting_text

    def test_negative_mark_rejected(self):
        tl = NoteTimeline()
        with pytest.raises(ValueError):
            tl.mark(-0.5)


class TestClearAndRestore:
    def test_clear(self):
        tl = NoteTimeline()
        tl.add_note(1.0, "a", AnalysisMode.FULL)
        tl.mark(2.0)
        tl.clear()
        assert len(tl) == 0
        assert not tl.awaiting_text

    def test_ids_not_reused_after_clear(self):
        tl = NoteTimeline()
        tl.add_note(1.0, "a", AnalysisMode.FULL)
        first_id = tl.notes[0].id
        tl.clear()
        tl.add_note(1.0, "b", AnalysisMode.FULL)
        assert tl.notes[0].id != first_id

    def test_restore_sorts_and_advances_ids(self):
        tl = NoteTimeline()
        tl.restore([
            Note(id=7, timestamp=30.0, text="late", mode=AnalysisMode.FULL),
            Note(id=3, timestamp=10.0, text="early", mode=AnalysisMode.BODY),
        ])
        assert [n.text for n in tl.notes] == ["early", "late"]
        tl.add_note(20.0, "new", AnalysisMode.FULL)
        assert tl.notes[1].id > 7

    @pytest.mark.parametrize("timestamp", [-5.0, math.nan, math.inf])
    def test_restore_rejects_invalid_timestamp(self, timestamp):
        tl = NoteTimeline()
        tl.add_note(1.0, "kept", AnalysisMode.FULL)
        with pytest.raises(ValueError):
            tl.restore([Note(id=1, timestamp=timestamp, text="bad", mode=AnalysisMode.FULL)])
        assert [n.text for n in tl.notes] == ["kept"]

    def test_restore_rejects_duplicate_ids(self):
        tl = NoteTimeline()
        with pytest.raises(ValueError, match="Duplicate note id 4"):
            tl.restore([
                Note(id=4, timestamp=1.0, text="a", mode=AnalysisMode.FULL),
                Note(id=4, timestamp=2.0, text="b", mode=AnalysisMode.FULL),
            ])
        assert len(tl) == 0


class TestFormatTimestamp:
    def test_zero(self):
        assert format_timestamp(0) == "0:00"

    def test_over_a_minute(self):
        assert format_timestamp(65) == "1:05"

    def test_truncates_not_rounds(self):
        assert format_timestamp(59.9) == "0:59"

    def test_long_video(self):
        assert format_timestamp(3725) == "62:05"


class TestAnalysisMode:
    def test_parse(self):
        assert AnalysisMode.parse("Body") is AnalysisMode.BODY
        assert AnalysisMode.parse(None) is AnalysisMode.FULL

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            AnalysisMode.parse("audio")

    def test_labels(self):
        assert AnalysisMode.LINGUISTIC.label == "Linguistic"


class TestNoteDict:
    def test_from_dict(self):
        note = Note.from_dict({"id": "4", "timestamp": "12.5", "text": "hi", "mode": "linguistic"})
        assert note == Note(id=4, timestamp=12.5, text="hi", mode=AnalysisMode.LINGUISTIC)
