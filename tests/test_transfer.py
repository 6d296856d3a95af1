"""バックアップのエクスポート/インポートを検証するテスト。"""

import json

import anyio
from structlog.testing import capture_logs

from spaced_repetition import FixedClock, MemoryBackend, ReviewScheduler, ScriptedPrompter
from spaced_repetition.transfer import backup_filename


def _seed(scheduler: ReviewScheduler, clock: FixedClock) -> None:
    scheduler.save_item("a1", "vocab", 1, {"english": "cat", "arabic": "قطة"})
    clock.advance(minutes=5)
    scheduler.save_item("b2", "sentence", 4, {"english": "It depends."})
    scheduler.review_item("a1_vocab_1", remembered=True)


def test_backup_filename_uses_iso_date(clock):
    assert backup_filename(clock.now().date()) == "spaced-repetition-backup-2026-01-10.json"


def test_export_writes_pretty_printed_store(scheduler, clock, tmp_path):
    _seed(scheduler, clock)

    path = scheduler.export_data(tmp_path / "exports")

    assert path.name == "spaced-repetition-backup-2026-01-10.json"
    text = path.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert "قطة" in text
    assert set(json.loads(text)) == {"a1_vocab_1", "b2_sentence_4"}


def test_export_then_import_reproduces_store(scheduler, clock, tmp_path):
    _seed(scheduler, clock)
    path = scheduler.export_data(tmp_path)

    prompter = ScriptedPrompter([True])
    restored = ReviewScheduler(MemoryBackend(), clock=clock, prompter=prompter)
    restored.save_item("c1", "vocab", 99, {"english": "to be replaced"})

    assert anyio.run(restored.import_data, path) is True
    assert restored.load() == scheduler.load()
    assert len(prompter.confirmations) == 1


def test_import_declined_keeps_existing_store(scheduler, clock, tmp_path):
    _seed(scheduler, clock)
    path = scheduler.export_data(tmp_path)

    other = ReviewScheduler(MemoryBackend(), clock=clock, prompter=ScriptedPrompter([False]))
    other.save_item("c1", "vocab", 99, {"english": "keep me"})

    assert anyio.run(other.import_data, path) is False
    assert list(other.load()) == ["c1_vocab_99"]


def test_import_malformed_json_alerts_and_keeps_state(scheduler, prompter, clock):
    scheduler.save_item("a1", "vocab", 1, {"english": "cat"})

    with capture_logs() as logs:
        assert scheduler.import_text("{broken", source="backup.json") is False

    assert list(scheduler.load()) == ["a1_vocab_1"]
    assert len(prompter.alerts) == 1
    assert prompter.confirmations == []
    assert any(
        entry["event"] == "store_import_failed" and entry["log_level"] == "error" for entry in logs
    )


def test_import_rejects_non_object_shapes(scheduler, prompter):
    for text in ("[1, 2, 3]", '"text"', "null", "", '{"a1_vocab_1": {"level": "a1"}}'):
        assert scheduler.import_text(text) is False

    assert len(prompter.alerts) == 5
    assert prompter.confirmations == []


def _entry(level: str, item_type: str, item_id: int, **overrides: object) -> dict:
    entry = {
        "level": level,
        "type": item_type,
        "id": item_id,
        "data": {"english": "cat"},
        "savedDate": "2026-01-01T00:00:00Z",
        "lastReviewed": None,
        "reviewCount": 0,
        "nextReviewDate": "2026-01-02T00:00:00Z",
        "lastModified": "2026-01-01T00:00:00Z",
    }
    entry.update(overrides)
    return entry


def test_import_rejects_timestamps_without_timezone(scheduler, prompter):
    """タイムゾーン無しの日時は UTC の時計と比較できないため形式エラーにする。"""

    scheduler.save_item("a1", "vocab", 2, {"english": "dog"})
    text = json.dumps({"a1_vocab_1": _entry("a1", "vocab", 1, nextReviewDate="2026-01-02T00:00:00")})

    assert scheduler.import_text(text) is False
    assert len(prompter.alerts) == 1
    assert prompter.confirmations == []
    assert list(scheduler.load()) == ["a1_vocab_2"]
    assert scheduler.get_due_items() == []


def test_import_accepts_timestamps_with_offset(scheduler, prompter, clock):
    prompter.default = True
    text = json.dumps(
        {"a1_vocab_1": _entry("a1", "vocab", 1, nextReviewDate="2026-01-02T09:00:00+09:00")}
    )

    assert scheduler.import_text(text) is True
    assert [item.key for item in scheduler.get_due_items()] == ["a1_vocab_1"]


def test_import_rejects_key_that_disagrees_with_item_identity(scheduler, prompter):
    """キーと level/type/id が食い違うアイテムは取り込まない。"""

    text = json.dumps({"a1_vocab_1": _entry("b2", "sentence", 5)})

    assert scheduler.import_text(text) is False
    assert len(prompter.alerts) == 1
    assert prompter.confirmations == []
    assert scheduler.load() == {}
    assert scheduler.remove_item("b2", "sentence", 5) is False


def test_import_missing_file_alerts(scheduler, prompter, tmp_path):
    assert anyio.run(scheduler.import_data, tmp_path / "missing.json") is False
    assert len(prompter.alerts) == 1


def test_import_empty_object_clears_store_after_confirmation(scheduler, prompter):
    scheduler.save_item("a1", "vocab", 1, {"english": "cat"})
    prompter.default = True

    assert scheduler.import_text("{}") is True
    assert scheduler.load() == {}
