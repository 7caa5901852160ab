"""Tests for writing single visitors back to the external CSV."""
from visitor_log import exporter
from visitor_log.csv_codec import parse_csv
from visitor_log.exporter import (
    NO_TARGET_MESSAGE,
    merge_general_notes,
    upsert_and_save_csv,
    upsert_rows,
)
from visitor_log.models import CANONICAL_COLUMNS, Visitor

JANE = Visitor(id="v1", firstName="Jane", lastName="Doe", notes="new", generalNotes="hello")


def test_merge_general_notes_returns_a_copy():
    stored = Visitor(id="v1", firstName="Jane", lastName="Doe", generalNotes="old")
    merged = merge_general_notes(stored, "typed just now")
    assert merged.generalNotes == "typed just now"
    assert stored.generalNotes == "old"
    assert merged.id == stored.id


def test_upsert_rows_replaces_by_trimmed_id():
    rows = [{"id": " v1 ", "x": "a"}, {"id": "v2", "x": "b"}]
    out = upsert_rows(rows, {"id": "v1", "x": "c"})
    assert out == [{"id": "v1", "x": "c"}, {"id": "v2", "x": "b"}]
    assert rows[0]["x"] == "a"


def test_upsert_rows_appends_unknown_id():
    out = upsert_rows([{"id": "v1"}], {"id": "v2"})
    assert [r["id"] for r in out] == ["v1", "v2"]


def test_save_without_target_file():
    result = upsert_and_save_csv(None, JANE)
    assert not result.success
    assert result.error == NO_TARGET_MESSAGE


def test_save_updates_existing_row_in_canonical_order(write_csv):
    path = write_csv(
        "visitorId,lastName,firstName,notes\n"
        "v1,Doe,Jane,old\n"
        'v2,Smith,Janet,"likes, commas"\n'
    )

    result = upsert_and_save_csv(path, JANE)

    assert result.success
    text = path.read_text(encoding="utf-8")
    assert text.splitlines()[0] == ",".join(CANONICAL_COLUMNS)
    rows = parse_csv(text)
    assert [r["id"] for r in rows] == ["v1", "v2"]
    assert rows[0]["notes"] == "new"
    assert rows[0]["generalNotes"] == "hello"
    assert rows[0]["isBanned"] == "0"
    assert rows[1]["notes"] == "likes, commas"
    assert rows[1]["firstName"] == "Janet"


def test_save_appends_new_visitor(write_csv):
    path = write_csv("id,firstName,lastName\nv2,Janet,Smith\n")

    assert upsert_and_save_csv(path, JANE).success

    rows = parse_csv(path.read_text(encoding="utf-8"))
    assert [r["id"] for r in rows] == ["v2", "v1"]


def test_save_reports_missing_file(tmp_path):
    result = upsert_and_save_csv(tmp_path / "gone.csv", JANE)
    assert not result.success
    assert result.error


def test_failed_write_leaves_file_intact(write_csv, monkeypatch):
    original = "id,firstName,lastName\nv1,Jane,Doe\nv2,Janet,Smith\n"
    path = write_csv(original)

    def disk_full(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(exporter.os, "replace", disk_full)

    result = upsert_and_save_csv(path, JANE)

    assert not result.success
    assert "No space left" in result.error
    assert path.read_text(encoding="utf-8") == original
    assert sorted(p.name for p in path.parent.iterdir()) == ["visitors.csv"]
