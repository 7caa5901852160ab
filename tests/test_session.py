"""Tests for the session object the window drives."""
import pytest

import visitor_log.session as session_module
from visitor_log.csv_codec import parse_csv
from visitor_log.errors import TransactionAborted
from visitor_log.models import Visitor
from visitor_log.session import Session


@pytest.fixture
def session(db) -> Session:
    return Session(db, unban_password="letmein")


@pytest.fixture
def opened(session, write_csv, sample_csv):
    """Session with the sample CSV opened and Jane Doe selected."""

    session.open_csv(write_csv(sample_csv))
    session.search("jane doe")
    return session


def test_open_csv_imports_and_remembers_path(session, write_csv, sample_csv):
    path = write_csv(sample_csv)

    result = session.open_csv(path)

    assert result.success
    assert result.message == "Successfully imported 2 visitor(s)."
    assert session.target_path == path
    assert len(session.db.all()) == 2


def test_open_csv_reports_skipped_rows(session, write_csv):
    result = session.open_csv(write_csv("id,firstName,lastName\nv1,Jane,Doe\nv2,,Smith\n"))
    assert result.count == 1
    assert result.details == ["Row 2: missing firstName or lastName"]


def test_open_missing_file(session, tmp_path):
    result = session.open_csv(tmp_path / "nope.csv")
    assert not result.success
    assert session.target_path is None


def test_failed_import_is_reported(session, monkeypatch):
    def explode(text, db):
        raise TransactionAborted("rolled back", cause=RuntimeError("x"))

    monkeypatch.setattr(session_module, "import_csv_text", explode)
    result = session.import_text("id,firstName,lastName\nv1,Jane,Doe")
    assert not result.success
    assert result.message == "Failed to import data."


def test_exact_search_selects_visitor(opened):
    assert opened.selected_id == "v1"
    opened.search("")
    assert opened.selected_id is None


def test_select_unknown_visitor(session):
    result = session.select("ghost")
    assert not result.success
    assert session.selected_id is None


def test_ban_then_read_back(opened):
    result = opened.ban("trespass")

    assert result.success
    stored = opened.db.get("v1")
    assert stored.isBanned is True
    assert stored.notes == "trespass"


def test_unban_needs_password_and_clears_notes(opened):
    opened.ban("trespass")

    wrong = opened.unban("guess")
    assert wrong.message == "Incorrect password."
    assert opened.db.get("v1").isBanned is True

    right = opened.unban("letmein")
    assert right.success
    assert opened.db.get("v1").isBanned is False
    assert opened.db.get("v1").notes == ""


def test_actions_need_a_selection(session):
    assert session.ban("x").message == "Please search for a visitor first."
    assert session.save_general_notes("x").message == "Please search for a visitor first."
    assert not session.export_selected("x").success


def test_status_update_failure_keeps_state(opened, snapshots):
    snapshots.fail = True
    result = opened.ban("trespass")
    assert not result.success
    assert result.message == "Failed to update visitor status."
    assert opened.db.get("v1").isBanned is False


def test_save_general_notes(opened):
    result = opened.save_general_notes("Prefers the side entrance")
    assert result.success
    assert opened.db.get("v1").generalNotes == "Prefers the side entrance"


def test_export_without_file(db):
    session = Session(db)
    db.upsert(Visitor(id="v1", firstName="Jane", lastName="Doe"))
    session.select("v1")

    result = session.export_selected("notes")

    assert not result.success
    assert result.message == "Export failed: No file has been selected for saving yet."
    assert db.get("v1").generalNotes == ""


def test_export_writes_file_and_store(opened):
    result = opened.export_selected("Escort to lift")

    assert result.success
    rows = parse_csv(opened.target_path.read_text(encoding="utf-8"))
    jane = next(r for r in rows if r["id"] == "v1")
    assert jane["generalNotes"] == "Escort to lift"
    assert opened.db.get("v1").generalNotes == "Escort to lift"


def test_clipboard_summary(opened):
    opened.ban("trespass")
    summary = opened.clipboard_summary()
    assert summary.splitlines()[0] == "Jane Doe"
    assert "Status: BANNED" in summary
    assert "Notes: trespass" in summary
