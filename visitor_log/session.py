"""
Session state for one running Visitor Log window.

Holds what the UI needs between events: the database, the visitor currently
selected, and the CSV file exports go to. Every action returns an
OperationResult instead of raising, so the window only has to show the
message.
"""

import logging
import os
import threading
from dataclasses import dataclass, field

from visitor_log import config
from visitor_log.database import Database
from visitor_log.errors import (
    NoTargetFile,
    NotFound,
    PersistenceFailure,
    TransactionAborted,
)
from visitor_log.exporter import NO_TARGET_MESSAGE, merge_general_notes, upsert_and_save_csv
from visitor_log.importer import import_csv_text
from visitor_log.search import search_visitors, suggest_visitors

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    success: bool
    message: str
    visitor: object = None
    count: int = 0
    details: list = field(default_factory=list)


class Session:
    """Explicit replacement for the app-wide globals (db, selection, file path)."""

    def __init__(self, db: Database, unban_password=None):
        self.db = db
        self.selected_id = None
        self.target_path = None
        self.unban_password = config.unban_password() if unban_password is None else unban_password
        self._lock = threading.Lock()

    @property
    def selected(self):
        if self.selected_id is None:
            return None
        return self.db.get(self.selected_id)

    def select(self, visitor_id):
        """Make a visitor the current one; None clears the selection."""
        if visitor_id is not None and self.db.get(visitor_id) is None:
            return OperationResult(False, "Selected visitor not found.")
        self.selected_id = visitor_id
        return OperationResult(True, "", visitor=self.selected)

    # Import

    def open_csv(self, path):
        """Read a CSV chosen by the user, remember it for exports, import it."""
        try:
            with open(path, newline="", encoding="utf-8-sig") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.exception("Error reading file %s", path)
            return OperationResult(False, f"Could not read {os.path.basename(path)}: {e}")
        self.target_path = path
        return self.import_text(text)

    def import_text(self, text):
        with self._lock:
            try:
                report = import_csv_text(text, self.db)
            except (TransactionAborted, PersistenceFailure):
                logger.exception("Error during CSV import")
                return OperationResult(False, "Failed to import data.")
        return OperationResult(
            True,
            f"Successfully imported {report.accepted} visitor(s).",
            count=report.accepted,
            details=[f"Row {n}: {reason}" for n, reason in report.rejected],
        )

    # Search

    def search(self, query):
        """Search by name. An exact full-name hit becomes the selection."""
        result = search_visitors(self.db.all(), query)
        if result.exact is not None:
            self.selected_id = result.exact.id
        elif not result.candidates:
            self.selected_id = None
        return result

    def suggestions(self, query, limit=5):
        return suggest_visitors(self.db.all(), query, limit=limit)

    # Status and notes

    def ban(self, notes=""):
        return self._update_status(True, notes, "Visitor status updated successfully!")

    def unban(self, password):
        if password != self.unban_password:
            return OperationResult(False, "Incorrect password.")
        return self._update_status(False, "", "Visitor has been unbanned.")

    def _update_status(self, banned, notes, message):
        if self.selected_id is None:
            return OperationResult(False, "Please search for a visitor first.")
        with self._lock:
            try:
                visitor = self.db.update_status(self.selected_id, banned, notes)
            except NotFound:
                return OperationResult(False, "Selected visitor not found.")
            except (TransactionAborted, PersistenceFailure):
                logger.exception("Error updating visitor status")
                return OperationResult(False, "Failed to update visitor status.")
        return OperationResult(True, message, visitor=visitor)

    def save_general_notes(self, notes):
        if self.selected_id is None:
            return OperationResult(False, "Please search for a visitor first.")
        with self._lock:
            try:
                visitor = self.db.update_general_notes(self.selected_id, notes)
            except NotFound:
                return OperationResult(False, "Selected visitor not found.")
            except (TransactionAborted, PersistenceFailure):
                logger.exception("Error updating general notes")
                return OperationResult(False, "Failed to save notes.")
        return OperationResult(True, "Notes saved successfully!", visitor=visitor)

    # Export

    def export_selected(self, general_notes):
        """Save the selected visitor, with the notes being edited, to the CSV file.

        The notes are committed to the database first so the store stays the
        single source of truth and the file only ever receives stored data.
        """
        if self.selected_id is None:
            return OperationResult(False, "Please search for and select a visitor to export.")
        with self._lock:
            try:
                if not self.target_path:
                    raise NoTargetFile(NO_TARGET_MESSAGE)
                stored = self.db.require(self.selected_id)
                if stored.generalNotes != (general_notes or "").strip():
                    stored = self.db.update_general_notes(stored.id, general_notes)
            except NoTargetFile as e:
                return OperationResult(False, f"Export failed: {e}")
            except NotFound:
                return OperationResult(False, "Selected visitor not found.")
            except (TransactionAborted, PersistenceFailure):
                logger.exception("Error saving notes before export")
                return OperationResult(False, "An error occurred during export.")

            result = upsert_and_save_csv(self.target_path, merge_general_notes(stored, general_notes))
        if not result.success:
            return OperationResult(False, f"Export failed: {result.error}")
        return OperationResult(True, "Visitor data updated in CSV successfully!", visitor=stored)

    # Clipboard

    def clipboard_summary(self):
        """One-line-per-field summary of the selected visitor, or ''."""
        v = self.selected
        if v is None:
            return ""
        lines = [
            v.full_name,
            f"Flat: {v.flatNumber or 'N/A'}",
            f"Phone: {v.phoneNumber or 'N/A'}",
            f"Date of Birth: {v.dateOfBirth or 'N/A'}",
            f"Status: {'BANNED' if v.isBanned else 'CLEARED'}",
        ]
        if v.notes:
            lines.append(f"Notes: {v.notes}")
        return "\n".join(lines)
