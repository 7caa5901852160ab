"""
CSV importer for Visitor Log.

Reads a visitor CSV and upserts every usable row into the database in a
single transaction. Rows without a first or last name are skipped and
reported; anything else going wrong rolls the whole import back.
"""

import logging
import uuid
from dataclasses import dataclass, field

from visitor_log.csv_codec import parse_csv
from visitor_log.database import Database
from visitor_log.errors import MalformedInput
from visitor_log.models import CANONICAL_COLUMNS, Visitor

logger = logging.getLogger(__name__)

DESK_OWNED_COLUMNS = ("generalNotes",)


@dataclass
class ImportReport:
    rows_read: int = 0
    inserted: int = 0
    updated: int = 0
    rejected: list = field(default_factory=list)

    @property
    def accepted(self) -> int:
        return self.inserted + self.updated


def import_csv_text(text, db: Database, id_factory=uuid.uuid4):
    """Import CSV text into the database and return an ImportReport.

    Rows without an id get one from ``id_factory``. A repeated id later in
    the same file overwrites the earlier row. Raises TransactionAborted if
    the batch fails, in which case nothing was stored.
    """
    rows = parse_csv(text, require_id=False)
    report = ImportReport(rows_read=len(rows))
    if not rows:
        return report

    # an update only touches columns the file carries; general notes are
    # owned by the desk once a visitor exists, so the file never replaces them
    updatable = [c for c in CANONICAL_COLUMNS if c in rows[0] and c not in DESK_OWNED_COLUMNS]

    with db.batch():
        for row_no, row in enumerate(rows, start=1):
            if not row.get("firstName") or not row.get("lastName"):
                logger.warning("Skipping row %d: missing firstName or lastName", row_no)
                report.rejected.append((row_no, "missing firstName or lastName"))
                continue

            visitor_id = row.get("id") or str(id_factory())
            try:
                visitor = Visitor.from_mapping({**row, "id": visitor_id})
            except MalformedInput as e:
                logger.warning("Skipping row %d: %s", row_no, e)
                report.rejected.append((row_no, str(e)))
                continue

            if db.exists(visitor_id):
                logger.debug("Updating existing visitor %s", visitor_id)
                report.updated += 1
            else:
                logger.debug("Inserting new visitor %s", visitor_id)
                report.inserted += 1
            db.upsert(visitor, fields=updatable)

    logger.info(
        "Imported %d visitor(s): %d new, %d updated, %d rejected",
        report.accepted, report.inserted, report.updated, len(report.rejected),
    )
    return report


def import_csv_file(path, db: Database, id_factory=uuid.uuid4):
    """Read a visitor CSV from disk and import it."""
    with open(path, newline="", encoding="utf-8-sig") as f:
        text = f.read()
    return import_csv_text(text, db, id_factory=id_factory)
