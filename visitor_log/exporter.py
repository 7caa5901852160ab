"""
Export of single visitors back to the external CSV file.

The CSV file the user opened is treated as a sink: a visitor is upserted into
it by id and the file is rewritten with the canonical column order.
"""

import logging
import os
import tempfile
from dataclasses import dataclass

from visitor_log.csv_codec import parse_csv, stringify_csv
from visitor_log.models import CANONICAL_COLUMNS, Visitor

logger = logging.getLogger(__name__)

NO_TARGET_MESSAGE = "No file has been selected for saving yet."


@dataclass
class SaveResult:
    success: bool
    error: str = ""


def merge_general_notes(visitor: Visitor, general_notes) -> Visitor:
    """Return a copy of the visitor carrying the notes currently being edited."""
    return visitor.with_changes(generalNotes=(general_notes or "").strip())


def canonical_row(row):
    """Re-key a raw CSV row to the canonical columns, filling gaps with ''."""
    return {c: row.get(c, "") or "" for c in CANONICAL_COLUMNS}


def upsert_rows(rows, new_row):
    """Replace the row with the same id in place, or append it."""
    target = (new_row.get("id") or "").strip()
    out = list(rows)
    for i, row in enumerate(out):
        if target and (row.get("id") or "").strip() == target:
            out[i] = new_row
            return out
    out.append(new_row)
    return out


def upsert_and_save_csv(path, visitor: Visitor) -> SaveResult:
    """Upsert one visitor into the CSV file at path and rewrite the file."""
    if not path:
        return SaveResult(False, NO_TARGET_MESSAGE)

    try:
        with open(path, newline="", encoding="utf-8-sig") as f:
            rows = [canonical_row(r) for r in parse_csv(f.read())]
        rows = upsert_rows(rows, visitor.to_row())
        _replace_file(path, stringify_csv(rows))
    except (OSError, UnicodeDecodeError) as e:
        logger.exception("Error updating and saving %s", path)
        return SaveResult(False, str(e))

    logger.info("Saved visitor %s to %s", visitor.id, path)
    return SaveResult(True)


def _replace_file(path, text):
    """Write text next to path, then swap it in. The old file survives any error."""
    fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(os.path.abspath(path)), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise
