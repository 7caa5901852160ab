"""Pytest configuration and shared fixtures for the visitor store."""
import sys
from pathlib import Path

import pytest

# Ensure repository root is on sys.path for module resolution
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from visitor_log.database import Database
from visitor_log.errors import PersistenceFailure
from visitor_log.models import Visitor
from visitor_log.snapshots import MemorySnapshotStore

SAMPLE_CSV = (
    "id,firstName,lastName,flatNumber,phoneNumber,dateOfBirth,scannedIdPicUrl,isBanned,notes,generalNotes\n"
    'v1,Jane,Doe,12B,555-0101,1990-01-01,jane.png,0,,"Visits Tuesdays, usually"\n'
    'v2,Janet,Smith,4,555-0102,1985-05-05,,1,"Shouted ""fire"" in lobby",\n'
)


class FlakySnapshotStore(MemorySnapshotStore):
    """Memory store whose saves can be switched to fail."""

    def __init__(self):
        super().__init__()
        self.fail = False

    def save(self, key, data):
        if self.fail:
            raise PersistenceFailure("disk full")
        super().save(key, data)


@pytest.fixture
def snapshots() -> FlakySnapshotStore:
    return FlakySnapshotStore()


@pytest.fixture
def db(snapshots) -> Database:
    database = Database(snapshots)
    yield database
    database.close()


@pytest.fixture
def seeded_db(db) -> Database:
    """Database holding Jane Doe (v1) and Janet Smith (v2)."""

    with db.batch():
        db.upsert(Visitor(id="v1", firstName="Jane", lastName="Doe", flatNumber="12B"))
        db.upsert(Visitor(id="v2", firstName="Janet", lastName="Smith", flatNumber="4"))
    return db


@pytest.fixture
def write_csv(tmp_path: Path):
    """Write CSV text to a file in tmp_path and return its path."""

    def _write(text: str, name: str = "visitors.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_csv() -> str:
    return SAMPLE_CSV
