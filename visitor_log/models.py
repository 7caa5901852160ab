"""
Visitor record type.

The field set is closed and declared in the canonical CSV column order.
Construction from loose mappings (CSV rows, sqlite rows) goes through
``Visitor.from_mapping``, which is the only place the required-name rule is
enforced.
"""

from dataclasses import dataclass, fields, replace

from visitor_log.errors import MalformedInput

BANNED_TRUE_VALUES = ("true", "1")


@dataclass(frozen=True)
class Visitor:
    id: str
    firstName: str
    lastName: str
    flatNumber: str = ""
    phoneNumber: str = ""
    dateOfBirth: str = ""
    scannedIdPicUrl: str = ""
    isBanned: bool = False
    notes: str = ""
    generalNotes: str = ""

    @classmethod
    def from_mapping(cls, row):
        """Build a visitor from any mapping, ignoring unknown keys.

        Raises MalformedInput when the id or either name is empty.
        """
        values = {}
        for f in fields(cls):
            if f.name == "isBanned":
                values[f.name] = parse_banned(row.get("isBanned"))
            else:
                values[f.name] = _text(row.get(f.name))

        if not values["firstName"] or not values["lastName"]:
            raise MalformedInput("missing firstName or lastName")
        if not values["id"]:
            raise MalformedInput("missing id")
        return cls(**values)

    @property
    def full_name(self):
        return f"{self.firstName} {self.lastName}"

    def with_changes(self, **changes):
        return replace(self, **changes)

    def to_row(self):
        """Plain dict of strings in canonical column order, for CSV output."""
        row = {}
        for name in CANONICAL_COLUMNS:
            value = getattr(self, name)
            if name == "isBanned":
                value = "1" if value else "0"
            row[name] = value
        return row


CANONICAL_COLUMNS = tuple(f.name for f in fields(Visitor))


def parse_banned(value) -> bool:
    """Normalize the many spellings of the banned flag.

    CSV text counts as banned only for ``"true"`` or ``"1"`` (case-sensitive);
    sqlite hands back integers, the UI hands back booleans.
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if value is None:
        return False
    return str(value).strip() in BANNED_TRUE_VALUES


def _text(value):
    if value is None:
        return ""
    return str(value).strip()
