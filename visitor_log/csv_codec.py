"""
CSV codec for visitor files.

Visitor CSVs are edited by hand in spreadsheets and text editors, so reading
is tolerant: values are trimmed, quoting is only honoured where a value is
wrapped in quotes, and the legacy ``visitorId`` header is accepted. Writing
quotes only what has to be quoted.

Both directions are pure functions over plain ``dict[str, str]`` rows.
"""

import csv
import io
import re

LEGACY_HEADERS = {"visitorId": "id"}

_LINE_BREAK = re.compile(r"\r?\n")


def split_fields(line):
    """Split one CSV line on commas that are not inside double quotes.

    Every double quote toggles the quoted state; a doubled quote inside a
    quoted value therefore leaves the state unchanged. Returned values are
    trimmed and unquoted.
    """
    values = []
    in_quotes = False
    start = 0
    for i, ch in enumerate(line):
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append(_unquote(line[start:i]))
            start = i + 1
    values.append(_unquote(line[start:]))
    return values


def _unquote(raw):
    value = raw.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        value = value[1:-1].replace('""', '"')
    return value.strip()


def parse_csv(text, require_id=True):
    """Parse CSV text into a list of rows keyed by header name.

    Blank lines are skipped and an empty input gives an empty list. With
    ``require_id`` set, rows whose ``id`` is empty are dropped.
    """
    lines = [line for line in _LINE_BREAK.split(text or "") if line.strip()]
    if not lines:
        return []

    headers = [LEGACY_HEADERS.get(h, h) for h in split_fields(lines[0])]

    rows = []
    for line in lines[1:]:
        values = split_fields(line)
        row = {}
        for index, header in enumerate(headers):
            row[header] = values[index] if index < len(values) else ""
        if require_id and not row.get("id"):
            continue
        rows.append(row)
    return rows


def stringify_csv(rows):
    """Serialize rows back to CSV text.

    The header is taken from the first row's keys, so callers pass rows that
    share one column order. Lines are joined with ``\\n`` and the text has no
    trailing newline.
    """
    rows = list(rows)
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_cell(row.get(h)) for h in headers])
    return buf.getvalue()[:-1]


def _cell(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)
