"""Quote-aware CSV tokenizer for listing exports.

Quoting rules, intentionally narrower than RFC 4180:

* A ``"`` toggles the quoted state unless it directly follows a backslash.
  A backslash-escaped quote is kept verbatim, backslash included.
* Inside a quoted field a doubled quote (``""``) yields one literal quote.
* The delimiter only splits fields outside quotes.
* Every line is a row of its own, so quoted fields cannot span lines.

Malformed input never raises; at worst field boundaries come out garbled and
the normalizer defaults whatever it cannot coerce.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

logger = logging.getLogger(__name__)

QUOTE = '"'
ESCAPE = "\\"


def clean_field(value: str) -> str:
    """Trim whitespace and one pair of wrapping quotes."""
    value = value.strip()
    if len(value) >= 2 and value[0] == QUOTE and value[-1] == QUOTE:
        value = value[1:-1]
    return value


def split_row(line: str, delimiter: str = ",") -> List[str]:
    fields: List[str] = []
    buffer: List[str] = []
    in_quote = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == QUOTE and (i == 0 or line[i - 1] != ESCAPE):
            if in_quote and i + 1 < len(line) and line[i + 1] == QUOTE:
                buffer.append(QUOTE)
                i += 2
                continue
            in_quote = not in_quote
        elif char == delimiter and not in_quote:
            fields.append(clean_field("".join(buffer)))
            buffer = []
        else:
            buffer.append(char)
        i += 1
    fields.append(clean_field("".join(buffer)))
    return fields


def tokenize(csv_text: str, delimiter: str = ",") -> List[List[str]]:
    """Split raw CSV text into rows of cleaned string fields.

    The first returned row is the header row. Blank lines are skipped.
    """
    if len(delimiter) != 1:
        raise ValueError("delimiter must be a single character")
    if csv_text.startswith("\ufeff"):
        csv_text = csv_text[1:]

    rows: List[List[str]] = []
    for line in csv_text.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue
        rows.append(split_row(line, delimiter))
    return rows


def to_raw_rows(rows: Sequence[Sequence[str]]) -> List[Dict[str, str]]:
    """Zip data rows against the header row positionally.

    Short rows are padded with empty strings and long rows are truncated.
    """
    if not rows:
        return []
    headers = list(rows[0])
    raw_rows: List[Dict[str, str]] = []
    for position, row in enumerate(rows[1:], start=1):
        if len(row) != len(headers):
            logger.debug("Row %d has %d fields for %d headers", position, len(row), len(headers))
        raw_rows.append({header: (row[index] if index < len(row) else "") for index, header in enumerate(headers)})
    return raw_rows


def parse_csv(csv_text: str, delimiter: str = ",") -> List[Dict[str, str]]:
    return to_raw_rows(tokenize(csv_text, delimiter))

