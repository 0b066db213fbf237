"""
CSV Parser Module
=================
Decodes delimited text into a fixed-schema table plus its header.

The first record supplies the header. Blank lines are skipped, short
records are padded with empty strings, and fields beyond the header
width are dropped. Duplicate header names keep the position of their
first occurrence and the values of their last occurrence.

Records may end in CRLF, LF or a bare CR, mixed within one file.
"""

import io
import logging

import pandas as pd

from tabclean.config import BYTE_ORDER_MARK, CSV_DIALECT
from tabclean.table import empty_frame

logger = logging.getLogger(__name__)


class MalformedInputError(ValueError):
    """Raised when the delimited text has an unterminated quoted field."""

    def __init__(self, line: int) -> None:
        self.line = line
        super().__init__(f"Unterminated quoted field starting on line {line}")


def normalize_text(text: str, delimiter: str = ",", quotechar: str = '"') -> tuple[str, int]:
    """
    Walk ``text`` once, rewriting it into a shape ``read_csv`` reads cleanly.

    Line breaks outside quoted fields (``\\r\\n``, ``\\n`` or a bare ``\\r``)
    become ``\\n``. Text between a closing quote and the next delimiter is
    folded into the quoted field, so ``"x" ,3`` reads as ``x `` and ``3``.
    A quote only opens a field when it is the first character of that
    field; a doubled quote inside a quoted field is an escaped quote.

    Returns the rewritten text and the number of fields in the first
    non-blank record.

    Raises:
        MalformedInputError: if a quoted field is never closed.
    """
    out: list[str] = []
    width = 0
    fields = 1
    line = 1
    opened_on = 0
    in_quotes = False
    # Past a closing quote but still inside the same field
    trailing = False
    field_start = True
    record_blank = True
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        crlf = ch == "\r" and i + 1 < n and text[i + 1] == "\n"
        if in_quotes:
            if ch == quotechar:
                if i + 1 < n and text[i + 1] == quotechar:
                    out.append(quotechar * 2)
                    i += 2
                    continue
                in_quotes = False
                trailing = True
            else:
                if ch == "\n" or (ch == "\r" and not crlf):
                    line += 1
                out.append(ch)
            i += 1
            continue

        if ch == delimiter or ch in "\r\n":
            if trailing:
                out.append(quotechar)
                trailing = False
            if ch == delimiter:
                out.append(ch)
                fields += 1
                field_start = True
                record_blank = False
            else:
                if crlf:
                    i += 1
                line += 1
                out.append("\n")
                if not record_blank and not width:
                    width = fields
                fields = 1
                field_start = True
                record_blank = True
        elif trailing:
            out.append(quotechar * 2 if ch == quotechar else ch)
        elif ch == quotechar and field_start:
            out.append(ch)
            in_quotes = True
            opened_on = line
            field_start = False
            record_blank = False
        else:
            out.append(ch)
            field_start = False
            record_blank = False
        i += 1

    if in_quotes:
        raise MalformedInputError(opened_on)
    if trailing:
        out.append(quotechar)
    if not record_blank and not width:
        width = fields
    return "".join(out), width


def _dedupe_header(fields: list[str]) -> dict[str, int]:
    """Map each column name to the index of its last occurrence, in first-seen order."""
    positions: dict[str, int] = {}
    for idx, name in enumerate(fields):
        positions[name] = idx
    return positions


def parse(text: str) -> tuple[pd.DataFrame, list[str]]:
    """
    Parse delimited text into ``(rows, header)``.

    ``header`` is empty whenever there are no data records, even if the
    text has a header line.

    Raises:
        MalformedInputError: if a quoted field is never closed.
    """
    delimiter = CSV_DIALECT["delimiter"]
    quotechar = CSV_DIALECT["quotechar"]

    if text.startswith(BYTE_ORDER_MARK):
        text = text[len(BYTE_ORDER_MARK):]
    text, width = normalize_text(text, delimiter, quotechar)
    # Leading blank lines would otherwise define a zero-width header
    text = text.lstrip("\n")
    if width == 0:
        logger.info("Parsed 0 rows x 0 columns (empty input)")
        return empty_frame(), []

    raw = pd.read_csv(
        io.StringIO(text),
        sep=delimiter,
        quotechar=quotechar,
        doublequote=True,
        header=None,
        dtype=object,
        na_filter=False,
        skip_blank_lines=False,
        engine="python",
        on_bad_lines=lambda fields: fields[:width],
    )

    # Blank lines come back as rows of nulls; real records always carry
    # a string in their first field.
    raw = raw.loc[raw.iloc[:, 0].notna()]
    records = [
        ["" if pd.isna(value) else str(value) for value in values]
        for values in raw.itertuples(index=False, name=None)
    ]

    header_fields, data = records[0], records[1:]
    if not data:
        logger.info("Parsed 0 rows (header only, %d fields)", len(header_fields))
        return empty_frame(), []

    positions = _dedupe_header(header_fields)
    header = list(positions)
    if len(header) < len(header_fields):
        logger.warning(
            "Duplicate column names in header; keeping last occurrence of each: %s",
            sorted({name for name in header_fields if header_fields.count(name) > 1}),
        )

    rows = [[values[idx] for idx in positions.values()] for values in data]
    frame = pd.DataFrame(rows, columns=header, dtype=object)
    logger.info("Parsed %d rows x %d columns", len(frame), len(header))
    return frame, header
