"""
Row representation shared by the parser, cleaner, profiler and serializer.

A table is a ``pd.DataFrame`` whose columns are the header, in order, and
whose cells are plain ``str``. A column absent from a source record is an
empty string, never a missing key.
"""

from typing import Any, Iterable, Mapping, Sequence

import pandas as pd


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if pd.isna(value):
        return ""
    return str(value)


def empty_frame(header: Sequence[str] = ()) -> pd.DataFrame:
    """Return a table with the given columns and no rows."""
    return pd.DataFrame(columns=list(dict.fromkeys(header)), dtype=object)


def build_frame(
    records: Iterable[Mapping[str, Any]],
    header: Sequence[str] | None = None,
) -> pd.DataFrame:
    """
    Build a fixed-schema table from row mappings.

    When ``header`` is omitted it is taken from the keys of the first
    record. Keys missing from a record become empty strings; keys not in
    the header are ignored.
    """
    records = list(records)
    if header is None:
        header = list(records[0].keys()) if records else []
    columns = list(dict.fromkeys(header))
    data = [[_as_text(record.get(col, "")) for col in columns] for record in records]
    if not data:
        return empty_frame(columns)
    return pd.DataFrame(data, columns=columns, dtype=object)


def to_records(frame: pd.DataFrame) -> list[dict[str, str]]:
    """Return the table as a list of ``{column: value}`` dicts in row order."""
    columns = list(frame.columns)
    return [
        {col: _as_text(value) for col, value in zip(columns, values)}
        for values in frame.itertuples(index=False, name=None)
    ]


def text_column(series: pd.Series) -> pd.Series:
    """Return a column as ``str`` values with nulls turned into ``""``."""
    return series.fillna("").astype(str)


def missing_mask(frame: pd.DataFrame, columns: Sequence[str] | None = None) -> pd.DataFrame:
    """
    Boolean table marking values that are empty or whitespace-only.

    Columns requested but absent from ``frame`` are reported as missing
    in every row.
    """
    columns = list(frame.columns) if columns is None else list(dict.fromkeys(columns))
    mask = {}
    for col in columns:
        if col in frame.columns:
            mask[col] = text_column(frame[col]).str.strip().eq("").astype(bool)
        else:
            mask[col] = pd.Series(True, index=frame.index, dtype=bool)
    return pd.DataFrame(mask, index=frame.index, columns=columns)


def empty_row_mask(frame: pd.DataFrame) -> pd.Series:
    """Rows whose every value is empty or whitespace-only."""
    return missing_mask(frame).all(axis=1).astype(bool)
