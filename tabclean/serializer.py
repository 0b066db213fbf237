"""
CSV Serializer Module
=====================
Encodes a table back into delimited text using the same dialect the
parser reads. Fields containing the delimiter, the quote character or a
line break are quoted, with embedded quotes doubled.
"""

import csv
import logging

import pandas as pd

from tabclean.config import CSV_DIALECT
from tabclean.table import text_column

logger = logging.getLogger(__name__)


def serialize(rows: pd.DataFrame) -> str:
    """Return ``rows`` as delimited text, header line first; ``""`` for no rows."""
    if len(rows) == 0:
        return ""

    frame = rows.copy()
    for col in frame.columns:
        frame[col] = text_column(frame[col])

    text = frame.to_csv(
        index=False,
        sep=CSV_DIALECT["delimiter"],
        quotechar=CSV_DIALECT["quotechar"],
        lineterminator=CSV_DIALECT["lineterminator"],
        quoting=csv.QUOTE_MINIMAL,
        doublequote=True,
    )
    logger.info("Serialized %d rows x %d columns", len(frame), len(frame.columns))
    return text
