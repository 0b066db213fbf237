"""
Data Quality Profiler
=====================
Takes a read-only snapshot of a table's quality: row and column counts,
duplicate rows, empty rows and missing values per column.

Also renders a before/after comparison report for a cleaning run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Sequence

import numpy as np
import pandas as pd

from tabclean.table import empty_row_mask, missing_mask

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DataProfile:
    """Aggregate data-quality statistics of one table."""

    row_count: int = 0
    column_count: int = 0
    duplicates: int = 0
    empty_rows: int = 0
    missing_values: dict[str, int] = field(default_factory=dict)

    @property
    def distinct_rows(self) -> int:
        return self.row_count - self.duplicates

    @property
    def total_missing(self) -> int:
        return sum(self.missing_values.values())

    def completeness(self) -> dict[str, float]:
        """Percentage of present (non-missing) values per column."""
        if self.row_count == 0:
            return {}
        return {
            col: round((self.row_count - missing) / self.row_count * 100, 1)
            for col, missing in self.missing_values.items()
        }

    def to_dict(self) -> dict[str, Any]:
        """camelCase form returned to API clients."""
        return {
            "rowCount": int(self.row_count),
            "columnCount": int(self.column_count),
            "duplicates": int(self.duplicates),
            "emptyRows": int(self.empty_rows),
            "missingValues": {col: int(n) for col, n in self.missing_values.items()},
        }


class DataProfiler:
    """Profiles a table against its header."""

    def __init__(self, df: pd.DataFrame, header: Sequence[str]) -> None:
        self.df = df
        self.header = list(dict.fromkeys(header))
        self.total_rows = len(df)

    def count_duplicates(self) -> int:
        """Rows beyond the first occurrence of each distinct row."""
        if self.total_rows == 0 or len(self.df.columns) == 0:
            return 0
        return int(np.count_nonzero(self.df.duplicated(keep="first").to_numpy()))

    def count_empty_rows(self) -> int:
        return int(np.count_nonzero(empty_row_mask(self.df).to_numpy()))

    def count_missing_values(self) -> dict[str, int]:
        """Missing values per header column; absent columns are missing in every row."""
        mask = missing_mask(self.df, self.header)
        return {col: int(np.count_nonzero(mask[col].to_numpy())) for col in self.header}

    def run_full_profile(self) -> DataProfile:
        """Compute every statistic and return them as one snapshot."""
        logger.info("Profiling %d rows x %d columns...", self.total_rows, len(self.header))
        if self.total_rows == 0:
            return DataProfile()

        result = DataProfile(
            row_count=self.total_rows,
            column_count=len(self.header),
            duplicates=self.count_duplicates(),
            empty_rows=self.count_empty_rows(),
            missing_values=self.count_missing_values(),
        )
        logger.debug(
            "Profile: %d duplicates, %d empty rows, %d missing values",
            result.duplicates, result.empty_rows, result.total_missing,
        )
        return result


def profile(rows: pd.DataFrame, header: Sequence[str]) -> DataProfile:
    """Return the ``DataProfile`` of ``rows`` measured against ``header``."""
    return DataProfiler(rows, header).run_full_profile()


def render_comparison(before: DataProfile, after: DataProfile, source_name: str = "input.csv") -> str:
    """Render a before/after data quality report."""
    lines: list[str] = []

    lines.append("DATA QUALITY PROFILE REPORT")
    lines.append("=" * 60)
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append(f"Dataset: {source_name}")
    lines.append("")

    lines.append("SUMMARY:")
    lines.append("-" * 40)
    lines.append(f"  {'':<16}{'Before':>10}{'After':>10}")
    for label, old, new in (
        ("Rows", before.row_count, after.row_count),
        ("Columns", before.column_count, after.column_count),
        ("Duplicates", before.duplicates, after.duplicates),
        ("Empty rows", before.empty_rows, after.empty_rows),
        ("Missing values", before.total_missing, after.total_missing),
    ):
        lines.append(f"  {label:<16}{old:>10}{new:>10}")
    lines.append("")

    lines.append("MISSING VALUES BY COLUMN:")
    lines.append("-" * 40)
    columns = list(dict.fromkeys([*before.missing_values, *after.missing_values]))
    if not columns:
        lines.append("  - No columns profiled")
    before_pct = before.completeness()
    after_pct = after.completeness()
    for col in columns:
        old = before.missing_values.get(col, 0)
        new = after.missing_values.get(col, 0)
        lines.append(
            f"  - {col}: {old} -> {new} missing "
            f"({before_pct.get(col, 100.0)}% -> {after_pct.get(col, 100.0)}% complete)"
        )
    lines.append("")

    return "\n".join(lines)
