"""
Data Cleaner Module
===================
Applies a ``CleaningRules`` configuration to a table. Steps always run
in the same order, each one reading the output of the previous step:

  1. Remove empty rows
  2. Trim whitespace
  3. Handle missing values (keep / drop / fill)
  4. Remove duplicate rows

Rows are only ever removed, never reordered. The input table is left
untouched; every step produces a new frame.
"""

import logging
from datetime import datetime
from typing import Any

import pandas as pd

from tabclean.config import FILL_VALUE
from tabclean.rules import CleaningRules, InvalidRuleError, MissingStrategy
from tabclean.table import empty_row_mask, missing_mask, text_column

logger = logging.getLogger(__name__)


def _positions(mask: pd.Series) -> list[int]:
    """1-based row positions where ``mask`` is True."""
    return [pos + 1 for pos, flag in enumerate(mask.tolist()) if flag]


class DataCleaner:
    """Cleans a table according to a set of rules."""

    def __init__(self, df: pd.DataFrame, rules: CleaningRules) -> None:
        self.df = df.copy()
        self.rules = rules
        self.total_rows = len(df)
        self.actions: list[dict[str, Any]] = []

    def _record(self, category: str, action: str, rows: list[int]) -> None:
        self.actions.append({"category": category, "action": action, "rows": rows})
        logger.debug("%s: %s", category, action)

    def _drop(self, mask: pd.Series) -> None:
        self.df = self.df.loc[~mask].reset_index(drop=True)

    # ------------------------------------------------------------------
    # Step 1: empty rows
    # ------------------------------------------------------------------
    def remove_empty_rows(self) -> pd.DataFrame:
        """Drop rows whose every value is empty or whitespace-only."""
        logger.info("Removing empty rows...")
        if len(self.df) == 0:
            return self.df

        empty = empty_row_mask(self.df)
        removed = _positions(empty)
        if removed:
            self._drop(empty)
            self._record(
                "Empty Rows",
                f"Removed {len(removed)} empty row(s)",
                removed,
            )
        return self.df

    # ------------------------------------------------------------------
    # Step 2: whitespace
    # ------------------------------------------------------------------
    def strip_whitespace(self) -> pd.DataFrame:
        """Remove leading/trailing whitespace from every value."""
        logger.info("Stripping whitespace...")
        if len(self.df) == 0:
            return self.df

        stripped = self.df.copy()
        changed = pd.Series(False, index=self.df.index)
        for col in self.df.columns:
            original = text_column(self.df[col])
            trimmed = original.str.strip()
            stripped[col] = trimmed.astype(object)
            changed |= original.ne(trimmed)

        self.df = stripped
        affected = _positions(changed)
        if affected:
            self._record(
                "Whitespace",
                f"Trimmed leading/trailing whitespace ({len(affected)} rows affected)",
                affected,
            )
        return self.df

    # ------------------------------------------------------------------
    # Step 3: missing values
    # ------------------------------------------------------------------
    def drop_missing_rows(self) -> pd.DataFrame:
        """Drop every row holding at least one empty or whitespace-only value."""
        mask = missing_mask(self.df).any(axis=1).astype(bool)
        removed = _positions(mask)
        if removed:
            self._drop(mask)
            self._record(
                "Missing Values",
                f"Dropped {len(removed)} row(s) with missing values",
                removed,
            )
        return self.df

    def fill_missing_values(self) -> pd.DataFrame:
        """Replace every empty or whitespace-only value with the fill sentinel."""
        mask = missing_mask(self.df)
        for col in mask.columns:
            col_rows = _positions(mask[col])
            if col_rows:
                self._record(
                    "Missing Values",
                    f"{col}: {len(col_rows)} row(s) missing -> filled with '{FILL_VALUE}'",
                    col_rows,
                )
        if mask.to_numpy().any():
            self.df = self.df.mask(mask, FILL_VALUE)
        return self.df

    def handle_missing_values(self) -> pd.DataFrame:
        """Apply the configured missing-value strategy."""
        strategy = self.rules.handle_missing
        logger.info("Handling missing values (strategy: %s)...", strategy)
        if strategy not in MissingStrategy.ALL:
            raise InvalidRuleError(f"Unknown missing-value strategy: {strategy!r}")
        if strategy == MissingStrategy.KEEP or len(self.df) == 0:
            return self.df
        if strategy == MissingStrategy.DROP:
            return self.drop_missing_rows()
        return self.fill_missing_values()

    # ------------------------------------------------------------------
    # Step 4: duplicates
    # ------------------------------------------------------------------
    def remove_duplicates(self) -> pd.DataFrame:
        """Keep the first occurrence of each distinct row."""
        logger.info("Removing duplicate rows...")
        if len(self.df) == 0 or len(self.df.columns) == 0:
            return self.df

        dupes = self.df.duplicated(keep="first").astype(bool)
        removed = _positions(dupes)
        if removed:
            self._drop(dupes)
            self._record(
                "Duplicates",
                f"Removed {len(removed)} duplicate row(s)",
                removed,
            )
        return self.df

    # ------------------------------------------------------------------
    # Run full cleaning
    # ------------------------------------------------------------------
    def run_full_cleaning(self) -> pd.DataFrame:
        """Execute the enabled cleaning steps in their fixed order."""
        logger.info("Running data cleaning (%s)...", self.rules.describe())
        if self.rules.remove_empty_rows:
            self.remove_empty_rows()
        if self.rules.trim_whitespace:
            self.strip_whitespace()
        self.handle_missing_values()
        if self.rules.remove_duplicates:
            self.remove_duplicates()
        logger.info("Cleaning complete: %d -> %d rows", self.total_rows, len(self.df))
        return self.df

    # ------------------------------------------------------------------
    # Report generation
    # ------------------------------------------------------------------
    def generate_report(self, source_name: str = "input.csv", filepath=None) -> str:
        """Render the cleaning log; also write it to ``filepath`` when given."""
        lines: list[str] = []

        lines.append("DATA CLEANING LOG")
        lines.append("=" * 60)
        lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"Dataset: {source_name}")
        lines.append(f"Rules: {self.rules.describe()}")
        lines.append("")

        lines.append("ACTIONS TAKEN:")
        lines.append("-" * 40)
        if not self.actions:
            lines.append("  - No changes were needed")

        # Group by category
        categories: dict[str, list] = {}
        for action in self.actions:
            categories.setdefault(action["category"], []).append(action)

        for cat, cat_actions in categories.items():
            lines.append(f"\n  {cat}:")
            for act in cat_actions:
                lines.append(f"    - {act['action']}")
                if act.get("rows"):
                    lines.append(f"      Affected rows: {act['rows']}")

        lines.append("")
        lines.append("OUTPUT:")
        lines.append("-" * 40)
        lines.append(f"  - Rows: {self.total_rows} -> {len(self.df)}")
        lines.append(f"  - Columns: {len(self.df.columns)}")
        lines.append("")

        report_text = "\n".join(lines)

        if filepath is not None:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(report_text)
            logger.info("Cleaning log saved to %s", filepath)
        return report_text


def clean(rows: pd.DataFrame, rules: CleaningRules) -> pd.DataFrame:
    """Return a new table with ``rules`` applied to ``rows``."""
    return DataCleaner(rows, rules).run_full_cleaning()
