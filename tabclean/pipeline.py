"""
Cleaning Pipeline
=================
Runs one cleaning job end to end:
  1. LOAD       - Read the uploaded file and decode it as UTF-8
  2. PARSE      - Delimited text -> table + header
  3. PROFILE    - Quality snapshot of the raw table
  4. CLEAN      - Apply the cleaning rules in their fixed order
  5. PROFILE    - Quality snapshot of the cleaned table (same header)
  6. SERIALIZE  - Table -> delimited text
  7. SAVE       - Write the cleaned file and report, record the job

Parsing and rule errors propagate unchanged; file-level failures are
raised as ``PipelineError``.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from tabclean.cleaner import DataCleaner
from tabclean.config import (
    ALLOWED_EXTENSIONS,
    CLEANED_SUFFIX,
    OUTPUT_DIR,
    TEXT_ENCODING,
)
from tabclean.job_history import JobHistory
from tabclean.parser import parse
from tabclean.profiler import DataProfile, profile, render_comparison
from tabclean.rules import CleaningRules
from tabclean.serializer import serialize

logger = logging.getLogger(__name__)


class PipelineError(Exception):
    """Raised when a cleaning job cannot read its input or write its output."""
    pass


@dataclass
class CleaningResult:
    """Outcome of one cleaning job."""

    job_id: str
    source_name: str
    rules: CleaningRules
    header: list[str]
    original_profile: DataProfile
    cleaned_profile: DataProfile
    cleaned_text: str
    actions: list[dict[str, Any]] = field(default_factory=list)
    report: str = ""
    cleaned_path: Path | None = None

    @property
    def cleaned_row_count(self) -> int:
        return self.cleaned_profile.row_count

    def to_dict(self) -> dict[str, Any]:
        return {
            "fileId": self.job_id,
            "sourceName": self.source_name,
            "rules": self.rules.to_dict(),
            "headers": list(self.header),
            "originalProfile": self.original_profile.to_dict(),
            "cleanedProfile": self.cleaned_profile.to_dict(),
            "cleanedRowCount": self.cleaned_row_count,
            "cleanedPath": str(self.cleaned_path) if self.cleaned_path else None,
        }


class CleaningPipeline:
    """Parses, profiles, cleans and serializes one delimited file."""

    def __init__(
        self,
        rules: CleaningRules,
        output_dir: Path | None = None,
        history: JobHistory | None = None,
    ) -> None:
        self.rules = rules
        self.output_dir = Path(output_dir or OUTPUT_DIR)
        self.history = history if history is not None else JobHistory()
        self.stages: list[dict] = []

    # ------------------------------------------------------------------
    # Stage helpers
    # ------------------------------------------------------------------
    def _log_stage(self, stage: str, status: str, details: list[str], started: float) -> None:
        """Record a pipeline stage result."""
        entry = {
            "stage": stage,
            "status": status,
            "details": details,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "timestamp": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        }
        self.stages.append(entry)
        symbol = "[OK]" if status == "SUCCESS" else "[XX]"
        logger.info("%s Stage: %s - %s", symbol, stage, status)
        for d in details:
            logger.info("  %s", d)

    @staticmethod
    def _new_job_id(source_name: str) -> str:
        return f"{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}-{source_name}"

    # ------------------------------------------------------------------
    # LOAD
    # ------------------------------------------------------------------
    def load(self, input_path: Path) -> str:
        """Read ``input_path`` and decode it as UTF-8 text."""
        started = time.perf_counter()
        input_path = Path(input_path)
        try:
            if input_path.suffix.lower() not in ALLOWED_EXTENSIONS:
                raise PipelineError(
                    f"Only {', '.join(ALLOWED_EXTENSIONS)} files are allowed, got '{input_path.name}'"
                )
            try:
                raw = input_path.read_bytes()
            except OSError as exc:
                raise PipelineError(f"Failed to read {input_path}: {exc}") from exc
            try:
                text = raw.decode(TEXT_ENCODING)
            except UnicodeDecodeError as exc:
                raise PipelineError(f"{input_path.name} is not valid {TEXT_ENCODING} text: {exc}") from exc
        except PipelineError as exc:
            self._log_stage("LOAD", "FAILURE", [str(exc)], started)
            raise

        self._log_stage("LOAD", "SUCCESS", [f"Loaded {input_path.name} ({len(raw)} bytes)"], started)
        return text

    # ------------------------------------------------------------------
    # PARSE -> PROFILE -> CLEAN -> PROFILE -> SERIALIZE
    # ------------------------------------------------------------------
    def run_text(self, text: str, source_name: str = "input.csv") -> CleaningResult:
        """Clean already-decoded text; writes nothing to disk."""
        started = time.perf_counter()
        try:
            rows, header = parse(text)
        except ValueError as exc:
            self._log_stage("PARSE", "FAILURE", [str(exc)], started)
            raise
        self._log_stage("PARSE", "SUCCESS", [f"{len(rows)} rows, {len(header)} columns"], started)

        started = time.perf_counter()
        original_profile = profile(rows, header)
        self._log_stage("PROFILE", "SUCCESS", [
            f"{original_profile.duplicates} duplicate row(s)",
            f"{original_profile.empty_rows} empty row(s)",
            f"{original_profile.total_missing} missing value(s)",
        ], started)

        started = time.perf_counter()
        cleaner = DataCleaner(rows, self.rules)
        cleaned = cleaner.run_full_cleaning()
        self._log_stage("CLEAN", "SUCCESS", [
            f"Rules: {self.rules.describe()}",
            f"{len(rows)} -> {len(cleaned)} rows",
        ], started)

        # Both snapshots are measured against the original header
        started = time.perf_counter()
        cleaned_profile = profile(cleaned, header)
        cleaned_text = serialize(cleaned)
        self._log_stage("SERIALIZE", "SUCCESS", [f"{len(cleaned_text)} characters"], started)

        report = "\n".join([
            cleaner.generate_report(source_name=source_name),
            render_comparison(original_profile, cleaned_profile, source_name=source_name),
        ])

        return CleaningResult(
            job_id=self._new_job_id(source_name),
            source_name=source_name,
            rules=self.rules,
            header=header,
            original_profile=original_profile,
            cleaned_profile=cleaned_profile,
            cleaned_text=cleaned_text,
            actions=list(cleaner.actions),
            report=report,
        )

    # ------------------------------------------------------------------
    # SAVE
    # ------------------------------------------------------------------
    def save(self, result: CleaningResult, input_path: Path) -> Path:
        """Write the cleaned file and its report next to each other in the output directory."""
        started = time.perf_counter()
        input_path = Path(input_path)
        cleaned_path = self.output_dir / f"{input_path.stem}{CLEANED_SUFFIX}{input_path.suffix}"
        report_path = self.output_dir / f"{input_path.stem}{CLEANED_SUFFIX}-report.txt"
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            # newline="" keeps the dialect's line terminator as written
            with open(cleaned_path, "w", encoding=TEXT_ENCODING, newline="") as f:
                f.write(result.cleaned_text)
            with open(report_path, "w", encoding=TEXT_ENCODING) as f:
                f.write(result.report)
        except OSError as exc:
            self._log_stage("SAVE", "FAILURE", [str(exc)], started)
            raise PipelineError(f"Failed to write cleaned output: {exc}") from exc

        result.cleaned_path = cleaned_path
        try:
            self.history.record_job(
                job_id=result.job_id,
                source_name=result.source_name,
                rules=result.rules.to_dict(),
                original_row_count=result.original_profile.row_count,
                cleaned_row_count=result.cleaned_row_count,
                column_count=len(result.header),
                cleaned_path=str(cleaned_path),
            )
        except OSError as exc:
            self._log_stage("SAVE", "FAILURE", [str(exc)], started)
            raise PipelineError(f"Failed to record job {result.job_id}: {exc}") from exc
        self._log_stage("SAVE", "SUCCESS", [
            f"Cleaned file: {cleaned_path}",
            f"Report: {report_path}",
        ], started)
        return cleaned_path

    # ------------------------------------------------------------------
    # Run the complete job
    # ------------------------------------------------------------------
    def run(self, input_path: Path) -> CleaningResult:
        """Load, clean and save ``input_path``; returns the job result."""
        input_path = Path(input_path)
        logger.info("Cleaning job started for %s", input_path.name)
        text = self.load(input_path)
        result = self.run_text(text, source_name=input_path.name)
        self.save(result, input_path)
        logger.info(
            "Cleaning job %s complete: %d -> %d rows",
            result.job_id, result.original_profile.row_count, result.cleaned_row_count,
        )
        return result
