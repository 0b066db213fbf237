"""
Job History Module
==================
Keeps a JSON log of completed cleaning jobs so past runs can be listed
and traced back to their rules and output files.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from tabclean.config import HISTORY_FILE, HISTORY_LIMIT

logger = logging.getLogger(__name__)


class JobHistory:
    """Append-only record of cleaning jobs, persisted as one JSON document."""

    def __init__(self, filepath: Path | None = None) -> None:
        self.filepath = Path(filepath or HISTORY_FILE)

    def load(self) -> list[dict[str, Any]]:
        """Return every recorded job, oldest first."""
        if not self.filepath.exists():
            return []
        try:
            with open(self.filepath, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as exc:
            logger.warning("Could not read job history %s: %s", self.filepath, exc)
            return []
        return data.get("jobs", [])

    def record_job(
        self,
        job_id: str,
        source_name: str,
        rules: dict[str, Any],
        original_row_count: int,
        cleaned_row_count: int,
        column_count: int,
        cleaned_path: str = "",
    ) -> dict[str, Any]:
        """Append a job entry and save the history file."""
        entry = {
            "job_id": job_id,
            "source_name": source_name,
            "rules": rules,
            "original_row_count": int(original_row_count),
            "cleaned_row_count": int(cleaned_row_count),
            "column_count": int(column_count),
            "cleaned_path": cleaned_path,
            "created_at": datetime.now().isoformat(),
        }
        jobs = self.load()
        jobs.append(entry)

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(self.filepath, "w", encoding="utf-8") as f:
            json.dump({"updated_at": entry["created_at"], "jobs": jobs}, f, indent=2, default=str)

        logger.info("Recorded job %s (%d -> %d rows)", job_id, original_row_count, cleaned_row_count)
        return entry

    def list_jobs(self, limit: int = HISTORY_LIMIT) -> list[dict[str, Any]]:
        """Return up to ``limit`` jobs, most recent first."""
        jobs = self.load()
        return list(reversed(jobs))[:limit]

    def get_job(self, job_id: str) -> dict[str, Any] | None:
        """Return the latest entry recorded for ``job_id``, if any."""
        for job in reversed(self.load()):
            if job["job_id"] == job_id:
                return job
        return None
