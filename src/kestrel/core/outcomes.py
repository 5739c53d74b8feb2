from __future__ import annotations

import json
import logging
from pathlib import Path

from kestrel.types import JobPosting, Outcome, OutcomeRecord

logger = logging.getLogger(__name__)


class OutcomeLog:
    """One append-only JSON array per outcome kind inside the output directory."""

    def __init__(self, output_dir: Path):
        self.output_dir = Path(output_dir)

    def path_for(self, outcome: Outcome) -> Path:
        return self.output_dir / f"{outcome}.json"

    def read(self, outcome: Outcome) -> list[dict]:
        path = self.path_for(outcome)
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            backup = path.with_name(f"{path.name}.corrupt")
            logger.error("Outcome log %s is not valid JSON (%s); moving it to %s", path, exc, backup)
            path.replace(backup)
            return []
        if not isinstance(payload, list):
            logger.error("Outcome log %s is not a list; starting a new one", path)
            return []
        return payload

    def write(self, job: JobPosting, outcome: Outcome) -> OutcomeRecord:
        record = OutcomeRecord(
            company=job.company,
            job_title=job.title,
            link=job.link,
            job_recruiter=job.recruiter_link,
            job_location=job.location,
            pdf_path=str(Path(job.pdf_path).resolve()) if job.pdf_path else "",
        )
        entries = self.read(outcome)
        entries.append(record.model_dump())

        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.path_for(outcome).write_text(json.dumps(entries, indent=4, ensure_ascii=False), encoding="utf-8")
        job.outcome = outcome
        logger.info("Recorded %s for %s at %s", outcome, job.title, job.company)
        return record
