from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from kestrel.errors import ResumeError
from kestrel.types import ResumeProfile

logger = logging.getLogger(__name__)


def load_resume(path: Path) -> ResumeProfile:
    """Read and validate the candidate profile JSON."""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ResumeError(f"Resume file {path} not found") from exc
    except json.JSONDecodeError as exc:
        raise ResumeError(f"Resume file {path} is not valid JSON: {exc}") from exc

    if not isinstance(payload, dict):
        raise ResumeError(f"Resume file {path} must contain a JSON object")

    try:
        profile = ResumeProfile.model_validate(payload)
    except ValidationError as exc:
        error = exc.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        if error["type"] == "missing":
            raise ResumeError(f"Missing required field: {location}") from exc
        raise ResumeError(f"Invalid resume field {location}: {error['msg']}") from exc

    logger.info(
        "Resume loaded for %s %s",
        profile.personal_information.first_name,
        profile.personal_information.last_name,
    )
    return profile
