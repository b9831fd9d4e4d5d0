"""
Schedule persistence as a JSON file.

Rule order is part of a schedule's meaning and is written back exactly as loaded.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from status_scheduler.schedule.errors import InvalidScheduleError
from status_scheduler.schedule.models import ScheduleDocument, document_to_dict

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def load_schedule(path: PathLike) -> Any:
    """Read a schedule document (unvalidated plain data) from a JSON file."""
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise InvalidScheduleError([f"Schedule file not found: {path}"]) from e
    except json.JSONDecodeError as e:
        raise InvalidScheduleError([f"Schedule file is not valid JSON: {path}: {e}"]) from e
    logger.debug("Loaded schedule from %s", path)
    return data


def save_schedule(path: PathLike, document: Union[ScheduleDocument, Dict[str, Any]]) -> None:
    """Write a schedule document as indented JSON (temp file + rename)."""
    path = Path(path)
    data = document_to_dict(document) if isinstance(document, ScheduleDocument) else document
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=".schedule_", suffix=".json", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except OSError:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise
    logger.debug("Saved schedule to %s", path)
