from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional

from .models import AlarmRecord

logger = logging.getLogger(__name__)


def _read_items(path: Path) -> Optional[list]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        logger.error("Failed to load alarms from %s: %s", path, exc)
        return None
    if not isinstance(payload, list):
        logger.error("Alarm storage %s must hold a JSON list, got %s", path, type(payload).__name__)
        return None
    return payload


def load_records(path: Path) -> List[AlarmRecord]:
    """Read stored alarms in display order; unreadable files and items are skipped."""
    if not path.exists():
        return []
    items = _read_items(path)
    if items is None:
        return []
    records: List[AlarmRecord] = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            logger.warning("Skipping alarm item %s: expected an object", position)
            continue
        try:
            records.append(AlarmRecord.from_dict(item))
        except (TypeError, ValueError) as exc:
            logger.warning("Skipping alarm item %s due to parse error: %s", position, exc)
    return records


def save_records(path: Path, records: Iterable[AlarmRecord]) -> None:
    """Replace the storage file in one step so readers never see a partial list."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps([r.to_dict() for r in records], ensure_ascii=False, indent=2)
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
