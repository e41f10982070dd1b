"""Best-effort local snapshot of records and mistakes."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

STATE_VERSION = 1


class LocalStateStore:
    """Versioned JSON file. Failures are logged, never raised."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, records: Dict[str, Any], mistakes: Dict[str, Any]) -> bool:
        document = {"version": STATE_VERSION, "records": records, "mistakes": mistakes}
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(document), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save local state to %s", self.path)
            return False
        return True

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            logger.exception("Failed to read local state from %s", self.path)
            return None

        try:
            document = json.loads(raw)
        except ValueError:
            logger.error("Local state at %s is not valid JSON, ignoring it", self.path)
            return None

        if not isinstance(document, dict) or document.get("version") != STATE_VERSION:
            logger.warning("Local state version mismatch, resetting progress")
            return None
        return document

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError:
            logger.exception("Failed to clear local state at %s", self.path)


__all__ = ["LocalStateStore", "STATE_VERSION"]
