"""
State store for the watcher.

Persists the mapping of known program ids plus the last-run timestamp
as a single JSON document. Loading never fails: a missing, unreadable or
malformed file yields a fresh empty state. Saves are atomic (temp file
then replace) so a reader sees either the old or the new document.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog

from h1_watcher.models.config import DEFAULT_STATE_PATH
from h1_watcher.models.program import WatcherState, utc_now_iso

logger = structlog.get_logger()

REASON_MISSING = "missing"
REASON_UNREADABLE = "unreadable"
REASON_INVALID_JSON = "invalid_json"
REASON_INVALID_STRUCTURE = "invalid_structure"


class StateStore:
    """
    Load and save watcher state.

    Attributes:
        path: Location of the state file.
        last_load_reason: Why the most recent load() fell back to an empty
            state, or None if the file was loaded as-is.
    """

    def __init__(self, path: Union[str, Path] = DEFAULT_STATE_PATH):
        self.path = Path(path)
        self.last_load_reason: Optional[str] = None

    def load(self) -> WatcherState:
        """
        Load state from disk.

        Returns:
            Persisted state, or a fresh empty state when the file is
            missing or invalid
        """
        if not self.path.exists():
            logger.info("state_not_found", path=str(self.path))
            return self._fresh(REASON_MISSING)

        try:
            raw = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("state_read_error", path=str(self.path), error=str(e))
            return self._fresh(REASON_UNREADABLE)

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning("state_invalid_json", path=str(self.path), error=str(e))
            return self._fresh(REASON_INVALID_JSON)

        if not self._has_valid_structure(data):
            logger.warning("state_invalid_structure", path=str(self.path))
            return self._fresh(REASON_INVALID_STRUCTURE)

        last_run = data.get("last_run")
        state = WatcherState(
            programs=data["programs"],
            last_run=last_run if isinstance(last_run, str) else None,
        )
        self.last_load_reason = None

        logger.info(
            "state_loaded",
            path=str(self.path),
            known_programs=state.tracked_count,
            last_run=state.last_run,
        )
        return state

    def save(self, state: WatcherState) -> None:
        """
        Save state atomically, stamping last_run with the current time.

        Args:
            state: State to persist (last_run is updated in place)
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)

        state.last_run = utc_now_iso()
        payload = json.dumps(state.to_document(), indent=2, ensure_ascii=False) + "\n"

        # Atomic write: write to temp file, then replace
        temp_file = self.path.with_name(self.path.name + ".tmp")
        try:
            temp_file.write_text(payload, encoding="utf-8")
            os.replace(temp_file, self.path)
        except OSError:
            if temp_file.exists():
                temp_file.unlink()
            raise

        logger.info(
            "state_saved",
            path=str(self.path),
            tracked_programs=state.tracked_count,
            last_run=state.last_run,
        )

    def summary(self) -> Dict[str, Any]:
        """Tracked program count and last run, for status reporting."""
        state = self.load()
        return {
            "path": str(self.path),
            "tracked_programs": state.tracked_count,
            "last_run": state.last_run,
            "recovered_reason": self.last_load_reason,
        }

    def _fresh(self, reason: str) -> WatcherState:
        self.last_load_reason = reason
        return WatcherState()

    @staticmethod
    def _has_valid_structure(data: Any) -> bool:
        """Top-level shape only; individual records are not validated."""
        return isinstance(data, dict) and isinstance(data.get("programs"), dict)
