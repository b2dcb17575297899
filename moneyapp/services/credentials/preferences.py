"""
Session Preferences

Non-secret session bookkeeping (last user id, last login time) that lives
outside the keychain. Backed by a small JSON file in the per-user config
directory, or by memory only when no path is given.

DESIGN DECISION: Nothing secret is ever written here. Tokens belong in
the credential store.
"""

import json
import threading
from pathlib import Path
from typing import Optional

import structlog


USER_ID_KEY = "user_id"
LAST_LOGIN_KEY = "last_login"


class SessionPreferences:
    """Small persistent string key/value store."""

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._logger = structlog.get_logger("moneyapp.preferences")
        self._values: dict[str, str] = self._load()

    @property
    def path(self) -> Optional[Path]:
        return self._path

    def _load(self) -> dict[str, str]:
        if self._path is None or not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            self._logger.warning(
                "preferences_unreadable",
                path=str(self._path),
                error_type=type(e).__name__,
            )
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): str(v) for k, v in data.items()}

    def _flush(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            json.dumps(self._values, indent=2, sort_keys=True) + "\n",
            encoding="utf-8",
        )

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value
            self._flush()

    def remove(self, *keys: str) -> None:
        """Remove ``keys``; absent keys are ignored."""
        with self._lock:
            changed = False
            for key in keys:
                if self._values.pop(key, None) is not None:
                    changed = True
            if changed:
                self._flush()
