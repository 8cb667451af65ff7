# Core - Application State Store
#
# Key/value persistence for the dashboard's application state.
# Values are JSON-encoded. The vault writes its whole snapshot
# (vaultPin + passwords) after every mutation via set_many().

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .db import transaction

logger = logging.getLogger(__name__)

# Well-known state keys
KEY_VAULT_PIN = "vaultPin"
KEY_PASSWORDS = "passwords"


class AppStateStore:
    """SQLite key/value store for application state.

    Args:
        db_path: Path to SQLite file. None keeps the state in memory only.
    """

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        self.db_path = Path(db_path) if db_path is not None else None
        self._memory: Dict[str, str] = {}
        if self.db_path is not None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._init_database()

    def _init_database(self):
        with transaction(self.db_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)

    @property
    def is_persistent(self) -> bool:
        return self.db_path is not None

    def get(self, key: str, default: Any = None) -> Any:
        """Get a decoded value by key. Returns default if not found."""
        if self.db_path is None:
            raw = self._memory.get(key)
        else:
            with transaction(self.db_path) as conn:
                row = conn.execute(
                    "SELECT value FROM app_state WHERE key = ?", (key,)
                ).fetchone()
            raw = row["value"] if row is not None else None
        if raw is None:
            return default
        return json.loads(raw)

    def set(self, key: str, value: Any) -> None:
        """Set a value (upsert)."""
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, Any]) -> None:
        """Upsert several keys in one transaction."""
        encoded = {key: json.dumps(value) for key, value in values.items()}
        if self.db_path is None:
            self._memory.update(encoded)
            return

        now = datetime.now(timezone.utc).isoformat()
        with transaction(self.db_path) as conn:
            conn.executemany(
                """INSERT INTO app_state (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                [(key, raw, now) for key, raw in encoded.items()],
            )
        logger.debug("State snapshot written: %s", ", ".join(sorted(encoded)))

    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if it existed."""
        if self.db_path is None:
            return self._memory.pop(key, None) is not None
        with transaction(self.db_path) as conn:
            cursor = conn.execute("DELETE FROM app_state WHERE key = ?", (key,))
            return cursor.rowcount > 0

    def get_all(self) -> Dict[str, Any]:
        """Return every key with its decoded value."""
        if self.db_path is None:
            return {key: json.loads(raw) for key, raw in sorted(self._memory.items())}
        with transaction(self.db_path) as conn:
            rows = conn.execute(
                "SELECT key, value FROM app_state ORDER BY key"
            ).fetchall()
        return {row["key"]: json.loads(row["value"]) for row in rows}
