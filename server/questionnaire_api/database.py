"""SQLite storage for submitted questionnaires."""
import json
import os
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List
import logging

from .config import Settings, get_settings

log = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS questionnaire_data (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    data_type TEXT NOT NULL,
    has_excessive_fatigue INTEGER NOT NULL,
    crash_duration TEXT,
    completion_status TEXT NOT NULL,
    questionnaire_version TEXT NOT NULL,
    payload TEXT NOT NULL,
    received_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_questionnaire_user_time
    ON questionnaire_data (user_id, timestamp);
"""


class DatabaseManager:
    """
    SQLite manager for questionnaire submissions.

    The schema is created on first connection, so constructing a manager
    never touches the filesystem.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._schema_ready = False
        self._lock = threading.Lock()

    @contextmanager
    def connect(self) -> Generator[sqlite3.Connection, None, None]:
        """Open a connection; commits on success, rolls back on error."""
        os.makedirs(self.settings.data_path, exist_ok=True)
        conn = sqlite3.connect(self.settings.db_path, check_same_thread=False)
        conn.row_factory = sqlite3.Row  # Enable dict-like row access
        try:
            self._ensure_schema(conn)
            yield conn
            conn.commit()
        finally:
            conn.close()

    def _ensure_schema(self, conn: sqlite3.Connection) -> None:
        with self._lock:
            if self._schema_ready:
                return
            conn.executescript(SCHEMA)
            self._schema_ready = True
            log.info(f"[DB] Schema ready at {self.settings.db_path}")

    def insert_questionnaire(self, payload: Dict[str, Any]) -> int:
        """
        Store one questionnaire payload (camelCase keys, as received).

        Returns:
            The new row id
        """
        received_at = datetime.now(timezone.utc).isoformat()
        with self.connect() as conn:
            cursor = conn.execute(
                """
                INSERT INTO questionnaire_data (
                    user_id, timestamp, data_type, has_excessive_fatigue,
                    crash_duration, completion_status, questionnaire_version,
                    payload, received_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    payload["userId"],
                    payload["timestamp"],
                    payload["dataType"],
                    int(bool(payload["hasExcessiveFatigue"])),
                    payload.get("crashDuration"),
                    payload["completionStatus"],
                    payload["questionnaireVersion"],
                    json.dumps(payload, ensure_ascii=False),
                    received_at,
                ),
            )
            record_id = cursor.lastrowid
        log.info(f"[DB] Stored questionnaire {record_id} for {payload['userId']}")
        return record_id

    def list_questionnaires(self, user_id: str, limit: int) -> List[Dict[str, Any]]:
        """Most recent questionnaires of a user, newest first."""
        with self.connect() as conn:
            rows = conn.execute(
                """
                SELECT id, user_id, received_at, payload FROM questionnaire_data
                WHERE user_id = ?
                ORDER BY timestamp DESC, id DESC
                LIMIT ?
                """,
                (user_id, limit),
            ).fetchall()

        return [
            {
                "id": row["id"],
                "user_id": row["user_id"],
                "received_at": row["received_at"],
                "submission": json.loads(row["payload"]),
            }
            for row in rows
        ]
