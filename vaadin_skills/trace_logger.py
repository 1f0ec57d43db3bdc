"""
Trace Logger — SQLite audit trail of every documentation tool call.
"""

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

# Stored results are truncated to keep the audit database small
MAX_RESULT_CHARS = 4000


class TraceLogger:
    """Records every tool invocation, its outcome and duration to SQLite."""

    def __init__(self, db_path: Optional[str] = None):
        if db_path is None:
            db_path = str(Path(__file__).parent.parent / "data" / "trace.db")

        if db_path != ":memory:":
            os.makedirs(os.path.dirname(os.path.abspath(db_path)), exist_ok=True)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._create_table()

    def _create_table(self):
        with self._lock:
            self.conn.executescript("""
                CREATE TABLE IF NOT EXISTS traces (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    timestamp TEXT,
                    tool TEXT,
                    args TEXT,
                    result TEXT,
                    status TEXT,
                    duration_ms REAL,
                    session_id TEXT
                );
                CREATE INDEX IF NOT EXISTS idx_traces_tool ON traces (tool);
                CREATE INDEX IF NOT EXISTS idx_traces_session ON traces (session_id);
            """)

    def log(
        self,
        tool: str,
        args: dict,
        result: str,
        status: str = "ok",
        duration_ms: float = 0.0,
        session_id: str = "",
    ):
        """Insert a trace record."""
        with self._lock:
            self.conn.execute(
                """INSERT INTO traces (timestamp, tool, args, result, status, duration_ms, session_id)
                   VALUES (?, ?, ?, ?, ?, ?, ?)""",
                (
                    datetime.now(timezone.utc).isoformat(),
                    tool,
                    json.dumps(args, ensure_ascii=False, default=str),
                    (result or "")[:MAX_RESULT_CHARS],
                    status,
                    round(duration_ms, 3),
                    session_id,
                ),
            )
            self.conn.commit()

    def query(
        self,
        tool: Optional[str] = None,
        session_id: Optional[str] = None,
        status: Optional[str] = None,
        since: Optional[str] = None,
        until: Optional[str] = None,
        limit: Optional[int] = 50,
        newest_first: bool = True,
    ) -> List[Dict]:
        """Trace records matching every given filter.

        *since* and *until* are ISO timestamps (or dates), both inclusive; a
        bare *until* date covers that whole day (UTC).
        """
        clauses = []
        params: list = []
        for column, value in (("tool", tool), ("session_id", session_id), ("status", status)):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        if since:
            clauses.append("timestamp >= ?")
            params.append(since)
        if until and len(until) == 10:
            clauses.append("substr(timestamp, 1, 10) <= ?")
            params.append(until)
        elif until:
            clauses.append("timestamp <= ?")
            params.append(until)

        sql = "SELECT * FROM traces"
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY id " + ("DESC" if newest_first else "ASC")
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)

        with self._lock:
            rows = self.conn.execute(sql, params).fetchall()
        return [dict(r) for r in rows]

    def get_recent(self, limit: int = 10) -> List[Dict]:
        return self.query(limit=limit)

    def export_json(self, **filters) -> str:
        """All records matching *filters* (see query), oldest first, as JSON."""
        filters.setdefault("limit", None)
        rows = self.query(newest_first=False, **filters)
        return json.dumps(rows, ensure_ascii=False, indent=2)

    def summary(self) -> List[Dict]:
        """Per-tool call count, error count and mean duration."""
        with self._lock:
            rows = self.conn.execute(
                """SELECT tool,
                          COUNT(*) AS calls,
                          SUM(CASE WHEN status = 'error' THEN 1 ELSE 0 END) AS errors,
                          AVG(duration_ms) AS avg_duration_ms
                   FROM traces GROUP BY tool ORDER BY tool"""
            ).fetchall()
        return [dict(r) for r in rows]

    def close(self):
        self.conn.close()
