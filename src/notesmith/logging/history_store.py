"""SQLite-backed refine history (developer-facing diagnostics)."""

from __future__ import annotations

import sqlite3
from datetime import datetime
from pathlib import Path

from notesmith.logging.models import RefineRecord

DEFAULT_DB_PATH = Path.home() / ".notesmith" / "history.db"

_COLUMNS = (
    "id, timestamp, document, model_id, provider, endpoint_url, success, "
    "error_kind, status_code, status_text, response_body, error_message, "
    "elapsed_seconds, prompt_chars, output_chars"
)


class RefineHistoryStore:
    """SQLite-backed store for refine diagnostics with WAL mode."""

    def __init__(self, db_path: str | Path = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS refine_history (
                    id TEXT PRIMARY KEY,
                    timestamp TEXT NOT NULL,
                    document TEXT NOT NULL,
                    model_id TEXT NOT NULL DEFAULT '',
                    provider TEXT NOT NULL DEFAULT 'standard',
                    endpoint_url TEXT NOT NULL DEFAULT '',
                    success INTEGER NOT NULL DEFAULT 1,
                    error_kind TEXT,
                    status_code INTEGER,
                    status_text TEXT,
                    response_body TEXT,
                    error_message TEXT,
                    elapsed_seconds REAL NOT NULL DEFAULT 0.0,
                    prompt_chars INTEGER NOT NULL DEFAULT 0,
                    output_chars INTEGER NOT NULL DEFAULT 0
                )
            """)

    def save_record(self, record: RefineRecord) -> None:
        """Persist a refine record."""
        with self._connect() as conn:
            conn.execute(
                f"""INSERT OR REPLACE INTO refine_history ({_COLUMNS})
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    record.id,
                    record.timestamp.isoformat(),
                    record.document,
                    record.model_id,
                    record.provider,
                    record.endpoint_url,
                    1 if record.success else 0,
                    record.error_kind,
                    record.status_code,
                    record.status_text,
                    record.response_body,
                    record.error_message,
                    record.elapsed_seconds,
                    record.prompt_chars,
                    record.output_chars,
                ),
            )

    def get_records(
        self,
        document: str | None = None,
        limit: int = 50,
        failures_only: bool = False,
    ) -> list[RefineRecord]:
        """Retrieve records newest first, optionally filtered."""
        clauses: list[str] = []
        params: list = []
        if document is not None:
            clauses.append("document = ?")
            params.append(document)
        if failures_only:
            clauses.append("success = 0")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM refine_history {where} "
                "ORDER BY timestamp DESC LIMIT ?",
                params,
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_stats(self) -> dict:
        """Aggregate totals, success rate and failure counts per error kind."""
        with self._connect() as conn:
            total, successes, avg_elapsed = conn.execute(
                """SELECT
                       COUNT(*),
                       SUM(CASE WHEN success = 1 THEN 1 ELSE 0 END),
                       AVG(elapsed_seconds)
                   FROM refine_history"""
            ).fetchone()
            by_kind = conn.execute(
                """SELECT error_kind, COUNT(*) FROM refine_history
                   WHERE success = 0 GROUP BY error_kind"""
            ).fetchall()
        total = total or 0
        return {
            "total_runs": total,
            "success_count": successes or 0,
            "success_rate": ((successes or 0) / total * 100) if total else 0.0,
            "avg_elapsed_seconds": round(avg_elapsed, 2) if avg_elapsed is not None else None,
            "failures_by_kind": {kind or "unknown": count for kind, count in by_kind},
        }

    def clear(self) -> int:
        """Delete all records. Returns count of deleted rows."""
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM refine_history")
            return cursor.rowcount

    @staticmethod
    def _row_to_record(row: tuple) -> RefineRecord:
        return RefineRecord(
            id=row[0],
            timestamp=datetime.fromisoformat(row[1]),
            document=row[2],
            model_id=row[3],
            provider=row[4],
            endpoint_url=row[5],
            success=bool(row[6]),
            error_kind=row[7],
            status_code=row[8],
            status_text=row[9],
            response_body=row[10],
            error_message=row[11],
            elapsed_seconds=row[12],
            prompt_chars=row[13],
            output_chars=row[14],
        )
