from __future__ import annotations

import json
import os
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Any

from resumedoc.core.config import settings

# Writes are last-write-wins: two concurrent saves of one section both succeed and the later one stays.


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dumps(value: Any) -> str | None:
    return None if value is None else json.dumps(value, ensure_ascii=False)


def _loads(value: str | None) -> Any:
    return json.loads(value) if value else None


def _job_clause(job_id: str | None) -> tuple[str, tuple[Any, ...]]:
    if job_id is None:
        return "job_id IS NULL", ()
    return "job_id = ?", (job_id,)


class WorkspaceStore:
    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None
        self._lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        with self._lock:
            if self._conn is not None:
                return self._conn

            directory = os.path.dirname(self.db_path)
            if directory:
                os.makedirs(directory, exist_ok=True)

            conn = sqlite3.connect(
                self.db_path,
                check_same_thread=False,
                timeout=5,
                isolation_level=None,
            )
            conn.execute("PRAGMA journal_mode=WAL;")
            conn.execute("PRAGMA synchronous=NORMAL;")
            conn.execute("PRAGMA busy_timeout=5000;")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS resumes (
                    resume_id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    sections_json TEXT NOT NULL,
                    removed_by_user INTEGER NOT NULL DEFAULT 0,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS section_states (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    resume_id TEXT NOT NULL,
                    section_heading TEXT NOT NULL,
                    job_id TEXT,
                    ai_suggestions_json TEXT,
                    final_updated_json TEXT,
                    raw_data_json TEXT,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_section_states_lookup
                ON section_states (resume_id, section_heading, job_id);
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS resume_scores (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    resume_id TEXT NOT NULL,
                    job_id TEXT,
                    score_type TEXT NOT NULL,
                    overall_score INTEGER NOT NULL,
                    breakdown_json TEXT NOT NULL,
                    suggestions_json TEXT,
                    improvement_areas_json TEXT,
                    keyword_coverage_json TEXT,
                    comparison_score INTEGER,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_resume_scores_lookup
                ON resume_scores (resume_id, job_id);
                """
            )
            self._conn = conn
            return conn

    def close(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    # Resumes

    def create_resume(self, *, resume_id: str, name: str, sections: list[dict[str, Any]]) -> None:
        conn = self._get_connection()
        now = _utc_now()
        with self._lock:
            conn.execute(
                """
                INSERT INTO resumes (resume_id, name, sections_json, removed_by_user, created_at, updated_at)
                VALUES (?, ?, ?, 0, ?, ?)
                """,
                (resume_id, name, _dumps(sections), now, now),
            )

    def get_resume(self, resume_id: str) -> dict[str, Any] | None:
        conn = self._get_connection()
        with self._lock:
            row = conn.execute(
                """
                SELECT resume_id, name, sections_json, created_at, updated_at
                FROM resumes
                WHERE resume_id = ? AND removed_by_user = 0
                """,
                (resume_id,),
            ).fetchone()
        if not row:
            return None
        return {
            "resume_id": row[0],
            "name": row[1],
            "sections": _loads(row[2]) or [],
            "created_at": row[3],
            "updated_at": row[4],
        }

    def soft_delete_resume(self, resume_id: str) -> bool:
        conn = self._get_connection()
        with self._lock:
            cur = conn.execute(
                """
                UPDATE resumes SET removed_by_user = 1, updated_at = ?
                WHERE resume_id = ? AND removed_by_user = 0
                """,
                (_utc_now(), resume_id),
            )
        return bool(cur.rowcount)

    # Section states; job_id None is the job-agnostic review variant.

    def get_section_state(
        self, resume_id: str, section_heading: str, job_id: str | None = None
    ) -> dict[str, Any] | None:
        conn = self._get_connection()
        clause, params = _job_clause(job_id)
        with self._lock:
            row = conn.execute(
                f"""
                SELECT ai_suggestions_json, final_updated_json, raw_data_json, updated_at
                FROM section_states
                WHERE resume_id = ? AND section_heading = ? AND {clause}
                ORDER BY id DESC
                LIMIT 1
                """,
                (resume_id, section_heading, *params),
            ).fetchone()
        if not row:
            return None
        return {
            "ai_suggestions": _loads(row[0]),
            "final_updated": _loads(row[1]),
            "raw_data": _loads(row[2]),
            "updated_at": row[3],
        }

    def save_section_state(
        self,
        resume_id: str,
        section_heading: str,
        job_id: str | None = None,
        *,
        ai_suggestions: Any = None,
        final_updated: Any = None,
        raw_data: Any = None,
    ) -> None:
        """Insert or overwrite the state row; None arguments keep the stored value."""
        conn = self._get_connection()
        clause, params = _job_clause(job_id)
        now = _utc_now()
        with self._lock:
            row = conn.execute(
                f"SELECT id FROM section_states WHERE resume_id = ? AND section_heading = ? AND {clause}",
                (resume_id, section_heading, *params),
            ).fetchone()
            if row is None:
                conn.execute(
                    """
                    INSERT INTO section_states (
                        resume_id, section_heading, job_id, ai_suggestions_json, final_updated_json,
                        raw_data_json, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        resume_id,
                        section_heading,
                        job_id,
                        _dumps(ai_suggestions),
                        _dumps(final_updated),
                        _dumps(raw_data),
                        now,
                    ),
                )
                return
            conn.execute(
                """
                UPDATE section_states SET
                    ai_suggestions_json = COALESCE(?, ai_suggestions_json),
                    final_updated_json = COALESCE(?, final_updated_json),
                    raw_data_json = COALESCE(?, raw_data_json),
                    updated_at = ?
                WHERE id = ?
                """,
                (_dumps(ai_suggestions), _dumps(final_updated), _dumps(raw_data), now, row[0]),
            )

    def list_final_updates(self, resume_id: str, job_id: str | None = None) -> dict[str, Any]:
        """Committed section documents keyed by heading."""
        conn = self._get_connection()
        clause, params = _job_clause(job_id)
        with self._lock:
            rows = conn.execute(
                f"""
                SELECT section_heading, final_updated_json
                FROM section_states
                WHERE resume_id = ? AND {clause} AND final_updated_json IS NOT NULL
                """,
                (resume_id, *params),
            ).fetchall()
        return {row[0]: _loads(row[1]) for row in rows}

    # Scores

    def get_score(self, resume_id: str, job_id: str | None = None) -> dict[str, Any] | None:
        conn = self._get_connection()
        clause, params = _job_clause(job_id)
        with self._lock:
            row = conn.execute(
                f"""
                SELECT score_type, overall_score, breakdown_json, suggestions_json, improvement_areas_json,
                       keyword_coverage_json, comparison_score, created_at, updated_at
                FROM resume_scores
                WHERE resume_id = ? AND {clause}
                ORDER BY id DESC
                LIMIT 1
                """,
                (resume_id, *params),
            ).fetchone()
        if not row:
            return None
        return {
            "score_type": row[0],
            "overall_score": row[1],
            "breakdown": _loads(row[2]),
            "suggestions": _loads(row[3]) or [],
            "improvement_areas": _loads(row[4]) or [],
            "keyword_coverage": _loads(row[5]),
            "comparison_score": row[6],
            "created_at": row[7],
            "updated_at": row[8],
        }

    def save_score(
        self,
        resume_id: str,
        job_id: str | None,
        *,
        score_type: str,
        overall_score: int,
        breakdown: dict[str, Any],
        suggestions: list[str],
        improvement_areas: list[str],
        keyword_coverage: dict[str, Any] | None = None,
        comparison_score: int | None = None,
    ) -> None:
        conn = self._get_connection()
        clause, params = _job_clause(job_id)
        now = _utc_now()
        values = (
            score_type,
            overall_score,
            _dumps(breakdown),
            _dumps(suggestions),
            _dumps(improvement_areas),
            _dumps(keyword_coverage),
            comparison_score,
        )
        with self._lock:
            row = conn.execute(
                f"SELECT id FROM resume_scores WHERE resume_id = ? AND {clause}",
                (resume_id, *params),
            ).fetchone()
            if row is None:
                conn.execute(
                    """
                    INSERT INTO resume_scores (
                        score_type, overall_score, breakdown_json, suggestions_json, improvement_areas_json,
                        keyword_coverage_json, comparison_score, resume_id, job_id, created_at, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (*values, resume_id, job_id, now, now),
                )
                return
            conn.execute(
                """
                UPDATE resume_scores SET
                    score_type = ?, overall_score = ?, breakdown_json = ?, suggestions_json = ?,
                    improvement_areas_json = ?, keyword_coverage_json = ?, comparison_score = ?, updated_at = ?
                WHERE id = ?
                """,
                (*values, now, row[0]),
            )


_store: WorkspaceStore | None = None
_store_lock = threading.Lock()


def get_workspace_store() -> WorkspaceStore:
    global _store
    with _store_lock:
        if _store is None:
            _store = WorkspaceStore(settings.workspace_db_path)
        return _store


def configure_workspace_store(db_path: str) -> WorkspaceStore:
    """Swap the process-wide store, closing the previous connection."""
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
        _store = WorkspaceStore(db_path)
        return _store
