"""SQLite-backed history of completed quiz attempts."""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import Optional

from studydash.engine.models import QuestionResponse, QuizAttempt


class AttemptStore:
    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path or (Path.home() / ".studydash" / "attempts.db")
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        with self._conn() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS attempts (
                    id TEXT PRIMARY KEY,
                    student_id TEXT NOT NULL,
                    subject TEXT NOT NULL,
                    topic TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    score REAL DEFAULT 0,
                    time_spent REAL DEFAULT 0
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS responses (
                    id TEXT PRIMARY KEY,
                    attempt_id TEXT NOT NULL REFERENCES attempts(id),
                    position INTEGER NOT NULL,
                    question TEXT NOT NULL,
                    student_answer TEXT NOT NULL,
                    correct_answer TEXT NOT NULL,
                    is_correct INTEGER NOT NULL,
                    answered_at TEXT NOT NULL
                )
            """)

    def _conn(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def save(self, attempt: QuizAttempt) -> None:
        """Store a completed attempt, replacing any earlier copy."""
        if not attempt.is_complete:
            raise ValueError(f"Attempt {attempt.id} is not complete")
        with self._conn() as conn:
            conn.execute(
                """INSERT OR REPLACE INTO attempts
                   (id, student_id, subject, topic, started_at, completed_at, score, time_spent)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (attempt.id, attempt.student_id, attempt.subject, attempt.topic,
                 attempt.started_at, attempt.completed_at, attempt.score, attempt.time_spent),
            )
            conn.execute("DELETE FROM responses WHERE attempt_id = ?", (attempt.id,))
            conn.executemany(
                """INSERT INTO responses
                   (id, attempt_id, position, question, student_answer, correct_answer,
                    is_correct, answered_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                [
                    (r.id, attempt.id, i, r.question, r.student_answer, r.correct_answer,
                     int(r.is_correct), r.answered_at)
                    for i, r in enumerate(attempt.responses)
                ],
            )

    def _responses(self, conn: sqlite3.Connection, attempt_id: str) -> list[QuestionResponse]:
        rows = conn.execute(
            """SELECT id, attempt_id, question, student_answer, correct_answer,
                      is_correct, answered_at
               FROM responses WHERE attempt_id = ? ORDER BY position""",
            (attempt_id,),
        ).fetchall()
        return [
            QuestionResponse(
                id=r[0], quiz_attempt_id=r[1], question=r[2], student_answer=r[3],
                correct_answer=r[4], is_correct=bool(r[5]), answered_at=r[6],
            )
            for r in rows
        ]

    def _attempt(self, conn: sqlite3.Connection, row) -> QuizAttempt:
        return QuizAttempt(
            id=row[0], student_id=row[1], subject=row[2], topic=row[3],
            started_at=row[4], completed_at=row[5], score=row[6], time_spent=row[7],
            responses=self._responses(conn, row[0]),
        )

    def get(self, attempt_id: str) -> Optional[QuizAttempt]:
        with self._conn() as conn:
            row = conn.execute(
                "SELECT * FROM attempts WHERE id = ?", (attempt_id,),
            ).fetchone()
            if not row:
                return None
            return self._attempt(conn, row)

    def list_for_student(self, student_id: str) -> list[QuizAttempt]:
        with self._conn() as conn:
            rows = conn.execute(
                "SELECT * FROM attempts WHERE student_id = ? ORDER BY completed_at, rowid",
                (student_id,),
            ).fetchall()
            return [self._attempt(conn, r) for r in rows]

    def summary(self, student_id: str) -> dict:
        """Aggregate a student's attempts.

        Returns dict with keys: attempts, questions, correct, average_score,
        time_spent, last_completed_at. ``attempts`` is 0 for a new student.
        """
        attempts = self.list_for_student(student_id)
        if not attempts:
            return {"attempts": 0}

        questions = sum(len(a.responses) for a in attempts)
        correct = sum(a.correct_count for a in attempts)
        return {
            "attempts": len(attempts),
            "questions": questions,
            "correct": correct,
            "average_score": sum(a.score for a in attempts) / len(attempts),
            "time_spent": sum(a.time_spent for a in attempts),
            "last_completed_at": max(a.completed_at or "" for a in attempts),
        }

    def delete_for_student(self, student_id: str) -> None:
        with self._conn() as conn:
            conn.execute(
                "DELETE FROM responses WHERE attempt_id IN "
                "(SELECT id FROM attempts WHERE student_id = ?)",
                (student_id,),
            )
            conn.execute("DELETE FROM attempts WHERE student_id = ?", (student_id,))
