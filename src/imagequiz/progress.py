import json
import logging
from datetime import datetime, timedelta
from typing import List

from .config import settings
from .database import transaction
from .models import QuizProgress

logger = logging.getLogger("imagequiz.progress")


class ProgressStore:
    """Shown-ids records, one per quiz session."""

    def get(self, session_id: str) -> QuizProgress:
        """
        Returns the session's progress. A missing or idle-expired record comes
        back empty; nothing is written until ``save``.
        """
        with transaction() as conn:
            row = conn.execute(
                "SELECT shown_image_ids, updated_at FROM quiz_progress WHERE session_id = ?",
                (session_id,),
            ).fetchone()

            if row is None:
                return QuizProgress(session_id=session_id, updated_at=datetime.now())

            updated_at = datetime.fromisoformat(row["updated_at"])
            if datetime.now() - updated_at > timedelta(
                minutes=settings.SESSION_TIMEOUT_MINUTES
            ):
                conn.execute(
                    "DELETE FROM quiz_progress WHERE session_id = ?", (session_id,)
                )
                logger.info(f"Expired progress for session {session_id}")
                return QuizProgress(session_id=session_id, updated_at=datetime.now())

        return QuizProgress(
            session_id=session_id,
            shown_image_ids=json.loads(row["shown_image_ids"]),
            updated_at=updated_at,
        )

    def save(self, session_id: str, shown_image_ids: List[str]) -> QuizProgress:
        now = datetime.now()
        with transaction() as conn:
            conn.execute(
                """
                INSERT INTO quiz_progress (session_id, shown_image_ids, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(session_id) DO UPDATE SET
                    shown_image_ids = excluded.shown_image_ids,
                    updated_at = excluded.updated_at
                """,
                (session_id, json.dumps(shown_image_ids), now.isoformat()),
            )
        return QuizProgress(
            session_id=session_id, shown_image_ids=shown_image_ids, updated_at=now
        )

    def clear(self, session_id: str):
        with transaction() as conn:
            conn.execute("DELETE FROM quiz_progress WHERE session_id = ?", (session_id,))

    def clear_all(self) -> int:
        """Drops every session's progress; used when the image set shrinks."""
        with transaction() as conn:
            cursor = conn.execute("DELETE FROM quiz_progress")
        return cursor.rowcount
