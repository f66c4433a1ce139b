import logging

from .database import transaction


class SQLiteHandler(logging.Handler):
    """
    Mirrors quiz log records into the ``logs`` table so admins can audit
    uploads, deletions and failed logins from the database alone.
    """

    def __init__(self, level=logging.INFO):
        super().__init__(level)

    def emit(self, record):
        try:
            message = self.format(record)
            with transaction() as conn:
                conn.execute(
                    "INSERT INTO logs (level, logger, message) VALUES (?, ?, ?)",
                    (record.levelname, record.name, message),
                )
        except Exception:
            self.handleError(record)
