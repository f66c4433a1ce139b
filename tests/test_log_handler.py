import logging

from imagequiz.database import transaction
from imagequiz.log_handler import SQLiteHandler


def test_sqlite_handler_writes_rows():
    logger = logging.getLogger("imagequiz.test_log_handler")
    handler = SQLiteHandler()
    handler.setFormatter(logging.Formatter("%(levelname)s - %(message)s"))
    logger.addHandler(handler)
    try:
        logger.warning("upload rejected")
    finally:
        logger.removeHandler(handler)

    with transaction() as conn:
        rows = conn.execute("SELECT level, logger, message FROM logs").fetchall()
    assert [(r["level"], r["logger"], r["message"]) for r in rows] == [
        ("WARNING", "imagequiz.test_log_handler", "WARNING - upload rejected")
    ]


def test_app_logs_to_database_when_enabled(client_factory):
    with client_factory(LOG_TO_DB=True) as client:
        client.post("/api/register", json={"username": "admin", "password": "Admin@quiz99"})

    with transaction() as conn:
        messages = [r["message"] for r in conn.execute("SELECT message FROM logs")]
    assert any("Registered user admin" in m for m in messages)
