import logging
from contextlib import contextmanager
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from imagequiz.app import create_app
from imagequiz.auth import create_access_token, user_store
from imagequiz.config import settings
from imagequiz.database import init_db
from imagequiz.models import Image

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "DB_DIR", str(tmp_path / "db"))
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))
    monkeypatch.setattr(settings, "LOG_DIR", str(tmp_path / "log"))
    monkeypatch.setattr(settings, "SEED_DIR", str(tmp_path / "seed"))
    monkeypatch.setattr(settings, "LOG_TO_DB", False)
    monkeypatch.setattr(settings, "JWT_SECRET", "test-secret")
    monkeypatch.setattr(settings, "ADMIN_USERNAME", "")
    monkeypatch.setattr(settings, "ADMIN_PASSWORD", "")
    init_db()
    return settings


@pytest.fixture
def client_factory(monkeypatch):
    """Builds an app after applying setting overrides, e.g. factory(LOG_TO_DB=True)."""

    @contextmanager
    def factory(**overrides):
        for name, value in overrides.items():
            monkeypatch.setattr(settings, name, value)
        app = create_app()
        try:
            with TestClient(app) as c:
                yield c
        finally:
            app_logger = logging.getLogger("imagequiz")
            for handler in list(app_logger.handlers):
                app_logger.removeHandler(handler)
                handler.close()

    return factory


@pytest.fixture
def client(client_factory):
    with client_factory() as c:
        yield c


@pytest.fixture
def admin_headers():
    user = user_store.register("admin", "Admin@quiz99")
    return {"Authorization": f"Bearer {create_access_token(user)}"}


def make_images(*flags):
    """Builds in-memory images, e.g. make_images(True, True, False) -> C1, C2, I1."""
    base = datetime(2024, 1, 1)
    images = []
    counts = {True: 0, False: 0}
    for i, flag in enumerate(flags):
        counts[flag] += 1
        prefix = "C" if flag else "I"
        images.append(
            Image(
                id=f"{prefix}{counts[flag]}",
                image_path=f"/uploads/{prefix}{counts[flag]}.png",
                is_correct=flag,
                created_at=base + timedelta(seconds=i),
            )
        )
    return images
