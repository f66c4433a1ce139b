import logging
import os
import time
import uuid
from datetime import datetime
from typing import List, Optional

from .config import settings
from .database import transaction
from .errors import NotFound, StorageError, ValidationError
from .models import Image
from .progress import ProgressStore

logger = logging.getLogger("imagequiz.images")

UPLOAD_URL_PREFIX = "/uploads/"
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp", ".bmp"}


def _row_to_image(row) -> Image:
    return Image(
        id=row["id"],
        image_path=row["image_path"],
        is_correct=bool(row["is_correct"]),
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class ImageStore:
    """Image records plus the uploaded files backing them."""

    def __init__(self, progress_store: ProgressStore, upload_dir: Optional[str] = None):
        self.progress_store = progress_store
        self._upload_dir = upload_dir

    @property
    def upload_dir(self) -> str:
        return self._upload_dir or settings.UPLOAD_DIR

    def upload(
        self,
        data: bytes,
        filename: str,
        is_correct: bool,
        content_type: Optional[str] = None,
    ) -> Image:
        if not data:
            raise ValidationError("No image data received.")
        if content_type and not content_type.startswith("image/"):
            raise ValidationError(f"Unsupported content type: {content_type}")

        ext = os.path.splitext(filename or "")[1].lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ValidationError(f"Unsupported image extension: '{ext or filename}'")

        stored_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"
        try:
            os.makedirs(self.upload_dir, exist_ok=True)
            with open(os.path.join(self.upload_dir, stored_name), "wb") as f:
                f.write(data)
        except OSError as e:
            raise StorageError(f"Could not store image file: {e}") from e

        image = Image(
            id=uuid.uuid4().hex,
            image_path=UPLOAD_URL_PREFIX + stored_name,
            is_correct=is_correct,
            created_at=datetime.now(),
        )
        try:
            with transaction() as conn:
                conn.execute(
                    "INSERT INTO images (id, image_path, is_correct, created_at) VALUES (?, ?, ?, ?)",
                    (
                        image.id,
                        image.image_path,
                        int(image.is_correct),
                        image.created_at.isoformat(),
                    ),
                )
        except StorageError:
            self._remove_file(image)
            raise
        logger.info(
            f"Uploaded {filename} as {image.image_path} "
            f"[{'correct' if is_correct else 'incorrect'}]"
        )
        return image

    def list(self) -> List[Image]:
        """All images in creation order."""
        with transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM images ORDER BY created_at, rowid"
            ).fetchall()
        return [_row_to_image(row) for row in rows]

    def count(self) -> int:
        with transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM images").fetchone()[0]

    def get(self, image_id: str) -> Image:
        with transaction() as conn:
            row = conn.execute(
                "SELECT * FROM images WHERE id = ?", (image_id,)
            ).fetchone()
        if row is None:
            raise NotFound("Image not found")
        return _row_to_image(row)

    def update(self, image_id: str, is_correct: bool) -> Image:
        with transaction() as conn:
            cursor = conn.execute(
                "UPDATE images SET is_correct = ? WHERE id = ?",
                (int(is_correct), image_id),
            )
        if cursor.rowcount == 0:
            raise NotFound("Image not found")
        logger.info(f"Image {image_id} marked {'correct' if is_correct else 'incorrect'}")
        return self.get(image_id)

    def delete(self, image_id: str):
        """
        Removes the record and invalidates every quiz session's progress.
        The file is removed best-effort.
        """
        image = self.get(image_id)
        self._remove_file(image)

        with transaction() as conn:
            conn.execute("DELETE FROM images WHERE id = ?", (image_id,))
        cleared = self.progress_store.clear_all()
        logger.info(f"Deleted image {image_id}; cleared {cleared} progress record(s)")

    def _remove_file(self, image: Image):
        if not image.image_path.startswith(UPLOAD_URL_PREFIX):
            logger.warning(f"Image {image.id} has no local file: {image.image_path}")
            return
        file_path = os.path.join(
            self.upload_dir, image.image_path[len(UPLOAD_URL_PREFIX):]
        )
        try:
            os.remove(file_path)
        except OSError as e:
            logger.error(f"Error deleting image file {file_path}: {e}")
