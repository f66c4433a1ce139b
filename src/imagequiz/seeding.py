import logging
import mimetypes
import os
from typing import Optional

import pandas as pd

from .config import settings
from .errors import QuizError
from .images import ImageStore

logger = logging.getLogger("imagequiz.seeding")

MANIFEST_FILE = "labels.csv"
TRUE_LABELS = {"true", "1", "yes", "correct"}
FALSE_LABELS = {"false", "0", "no", "incorrect"}


def _parse_label(value) -> bool:
    label = str(value).strip().lower()
    if label in TRUE_LABELS:
        return True
    if label in FALSE_LABELS:
        return False
    raise ValueError(f"unrecognised is_correct value '{value}'")


class SeedLibrary:
    """Imports a directory of labelled images described by a labels.csv manifest."""

    def __init__(self, image_store: ImageStore, directory: Optional[str] = None):
        self.image_store = image_store
        self._directory = directory

    @property
    def directory(self) -> str:
        return self._directory or settings.SEED_DIR

    def load_all(self) -> int:
        """Imports the manifest when the store is empty. Returns the number imported."""
        manifest_path = os.path.join(self.directory, MANIFEST_FILE)
        if not os.path.exists(manifest_path):
            return 0
        if self.image_store.count() > 0:
            logger.info("Image store already populated; skipping seed import.")
            return 0

        try:
            df = pd.read_csv(manifest_path, encoding="utf-8")
        except Exception as e:
            logger.error(f"Failed to read {manifest_path}: {e}")
            return 0
        if "filename" not in df.columns or "is_correct" not in df.columns:
            logger.error(f"Skipping {manifest_path}: Missing columns.")
            return 0

        imported = 0
        for row in df.to_dict("records"):
            filename = str(row["filename"])
            file_path = os.path.join(self.directory, filename)
            try:
                is_correct = _parse_label(row["is_correct"])
                with open(file_path, "rb") as f:
                    data = f.read()
                content_type, _ = mimetypes.guess_type(filename)
                self.image_store.upload(data, filename, is_correct, content_type)
                imported += 1
            except (OSError, ValueError, QuizError) as e:
                logger.error(f"Skipping seed image {filename}: {e}")

        logger.info(f"Imported {imported} seed image(s) from {self.directory}")
        return imported
