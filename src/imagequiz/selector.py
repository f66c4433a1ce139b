import logging
from typing import List, Tuple, Union

from .errors import InsufficientData
from .images import ImageStore
from .models import Image, PairResult, ResetSignal
from .progress import ProgressStore

logger = logging.getLogger("imagequiz.selector")

PairOutcome = Union[PairResult, ResetSignal]


def choose_pair(
    images: List[Image], shown_image_ids: List[str]
) -> Tuple[PairOutcome, List[str]]:
    """
    Picks the next correct/incorrect pair for a cycle.

    ``images`` must be in creation order. Returns the outcome together with
    the shown-ids list the caller has to persist. Raises InsufficientData when
    no pair can ever be formed.
    """
    correct_set = [img for img in images if img.is_correct]
    incorrect_set = [img for img in images if not img.is_correct]
    total_pairs = min(len(correct_set), len(incorrect_set))

    if total_pairs == 0:
        raise InsufficientData(
            "Not enough images. Please upload at least one correct and one incorrect image."
        )

    if len(shown_image_ids) >= total_pairs * 2:
        return ResetSignal(), []

    shown = set(shown_image_ids)
    available_correct = [img for img in correct_set if img.id not in shown]
    available_incorrect = [img for img in incorrect_set if img.id not in shown]

    # One side ran dry before the counter did (flags were edited mid-cycle).
    if not available_correct or not available_incorrect:
        return ResetSignal(), []

    correct_image = available_correct[0]
    incorrect_image = available_incorrect[0]
    new_shown = list(shown_image_ids) + [correct_image.id, incorrect_image.id]
    served = len(new_shown) // 2

    result = PairResult(
        correct_image=correct_image,
        incorrect_image=incorrect_image,
        total_pairs=total_pairs,
        remaining_pairs=total_pairs - served,
        current_pair_index=served,
    )
    return result, new_shown


class PairSelector:
    """Serves pairs for a quiz session, persisting its progress after every step."""

    def __init__(self, image_store: ImageStore, progress_store: ProgressStore):
        self.image_store = image_store
        self.progress_store = progress_store

    def next_pair(self, session_id: str) -> PairOutcome:
        images = self.image_store.list()
        progress = self.progress_store.get(session_id)

        outcome, new_shown = choose_pair(images, progress.shown_image_ids)

        self.progress_store.save(session_id, new_shown)
        if isinstance(outcome, ResetSignal):
            logger.info(f"Cycle complete for session {session_id}, progress reset")
        return outcome
