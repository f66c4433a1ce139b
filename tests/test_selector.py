import pytest

from imagequiz.errors import InsufficientData
from imagequiz.models import PairResult, ResetSignal
from imagequiz.selector import choose_pair

from conftest import make_images


def run_cycle(images):
    shown = []
    served = []
    while True:
        outcome, shown = choose_pair(images, shown)
        if isinstance(outcome, ResetSignal):
            return served, shown
        served.append(outcome)


def test_first_pair_uses_stored_order():
    images = make_images(True, True, False)

    outcome, shown = choose_pair(images, [])

    assert isinstance(outcome, PairResult)
    assert outcome.correct_image.id == "C1"
    assert outcome.incorrect_image.id == "I1"
    assert outcome.total_pairs == 1
    assert outcome.remaining_pairs == 0
    assert outcome.current_pair_index == 1
    assert shown == ["C1", "I1"]


def test_second_call_after_last_pair_resets():
    images = make_images(True, True, False)
    _, shown = choose_pair(images, [])

    outcome, shown = choose_pair(images, shown)

    assert isinstance(outcome, ResetSignal)
    assert outcome.reset is True
    assert shown == []


@pytest.mark.parametrize(
    "flags, expected_pairs",
    [
        ((True, False), 1),
        ((True, False, True, False), 2),
        ((True, True, True, False, False), 2),
        ((False, False, False, True), 1),
        ((True, False) * 5, 5),
    ],
)
def test_total_pairs_served_before_reset(flags, expected_pairs):
    images = make_images(*flags)

    served, shown = run_cycle(images)

    assert len(served) == expected_pairs
    assert all(p.total_pairs == expected_pairs for p in served)
    assert [p.remaining_pairs for p in served] == list(range(expected_pairs - 1, -1, -1))
    assert [p.current_pair_index for p in served] == list(range(1, expected_pairs + 1))
    assert shown == []


def test_each_call_appends_two_new_ids():
    images = make_images(True, False, True, False, True, False)
    shown = []
    for _ in range(3):
        outcome, new_shown = choose_pair(images, shown)
        assert len(new_shown) == len(shown) + 2
        assert new_shown[: len(shown)] == shown
        assert len(set(new_shown)) == len(new_shown)
        shown = new_shown


@pytest.mark.parametrize("flags", [(), (True,), (True, True), (False, False, False)])
def test_insufficient_data(flags):
    with pytest.raises(InsufficientData):
        choose_pair(make_images(*flags), [])


def test_insufficient_data_even_with_stale_progress():
    with pytest.raises(InsufficientData):
        choose_pair(make_images(True), ["C1", "I9"])


def test_exhausted_side_resets_the_whole_cycle():
    images = make_images(True, False, False, False)
    _, shown = choose_pair(images, [])
    assert shown == ["C1", "I1"]
    # I1 flipped to correct: two pairs exist now but every correct image was shown
    images[1] = images[1].model_copy(update={"is_correct": True})

    outcome, shown = choose_pair(images, shown)

    assert isinstance(outcome, ResetSignal)
    assert shown == []

    outcome, shown = choose_pair(images, shown)
    assert outcome.total_pairs == 2
    assert (outcome.correct_image.id, outcome.incorrect_image.id) == ("C1", "I2")


def test_partition_follows_flag_changes():
    images = make_images(True, True, False)
    images[1] = images[1].model_copy(update={"is_correct": False})

    served, _ = run_cycle(images)

    assert [(p.correct_image.id, p.incorrect_image.id) for p in served] == [
        ("C1", "C2"),
    ]
