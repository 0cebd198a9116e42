import random

import pytest

from services.rating import (
    NO_RATING_TEXT,
    RatingState,
    apply_rating,
    average_rating,
    format_average,
)


def test_first_rating_increments_count():
    state = apply_rating(RatingState(), "A", 3)

    assert state.rating_sum == 3
    assert state.rating_count == 1
    assert state.user_ratings == {"A": 3}


def test_rerating_replaces_previous_contribution():
    state = RatingState()
    for rater, rating in [("A", 3), ("B", 5), ("A", 4)]:
        state = apply_rating(state, rater, rating)

    assert state.rating_count == 2
    assert state.rating_sum == 9
    assert format_average(state.rating_sum, state.rating_count) == "4.5"


def test_apply_rating_does_not_mutate_input():
    original = RatingState(3, 1, {"A": 3})
    apply_rating(original, "A", 5)

    assert original == RatingState(3, 1, {"A": 3})


def test_random_sequences_keep_sum_of_latest_ratings():
    rng = random.Random(42)
    for _ in range(50):
        state = RatingState()
        latest = {}
        for _ in range(rng.randint(1, 30)):
            rater = rng.choice("ABCDEFG")
            rating = rng.randint(1, 5)
            count_before = state.rating_count
            state = apply_rating(state, rater, rating)
            if rater in latest:
                assert state.rating_count == count_before
            latest[rater] = rating

        assert state.rating_count == len(latest)
        assert state.rating_sum == sum(latest.values())


@pytest.mark.parametrize("rating", [0, 6, -1])
def test_rating_out_of_range_rejected(rating):
    with pytest.raises(ValueError):
        apply_rating(RatingState(), "A", rating)


def test_average_without_ratings():
    assert average_rating(0, 0) is None
    assert format_average(0, 0) == NO_RATING_TEXT


def test_average_rounded_to_one_decimal():
    assert average_rating(10, 3) == 3.3
    assert format_average(8, 2) == "4.0"


def test_average_half_rounds_up():
    # 5, 4, 4, 4
    assert format_average(17, 4) == "4.3"
    assert average_rating(11, 4) == 2.8
