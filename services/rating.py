"""Подсчет среднего рейтинга тренера"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

MIN_RATING = 1
MAX_RATING = 5

NO_RATING_TEXT = "No rating available"


@dataclass
class RatingState:
    """Агрегат рейтинга тренера"""
    rating_sum: int = 0
    rating_count: int = 0
    user_ratings: Dict[int, int] = field(default_factory=dict)


def apply_rating(state: RatingState, rater_id: int, rating: int) -> RatingState:
    """
    Применить оценку rater_id к агрегату.

    Повторная оценка заменяет предыдущий вклад пользователя в rating_sum,
    rating_count при этом не меняется.
    """
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}, got {rating}")

    user_ratings = dict(state.user_ratings)
    previous = user_ratings.get(rater_id)
    user_ratings[rater_id] = rating

    if previous is None:
        return RatingState(state.rating_sum + rating, state.rating_count + 1, user_ratings)
    return RatingState(state.rating_sum - previous + rating, state.rating_count, user_ratings)


def average_rating(rating_sum: int, rating_count: int) -> Optional[float]:
    """Средняя оценка с точностью до десятых (половина округляется вверх), None если оценок нет"""
    if not rating_count:
        return None
    average = Decimal(rating_sum) / Decimal(rating_count)
    return float(average.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def format_average(rating_sum: int, rating_count: int) -> str:
    average = average_rating(rating_sum, rating_count)
    if average is None:
        return NO_RATING_TEXT
    return f"{average:.1f}"
