"""Фильтрация тренеров"""
from typing import List, Sequence

from database.models import TrainerDetail, User


def filter_by_sport(details: Sequence[TrainerDetail], sport: str) -> List[TrainerDetail]:
    """Предложения тренера по выбранному виду спорта"""
    return [detail for detail in details if detail.sport == sport]


def search_by_name(trainers: Sequence[User], query: str) -> List[User]:
    """Поиск тренеров по подстроке имени без учета регистра"""
    query = (query or "").strip().lower()
    if not query:
        return list(trainers)
    return [trainer for trainer in trainers if query in (trainer.name or "").lower()]
