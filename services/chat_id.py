"""Идентификатор переписки"""

CHAT_ID_SEPARATOR = "_"


def make_chat_id(first_id, second_id) -> str:
    """
    Детерминированный ID переписки для пары пользователей.

    ID не зависит от порядка аргументов, поэтому одна и та же пара
    всегда попадает в одну переписку.
    """
    first, second = str(first_id), str(second_id)
    low, high = (first, second) if first < second else (second, first)
    return f"{low}{CHAT_ID_SEPARATOR}{high}"
