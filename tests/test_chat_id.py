import itertools

from services.chat_id import make_chat_id


def test_chat_id_is_symmetric():
    assert make_chat_id("u2", "u1") == make_chat_id("u1", "u2") == "u1_u2"


def test_chat_id_accepts_telegram_ids():
    assert make_chat_id(200, 100) == "100_200"


def test_chat_id_uses_string_ordering():
    assert make_chat_id(9, 10) == "10_9"


def test_distinct_pairs_do_not_collide():
    identities = ["a", "b", "ab", "ba", "1", "10", "100"]
    pairs = list(itertools.combinations(identities, 2))
    ids = {make_chat_id(first, second) for first, second in pairs}

    assert len(ids) == len(pairs)
