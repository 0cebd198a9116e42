from types import SimpleNamespace
from unittest.mock import AsyncMock

from database.models import TrainerDetail, User
from services.rating import NO_RATING_TEXT
from services.trainer_card import CAPTION_LIMIT, format_trainer_card, send_trainer_card


def make_trainer(picture="photo-id", rating_sum=0, rating_count=0):
    return User(
        user_id=1, username="coach", name="Anna <Coach>", city="Odense", profile_picture=picture,
        is_trainer=True, rating_sum=rating_sum, rating_count=rating_count, created_at=None
    )


def make_message():
    return SimpleNamespace(delete=AsyncMock(), answer=AsyncMock(), answer_photo=AsyncMock())


def test_card_shows_detail_and_rating():
    detail = TrainerDetail(1, 1, "Tennis", "300 DKK", "5 years", "Serve & volley")
    main_text, about_text = format_trainer_card(make_trainer(rating_sum=9, rating_count=2), detail)

    assert "Anna &lt;Coach&gt;" in main_text
    assert "Sport: Tennis" in main_text
    assert "Average Rating: 4.5" in main_text
    assert "Serve &amp; volley" in about_text


def test_card_without_ratings_or_details():
    main_text, about_text = format_trainer_card(make_trainer(), None)

    assert NO_RATING_TEXT in main_text
    assert about_text == "No trainer details available"


async def test_short_card_sent_as_single_photo():
    message = make_message()
    detail = TrainerDetail(1, 1, "Tennis", "300 DKK", "5 years", "Short")

    await send_trainer_card(message, make_trainer(), detail, keyboard=None)

    message.answer_photo.assert_awaited_once()
    message.answer.assert_not_awaited()


async def test_long_description_sent_separately():
    message = make_message()
    detail = TrainerDetail(1, 1, "Tennis", "300 DKK", "5 years", "x" * CAPTION_LIMIT)

    await send_trainer_card(message, make_trainer(), detail, keyboard="kb")

    message.answer_photo.assert_awaited_once()
    assert message.answer.await_args.kwargs["reply_markup"] == "kb"
