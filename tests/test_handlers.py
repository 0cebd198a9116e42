from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

from aiogram.exceptions import TelegramAPIError

from handlers.booking import choose_date, confirm_booking
from handlers.chat import contact_trainer, process_chat_message, process_open_chat
from handlers.chatbot import process_support_message
from handlers.profile import save_profile
from handlers.sports import process_comment, process_navigation, process_rating, start_comment
from handlers.trainer import process_trainer_description
from services.chat_id import make_chat_id
from services.session import Session
from services.support_bot import SupportBotError, initial_conversation
from states import ChatConversation, CommentInput, SupportConversation, TrainerRegistration
from tests.conftest import TRAINEE_ID, TRAINER_ID

BOOKING_DATE = (date.today() + timedelta(days=2)).isoformat()


def make_callback(data):
    callback = AsyncMock()
    callback.data = data
    callback.message.photo = None
    return callback


def make_message(text):
    message = AsyncMock()
    message.text = text
    return message


def trainee_session(user):
    return Session(user_id=TRAINEE_ID, username="student", user=user)


async def test_empty_comment_is_not_saved(db, trainer, trainee, state):
    await state.set_state(CommentInput.waiting_for_text)
    await state.update_data(comment_trainer_id=TRAINER_ID)

    message = make_message("   ")
    await process_comment(message, db, trainee_session(trainee), state)

    assert await db.get_comments(TRAINER_ID) == []
    assert await state.get_state() == CommentInput.waiting_for_text.state


async def test_comment_is_saved(db, trainer, trainee, state):
    await state.set_state(CommentInput.waiting_for_text)
    await state.update_data(comment_trainer_id=TRAINER_ID)

    await process_comment(make_message("Very helpful"), db, trainee_session(trainee), state)

    comments = await db.get_comments(TRAINER_ID)
    assert [c.text for c in comments] == ["Very helpful"]
    assert await state.get_state() is None


async def test_rating_updates_average(db, trainer, trainee, state):
    callback = make_callback(f"rate:{TRAINER_ID}:4")

    await process_rating(callback, db, trainee_session(trainee), state)

    text = callback.answer.await_args_list[0].args[0]
    assert "4.0" in text
    user = await db.get_user(TRAINER_ID)
    assert (user.rating_sum, user.rating_count) == (4, 1)


async def test_booking_taken_slot_rejected(db, trainer, trainee):
    await db.book_slot(TRAINER_ID, BOOKING_DATE, "9:00 AM", 300)
    callback = make_callback(f"book_slot:{TRAINER_ID}:{BOOKING_DATE}:0")
    bot = AsyncMock()

    await confirm_booking(callback, bot, db, trainee_session(trainee))

    assert "already booked" in callback.answer.await_args.args[0]
    assert await db.get_client_bookings(TRAINEE_ID) == []
    bot.send_message.assert_not_awaited()


async def test_booking_free_slot_notifies_trainer(db, trainer, trainee):
    callback = make_callback(f"book_slot:{TRAINER_ID}:{BOOKING_DATE}:1")
    bot = AsyncMock()

    await confirm_booking(callback, bot, db, trainee_session(trainee))

    assert await db.get_booked_slots(TRAINER_ID, BOOKING_DATE) == ["9:30 AM"]
    assert bot.send_message.await_args.args[0] == TRAINER_ID
    callback.message.edit_reply_markup.assert_awaited_once()


async def test_contact_opens_deterministic_chat(db, trainer, trainee, state):
    callback = make_callback(f"contact:{TRAINER_ID}")

    await contact_trainer(callback, db, trainee_session(trainee), state)

    assert await state.get_state() == ChatConversation.active.state
    assert (await state.get_data())["chat_id"] == make_chat_id(TRAINEE_ID, TRAINER_ID)


async def test_empty_chat_message_is_not_sent(db, trainer, trainee, state):
    chat = await db.create_chat(TRAINEE_ID, TRAINER_ID)
    await state.set_state(ChatConversation.active)
    await state.update_data(chat_id=chat.id)
    bot = AsyncMock()

    await process_chat_message(make_message(""), bot, db, trainee_session(trainee), state)

    assert await db.get_messages(chat.id) == []
    bot.send_message.assert_not_awaited()


async def test_chat_message_saved_and_delivered(db, trainer, trainee, state):
    chat = await db.create_chat(TRAINEE_ID, TRAINER_ID)
    await state.set_state(ChatConversation.active)
    await state.update_data(chat_id=chat.id)
    bot = AsyncMock()

    await process_chat_message(make_message("Hello coach"), bot, db, trainee_session(trainee), state)

    messages = await db.get_messages(chat.id)
    assert [(m.sender_id, m.sender_name, m.text) for m in messages] == [(TRAINEE_ID, "Bo Student", "Hello coach")]
    assert bot.send_message.await_args.args[0] == TRAINER_ID


async def test_support_failure_keeps_conversation(state):
    await state.set_state(SupportConversation.active)
    await state.update_data(conversation=initial_conversation())
    support_bot = AsyncMock()
    support_bot.send.side_effect = SupportBotError("Support chat is unavailable")
    message = make_message("Where is my booking?")

    await process_support_message(message, state, support_bot)

    assert (await state.get_data())["conversation"] == initial_conversation()
    assert "unavailable" in message.answer.await_args.args[0]


async def test_support_reply_appended(state):
    await state.set_state(SupportConversation.active)
    await state.update_data(conversation=initial_conversation())
    support_bot = AsyncMock()
    support_bot.send.return_value = {"role": "assistant", "content": "Check My bookings."}
    message = make_message("Where is my booking?")

    await process_support_message(message, state, support_bot)

    conversation = (await state.get_data())["conversation"]
    assert conversation[-2:] == [
        {"role": "user", "content": "Where is my booking?"},
        {"role": "assistant", "content": "Check My bookings."},
    ]
    sent = support_bot.send.await_args.args[0]
    assert sent[0]["role"] == "system"
    assert sent[-1] == {"role": "user", "content": "Where is my booking?"}


def failing_db(*methods):
    db = AsyncMock()
    for name in methods:
        getattr(db, name).side_effect = RuntimeError("database is locked")
    return db


def alert_text(callback):
    assert callback.answer.await_args.kwargs.get("show_alert") is True
    return callback.answer.await_args.args[0]


async def test_open_chat_database_error_shows_alert(trainee, state):
    callback = make_callback(f"open_chat:{make_chat_id(TRAINEE_ID, TRAINER_ID)}")

    await process_open_chat(callback, failing_db("get_chat"), trainee_session(trainee), state)

    assert "Failed to open chat" in alert_text(callback)
    assert await state.get_state() is None


async def test_choose_date_database_error_shows_alert(trainee):
    callback = make_callback(f"book:{TRAINER_ID}")

    await choose_date(callback, failing_db("get_user"), trainee_session(trainee))

    assert "Failed to load trainer" in alert_text(callback)


async def test_navigation_database_error_shows_alert(state):
    await state.update_data(sport="Tennis", trainers=[TRAINER_ID, 300], current_index=0)
    callback = make_callback("trainer_next")

    await process_navigation(callback, failing_db("get_user"), state)

    assert "Failed to load trainer" in alert_text(callback)
    callback.message.delete.assert_not_awaited()


async def test_save_profile_database_error_reported(trainee, state):
    await state.update_data(name="Bo Student", city="Aarhus")
    message = make_message(None)

    await save_profile(message, state, failing_db("update_profile"), trainee_session(trainee))

    assert "Failed to save profile" in message.answer.await_args.args[0]


async def test_contact_requires_profile(db, trainer, state):
    callback = make_callback(f"contact:{TRAINER_ID}")
    session = Session(user_id=TRAINEE_ID, username="student", user=None)

    await contact_trainer(callback, db, session, state)

    assert "set up your profile" in alert_text(callback)
    assert await db.get_chat(make_chat_id(TRAINEE_ID, TRAINER_ID)) is None


async def test_comment_requires_profile(state):
    callback = make_callback(f"add_comment:{TRAINER_ID}")
    session = Session(user_id=TRAINEE_ID, username="student", user=None)

    await start_comment(callback, session, state)

    assert "set up your profile" in alert_text(callback)
    assert await state.get_state() is None


async def test_trainer_cannot_book_themselves(db, trainer):
    callback = make_callback(f"book_slot:{TRAINER_ID}:{BOOKING_DATE}:0")
    session = Session(user_id=TRAINER_ID, username="coach", user=trainer)

    await confirm_booking(callback, AsyncMock(), db, session)

    assert "cannot book yourself" in alert_text(callback)
    assert await db.get_booked_slots(TRAINER_ID, BOOKING_DATE) == []


async def test_booking_past_date_rejected(db, trainer, trainee):
    past_date = (date.today() - timedelta(days=1)).isoformat()
    callback = make_callback(f"book_slot:{TRAINER_ID}:{past_date}:0")
    bot = AsyncMock()

    await confirm_booking(callback, bot, db, trainee_session(trainee))

    assert "not available for booking" in alert_text(callback)
    assert await db.get_client_bookings(TRAINEE_ID) == []
    bot.send_message.assert_not_awaited()


async def test_trainer_error_text_is_escaped(trainee, state):
    await state.set_state(TrainerRegistration.waiting_for_description)
    await state.update_data(sport="Tennis", price="300 DKK", experience="5 years")
    db = AsyncMock()
    db.add_trainer_detail.side_effect = RuntimeError("bad <value>")
    message = make_message("Technique and match play")

    await process_trainer_description(message, state, db, trainee_session(trainee))

    assert "bad &lt;value&gt;" in message.answer.await_args.args[0]


async def test_support_typing_failure_does_not_block_reply(state):
    await state.set_state(SupportConversation.active)
    await state.update_data(conversation=initial_conversation())
    support_bot = AsyncMock()
    support_bot.send.return_value = {"role": "assistant", "content": "Happy to help."}
    message = make_message("Hi")
    message.bot.send_chat_action.side_effect = TelegramAPIError(method=MagicMock(), message="Forbidden")

    await process_support_message(message, state, support_bot)

    support_bot.send.assert_awaited_once()
    assert message.answer.await_args.args[0] == "Happy to help."
