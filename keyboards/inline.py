"""Inline клавиатуры"""
from aiogram.types import InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder
from typing import List

from config import SPORTS, TIME_SLOTS
from database.models import Booking, Chat, User
from services.rating import MIN_RATING, MAX_RATING


def get_main_menu_keyboard(is_trainer: bool = False) -> InlineKeyboardMarkup:
    """Главное меню"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="🏅 Find a trainer", callback_data="menu:sports")
    )
    builder.row(
        InlineKeyboardButton(text="💬 Messages", callback_data="menu:messages"),
        InlineKeyboardButton(text="📅 My bookings", callback_data="menu:bookings")
    )
    builder.row(
        InlineKeyboardButton(text="👤 Profile", callback_data="menu:profile"),
        InlineKeyboardButton(
            text="➕ Add a sport" if is_trainer else "💪 Become a trainer",
            callback_data="menu:become_trainer"
        )
    )
    builder.row(
        InlineKeyboardButton(text="🤖 Support", callback_data="menu:support")
    )
    return builder.as_markup()


def get_sports_keyboard(prefix: str = "sport") -> InlineKeyboardMarkup:
    """Клавиатура выбора вида спорта"""
    builder = InlineKeyboardBuilder()
    for sport in SPORTS:
        builder.button(text=sport, callback_data=f"{prefix}:{sport}")
    builder.adjust(2)
    builder.row(
        InlineKeyboardButton(text="🔙 Main menu", callback_data="back_to_main")
    )
    return builder.as_markup()


def get_trainer_view_keyboard(trainer_id: int, total: int) -> InlineKeyboardMarkup:
    """Клавиатура для просмотра карточки тренера"""
    builder = InlineKeyboardBuilder()

    builder.row(
        InlineKeyboardButton(text="📅 Book", callback_data=f"book:{trainer_id}"),
        InlineKeyboardButton(text="✉️ Contact", callback_data=f"contact:{trainer_id}")
    )
    builder.row(
        InlineKeyboardButton(text="⭐ Rate", callback_data=f"rate_menu:{trainer_id}"),
        InlineKeyboardButton(text="💭 Comments", callback_data=f"comments:{trainer_id}")
    )

    # Навигация по списку
    if total > 1:
        builder.row(
            InlineKeyboardButton(text="⬅️ Back", callback_data="trainer_prev"),
            InlineKeyboardButton(text="➡️ Next", callback_data="trainer_next")
        )

    builder.row(
        InlineKeyboardButton(text="🔍 Search by name", callback_data="search_trainer")
    )
    builder.row(
        InlineKeyboardButton(text="🔙 To sports", callback_data="back_to_sports")
    )
    return builder.as_markup()


def get_search_results_keyboard(trainers: List[User]) -> InlineKeyboardMarkup:
    """Клавиатура с результатами поиска"""
    builder = InlineKeyboardBuilder()
    for trainer in trainers:
        builder.row(
            InlineKeyboardButton(
                text=trainer.name or "Unknown User",
                callback_data=f"trainer:{trainer.user_id}"
            )
        )
    builder.row(
        InlineKeyboardButton(text="🔙 To sports", callback_data="back_to_sports")
    )
    return builder.as_markup()


def get_rating_keyboard(trainer_id: int) -> InlineKeyboardMarkup:
    """Клавиатура выбора оценки"""
    builder = InlineKeyboardBuilder()
    for value in range(MIN_RATING, MAX_RATING + 1):
        builder.button(text="⭐" * value, callback_data=f"rate:{trainer_id}:{value}")
    builder.adjust(1)
    builder.row(
        InlineKeyboardButton(text="❌ Cancel", callback_data=f"trainer:{trainer_id}")
    )
    return builder.as_markup()


def get_comments_keyboard(trainer_id: int) -> InlineKeyboardMarkup:
    """Клавиатура под списком комментариев"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="✍️ Add comment", callback_data=f"add_comment:{trainer_id}")
    )
    builder.row(
        InlineKeyboardButton(text="🔙 Back to trainer", callback_data=f"trainer:{trainer_id}")
    )
    return builder.as_markup()


def get_skip_photo_keyboard() -> InlineKeyboardMarkup:
    """Клавиатура для пропуска фото"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="⏭ Skip photo", callback_data="skip_photo")
    )
    return builder.as_markup()


def get_chats_keyboard(chats: List[Chat], user_id: int) -> InlineKeyboardMarkup:
    """Клавиатура со списком переписок"""
    builder = InlineKeyboardBuilder()
    for chat in chats:
        other = chat.other_participant(user_id)
        preview = chat.last_message[:25] + "…" if len(chat.last_message) > 25 else chat.last_message
        text = f"{other.name}: {preview}" if preview else other.name
        builder.row(
            InlineKeyboardButton(text=text, callback_data=f"open_chat:{chat.id}")
        )
    builder.row(
        InlineKeyboardButton(text="🔙 Main menu", callback_data="back_to_main")
    )
    return builder.as_markup()


def get_chat_keyboard() -> InlineKeyboardMarkup:
    """Клавиатура открытой переписки"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="💬 All conversations", callback_data="menu:messages")
    )
    builder.row(
        InlineKeyboardButton(text="🚪 Close chat", callback_data="close_chat")
    )
    return builder.as_markup()


def get_reply_keyboard(chat_id: str) -> InlineKeyboardMarkup:
    """Кнопка ответа под входящим сообщением"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="↩️ Reply", callback_data=f"open_chat:{chat_id}")
    )
    return builder.as_markup()


def get_dates_keyboard(trainer_id: int, dates: List[str]) -> InlineKeyboardMarkup:
    """Клавиатура выбора даты записи"""
    builder = InlineKeyboardBuilder()
    for date in dates:
        builder.button(text=date, callback_data=f"book_date:{trainer_id}:{date}")
    builder.adjust(2)
    builder.row(
        InlineKeyboardButton(text="🔙 Back to trainer", callback_data=f"trainer:{trainer_id}")
    )
    return builder.as_markup()


def get_time_slots_keyboard(trainer_id: int, date: str, slots: List[str]) -> InlineKeyboardMarkup:
    """Клавиатура выбора свободного времени"""
    builder = InlineKeyboardBuilder()
    for slot in slots:
        # В callback_data передаем индекс слота, в самом слоте есть двоеточие
        builder.button(
            text=slot,
            callback_data=f"book_slot:{trainer_id}:{date}:{TIME_SLOTS.index(slot)}"
        )
    builder.adjust(2)
    builder.row(
        InlineKeyboardButton(text="🔙 Choose another date", callback_data=f"book:{trainer_id}")
    )
    return builder.as_markup()


def get_bookings_keyboard(bookings: List[Booking]) -> InlineKeyboardMarkup:
    """Клавиатура со списком записей"""
    builder = InlineKeyboardBuilder()
    for booking in bookings:
        builder.row(
            InlineKeyboardButton(
                text=f"{booking.date} {booking.time_slot}",
                callback_data=f"trainer:{booking.trainer_id}"
            )
        )
    builder.row(
        InlineKeyboardButton(text="🔙 Main menu", callback_data="back_to_main")
    )
    return builder.as_markup()


def get_support_keyboard() -> InlineKeyboardMarkup:
    """Клавиатура чата поддержки"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="🚪 End support chat", callback_data="close_support")
    )
    return builder.as_markup()


def get_cancel_keyboard() -> InlineKeyboardMarkup:
    """Клавиатура отмены ввода"""
    builder = InlineKeyboardBuilder()
    builder.row(
        InlineKeyboardButton(text="❌ Cancel", callback_data="cancel_input")
    )
    return builder.as_markup()
