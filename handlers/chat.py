"""Обработчики переписки между учениками и тренерами"""
import html
import logging

from aiogram import Router, F, Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from config import MESSAGES_HISTORY_LIMIT
from database import Database
from database.models import Chat
from keyboards.inline import get_chats_keyboard, get_chat_keyboard, get_reply_keyboard, get_main_menu_keyboard
from services.replies import replace_text
from services.session import Session
from states import ChatConversation

logger = logging.getLogger(__name__)

router = Router()


def format_history(chat: Chat, messages, user_id: int) -> str:
    """Текст истории переписки"""
    other = chat.other_participant(user_id)
    lines = [f"💬 <b>Chat with {html.escape(other.name)}</b>\n"]

    if not messages:
        lines.append("No messages yet. Say hi!")
    for message in messages:
        sender = "You" if message.sender_id == user_id else message.sender_name
        lines.append(f"<b>{html.escape(sender)}:</b> {html.escape(message.text)}")

    lines.append("\n<i>Type a message to send it.</i>")
    return "\n".join(lines)


@router.callback_query(F.data == "menu:messages")
async def show_conversations(callback: CallbackQuery, db: Database, session: Session, state: FSMContext):
    """Список переписок пользователя"""
    await state.clear()

    try:
        chats = await db.get_user_chats(session.user_id)
    except Exception:
        logger.exception(f"Ошибка получения переписок {session.user_id}")
        await callback.answer("❌ Failed to load conversations.", show_alert=True)
        return

    text = "💬 <b>Your conversations</b>" if chats else "💬 No conversations yet."
    await replace_text(callback.message, text, get_chats_keyboard(chats, session.user_id))
    await callback.answer()


@router.callback_query(F.data.startswith("contact:"))
async def contact_trainer(callback: CallbackQuery, db: Database, session: Session, state: FSMContext):
    """Открыть (или создать) переписку с тренером"""
    trainer_id = int(callback.data.split(":", 1)[1])

    if trainer_id == session.user_id:
        await callback.answer("This is your own trainer profile.", show_alert=True)
        return

    if not session.has_profile:
        await callback.answer(
            "Please set up your profile (name and city) before messaging trainers.",
            show_alert=True
        )
        return

    try:
        chat = await db.create_chat(session.user_id, trainer_id)
        messages = await db.get_messages(chat.id, MESSAGES_HISTORY_LIMIT)
    except Exception:
        logger.exception(f"Ошибка создания переписки {session.user_id} - {trainer_id}")
        await callback.answer("❌ Failed to open chat. Please try again.", show_alert=True)
        return

    await open_chat(callback.message, session, state, chat, messages)
    await callback.answer()


@router.callback_query(F.data.startswith("open_chat:"))
async def process_open_chat(callback: CallbackQuery, db: Database, session: Session, state: FSMContext):
    """Открыть переписку из списка"""
    chat_id = callback.data.split(":", 1)[1]

    try:
        chat = await db.get_chat(chat_id)
        if not chat or session.user_id not in chat.participants:
            await callback.answer("❌ Chat not found.", show_alert=True)
            return
        messages = await db.get_messages(chat.id, MESSAGES_HISTORY_LIMIT)
    except Exception:
        logger.exception(f"Ошибка открытия переписки {chat_id}")
        await callback.answer("❌ Failed to open chat. Please try again.", show_alert=True)
        return

    await open_chat(callback.message, session, state, chat, messages)
    await callback.answer()


async def open_chat(message, session: Session, state: FSMContext, chat: Chat, messages):
    """Показать историю и перейти в режим переписки"""
    await state.clear()
    await state.set_state(ChatConversation.active)
    await state.update_data(chat_id=chat.id)

    await replace_text(message, format_history(chat, messages, session.user_id), get_chat_keyboard())


@router.message(ChatConversation.active)
async def process_chat_message(message: Message, bot: Bot, db: Database, session: Session, state: FSMContext):
    """Отправка сообщения собеседнику"""
    text = (message.text or "").strip()

    # Пустые сообщения не отправляем
    if not text:
        return

    data = await state.get_data()
    chat_id = data.get("chat_id")

    try:
        chat = await db.get_chat(chat_id)
        if not chat:
            await state.clear()
            await message.answer("❌ Chat not found.", reply_markup=get_main_menu_keyboard(session.is_trainer))
            return

        await db.add_message(chat.id, session.user_id, session.display_name, text)
    except Exception:
        logger.exception(f"Ошибка отправки сообщения в {chat_id}")
        await message.answer("❌ Failed to send message. Please try again.")
        return

    # Доставляем сообщение собеседнику
    recipient = chat.other_participant(session.user_id)
    try:
        await bot.send_message(
            recipient.id,
            f"💬 <b>{html.escape(session.display_name)}:</b> {html.escape(text)}",
            reply_markup=get_reply_keyboard(chat.id)
        )
    except TelegramAPIError as e:
        # Собеседник заблокировал бота, сообщение останется в истории
        logger.warning(f"Не удалось доставить сообщение пользователю {recipient.id}: {e}")


@router.callback_query(F.data == "close_chat")
async def close_chat(callback: CallbackQuery, session: Session, state: FSMContext):
    """Выход из режима переписки"""
    await state.clear()
    await replace_text(
        callback.message,
        "Chat closed. What would you like to do next?",
        get_main_menu_keyboard(session.is_trainer)
    )
    await callback.answer()
