"""Обработчики чата с ботом поддержки"""
import html
import logging

from aiogram import Router, F
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from keyboards.inline import get_support_keyboard, get_main_menu_keyboard
from services.replies import replace_text
from services.session import Session
from services.support_bot import SupportBot, SupportBotError, initial_conversation, greeting_text
from states import SupportConversation

logger = logging.getLogger(__name__)

router = Router()


@router.callback_query(F.data == "menu:support")
async def start_support(callback: CallbackQuery, state: FSMContext):
    """Начало переписки с ботом поддержки"""
    await state.clear()
    await state.set_state(SupportConversation.active)
    await state.update_data(conversation=initial_conversation())

    await replace_text(callback.message, f"🤖 {greeting_text()}", get_support_keyboard())
    await callback.answer()


@router.message(SupportConversation.active)
async def process_support_message(message: Message, state: FSMContext, support_bot: SupportBot):
    """Отправка вопроса боту поддержки"""
    text = (message.text or "").strip()
    if not text:
        return

    data = await state.get_data()
    conversation = data.get("conversation") or initial_conversation()
    conversation = conversation + [{"role": "user", "content": text}]

    try:
        await message.bot.send_chat_action(message.chat.id, "typing")
    except TelegramAPIError as e:
        logger.warning(f"Не удалось отправить статус набора в {message.chat.id}: {e}")

    try:
        reply = await support_bot.send(conversation)
    except SupportBotError as e:
        logger.warning(f"Бот поддержки недоступен: {e}")
        await message.answer(
            f"❌ {html.escape(str(e))}. Please try again later.",
            reply_markup=get_support_keyboard()
        )
        return

    await state.update_data(conversation=conversation + [reply])
    await message.answer(html.escape(reply["content"]) or "…", reply_markup=get_support_keyboard())


@router.callback_query(F.data == "close_support")
async def close_support(callback: CallbackQuery, session: Session, state: FSMContext):
    """Завершение переписки с ботом поддержки"""
    await state.clear()
    await replace_text(
        callback.message,
        "Support chat ended. What would you like to do next?",
        get_main_menu_keyboard(session.is_trainer)
    )
    await callback.answer()
