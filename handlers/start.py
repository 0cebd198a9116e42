"""Обработчики команды start и главного меню"""
import html

from aiogram import Router, F
from aiogram.filters import CommandStart
from aiogram.types import Message, CallbackQuery
from aiogram.fsm.context import FSMContext

from keyboards.inline import get_main_menu_keyboard
from services.replies import replace_text
from services.session import Session

router = Router()


def main_menu_text(session: Session) -> str:
    """Приветствие главного меню"""
    text = "👋 Welcome to <b>MentorZone</b>!\n\n"
    if session.has_profile:
        text += f"Hi, <b>{html.escape(session.display_name)}</b>! "
    else:
        text += "Set up your profile to message trainers and leave comments.\n\n"
    text += "Find professional trainers for different sports. Choose what you want to do:"
    return text


@router.message(CommandStart())
async def cmd_start(message: Message, session: Session, state: FSMContext):
    """Обработчик команды /start"""
    await state.clear()

    await message.answer(
        main_menu_text(session),
        reply_markup=get_main_menu_keyboard(session.is_trainer)
    )


@router.callback_query(F.data.in_({"back_to_main", "cancel_input"}))
async def back_to_main_menu(callback: CallbackQuery, session: Session, state: FSMContext):
    """Обработчик возврата в главное меню"""
    await state.clear()

    await replace_text(
        callback.message,
        main_menu_text(session),
        get_main_menu_keyboard(session.is_trainer)
    )
    await callback.answer()
