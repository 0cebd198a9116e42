"""Обработчики настройки профиля"""
import html
import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from database import Database
from keyboards.inline import get_skip_photo_keyboard, get_main_menu_keyboard, get_cancel_keyboard
from services.session import Session
from states import ProfileSetup

logger = logging.getLogger(__name__)

router = Router()

MAX_NAME_LENGTH = 50
MAX_CITY_LENGTH = 50


@router.callback_query(F.data == "menu:profile")
async def start_profile_setup(callback: CallbackQuery, session: Session, state: FSMContext):
    """Начало заполнения профиля"""
    await state.clear()

    text = "👤 <b>Your profile</b>\n\n"
    if session.has_profile:
        text += (
            f"<b>Name:</b> {html.escape(session.user.name)}\n"
            f"<b>City:</b> {html.escape(session.user.city)}\n\n"
            "Let's update it. "
        )
    text += "Enter your <b>name</b>:"

    await callback.message.answer(text, reply_markup=get_cancel_keyboard())
    await state.set_state(ProfileSetup.waiting_for_name)
    await callback.answer()


@router.message(ProfileSetup.waiting_for_name)
async def process_name(message: Message, state: FSMContext):
    """Обработчик ввода имени"""
    name = (message.text or "").strip()

    if not name:
        await message.answer("❌ Name cannot be empty. Enter your name:")
        return

    if len(name) > MAX_NAME_LENGTH:
        await message.answer(f"❌ Name is too long (max {MAX_NAME_LENGTH} characters). Try again:")
        return

    await state.update_data(name=name)
    await state.set_state(ProfileSetup.waiting_for_city)
    await message.answer("Now enter your <b>city</b>:")


@router.message(ProfileSetup.waiting_for_city)
async def process_city(message: Message, state: FSMContext):
    """Обработчик ввода города"""
    city = (message.text or "").strip()

    if not city:
        await message.answer("❌ City cannot be empty. Enter your city:")
        return

    if len(city) > MAX_CITY_LENGTH:
        await message.answer(f"❌ City is too long (max {MAX_CITY_LENGTH} characters). Try again:")
        return

    await state.update_data(city=city)
    await state.set_state(ProfileSetup.waiting_for_photo)
    await message.answer(
        "Almost done! Send a <b>profile picture</b> or skip this step:",
        reply_markup=get_skip_photo_keyboard()
    )


@router.message(ProfileSetup.waiting_for_photo, F.photo)
async def process_photo(message: Message, state: FSMContext, db: Database, session: Session):
    """Обработчик загрузки фото"""
    await state.update_data(profile_picture=message.photo[-1].file_id)
    await save_profile(message, state, db, session)


@router.callback_query(F.data == "skip_photo", ProfileSetup.waiting_for_photo)
async def process_skip_photo(callback: CallbackQuery, state: FSMContext, db: Database, session: Session):
    """Обработчик пропуска фото"""
    await state.update_data(profile_picture=None)
    await callback.answer()
    await save_profile(callback.message, state, db, session)


@router.message(ProfileSetup.waiting_for_photo)
async def process_invalid_photo(message: Message):
    """Обработчик некорректного ввода вместо фото"""
    await message.answer(
        "❌ Please send a photo or press 'Skip photo'.",
        reply_markup=get_skip_photo_keyboard()
    )


async def save_profile(message: Message, state: FSMContext, db: Database, session: Session):
    """Сохранение профиля и обновление снимков в переписках"""
    data = await state.get_data()
    await state.clear()

    try:
        await db.update_profile(
            session.user_id,
            data['name'],
            data['city'],
            data.get('profile_picture')
        )
        for chat in await db.get_user_chats(session.user_id):
            await db.update_chat_participant_info(chat.id, session.user_id)
        user = await db.get_user(session.user_id)
    except Exception:
        logger.exception(f"Ошибка сохранения профиля {session.user_id}")
        await message.answer("❌ Failed to save profile. Please try again.")
        return

    await message.answer(
        "✅ <b>Profile saved successfully!</b>",
        reply_markup=get_main_menu_keyboard(bool(user and user.is_trainer))
    )
