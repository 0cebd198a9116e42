"""Обработчики для тренеров"""
import html
import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from database import Database
from database.models import TrainerDetail
from keyboards.inline import get_sports_keyboard, get_main_menu_keyboard, get_cancel_keyboard
from services.replies import replace_text
from services.session import Session
from states import TrainerRegistration

logger = logging.getLogger(__name__)

router = Router()


@router.callback_query(F.data == "menu:become_trainer")
async def start_trainer_registration(callback: CallbackQuery, session: Session, state: FSMContext):
    """Начало добавления предложения тренера"""
    await state.clear()

    if not session.has_profile:
        await callback.answer(
            "Please set up your profile (name and city) before becoming a trainer.",
            show_alert=True
        )
        return

    await replace_text(
        callback.message,
        "💪 Let's add you as a trainer!\n\n"
        "Choose the <b>sport</b> you teach:",
        get_sports_keyboard(prefix="trainer_sport")
    )
    await state.set_state(TrainerRegistration.waiting_for_sport)
    await callback.answer()


@router.callback_query(
    F.data.startswith("trainer_sport:"),
    TrainerRegistration.waiting_for_sport
)
async def process_trainer_sport(callback: CallbackQuery, state: FSMContext):
    """Обработчик выбора вида спорта"""
    sport = callback.data.split(":", 1)[1]

    await state.update_data(sport=sport)
    await state.set_state(TrainerRegistration.waiting_for_price)

    await callback.message.edit_text(
        f"Sport: <b>{html.escape(sport)}</b>\n\n"
        "What is your <b>price</b> per session? (for example \"300 DKK/hour\")",
        reply_markup=get_cancel_keyboard()
    )
    await callback.answer()


@router.message(TrainerRegistration.waiting_for_price)
async def process_trainer_price(message: Message, state: FSMContext):
    """Обработчик ввода цены"""
    price = (message.text or "").strip()

    if not price:
        await message.answer("❌ Price cannot be empty. Enter your price:")
        return

    await state.update_data(price=price)
    await state.set_state(TrainerRegistration.waiting_for_experience)
    await message.answer(
        "Tell us about your <b>experience</b>.\n"
        "For example: \"5 years\", \"Former national team player\":"
    )


@router.message(TrainerRegistration.waiting_for_experience)
async def process_trainer_experience(message: Message, state: FSMContext):
    """Обработчик ввода опыта"""
    experience = (message.text or "").strip()

    if not experience:
        await message.answer("❌ Experience cannot be empty. Tell us about your experience:")
        return

    if len(experience) > 100:
        await message.answer("❌ Too long. Keep it under 100 characters:")
        return

    await state.update_data(experience=experience)
    await state.set_state(TrainerRegistration.waiting_for_description)
    await message.answer(
        "Great! Finally, write a short <b>description</b> of your training:\n"
        "- What you focus on\n"
        "- Who your sessions are for"
    )


@router.message(TrainerRegistration.waiting_for_description)
async def process_trainer_description(message: Message, state: FSMContext, db: Database, session: Session):
    """Обработчик ввода описания и сохранение предложения"""
    description = (message.text or "").strip()

    if not description:
        await message.answer("❌ Description cannot be empty. Describe your training:")
        return

    if len(description) > 1000:
        await message.answer("❌ Too long. Keep it under 1000 characters:")
        return

    data = await state.get_data()
    await state.clear()

    detail = TrainerDetail(
        id=None,
        user_id=session.user_id,
        sport=data['sport'],
        price=data['price'],
        experience=data['experience'],
        description=description
    )

    try:
        await db.add_trainer_detail(detail)
    except Exception as e:
        logger.exception(f"Ошибка добавления тренера {session.user_id}")
        await message.answer(f"❌ Error adding trainer: {html.escape(str(e))}")
        return

    logger.info(f"Пользователь {session.user_id} добавлен тренером по {detail.sport}")
    await message.answer(
        "✅ <b>You have successfully added yourself as a trainer!</b>\n\n"
        f"Trainees looking for {html.escape(detail.sport)} trainers can now find you.",
        reply_markup=get_main_menu_keyboard(is_trainer=True)
    )
