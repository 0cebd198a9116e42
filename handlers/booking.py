"""Обработчики записи на тренировку"""
import html
import logging
from datetime import date

from aiogram import Router, F, Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import CallbackQuery
from aiogram.fsm.context import FSMContext

from config import TIME_SLOTS, BOOKING_DAYS_AHEAD
from database import Database
from keyboards.inline import get_dates_keyboard, get_time_slots_keyboard, get_bookings_keyboard
from services.booking import (
    BookingError,
    available_slots,
    check_booking_window,
    upcoming_dates,
    validate_booking,
)
from services.replies import replace_text
from services.session import Session

logger = logging.getLogger(__name__)

router = Router()


@router.callback_query(F.data.startswith("book:"))
async def choose_date(callback: CallbackQuery, db: Database, session: Session):
    """Выбор даты записи"""
    trainer_id = int(callback.data.split(":", 1)[1])

    if trainer_id == session.user_id:
        await callback.answer("You cannot book yourself.", show_alert=True)
        return

    try:
        trainer = await db.get_user(trainer_id)
    except Exception:
        logger.exception(f"Ошибка получения тренера {trainer_id}")
        await callback.answer("❌ Failed to load trainer. Please try again.", show_alert=True)
        return

    if not trainer or not trainer.is_trainer:
        await callback.answer("❌ Trainer not found.", show_alert=True)
        return

    dates = upcoming_dates(date.today(), BOOKING_DAYS_AHEAD)
    await replace_text(
        callback.message,
        f"📅 Book <b>{html.escape(trainer.display_name)}</b>\n\nSelect a date:",
        get_dates_keyboard(trainer_id, dates)
    )
    await callback.answer()


@router.callback_query(F.data.startswith("book_date:"))
async def choose_time(callback: CallbackQuery, db: Database):
    """Выбор свободного времени на дату"""
    _, trainer_id, selected_date = callback.data.split(":", 2)
    trainer_id = int(trainer_id)

    try:
        check_booking_window(selected_date, date.today(), BOOKING_DAYS_AHEAD)
        booked = await db.get_booked_slots(trainer_id, selected_date)
    except BookingError as e:
        await callback.answer(f"❌ {e}", show_alert=True)
        return
    except Exception:
        logger.exception(f"Ошибка получения записей тренера {trainer_id}")
        await callback.answer("❌ Failed to load time slots. Please try again.", show_alert=True)
        return

    slots = available_slots(booked)
    if not slots:
        await callback.answer("😔 This day is fully booked. Choose another date.", show_alert=True)
        return

    await replace_text(
        callback.message,
        f"📅 <b>{selected_date}</b>\n\nAvailable times:",
        get_time_slots_keyboard(trainer_id, selected_date, slots)
    )
    await callback.answer()


@router.callback_query(F.data.startswith("book_slot:"))
async def confirm_booking(callback: CallbackQuery, bot: Bot, db: Database, session: Session):
    """Подтверждение записи на выбранное время"""
    _, trainer_id, selected_date, slot_index = callback.data.split(":")
    trainer_id = int(trainer_id)

    if trainer_id == session.user_id:
        await callback.answer("You cannot book yourself.", show_alert=True)
        return

    try:
        time_slot = TIME_SLOTS[int(slot_index)]
    except (ValueError, IndexError):
        await callback.answer("❌ Please select both date and time.", show_alert=True)
        return

    try:
        check_booking_window(selected_date, date.today(), BOOKING_DAYS_AHEAD)
        trainer = await db.get_user(trainer_id)
        if not trainer or not trainer.is_trainer:
            await callback.answer("❌ Trainer not found.", show_alert=True)
            return

        booked = await db.get_booked_slots(trainer_id, selected_date)
        validate_booking(selected_date, time_slot, booked)
        success = await db.book_slot(trainer_id, selected_date, time_slot, session.user_id)
    except BookingError as e:
        await callback.answer(f"❌ {e}", show_alert=True)
        return
    except Exception:
        logger.exception(f"Ошибка записи к тренеру {trainer_id}")
        await callback.answer("❌ Failed to book time. Please try again.", show_alert=True)
        return

    if not success:
        # Слот заняли между проверкой и записью
        await callback.answer("❌ This time slot is already booked.", show_alert=True)
        return

    logger.info(f"Пользователь {session.user_id} записался к {trainer_id} на {selected_date} {time_slot}")
    await callback.answer(
        f"✅ You booked {trainer.display_name} on {selected_date} at {time_slot}",
        show_alert=True
    )

    # Уведомляем тренера
    try:
        await bot.send_message(
            trainer_id,
            f"📅 <b>New booking!</b>\n\n"
            f"{html.escape(session.display_name)} booked you on {selected_date} at {time_slot}."
        )
    except TelegramAPIError as e:
        logger.warning(f"Не удалось уведомить тренера {trainer_id}: {e}")

    # Обновляем список свободных слотов
    slots = available_slots(booked + [time_slot])
    if slots:
        await callback.message.edit_reply_markup(
            reply_markup=get_time_slots_keyboard(trainer_id, selected_date, slots)
        )
    else:
        await replace_text(
            callback.message,
            f"📅 <b>{selected_date}</b> is now fully booked.",
            get_dates_keyboard(trainer_id, upcoming_dates(date.today(), BOOKING_DAYS_AHEAD))
        )


@router.callback_query(F.data == "menu:bookings")
async def show_bookings(callback: CallbackQuery, db: Database, session: Session, state: FSMContext):
    """Список записей пользователя"""
    await state.clear()

    try:
        bookings = await db.get_client_bookings(session.user_id)
    except Exception:
        logger.exception(f"Ошибка получения записей {session.user_id}")
        await callback.answer("❌ Failed to load bookings.", show_alert=True)
        return

    text = "📅 <b>Your bookings</b>" if bookings else "📅 You have no bookings yet."
    await replace_text(callback.message, text, get_bookings_keyboard(bookings))
    await callback.answer()
