"""Обработчики для учеников: виды спорта, тренеры, оценки и комментарии"""
import html
import logging

from aiogram import Router, F
from aiogram.types import CallbackQuery, Message
from aiogram.fsm.context import FSMContext

from database import Database
from keyboards.inline import (
    get_sports_keyboard,
    get_trainer_view_keyboard,
    get_search_results_keyboard,
    get_rating_keyboard,
    get_comments_keyboard,
    get_cancel_keyboard,
)
from services.rating import format_average
from services.replies import replace_text
from services.session import Session
from services.trainer_card import send_trainer_card
from services.trainer_search import filter_by_sport, search_by_name
from states import TrainerSearch, CommentInput

logger = logging.getLogger(__name__)

router = Router()

SPORTS_TEXT = (
    "🏅 Find professional trainers for different sports.\n\n"
    "Select a sport below to see available trainers!"
)

LOAD_TRAINER_ERROR = "❌ Failed to load trainer. Please try again."


@router.callback_query(F.data.in_({"menu:sports", "back_to_sports"}))
async def show_sports(callback: CallbackQuery, state: FSMContext):
    """Список видов спорта"""
    await state.clear()
    await replace_text(callback.message, SPORTS_TEXT, get_sports_keyboard())
    await callback.answer()


@router.callback_query(F.data.startswith("sport:"))
async def process_sport(callback: CallbackQuery, db: Database, state: FSMContext):
    """Обработчик выбора вида спорта"""
    sport = callback.data.split(":", 1)[1]

    try:
        trainers = await db.get_trainers_by_sport(sport)
    except Exception:
        logger.exception(f"Ошибка получения тренеров по {sport}")
        await callback.answer("❌ Failed to load trainers. Please try again.", show_alert=True)
        return

    if not trainers:
        await replace_text(
            callback.message,
            f"😔 There are no trainers for <b>{html.escape(sport)}</b> yet.\n\n"
            "Try another sport:",
            get_sports_keyboard()
        )
        await callback.answer()
        return

    # Сохраняем в state список тренеров и текущий индекс
    await state.update_data(
        sport=sport,
        trainers=[t.user_id for t in trainers],
        current_index=0
    )

    if not await show_trainer(callback.message, db, state):
        await callback.answer(LOAD_TRAINER_ERROR, show_alert=True)
        return
    await callback.answer()


async def show_trainer(message, db: Database, state: FSMContext) -> bool:
    """
    Показать карточку текущего тренера из списка.

    Возвращает False, если данные тренера не удалось загрузить.
    """
    data = await state.get_data()
    trainer_ids = data.get("trainers", [])
    current_index = data.get("current_index", 0)

    if not trainer_ids:
        await replace_text(message, "😔 No trainers available.\n\nChoose a sport:", get_sports_keyboard())
        return True

    trainer_id = trainer_ids[current_index]
    try:
        trainer = await db.get_user(trainer_id)
        details = await db.get_trainer_details(trainer_id) if trainer else []
    except Exception:
        logger.exception(f"Ошибка загрузки карточки тренера {trainer_id}")
        return False

    if not trainer or not trainer.is_trainer:
        await replace_text(message, "❌ Trainer not found.", get_sports_keyboard())
        return True

    sport = data.get("sport")
    sport_details = filter_by_sport(details, sport) if sport else details
    detail = (sport_details or details or [None])[0]

    status_info = None
    if len(trainer_ids) > 1:
        status_info = f"Trainer {current_index + 1}/{len(trainer_ids)}"

    await send_trainer_card(
        message=message,
        trainer=trainer,
        detail=detail,
        keyboard=get_trainer_view_keyboard(trainer_id, len(trainer_ids)),
        status_info=status_info
    )
    return True


@router.callback_query(F.data.in_({"trainer_next", "trainer_prev"}))
async def process_navigation(callback: CallbackQuery, db: Database, state: FSMContext):
    """Обработчик кнопок 'Назад' и 'Следующий'"""
    data = await state.get_data()
    trainer_ids = data.get("trainers", [])

    if not trainer_ids:
        await callback.answer("The trainer list has expired. Choose a sport again.", show_alert=True)
        return

    # Циклический переход
    step = 1 if callback.data == "trainer_next" else -1
    new_index = (data.get("current_index", 0) + step) % len(trainer_ids)
    await state.update_data(current_index=new_index)

    if not await show_trainer(callback.message, db, state):
        await callback.answer(LOAD_TRAINER_ERROR, show_alert=True)
        return
    await callback.answer()


@router.callback_query(F.data.startswith("trainer:"))
async def process_open_trainer(callback: CallbackQuery, db: Database, state: FSMContext):
    """Открыть карточку конкретного тренера"""
    trainer_id = int(callback.data.split(":", 1)[1])

    # Ввод комментария или поиска прерывается, список тренеров сохраняется
    await state.set_state(None)

    data = await state.get_data()
    trainer_ids = data.get("trainers", [])
    if trainer_id in trainer_ids:
        await state.update_data(current_index=trainer_ids.index(trainer_id))
    else:
        await state.update_data(trainers=[trainer_id], current_index=0)

    if not await show_trainer(callback.message, db, state):
        await callback.answer(LOAD_TRAINER_ERROR, show_alert=True)
        return
    await callback.answer()


# === Поиск ===

@router.callback_query(F.data == "search_trainer")
async def start_search(callback: CallbackQuery, state: FSMContext):
    """Начало поиска тренера по имени"""
    data = await state.get_data()
    if not data.get("sport"):
        await callback.answer("Choose a sport first.", show_alert=True)
        return

    await state.set_state(TrainerSearch.waiting_for_query)
    await callback.message.answer(
        f"🔍 Enter a trainer name to search among <b>{html.escape(data['sport'])}</b> trainers:",
        reply_markup=get_cancel_keyboard()
    )
    await callback.answer()


@router.message(TrainerSearch.waiting_for_query)
async def process_search_query(message: Message, db: Database, state: FSMContext):
    """Обработчик поискового запроса"""
    data = await state.get_data()
    sport = data.get("sport")
    await state.set_state(None)

    try:
        trainers = await db.get_trainers_by_sport(sport)
    except Exception:
        logger.exception(f"Ошибка поиска тренеров по {sport}")
        await message.answer("❌ Failed to search trainers. Please try again.")
        return

    found = search_by_name(trainers, message.text or "")
    if not found:
        await message.answer(
            "😔 No trainers match your search.",
            reply_markup=get_search_results_keyboard([])
        )
        return

    await state.update_data(trainers=[t.user_id for t in found], current_index=0)
    await message.answer(
        f"🔍 Found trainers: {len(found)}",
        reply_markup=get_search_results_keyboard(found)
    )


# === Рейтинг ===

@router.callback_query(F.data.startswith("rate_menu:"))
async def show_rating_menu(callback: CallbackQuery):
    """Клавиатура выбора оценки"""
    trainer_id = int(callback.data.split(":", 1)[1])
    await callback.message.edit_reply_markup(reply_markup=get_rating_keyboard(trainer_id))
    await callback.answer("Rate this trainer")


@router.callback_query(F.data.startswith("rate:"))
async def process_rating(callback: CallbackQuery, db: Database, session: Session, state: FSMContext):
    """Обработчик оценки тренера"""
    _, trainer_id, value = callback.data.split(":")
    trainer_id, value = int(trainer_id), int(value)

    try:
        result = await db.rate_trainer(trainer_id, session.user_id, value)
    except ValueError:
        await callback.answer("❌ Rating must be between 1 and 5.", show_alert=True)
        return
    except Exception:
        logger.exception(f"Ошибка оценки тренера {trainer_id}")
        await callback.answer("❌ Failed to submit rating. Please try again.", show_alert=True)
        return

    if result is None:
        await callback.answer("❌ Trainer not found.", show_alert=True)
        return

    await callback.answer(
        f"⭐ Thanks for your rating!\n\n"
        f"Average rating: {format_average(result.rating_sum, result.rating_count)}",
        show_alert=True
    )

    data = await state.get_data()
    if trainer_id not in data.get("trainers", []):
        await state.update_data(trainers=[trainer_id], current_index=0)
    await show_trainer(callback.message, db, state)


# === Комментарии ===

def format_comments(comments) -> str:
    """Текст списка комментариев"""
    if not comments:
        return "💭 <b>Comments</b>\n\nNo comments yet. Be the first!"

    lines = ["💭 <b>Comments</b>\n"]
    for comment in comments:
        lines.append(
            f"<b>{html.escape(comment.author_name)}</b> <i>({comment.created_at})</i>\n"
            f"{html.escape(comment.text)}\n"
        )
    return "\n".join(lines)


@router.callback_query(F.data.startswith("comments:"))
async def show_comments(callback: CallbackQuery, db: Database):
    """Комментарии к тренеру"""
    trainer_id = int(callback.data.split(":", 1)[1])

    try:
        comments = await db.get_comments(trainer_id)
    except Exception:
        logger.exception(f"Ошибка получения комментариев тренера {trainer_id}")
        await callback.answer("❌ Failed to load comments.", show_alert=True)
        return

    await replace_text(callback.message, format_comments(comments), get_comments_keyboard(trainer_id))
    await callback.answer()


@router.callback_query(F.data.startswith("add_comment:"))
async def start_comment(callback: CallbackQuery, session: Session, state: FSMContext):
    """Начало ввода комментария"""
    trainer_id = int(callback.data.split(":", 1)[1])

    if not session.has_profile:
        await callback.answer(
            "Please set up your profile (name and city) before leaving comments.",
            show_alert=True
        )
        return

    await state.set_state(CommentInput.waiting_for_text)
    await state.update_data(comment_trainer_id=trainer_id)
    await callback.message.answer("✍️ Write your comment:", reply_markup=get_cancel_keyboard())
    await callback.answer()


@router.message(CommentInput.waiting_for_text)
async def process_comment(message: Message, db: Database, session: Session, state: FSMContext):
    """Обработчик текста комментария"""
    text = (message.text or "").strip()

    # Пустой комментарий не сохраняем
    if not text:
        await message.answer("❌ Comment cannot be empty.")
        return

    data = await state.get_data()
    trainer_id = data["comment_trainer_id"]

    try:
        await db.add_comment(trainer_id, session.user_id, text)
        comments = await db.get_comments(trainer_id)
    except Exception:
        logger.exception(f"Ошибка добавления комментария тренеру {trainer_id}")
        await message.answer("❌ Failed to add comment. Try again.")
        return

    await state.set_state(None)
    await message.answer(format_comments(comments), reply_markup=get_comments_keyboard(trainer_id))
