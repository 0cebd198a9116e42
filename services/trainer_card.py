"""Сервис для отправки карточек тренеров"""
import html
import logging
from typing import Optional, Tuple

from database.models import TrainerDetail, User
from services.rating import format_average

logger = logging.getLogger(__name__)

# Лимит подписи к фото в Telegram
CAPTION_LIMIT = 1024


def format_trainer_card(
    trainer: User,
    detail: Optional[TrainerDetail],
    prefix: str = "",
    status_info: Optional[str] = None
) -> Tuple[str, str]:
    """
    Текст карточки тренера.

    Returns:
        Основной текст и блок описания отдельно, чтобы длинное описание
        можно было отправить вторым сообщением.
    """
    main_text = f"{prefix}\n\n" if prefix else ""
    main_text += (
        f"<b>{html.escape(trainer.name or 'Name not available')}</b>\n"
        f"City: {html.escape(trainer.city or 'City not available')}\n"
    )

    if detail:
        main_text += (
            f"Sport: {html.escape(detail.sport or 'N/A')}\n"
            f"Price: {html.escape(detail.price or 'N/A')}\n"
            f"Experience: {html.escape(detail.experience or 'N/A')}\n"
        )
        about_text = f"<b>Description:</b>\n{html.escape(detail.description or 'No description available')}"
    else:
        about_text = "No trainer details available"

    main_text += f"⭐ Average Rating: {format_average(trainer.rating_sum, trainer.rating_count)}"

    if status_info:
        main_text += f"\n\n{status_info}"

    return main_text, about_text


async def send_trainer_card(
    message,
    trainer: User,
    detail: Optional[TrainerDetail],
    keyboard,
    prefix: str = "",
    status_info: Optional[str] = None
):
    """
    Отправить карточку тренера

    Args:
        message: Объект Message или CallbackQuery
        trainer: Тренер
        detail: Предложение по выбранному виду спорта
        keyboard: Клавиатура для сообщения
        prefix: Заголовок карточки
        status_info: Дополнительная строка под карточкой
    """
    main_text, about_text = format_trainer_card(trainer, detail, prefix, status_info)
    full_text = f"{main_text}\n\n{about_text}"

    message_to_send = message.message if hasattr(message, 'message') else message

    # Сообщение с фото нельзя отредактировать в текст, поэтому удаляем старое
    try:
        await message_to_send.delete()
    except Exception as e:
        logger.debug(f"Не удалось удалить предыдущее сообщение: {e}")

    try:
        if len(full_text) <= CAPTION_LIMIT:
            await _send_single_message(message_to_send, trainer, full_text, keyboard)
        else:
            await _send_split_message(message_to_send, trainer, main_text, about_text, keyboard)
    except Exception as e:
        logger.warning(f"Ошибка отправки карточки тренера {trainer.user_id}: {e}")
        # Fallback - отправляем все текстом
        await message_to_send.answer(full_text, reply_markup=keyboard)


async def _send_single_message(message, trainer: User, text: str, keyboard):
    """Отправка одним сообщением"""
    if trainer.profile_picture:
        await message.answer_photo(
            photo=trainer.profile_picture,
            caption=text,
            reply_markup=keyboard
        )
    else:
        await message.answer(text, reply_markup=keyboard)


async def _send_split_message(message, trainer: User, main_text: str, about_text: str, keyboard):
    """Отправка разделенного сообщения (фото + описание)"""
    if trainer.profile_picture:
        await message.answer_photo(photo=trainer.profile_picture, caption=main_text)
    else:
        await message.answer(main_text)

    # Описание отдельным сообщением с кнопками
    await message.answer(about_text, reply_markup=keyboard)
