"""Отправка ответов поверх текущего сообщения"""
import logging

from aiogram.exceptions import TelegramBadRequest

logger = logging.getLogger(__name__)


async def replace_text(message, text: str, reply_markup=None):
    """
    Показать текст вместо текущего сообщения бота.

    Сообщение с фото нельзя отредактировать в текст, поэтому оно удаляется
    и отправляется новое.
    """
    if message.photo:
        try:
            await message.delete()
        except TelegramBadRequest as e:
            logger.debug(f"Не удалось удалить сообщение: {e}")
        return await message.answer(text, reply_markup=reply_markup)

    try:
        return await message.edit_text(text, reply_markup=reply_markup)
    except TelegramBadRequest as e:
        # Сообщение слишком старое или не изменилось
        logger.debug(f"Не удалось отредактировать сообщение: {e}")
        return await message.answer(text, reply_markup=reply_markup)
