"""Главный файл бота"""
import asyncio
import logging
import sys

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.fsm.storage.memory import MemoryStorage

from config import BOT_TOKEN, DATABASE_PATH
from database import Database
from services.session import load_session
from services.support_bot import SupportBot

# Импортируем роутеры
from handlers import start, profile, trainer, sports, chat, booking, chatbot

# Настройка логирования
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    stream=sys.stdout
)
logger = logging.getLogger(__name__)


def create_dispatcher(db: Database, support_bot: SupportBot) -> Dispatcher:
    """Диспетчер со всеми middleware и роутерами"""
    # Используем MemoryStorage для FSM
    dp = Dispatcher(storage=MemoryStorage())

    # Регистрируем middleware для передачи зависимостей в handlers
    @dp.update.outer_middleware()
    async def services_middleware(handler, event, data):
        """Middleware для передачи базы данных и чат-бота в handlers"""
        data['db'] = db
        data['support_bot'] = support_bot
        return await handler(event, data)

    @dp.update.outer_middleware()
    async def session_middleware(handler, event, data):
        """Middleware для передачи текущего пользователя в handlers"""
        tg_user = data.get('event_from_user')
        if tg_user is not None:
            data['session'] = await load_session(db, tg_user)
        return await handler(event, data)

    # Регистрируем роутеры
    dp.include_router(start.router)
    dp.include_router(profile.router)
    dp.include_router(trainer.router)
    dp.include_router(sports.router)
    dp.include_router(chat.router)
    dp.include_router(booking.router)
    dp.include_router(chatbot.router)

    return dp


async def main():
    """Главная функция запуска бота"""

    # Проверяем наличие токена
    if not BOT_TOKEN:
        logger.error("❌ BOT_TOKEN не установлен! Проверьте файл .env")
        return

    # Инициализируем бота
    bot = Bot(
        token=BOT_TOKEN,
        default=DefaultBotProperties(parse_mode=ParseMode.HTML)
    )

    # Инициализируем базу данных
    db = Database(DATABASE_PATH)
    await db.init_db()
    logger.info("✅ База данных инициализирована")

    support_bot = SupportBot()
    dp = create_dispatcher(db, support_bot)
    logger.info("✅ Роутеры зарегистрированы")

    # Запускаем polling
    logger.info("🚀 Бот запущен!")
    try:
        await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())
    finally:
        await support_bot.close()
        await bot.session.close()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("⏹ Бот остановлен пользователем")
    except Exception as e:
        logger.error(f"❌ Критическая ошибка: {e}", exc_info=True)
