"""Конфигурация бота"""
import os
from dotenv import load_dotenv

load_dotenv()

# Токен бота
BOT_TOKEN = os.getenv("BOT_TOKEN")

# Путь к базе данных
DATABASE_PATH = os.getenv("DATABASE_PATH", "mentorzone.db")

# Настройки LLM для чат-бота поддержки (OpenAI-совместимый API)
LLM_API_KEY = os.getenv("LLM_API_KEY", "")
LLM_API_URL = os.getenv("LLM_API_URL", "https://api.openai.com/v1/chat/completions")
LLM_MODEL = os.getenv("LLM_MODEL", "gpt-4o-mini")
LLM_TIMEOUT = float(os.getenv("LLM_TIMEOUT", "30"))

SUPPORT_BOT_NAME = "MentorZone Support"
SUPPORT_SYSTEM_PROMPT = (
    "You are a customer support assistant. Your job is to help users resolve issues, "
    "answer questions, and provide information about our services. "
    "Be polite, clear, and concise in your responses."
)

# Список видов спорта
SPORTS = [
    "Football",
    "Basketball",
    "Tennis",
    "Running",
    "Swimming",
    "Cycling",
    "Bordtennis",
    "Badminton",
    "Yoga",
]

# Все возможные слоты для записи (обед с 12 до 13 не бронируется)
TIME_SLOTS = [
    "9:00 AM", "9:30 AM", "10:00 AM", "10:30 AM",
    "11:00 AM", "11:30 AM", "1:00 PM", "1:30 PM",
    "2:00 PM", "2:30 PM", "3:00 PM", "3:30 PM",
]

# На сколько дней вперед можно записаться
BOOKING_DAYS_AHEAD = int(os.getenv("BOOKING_DAYS_AHEAD", "14"))

# Сколько последних сообщений показывать в переписке
MESSAGES_HISTORY_LIMIT = int(os.getenv("MESSAGES_HISTORY_LIMIT", "20"))
