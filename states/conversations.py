"""FSM состояния для ввода текста: поиск, комментарии, переписки"""
from aiogram.fsm.state import State, StatesGroup


class TrainerSearch(StatesGroup):
    """Поиск тренера по имени"""
    waiting_for_query = State()


class CommentInput(StatesGroup):
    """Ввод комментария к тренеру"""
    waiting_for_text = State()


class ChatConversation(StatesGroup):
    """Открытая переписка с пользователем"""
    active = State()


class SupportConversation(StatesGroup):
    """Переписка с чат-ботом поддержки"""
    active = State()
