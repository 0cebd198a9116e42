"""FSM состояния для регистрации тренера"""
from aiogram.fsm.state import State, StatesGroup


class TrainerRegistration(StatesGroup):
    """Состояния добавления предложения тренера"""
    waiting_for_sport = State()
    waiting_for_price = State()
    waiting_for_experience = State()
    waiting_for_description = State()
