"""FSM состояния для настройки профиля"""
from aiogram.fsm.state import State, StatesGroup


class ProfileSetup(StatesGroup):
    """Состояния заполнения профиля"""
    waiting_for_name = State()
    waiting_for_city = State()
    waiting_for_photo = State()
