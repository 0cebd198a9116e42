"""Контекст текущего пользователя"""
from dataclasses import dataclass
from typing import Optional

from database import Database
from database.models import User


@dataclass
class Session:
    """Текущий пользователь, передается в каждый обработчик через middleware"""
    user_id: int
    username: Optional[str]
    user: Optional[User]

    @property
    def has_profile(self) -> bool:
        return bool(self.user and self.user.has_profile)

    @property
    def is_trainer(self) -> bool:
        return bool(self.user and self.user.is_trainer)

    @property
    def display_name(self) -> str:
        if self.user and self.user.name:
            return self.user.name
        return self.username or "Unknown User"


async def load_session(db: Database, tg_user) -> Session:
    """Зарегистрировать пользователя Telegram и собрать сессию"""
    await db.add_user(tg_user.id, tg_user.username)
    user = await db.get_user(tg_user.id)
    return Session(user_id=tg_user.id, username=tg_user.username, user=user)
