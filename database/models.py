"""Модели данных"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    """Пользователь бота (ученик или тренер)"""
    user_id: int
    username: Optional[str]
    name: Optional[str]
    city: Optional[str]
    profile_picture: Optional[str]  # file_id фото в Telegram
    is_trainer: bool
    rating_sum: int
    rating_count: int
    created_at: Optional[str]

    @property
    def has_profile(self) -> bool:
        return bool(self.name and self.city)

    @property
    def display_name(self) -> str:
        return self.name or "Unknown User"


@dataclass
class TrainerDetail:
    """Предложение тренера по конкретному виду спорта"""
    id: Optional[int]
    user_id: int
    sport: str
    price: str
    experience: str
    description: str


@dataclass
class Comment:
    """Комментарий к тренеру"""
    id: Optional[int]
    trainer_id: int
    user_id: int
    text: str
    created_at: Optional[str]
    author_name: str = "Unknown User"


@dataclass
class ParticipantInfo:
    """Снимок имени и фото участника чата"""
    id: int
    name: str
    profile_picture: str


@dataclass
class Chat:
    """Переписка двух пользователей"""
    id: str
    user1_id: int
    user1_name: str
    user1_picture: str
    user2_id: int
    user2_name: str
    user2_picture: str
    last_message: str
    created_at: Optional[str]

    @property
    def participants(self) -> list[int]:
        return [self.user1_id, self.user2_id]

    @property
    def participants_info(self) -> list[ParticipantInfo]:
        return [
            ParticipantInfo(self.user1_id, self.user1_name, self.user1_picture),
            ParticipantInfo(self.user2_id, self.user2_name, self.user2_picture),
        ]

    def other_participant(self, user_id: int) -> ParticipantInfo:
        """Собеседник пользователя user_id"""
        first, second = self.participants_info
        return second if first.id == user_id else first


@dataclass
class Message:
    """Сообщение в переписке"""
    id: Optional[int]
    chat_id: str
    sender_id: int
    sender_name: str
    text: str
    created_at: Optional[str]


@dataclass
class Booking:
    """Запись на тренировку"""
    id: Optional[int]
    trainer_id: int
    date: str  # YYYY-MM-DD
    time_slot: str
    client_id: int
    created_at: Optional[str]
