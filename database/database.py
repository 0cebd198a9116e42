"""Работа с базой данных"""
import logging
import aiosqlite
from typing import Optional, List, Dict
from .models import User, TrainerDetail, Comment, Chat, Message, Booking
from services.chat_id import make_chat_id
from services.rating import RatingState, apply_rating

logger = logging.getLogger(__name__)

UNKNOWN_USER_NAME = "Unknown User"


def _row_to_user(row) -> User:
    data = dict(row)
    data['is_trainer'] = bool(data['is_trainer'])
    return User(**data)


class Database:
    """Класс для работы с SQLite базой данных"""

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def init_db(self):
        """Инициализация базы данных"""
        async with aiosqlite.connect(self.db_path) as db:
            # Таблица пользователей (ученики и тренеры)
            await db.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id INTEGER PRIMARY KEY,
                    username TEXT,
                    name TEXT,
                    city TEXT,
                    profile_picture TEXT,
                    is_trainer INTEGER NOT NULL DEFAULT 0,
                    rating_sum INTEGER NOT NULL DEFAULT 0,
                    rating_count INTEGER NOT NULL DEFAULT 0,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Предложения тренеров по видам спорта
            await db.execute("""
                CREATE TABLE IF NOT EXISTS trainer_details (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    user_id INTEGER NOT NULL,
                    sport TEXT NOT NULL,
                    price TEXT NOT NULL,
                    experience TEXT NOT NULL,
                    description TEXT NOT NULL,
                    FOREIGN KEY (user_id) REFERENCES users (user_id)
                )
            """)

            # Последняя оценка каждого пользователя для каждого тренера
            await db.execute("""
                CREATE TABLE IF NOT EXISTS user_ratings (
                    trainer_id INTEGER NOT NULL,
                    rater_id INTEGER NOT NULL,
                    rating INTEGER NOT NULL,
                    PRIMARY KEY (trainer_id, rater_id),
                    FOREIGN KEY (trainer_id) REFERENCES users (user_id)
                )
            """)

            # Комментарии к тренерам
            await db.execute("""
                CREATE TABLE IF NOT EXISTS comments (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    trainer_id INTEGER NOT NULL,
                    user_id INTEGER NOT NULL,
                    text TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (trainer_id) REFERENCES users (user_id)
                )
            """)

            # Переписки, id строится из id участников
            await db.execute("""
                CREATE TABLE IF NOT EXISTS chats (
                    id TEXT PRIMARY KEY,
                    user1_id INTEGER NOT NULL,
                    user1_name TEXT NOT NULL,
                    user1_picture TEXT NOT NULL DEFAULT '',
                    user2_id INTEGER NOT NULL,
                    user2_name TEXT NOT NULL,
                    user2_picture TEXT NOT NULL DEFAULT '',
                    last_message TEXT NOT NULL DEFAULT '',
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # Сообщения
            await db.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    chat_id TEXT NOT NULL,
                    sender_id INTEGER NOT NULL,
                    sender_name TEXT NOT NULL,
                    text TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (chat_id) REFERENCES chats (id)
                )
            """)

            # Записи на тренировки
            await db.execute("""
                CREATE TABLE IF NOT EXISTS bookings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    trainer_id INTEGER NOT NULL,
                    date TEXT NOT NULL,
                    time_slot TEXT NOT NULL,
                    client_id INTEGER NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE(trainer_id, date, time_slot),
                    FOREIGN KEY (trainer_id) REFERENCES users (user_id)
                )
            """)

            await db.commit()

    # === Пользователи ===

    async def add_user(self, user_id: int, username: Optional[str]):
        """Добавить пользователя или обновить его username"""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO users (user_id, username) VALUES (?, ?) "
                "ON CONFLICT(user_id) DO UPDATE SET username = excluded.username",
                (user_id, username)
            )
            await db.commit()

    async def get_user(self, user_id: int) -> Optional[User]:
        """Получить пользователя по ID"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM users WHERE user_id = ?", (user_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row:
                    return _row_to_user(row)
                return None

    async def update_profile(self, user_id: int, name: str, city: str, profile_picture: Optional[str] = None):
        """Сохранить профиль. Фото не затирается, если новое не передано"""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO users (user_id, name, city, profile_picture) VALUES (?, ?, ?, ?) "
                "ON CONFLICT(user_id) DO UPDATE SET name = excluded.name, city = excluded.city, "
                "profile_picture = COALESCE(excluded.profile_picture, users.profile_picture)",
                (user_id, name, city, profile_picture)
            )
            await db.commit()

    # === Тренеры ===

    async def add_trainer_detail(self, detail: TrainerDetail) -> int:
        """Отметить пользователя тренером и добавить предложение по виду спорта"""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                "INSERT INTO users (user_id, is_trainer) VALUES (?, 1) "
                "ON CONFLICT(user_id) DO UPDATE SET is_trainer = 1",
                (detail.user_id,)
            )
            cursor = await db.execute("""
                INSERT INTO trainer_details (user_id, sport, price, experience, description)
                VALUES (?, ?, ?, ?, ?)
            """, (
                detail.user_id, detail.sport, detail.price,
                detail.experience, detail.description
            ))
            await db.commit()
            return cursor.lastrowid

    async def get_trainer_details(self, user_id: int) -> List[TrainerDetail]:
        """Получить все предложения тренера"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM trainer_details WHERE user_id = ? ORDER BY id",
                (user_id,)
            ) as cursor:
                rows = await cursor.fetchall()
                return [TrainerDetail(**dict(row)) for row in rows]

    async def get_trainers_by_sport(self, sport: str) -> List[User]:
        """Получить тренеров, у которых есть предложение по виду спорта"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("""
                SELECT * FROM users
                WHERE is_trainer = 1 AND user_id IN (
                    SELECT user_id FROM trainer_details WHERE sport = ?
                )
                ORDER BY name COLLATE NOCASE, user_id
            """, (sport,)) as cursor:
                rows = await cursor.fetchall()
                return [_row_to_user(row) for row in rows]

    # === Рейтинг ===

    async def get_user_ratings(self, trainer_id: int) -> Dict[int, int]:
        """Последние оценки тренера по каждому пользователю"""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT rater_id, rating FROM user_ratings WHERE trainer_id = ?",
                (trainer_id,)
            ) as cursor:
                rows = await cursor.fetchall()
                return {rater_id: rating for rater_id, rating in rows}

    async def rate_trainer(self, trainer_id: int, rater_id: int, rating: int) -> Optional[RatingState]:
        """
        Оценить тренера.

        Чтение агрегата и запись выполняются в одной транзакции BEGIN IMMEDIATE,
        поэтому одновременные оценки не теряются. Возвращает новый агрегат
        или None, если тренер не найден.
        """
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                async with db.execute(
                    "SELECT rating_sum, rating_count FROM users WHERE user_id = ? AND is_trainer = 1",
                    (trainer_id,)
                ) as cursor:
                    row = await cursor.fetchone()
                if not row:
                    await db.rollback()
                    return None

                async with db.execute(
                    "SELECT rater_id, rating FROM user_ratings WHERE trainer_id = ?",
                    (trainer_id,)
                ) as cursor:
                    user_ratings = {r_id: value for r_id, value in await cursor.fetchall()}

                state = apply_rating(
                    RatingState(row[0], row[1], user_ratings), rater_id, rating
                )

                await db.execute(
                    "UPDATE users SET rating_sum = ?, rating_count = ? WHERE user_id = ?",
                    (state.rating_sum, state.rating_count, trainer_id)
                )
                await db.execute(
                    "INSERT INTO user_ratings (trainer_id, rater_id, rating) VALUES (?, ?, ?) "
                    "ON CONFLICT(trainer_id, rater_id) DO UPDATE SET rating = excluded.rating",
                    (trainer_id, rater_id, rating)
                )
                await db.commit()
                return state
            except Exception:
                await db.rollback()
                raise

    # === Комментарии ===

    async def add_comment(self, trainer_id: int, user_id: int, text: str) -> int:
        """Добавить комментарий к тренеру"""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "INSERT INTO comments (trainer_id, user_id, text) VALUES (?, ?, ?)",
                (trainer_id, user_id, text)
            )
            await db.commit()
            return cursor.lastrowid

    async def get_comments(self, trainer_id: int) -> List[Comment]:
        """Комментарии к тренеру, старые сначала"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute("""
                SELECT c.id, c.trainer_id, c.user_id, c.text, c.created_at,
                       CASE
                           WHEN u.user_id IS NULL THEN ?
                           WHEN u.name IS NULL OR u.name = '' THEN 'Anonymous'
                           ELSE u.name
                       END AS author_name
                FROM comments c
                LEFT JOIN users u ON u.user_id = c.user_id
                WHERE c.trainer_id = ?
                ORDER BY c.created_at, c.id
            """, (UNKNOWN_USER_NAME, trainer_id)) as cursor:
                rows = await cursor.fetchall()
                return [Comment(**dict(row)) for row in rows]

    # === Переписки ===

    async def get_chat(self, chat_id: str) -> Optional[Chat]:
        """Получить переписку по ID"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM chats WHERE id = ?", (chat_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row:
                    return Chat(**dict(row))
                return None

    async def create_chat(self, user1_id: int, user2_id: int) -> Chat:
        """
        Получить или создать переписку двух пользователей.

        При одновременном создании вторая запись сливается с первой
        (ON CONFLICT DO NOTHING), так что переписка для пары всегда одна.
        """
        chat_id = make_chat_id(user1_id, user2_id)
        existing = await self.get_chat(chat_id)
        if existing:
            return existing

        user1 = await self.get_user(user1_id)
        user2 = await self.get_user(user2_id)

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                INSERT INTO chats
                (id, user1_id, user1_name, user1_picture, user2_id, user2_name, user2_picture)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO NOTHING
            """, (
                chat_id,
                user1_id, user1.display_name if user1 else UNKNOWN_USER_NAME,
                (user1.profile_picture or "") if user1 else "",
                user2_id, user2.display_name if user2 else UNKNOWN_USER_NAME,
                (user2.profile_picture or "") if user2 else "",
            ))
            await db.commit()

        logger.info(f"Переписка {chat_id} создана")
        return await self.get_chat(chat_id)

    async def update_chat_participant_info(self, chat_id: str, user_id: int) -> bool:
        """Обновить имя и фото участника в переписке. False если нечего обновлять"""
        user = await self.get_user(user_id)
        if not user:
            logger.warning(f"Пользователь {user_id} не найден")
            return False

        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("""
                UPDATE chats SET
                    user1_name = CASE WHEN user1_id = ? THEN ? ELSE user1_name END,
                    user1_picture = CASE WHEN user1_id = ? THEN ? ELSE user1_picture END,
                    user2_name = CASE WHEN user2_id = ? THEN ? ELSE user2_name END,
                    user2_picture = CASE WHEN user2_id = ? THEN ? ELSE user2_picture END
                WHERE id = ? AND (user1_id = ? OR user2_id = ?)
            """, (
                user_id, user.display_name, user_id, user.profile_picture or "",
                user_id, user.display_name, user_id, user.profile_picture or "",
                chat_id, user_id, user_id
            ))
            await db.commit()
            return cursor.rowcount > 0

    async def get_user_chats(self, user_id: int) -> List[Chat]:
        """Все переписки пользователя, новые сначала"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM chats WHERE user1_id = ? OR user2_id = ? "
                "ORDER BY created_at DESC, id",
                (user_id, user_id)
            ) as cursor:
                rows = await cursor.fetchall()
                return [Chat(**dict(row)) for row in rows]

    # === Сообщения ===

    async def add_message(self, chat_id: str, sender_id: int, sender_name: str, text: str) -> Message:
        """Добавить сообщение и обновить превью последнего сообщения"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "INSERT INTO messages (chat_id, sender_id, sender_name, text) VALUES (?, ?, ?, ?)",
                (chat_id, sender_id, sender_name, text)
            )
            message_id = cursor.lastrowid
            await db.execute(
                "UPDATE chats SET last_message = ? WHERE id = ?",
                (text, chat_id)
            )
            await db.commit()
            async with db.execute(
                "SELECT * FROM messages WHERE id = ?", (message_id,)
            ) as cursor:
                row = await cursor.fetchone()
                return Message(**dict(row))

    async def get_messages(self, chat_id: str, limit: Optional[int] = None) -> List[Message]:
        """Сообщения переписки по возрастанию времени (последние limit штук)"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM messages WHERE chat_id = ? ORDER BY created_at DESC, id DESC LIMIT ?",
                (chat_id, -1 if limit is None else limit)
            ) as cursor:
                rows = await cursor.fetchall()
                return [Message(**dict(row)) for row in reversed(rows)]

    # === Записи ===

    async def get_booked_slots(self, trainer_id: int, date: str) -> List[str]:
        """Занятые слоты тренера на дату"""
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute(
                "SELECT time_slot FROM bookings WHERE trainer_id = ? AND date = ? ORDER BY id",
                (trainer_id, date)
            ) as cursor:
                rows = await cursor.fetchall()
                return [row[0] for row in rows]

    async def book_slot(self, trainer_id: int, date: str, time_slot: str, client_id: int) -> bool:
        """Записаться на слот. False если слот уже занят"""
        async with aiosqlite.connect(self.db_path) as db:
            try:
                await db.execute(
                    "INSERT INTO bookings (trainer_id, date, time_slot, client_id) VALUES (?, ?, ?, ?)",
                    (trainer_id, date, time_slot, client_id)
                )
                await db.commit()
                return True
            except aiosqlite.IntegrityError:
                # Слот уже занят
                return False

    async def get_client_bookings(self, client_id: int) -> List[Booking]:
        """Записи пользователя по дате"""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM bookings WHERE client_id = ? ORDER BY date, id",
                (client_id,)
            ) as cursor:
                rows = await cursor.fetchall()
                return [Booking(**dict(row)) for row in rows]
