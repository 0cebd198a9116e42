import pytest
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.base import StorageKey
from aiogram.fsm.storage.memory import MemoryStorage

from database import Database
from database.models import TrainerDetail

TRAINEE_ID = 100
TRAINER_ID = 200


@pytest.fixture
async def db(tmp_path):
    database = Database(str(tmp_path / "test.db"))
    await database.init_db()
    return database


@pytest.fixture
async def trainer(db):
    """Тренер по теннису с заполненным профилем"""
    await db.add_user(TRAINER_ID, "coach")
    await db.update_profile(TRAINER_ID, "Anna Coach", "Copenhagen", "photo-file-id")
    await db.add_trainer_detail(TrainerDetail(
        id=None,
        user_id=TRAINER_ID,
        sport="Tennis",
        price="300 DKK",
        experience="5 years",
        description="Technique and match play"
    ))
    return await db.get_user(TRAINER_ID)


@pytest.fixture
async def trainee(db):
    await db.add_user(TRAINEE_ID, "student")
    await db.update_profile(TRAINEE_ID, "Bo Student", "Aarhus")
    return await db.get_user(TRAINEE_ID)


@pytest.fixture
def state():
    return FSMContext(
        storage=MemoryStorage(),
        key=StorageKey(bot_id=1, chat_id=TRAINEE_ID, user_id=TRAINEE_ID)
    )
