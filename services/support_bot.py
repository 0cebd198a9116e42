"""Чат-бот поддержки на базе LLM"""
import logging
from typing import Dict, List, Optional

import httpx

from config import (
    LLM_API_KEY,
    LLM_API_URL,
    LLM_MODEL,
    LLM_TIMEOUT,
    SUPPORT_BOT_NAME,
    SUPPORT_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

ChatTurn = Dict[str, str]


class SupportBotError(Exception):
    """Не удалось получить ответ чат-бота"""


def initial_conversation() -> List[ChatTurn]:
    """Начальный контекст переписки с ботом поддержки"""
    return [
        {"role": "system", "content": SUPPORT_SYSTEM_PROMPT},
        {"role": "assistant", "content": "Hello!"},
    ]


def greeting_text() -> str:
    return f"Hi, I'm {SUPPORT_BOT_NAME}. How can I assist you?"


class SupportBot:
    """
    Клиент OpenAI-совместимого chat completions API.

    Один запрос - один ответ, без стриминга и повторов.
    """

    def __init__(
        self,
        api_key: str = LLM_API_KEY,
        api_url: str = LLM_API_URL,
        model: str = LLM_MODEL,
        timeout: float = LLM_TIMEOUT,
        client: Optional[httpx.AsyncClient] = None
    ):
        self._api_key = api_key
        self._api_url = api_url
        self._model = model
        self._client = client or httpx.AsyncClient(timeout=timeout)

        if not self._api_key:
            logger.warning("LLM_API_KEY не установлен! Чат-бот поддержки будет недоступен.")

    async def send(self, messages: List[ChatTurn]) -> ChatTurn:
        """Отправить всю переписку и получить ответ ассистента"""
        if not self._api_key:
            raise SupportBotError("Support chat is not configured")

        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        payload = {
            "model": self._model,
            "messages": messages,
        }

        try:
            response = await self._client.post(self._api_url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Ошибка LLM API: {e}")
            raise SupportBotError("Support chat is unavailable") from e
        except ValueError as e:
            logger.warning(f"LLM API вернул не JSON: {e}")
            raise SupportBotError("Support chat returned an invalid response") from e

        return {"role": "assistant", "content": self._extract_content(data)}

    async def close(self):
        await self._client.aclose()

    @staticmethod
    def _extract_content(data) -> str:
        """Текст первого варианта ответа или пустая строка"""
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError):
            return ""
