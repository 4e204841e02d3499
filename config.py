# -*- coding: utf-8 -*-
from __future__ import annotations

import json
import os
from typing import FrozenSet

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# Загружаем .env до чтения переменных
load_dotenv()

# ---------- Вспомогательные функции ----------

def _coalesce_env(*names: str, default: str = "") -> str:
    """Берём первое непустое значение из списка имён переменных окружения."""
    for n in names:
        v = os.getenv(n, "")
        if isinstance(v, str) and v.strip():
            return v.strip()
    return default


def _parse_id_list(raw: object) -> FrozenSet[int]:
    """
    Универсальный парсер списков Telegram id:
    - "1,2,3" / "1 2 3" / "1;2;3"
    - JSON-массивы: "[1, 2, 3]" или '["1","2"]'
    - Уже-построенные коллекции (list/tuple/set)
    Нечисловые элементы пропускаются.
    """
    ids: set[int] = set()

    if isinstance(raw, (list, tuple, set, frozenset)):
        for x in raw:
            try:
                ids.add(int(x))
            except (TypeError, ValueError):
                continue
        return frozenset(ids)

    s = str(raw or "").strip()
    if not s:
        return frozenset()

    if s[0] == "[" and s[-1] == "]":
        try:
            data = json.loads(s)
        except ValueError:
            data = None  # пойдём простым путём
        if isinstance(data, list):
            return _parse_id_list(data)

    s = s.strip("[]").replace(";", ",").replace(" ", ",")
    for token in (t for t in s.split(",") if t):
        try:
            ids.add(int(token))
        except ValueError:
            continue

    return frozenset(ids)


# RemoveJoinGrpMsgBot: всегда под фильтром
_DEFAULT_ALWAYS_MODERATE = "1230480769"

# ---------- Модель конфигурации ----------

class Settings(BaseModel):
    """Application-level configuration derived from environment variables."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Общие
    APP_ENV: str = os.getenv("APP_ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Токен бота: поддерживаем BOT_TOKEN и TG_BOT_TOKEN
    BOT_TOKEN: str = _coalesce_env("BOT_TOKEN", "TG_BOT_TOKEN")

    # Webhook (если WEBHOOK_URL пуст, работаем через long polling)
    WEBHOOK_URL: str = os.getenv("WEBHOOK_URL", "")
    WEBHOOK_SECRET: str = os.getenv("WEBHOOK_SECRET", "")
    WEBHOOK_PATH: str = os.getenv("WEBHOOK_PATH", "/webhook")
    WEBHOOK_HOST: str = os.getenv("WEBHOOK_HOST", "0.0.0.0")
    WEBHOOK_PORT: int = int(os.getenv("WEBHOOK_PORT", 8080))

    # Канал, куда пишем лог удалений
    LOG_CHANNEL_ID: str = os.getenv("LOG_CHANNEL_ID", "")

    # Хранилище счётчиков и список ключевых слов
    DB_PATH: str = os.getenv("DB_PATH", "")
    KEYWORDS_FILE: str = os.getenv("KEYWORDS_FILE", "")

    # Модерация
    PROBATION_LIMIT: int = int(os.getenv("PROBATION_LIMIT", 5))
    PREVIEW_LIMIT: int = int(os.getenv("PREVIEW_LIMIT", 200))
    STORE_FAILURE_POLICY: str = _coalesce_env("STORE_FAILURE_POLICY", default="closed")

    # Списки id
    ALWAYS_MODERATE_USER_IDS: str = _coalesce_env("ALWAYS_MODERATE_USER_IDS", default=_DEFAULT_ALWAYS_MODERATE)
    ADMIN_USER_IDS: str = os.getenv("ADMIN_USER_IDS", "")

    @field_validator("STORE_FAILURE_POLICY")
    @classmethod
    def _check_policy(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ("closed", "open"):
            raise ValueError("STORE_FAILURE_POLICY must be 'closed' or 'open'")
        return v

    @field_validator("PROBATION_LIMIT", "PREVIEW_LIMIT")
    @classmethod
    def _check_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("limits must be >= 0")
        return v

    # ---------- Утилиты ----------
    def always_moderate_ids(self) -> FrozenSet[int]:
        """Пользователи, для которых испытательный срок не заканчивается."""
        return _parse_id_list(self.ALWAYS_MODERATE_USER_IDS)

    def admin_ids(self) -> FrozenSet[int]:
        return _parse_id_list(self.ADMIN_USER_IDS)

    def is_admin(self, user_id: int | str) -> bool:
        """Проверка, что пользователь является админом (удобно вызывать из хендлеров)."""
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            return False
        return uid in self.admin_ids()

    def use_webhook(self) -> bool:
        return bool(self.WEBHOOK_URL)


settings = Settings()
