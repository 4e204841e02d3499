# -*- coding: utf-8 -*-
from __future__ import annotations

import logging

from aiogram import Router
from aiogram.filters import Command, CommandObject, Filter
from aiogram.types import Message

from config import settings
from services.moderation import ModerationService
from services.normalizer import normalize
from services.probation import ProbationStoreError

router = Router()
log = logging.getLogger(__name__)


# ---------- Админ-проверка ----------
class IsAdmin(Filter):
    """Не-админские сообщения проходят дальше, в общий фильтр."""

    async def __call__(self, msg: Message) -> bool:
        return bool(msg.from_user) and settings.is_admin(msg.from_user.id)


router.message.filter(IsAdmin())


@router.message(Command("check"))
async def cmd_check(msg: Message, command: CommandObject, moderation: ModerationService) -> None:
    """Прогоняем текст через фильтр, не трогая счётчики."""
    text = (command.args or "").strip()
    if not text:
        await msg.answer("Usage: /check <text>")
        return

    result = moderation.matcher.match(text)
    verdict = f"MATCH: {result.label}" if result.matched else "no match"
    await msg.answer(f"Normalized: {normalize(text) or '—'}\n{verdict}")


@router.message(Command("probation"))
async def cmd_probation(msg: Message, command: CommandObject, moderation: ModerationService) -> None:
    raw = (command.args or "").strip()
    if not raw.lstrip("-").isdigit():
        await msg.answer("Usage: /probation <user_id>")
        return
    user_id = int(raw)

    try:
        seen = await moderation.counter.peek(user_id)
    except ProbationStoreError as exc:
        log.error("Probation lookup for %s failed: %s", user_id, exc)
        await msg.answer("⚠️ Probation store is unavailable")
        return

    limit = moderation.probation_limit
    if moderation.is_always_moderated(user_id):
        state = "always moderated"
    elif seen == 0:
        state = "unseen"
    elif seen < limit:
        state = f"on probation ({seen}/{limit})"
    else:
        state = "trusted"
    await msg.answer(f"User {user_id}: seen {seen} message(s), {state}")
