# -*- coding: utf-8 -*-
from __future__ import annotations

import asyncio
import logging
from functools import partial
from typing import Any, Awaitable

from aiogram import Bot, F, Router
from aiogram.exceptions import TelegramAPIError
from aiogram.types import Message

from config import settings
from models import InboundMessage, ModerationDecision
from services.moderation import ModerationService
from utils.labels import build_log_text

router = Router()
log = logging.getLogger(__name__)

# Фоновые задачи (удаление/лог) держим здесь, чтобы GC не собрал их раньше времени
_background: set[asyncio.Task[Any]] = set()

GROUP_CHATS = {"group", "supergroup"}


def to_inbound(msg: Message) -> InboundMessage:
    """Convert aiogram message into the platform-neutral record."""
    user = msg.from_user
    chat = msg.chat
    return InboundMessage(
        user_id=user.id if user else None,
        chat_id=chat.id,
        message_id=msg.message_id,
        text=msg.text,
        caption=msg.caption,
        username=user.username if user else None,
        first_name=user.first_name if user else None,
        last_name=user.last_name if user else None,
        chat_title=chat.title,
        chat_username=chat.username,
    )


def _reap(what: str, task: asyncio.Task[Any]) -> None:
    _background.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is None:
        return
    if isinstance(exc, TelegramAPIError):
        log.warning("%s failed: %s", what, exc)
    else:
        log.error("%s failed unexpectedly", what, exc_info=exc)


def _spawn(coro: Awaitable[Any], what: str) -> asyncio.Task[Any]:
    task = asyncio.ensure_future(coro)
    _background.add(task)
    task.add_done_callback(partial(_reap, what))
    return task


def dispatch_enforcement(
    bot: Bot,
    message: InboundMessage,
    decision: ModerationDecision,
) -> tuple[asyncio.Task[Any], ...]:
    """
    Fire-and-forget: удаление сообщения и запись в лог-канал.
    Решение модерации не ждёт их результата.
    """
    tasks = [
        _spawn(
            bot.delete_message(chat_id=message.chat_id, message_id=message.message_id),
            f"deleteMessage {message.chat_id}/{message.message_id}",
        )
    ]

    if settings.LOG_CHANNEL_ID:
        text = build_log_text(
            message,
            decision,
            probation_limit=settings.PROBATION_LIMIT,
            preview_limit=settings.PREVIEW_LIMIT,
        )
        tasks.append(
            _spawn(
                bot.send_message(
                    chat_id=settings.LOG_CHANNEL_ID,
                    text=text,
                    disable_web_page_preview=True,
                ),
                "sendMessage to log channel",
            )
        )
    else:
        log.warning("LOG_CHANNEL_ID is not set; deletion of %s not logged", message.message_id)

    return tuple(tasks)


async def _moderate(msg: Message, bot: Bot, moderation: ModerationService) -> None:
    inbound = to_inbound(msg)
    decision = await moderation.decide(inbound)
    if decision.enforce:
        dispatch_enforcement(bot, inbound, decision)


@router.message(F.chat.type.in_(GROUP_CHATS))
async def on_group_message(msg: Message, bot: Bot, moderation: ModerationService) -> None:
    await _moderate(msg, bot, moderation)


@router.edited_message(F.chat.type.in_(GROUP_CHATS))
async def on_group_message_edit(msg: Message, bot: Bot, moderation: ModerationService) -> None:
    await _moderate(msg, bot, moderation)
