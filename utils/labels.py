# -*- coding: utf-8 -*-
"""Human readable labels for the moderation log channel."""

from __future__ import annotations

from models import InboundMessage, ModerationDecision
from services.moderation import PREVIEW_LIMIT, preview


def chat_label(message: InboundMessage) -> str:
    if message.chat_title:
        return message.chat_title
    if message.chat_username:
        return f"@{message.chat_username}"
    return str(message.chat_id)


def user_label(message: InboundMessage) -> str:
    if message.username:
        return f"@{message.username}"
    full = f"{message.first_name or ''} {message.last_name or ''}".strip()
    return full or str(message.user_id)


def probation_label(decision: ModerationDecision, limit: int) -> str:
    if decision.probation_count is None:
        return "store unavailable"
    if decision.always_moderated:
        return f"always, seen {decision.probation_count}"
    return f"{decision.probation_count}/{limit}"


def build_log_text(
    message: InboundMessage,
    decision: ModerationDecision,
    *,
    probation_limit: int = 5,
    preview_limit: int = PREVIEW_LIMIT,
) -> str:
    """Summary posted to the log channel after a deletion."""
    return "\n".join(
        [
            f"🧹 Deleted (probation {probation_label(decision, probation_limit)})",
            f"Chat: {chat_label(message)}",
            f"User: {user_label(message)} (id {message.user_id})",
            f"Keyword: {decision.result.label}",
            f"Text: {preview(message.content, preview_limit)}",
        ]
    )
