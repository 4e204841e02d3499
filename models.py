# -*- coding: utf-8 -*-
from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Optional


class Verdict(StrEnum):
    """Outcome of a single moderation decision."""

    NO_USER = "no_user"
    NO_TEXT = "no_text"
    TRUSTED = "trusted"
    STORE_UNAVAILABLE = "store_unavailable"
    CLEAN = "clean"
    MATCHED = "matched"


@dataclass(slots=True, frozen=True)
class InboundMessage:
    """Platform-neutral view of an incoming chat message."""

    user_id: Optional[int]
    chat_id: int
    message_id: int
    text: Optional[str] = None
    caption: Optional[str] = None

    # Только для строки лога
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    chat_title: Optional[str] = None
    chat_username: Optional[str] = None

    @property
    def content(self) -> str:
        """Text if present, otherwise the caption, otherwise an empty string."""
        return self.text or self.caption or ""


@dataclass(slots=True, frozen=True)
class MatchResult:
    matched: bool
    keyword: Optional[str] = None  # исходная фраза из списка, не нормализованная
    plural: bool = False

    @property
    def label(self) -> str:
        if not self.matched:
            return "?"
        return f"{self.keyword} (plural)" if self.plural else str(self.keyword)


NO_MATCH = MatchResult(matched=False)


@dataclass(slots=True, frozen=True)
class ModerationDecision:
    verdict: Verdict
    result: MatchResult = NO_MATCH
    probation_count: Optional[int] = None
    always_moderated: bool = False
    store_error: Optional[str] = None

    @property
    def enforce(self) -> bool:
        """Delete + log only on a keyword hit."""
        return self.verdict is Verdict.MATCHED
