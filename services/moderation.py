# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from typing import AbstractSet, Protocol

from models import InboundMessage, ModerationDecision, NO_MATCH, Verdict
from services.matcher import KeywordMatcher
from services.probation import ProbationStoreError

log = logging.getLogger(__name__)

FAIL_CLOSED = "closed"
FAIL_OPEN = "open"
STORE_FAILURE_POLICIES = (FAIL_CLOSED, FAIL_OPEN)

PREVIEW_LIMIT = 200


class Counter(Protocol):
    async def record_and_get(self, user_id: int) -> int:
        """Count one more message from the user and return the new total."""

    async def peek(self, user_id: int) -> int:
        """Return the current total without counting."""


def preview(text: str, limit: int = PREVIEW_LIMIT) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + "…"
    return text


class ModerationService:
    """
    Decides whether a message has to be removed.

    Counting happens for every message with a sender; the keyword check only runs
    while the sender is in the probation window or always moderated.
    """

    def __init__(
        self,
        matcher: KeywordMatcher,
        counter: Counter,
        always_moderate: AbstractSet[int] = frozenset(),
        *,
        probation_limit: int = 5,
        store_failure_policy: str = FAIL_CLOSED,
    ):
        if store_failure_policy not in STORE_FAILURE_POLICIES:
            raise ValueError(f"Unknown store failure policy: {store_failure_policy!r}")
        if probation_limit < 0:
            raise ValueError("probation_limit must be >= 0")
        self.matcher = matcher
        self.counter = counter
        self.always_moderate = frozenset(always_moderate)
        self.probation_limit = probation_limit
        self.store_failure_policy = store_failure_policy

    def is_always_moderated(self, user_id: int) -> bool:
        return user_id in self.always_moderate

    def in_probation(self, user_id: int, count: int) -> bool:
        return self.is_always_moderated(user_id) or count <= self.probation_limit

    async def decide(self, message: InboundMessage) -> ModerationDecision:
        user_id = message.user_id
        if not user_id:
            return ModerationDecision(Verdict.NO_USER)

        always = self.is_always_moderated(user_id)
        store_error: str | None = None
        try:
            count: int | None = await self.counter.record_and_get(user_id)
        except ProbationStoreError as exc:
            log.error(
                "Probation store unavailable for user %s (policy=%s): %s",
                user_id, self.store_failure_policy, exc,
            )
            if self.store_failure_policy == FAIL_OPEN:
                return ModerationDecision(
                    Verdict.STORE_UNAVAILABLE, always_moderated=always, store_error=str(exc)
                )
            # fail closed: считаем, что пользователь ещё на испытательном сроке
            count, store_error = None, str(exc)

        text = message.content
        if not text:
            return ModerationDecision(
                Verdict.NO_TEXT, probation_count=count, always_moderated=always, store_error=store_error
            )

        if count is not None and not self.in_probation(user_id, count):
            log.debug("User %s trusted (seen %s messages)", user_id, count)
            return ModerationDecision(Verdict.TRUSTED, probation_count=count, always_moderated=always)

        result = self.matcher.match(text)
        if not result.matched:
            return ModerationDecision(
                Verdict.CLEAN, NO_MATCH, probation_count=count, always_moderated=always, store_error=store_error
            )

        log.info(
            "Keyword %r matched in chat %s, message %s (user %s, probation %s)",
            result.label, message.chat_id, message.message_id, user_id, count,
        )
        return ModerationDecision(
            Verdict.MATCHED, result, probation_count=count, always_moderated=always, store_error=store_error
        )
