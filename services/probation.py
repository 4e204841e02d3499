# -*- coding: utf-8 -*-
"""
Per-user "messages seen" counter.

Every user gets a single owner: a mailbox (``asyncio.Queue``) drained by one
worker task, so increments for the same user are applied strictly one after
another while different users proceed in parallel. The worker retires once its
mailbox is empty; the next message for that user spawns a fresh one.
"""

from __future__ import annotations

import asyncio
import logging
import os

import aiosqlite

import db

log = logging.getLogger(__name__)


class ProbationStoreError(RuntimeError):
    """The durable counter store could not be read or written."""


class ProbationCounter:
    def __init__(self, db_path: str | os.PathLike[str] | None = None):
        self._db_path = db_path
        self._mailboxes: dict[int, asyncio.Queue[asyncio.Future[int]]] = {}
        self._workers: dict[int, asyncio.Task[None]] = {}

    async def record_and_get(self, user_id: int) -> int:
        """Count one more message from ``user_id`` and return the new total."""
        reply: asyncio.Future[int] = asyncio.get_running_loop().create_future()

        mailbox = self._mailboxes.get(user_id)
        if mailbox is None:
            mailbox = asyncio.Queue()
            self._mailboxes[user_id] = mailbox
            self._workers[user_id] = asyncio.create_task(
                self._drain(user_id, mailbox), name=f"probation:{user_id}"
            )
        mailbox.put_nowait(reply)
        return await reply

    async def peek(self, user_id: int) -> int:
        """Current total for ``user_id`` without counting anything."""
        try:
            async with db.connect(self._db_path) as conn:
                await db._prepare(conn)
                return await db.get_seen_count(conn, user_id)
        except (aiosqlite.Error, OSError) as exc:
            raise ProbationStoreError(f"probation store read failed: {exc}") from exc

    @property
    def active_owners(self) -> int:
        return len(self._workers)

    async def close(self) -> None:
        """Wait for in-flight increments to finish."""
        workers = list(self._workers.values())
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

    # ---------- владелец записи пользователя ----------

    async def _drain(self, user_id: int, mailbox: asyncio.Queue[asyncio.Future[int]]) -> None:
        try:
            # между проверкой empty() и finally нет await, поэтому новый запрос не потеряется
            while not mailbox.empty():
                reply = mailbox.get_nowait()
                try:
                    count = await self._increment(user_id)
                except Exception as exc:
                    if not reply.done():
                        reply.set_exception(exc)
                    else:
                        log.warning("Probation increment for %s failed after caller left: %s", user_id, exc)
                    continue
                if not reply.done():
                    reply.set_result(count)
                else:
                    # вызывающий отменился, но сообщение всё равно учтено
                    log.debug("Probation reply for %s dropped (count=%s)", user_id, count)
        finally:
            # при отмене воркера не оставляем ожидающих без ответа
            while not mailbox.empty():
                pending = mailbox.get_nowait()
                if not pending.done():
                    pending.cancel()
            if self._mailboxes.get(user_id) is mailbox:
                del self._mailboxes[user_id]
                self._workers.pop(user_id, None)

    async def _increment(self, user_id: int) -> int:
        try:
            async with db.connect(self._db_path) as conn:
                await db._prepare(conn)
                return await db.record_and_get(conn, user_id)
        except (aiosqlite.Error, OSError) as exc:
            raise ProbationStoreError(f"probation store write failed: {exc}") from exc
