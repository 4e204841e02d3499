# -*- coding: utf-8 -*-
from __future__ import annotations

import os
import time

import aiosqlite

from config import settings

_DB_PATH = settings.DB_PATH or os.path.join(os.getcwd(), "probation.sqlite3")


def connect(path: str | os.PathLike[str] | None = None) -> aiosqlite.Connection:
    """Return raw sqlite connection (aio)."""
    return aiosqlite.connect(path or _DB_PATH)


async def _prepare(db: aiosqlite.Connection) -> aiosqlite.Connection:
    db.row_factory = aiosqlite.Row
    return db


# -------------------------
# Испытательный срок (probation)
# -------------------------

async def record_and_get(db: aiosqlite.Connection, tg_user_id: int) -> int:
    """
    Атомарно увеличивает счётчик сообщений пользователя и возвращает новое значение.
    Первое сообщение создаёт запись и возвращает 1.
    """
    now = int(time.time())
    cur = await db.execute(
        """
        INSERT INTO user_probation (tg_user_id, seen_count, first_seen_at, last_seen_at)
        VALUES (?, 1, ?, ?)
        ON CONFLICT(tg_user_id) DO UPDATE
           SET seen_count = seen_count + 1,
               last_seen_at = excluded.last_seen_at
        RETURNING seen_count
        """,
        (tg_user_id, now, now),
    )
    row = await cur.fetchone()
    await cur.close()
    await db.commit()
    return int(row["seen_count"])  # type: ignore[index]


async def get_seen_count(db: aiosqlite.Connection, tg_user_id: int) -> int:
    """Сколько сообщений пользователя мы уже видели (0, если ни одного)."""
    cur = await db.execute(
        "SELECT seen_count FROM user_probation WHERE tg_user_id = ?",
        (tg_user_id,),
    )
    row = await cur.fetchone()
    await cur.close()
    return int(row["seen_count"]) if row and row["seen_count"] is not None else 0


# -------------------------
# Миграции / схема
# -------------------------

async def migrate(path: str | os.PathLike[str] | None = None) -> None:
    """Apply schema migrations."""
    async with connect(path) as db:
        await _prepare(db)
        for sql in _MIGRATIONS:
            await db.executescript(sql)
            await db.commit()


# Base migrations used for fresh deployments
_MIGRATIONS = [
    """
    PRAGMA journal_mode = WAL;
    """,
    """
    CREATE TABLE IF NOT EXISTS user_probation (
        tg_user_id INTEGER PRIMARY KEY,
        seen_count INTEGER NOT NULL DEFAULT 0,
        first_seen_at INTEGER DEFAULT (strftime('%s','now')),
        last_seen_at INTEGER DEFAULT (strftime('%s','now'))
    );
    """,
]
