# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
from pathlib import Path

log = logging.getLogger(__name__)

# Порядок важен: при нескольких совпадениях в логе окажется первое
DEFAULT_KEYWORDS: tuple[str, ...] = (
    "crypto",
    "bitcoin",
    "usdt",
    "forex",
    "binary options",
    "airdrop",
    "passive income",
    "guaranteed profit",
    "investment opportunity",
    "work from home",
    "earn money",
    "dm me",
    "casino",
    "onlyfans",
    "gagner de l'argent",
    "revenu passif",
    "investissement",
    "rémunéré",
)


def load_keywords(path: str | os.PathLike[str] | None = None) -> tuple[str, ...]:
    """
    Read keywords from a UTF-8 text file, one phrase per line.
    Blank lines and ``#`` comments are skipped; order is kept.
    Without a path (or if the file is missing) the built-in list is used.
    """
    if not path:
        return DEFAULT_KEYWORDS

    p = Path(path)
    if not p.is_file():
        log.warning("Keywords file %s not found, using built-in list", p)
        return DEFAULT_KEYWORDS

    phrases: list[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        phrase = line.strip()
        if not phrase or phrase.startswith("#"):
            continue
        phrases.append(phrase)

    log.info("Loaded %s keywords from %s", len(phrases), p)
    return tuple(phrases)
