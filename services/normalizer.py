# -*- coding: utf-8 -*-
"""
Comparison form of a message or keyword.

Both sides of a keyword check go through :func:`normalize`, so casing, accents,
invisible characters, punctuation and lookalike letters never decide a match.
"""

from __future__ import annotations

import unicodedata

import regex as rx

from services.confusables import fold

FORMAT_CHARS = rx.compile(r"\p{Cf}+")
COMBINING_MARKS = rx.compile(r"\p{M}+")
NON_WORD_RUN = rx.compile(r"[^\p{L}\p{N}]+")

# Валюты сохраняем отдельными токенами до зачистки пунктуации
CURRENCY_TOKENS: tuple[tuple[str, str], ...] = (
    ("€", " eur "),
    ("$", " usd "),
    ("£", " gbp "),
    ("¥", " jpy "),
)


def normalize(text: str | None) -> str:
    """
    Canonical comparison form:
    - lookalike letters folded to Latin
    - NFKD, then format chars (bidi, ZWJ, variation selectors) and marks removed
    - currency symbols become word tokens
    - every other non letter/digit run becomes a single space
    - case folded and trimmed
    """
    if not text:
        return ""

    s = fold(text)
    s = unicodedata.normalize("NFKD", s)
    # NFKD может раскрыть символ в букву из сворачиваемого блока (µ -> μ, ά -> α)
    s = fold(s)
    s = FORMAT_CHARS.sub("", s)
    s = COMBINING_MARKS.sub("", s)

    for symbol, token in CURRENCY_TOKENS:
        s = s.replace(symbol, token)

    s = NON_WORD_RUN.sub(" ", s)
    # casefold может дать строчную букву из сворачиваемого блока
    return fold(s.casefold()).strip()
