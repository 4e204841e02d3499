# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

import regex as rx

from models import MatchResult, NO_MATCH
from services.normalizer import normalize

log = logging.getLogger(__name__)

# Граница слова с учётом Unicode (вместо ASCII-шного \b)
_BOUNDARY_BEFORE = r"(?<![\p{L}\p{N}_])"
_BOUNDARY_AFTER = r"(?![\p{L}\p{N}_])"


def whole_word_pattern(normalized_kw: str) -> rx.Pattern:
    """Pattern that finds ``normalized_kw`` only as a whole token or phrase."""
    if not normalized_kw:
        raise ValueError("keyword pattern must not be empty")
    return rx.compile(_BOUNDARY_BEFORE + rx.escape(normalized_kw) + _BOUNDARY_AFTER)


@dataclass(slots=True, frozen=True)
class CompiledKeyword:
    raw: str
    normalized: str
    exact: rx.Pattern
    plural: Optional[rx.Pattern] = None

    @classmethod
    def build(cls, raw: str) -> Optional["CompiledKeyword"]:
        """Compile a raw phrase; ``None`` when nothing survives normalization."""
        kw = normalize(raw)
        if not kw:
            return None
        # мн. число только для одиночных слов: crypto -> cryptos
        plural = whole_word_pattern(kw + "s") if " " not in kw else None
        return cls(raw=raw, normalized=kw, exact=whole_word_pattern(kw), plural=plural)


class KeywordMatcher:
    """Ordered keyword list compiled once; first hit in list order wins."""

    def __init__(self, keywords: Iterable[str]):
        compiled: list[CompiledKeyword] = []
        for raw in keywords:
            entry = CompiledKeyword.build(raw)
            if entry is None:
                log.warning("Keyword %r is empty after normalization, skipped", raw)
                continue
            compiled.append(entry)
        self._keywords: tuple[CompiledKeyword, ...] = tuple(compiled)

    @property
    def keywords(self) -> tuple[CompiledKeyword, ...]:
        return self._keywords

    def __len__(self) -> int:
        return len(self._keywords)

    def match(self, raw_text: str | None) -> MatchResult:
        text = normalize(raw_text)
        if not text:
            return NO_MATCH

        for kw in self._keywords:
            if kw.exact.search(text):
                return MatchResult(matched=True, keyword=kw.raw)
            if kw.plural is not None and kw.plural.search(text):
                return MatchResult(matched=True, keyword=kw.raw, plural=True)

        return NO_MATCH


def match(raw_text: str | None, keywords: Iterable[str]) -> MatchResult:
    """One-off check against an ad hoc keyword list."""
    return KeywordMatcher(keywords).match(raw_text)
