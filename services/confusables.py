# -*- coding: utf-8 -*-
"""Fold Greek/Cyrillic/Armenian lookalike letters to their Latin twins."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

# Блоки, в которых ищем «латиноподобные» буквы
FOLD_RANGES: tuple[tuple[int, int], ...] = (
    (0x0370, 0x03FF),  # Greek
    (0x0400, 0x052F),  # Cyrillic + Supplement
    (0x0530, 0x058F),  # Armenian
    (0x1C80, 0x1C8F),  # Cyrillic Extended-C
    (0x2DE0, 0x2DFF),  # Cyrillic Extended-A
    (0xA640, 0xA69F),  # Cyrillic Extended-B
)

# Латинские I без точки / с точкой живут в Latin Extended-A, но это частый обход
DOTLESS_I: frozenset[str] = frozenset({"ı", "İ"})

_CONFUSABLES: dict[str, str] = {
    # Cyrillic (lower)
    "а": "a",  # U+0430
    "е": "e",  # U+0435
    "о": "o",  # U+043E
    "р": "p",  # U+0440
    "с": "c",  # U+0441
    "х": "x",  # U+0445
    "у": "y",  # U+0443
    "к": "k",  # U+043A
    "м": "m",  # U+043C
    "т": "t",  # U+0442
    "н": "h",  # U+043D, выглядит как h
    "і": "i",  # U+0456
    "ї": "i",  # U+0457
    "ј": "j",  # U+0458
    "ѕ": "s",  # U+0455
    "һ": "h",  # U+04BB
    "ӏ": "l",  # U+04CF
    "ԁ": "d",  # U+0501
    "ԛ": "q",  # U+051B
    "ԝ": "w",  # U+051D
    # Cyrillic (upper)
    "А": "a",
    "Е": "e",
    "О": "o",
    "Р": "p",
    "С": "c",
    "Х": "x",
    "У": "y",
    "К": "k",
    "М": "m",
    "Т": "t",
    "Н": "h",
    "І": "i",
    "Ї": "i",
    "Ј": "j",
    "Ѕ": "s",
    "Һ": "h",
    "Ӏ": "l",
    "Ԁ": "d",
    "Ԛ": "q",
    "Ԝ": "w",
    # Greek (upper)
    "Α": "a",
    "Β": "b",
    "Ε": "e",
    "Ζ": "z",
    "Η": "h",
    "Ι": "i",
    "Κ": "k",
    "Μ": "m",
    "Ν": "n",
    "Ο": "o",
    "Ρ": "p",
    "Τ": "t",
    "Υ": "y",
    "Χ": "x",
    # Greek (lower)
    "α": "a",
    "β": "b",
    "ε": "e",
    "ι": "i",
    "κ": "k",
    "μ": "m",
    "ν": "n",
    "ο": "o",
    "ρ": "p",
    "τ": "t",
    "υ": "y",
    "χ": "x",
    # Armenian
    "ն": "u",  # U+0576
    "ո": "n",  # U+0578
    "օ": "o",  # U+0585
    "ս": "u",  # U+057D
    "հ": "h",  # U+0570
    "Ն": "u",  # U+0546
    "Ո": "n",  # U+0548
    "Օ": "o",  # U+0555
    "Ս": "u",  # U+054D
    "Հ": "h",  # U+0540
    # Latin dotless / dotted I
    "ı": "i",
    "İ": "i",
}

CONFUSABLES: Mapping[str, str] = MappingProxyType(_CONFUSABLES)


def in_fold_range(ch: str) -> bool:
    """True if ``ch`` is inside one of the scripts we fold."""
    cp = ord(ch)
    return any(lo <= cp <= hi for lo, hi in FOLD_RANGES)


def _check_map() -> None:
    for src, dst in CONFUSABLES.items():
        if len(src) != 1 or not (in_fold_range(src) or src in DOTLESS_I):
            raise ValueError(f"Confusable key out of range: U+{ord(src[0]):04X}")
        if len(dst) != 1 or not ("a" <= dst <= "z"):
            raise ValueError(f"Confusable value must be a basic Latin letter: {dst!r}")


_check_map()


def fold(text: str) -> str:
    """Replace mapped lookalikes with Latin letters, leave everything else as is."""
    if not text:
        return ""
    return "".join(
        CONFUSABLES.get(ch, ch) if (ch in DOTLESS_I or in_fold_range(ch)) else ch
        for ch in text
    )
