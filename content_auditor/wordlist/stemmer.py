"""
Stemmed term equality.

A light suffix stripper after the first step of the Porter algorithm
(plurals, ``-ed`` / ``-ing``, terminal ``y``). It is enough to make
"whales" equal "Whale" and "running" equal "run" without pretending to
be a full morphological analyzer.
"""

from __future__ import annotations

import re
from typing import List

_WORD = re.compile(r"[^\W_]+")


def _is_consonant(word: str, i: int) -> bool:
    ch = word[i]
    if ch in "aeiou":
        return False
    if ch == "y":
        return i == 0 or not _is_consonant(word, i - 1)
    return True


def _measure(stem: str) -> int:
    """Number of vowel-consonant sequences in ``stem``."""
    m = 0
    prev_vowel = False
    for i in range(len(stem)):
        vowel = not _is_consonant(stem, i)
        if prev_vowel and not vowel:
            m += 1
        prev_vowel = vowel
    return m


def _has_vowel(stem: str) -> bool:
    return any(not _is_consonant(stem, i) for i in range(len(stem)))


def _ends_double_consonant(word: str) -> bool:
    return len(word) >= 2 and word[-1] == word[-2] and _is_consonant(word, len(word) - 1)


def _ends_cvc(word: str) -> bool:
    return (
        len(word) >= 3
        and _is_consonant(word, len(word) - 3)
        and not _is_consonant(word, len(word) - 2)
        and _is_consonant(word, len(word) - 1)
        and word[-1] not in "wxy"
    )


def stem(word: str) -> str:
    """Reduce one word to its approximate root (lower case)."""
    w = word.lower()
    if len(w) <= 2:
        return w

    # plurals
    if w.endswith("sses") or w.endswith("ies"):
        w = w[:-2]
    elif w.endswith("s") and not w.endswith("ss"):
        w = w[:-1]

    # past tense and progressive
    trimmed = False
    if w.endswith("eed"):
        if _measure(w[:-3]) > 0:
            w = w[:-1]
    elif w.endswith("ed") and _has_vowel(w[:-2]):
        w, trimmed = w[:-2], True
    elif w.endswith("ing") and _has_vowel(w[:-3]):
        w, trimmed = w[:-3], True
    if trimmed:
        if w.endswith(("at", "bl", "iz")):
            w += "e"
        elif _ends_double_consonant(w) and w[-1] not in "lsz":
            w = w[:-1]
        elif _measure(w) == 1 and _ends_cvc(w):
            w += "e"

    if w.endswith("y") and _has_vowel(w[:-1]):
        w = w[:-1] + "i"
    return w


def stem_words(text: str) -> List[str]:
    return [stem(word) for word in _WORD.findall(text)]


def terms_match(a: str, b: str) -> bool:
    """True when two terms have the same words after stemming.

    Case, punctuation and spacing are ignored; the relation is reflexive
    and symmetric.
    """
    return stem_words(a) == stem_words(b)
