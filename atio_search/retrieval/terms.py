"""Significant-term extraction for the full-text stage."""

import re
from functools import lru_cache
from pathlib import Path

from atio_search.config.settings import settings

STOPWORDS_PATH = Path(__file__).with_name("stopwords.txt")

_NON_TERM_CHARS = re.compile(r"[^a-z0-9\s-]")
_SPLIT = re.compile(r"[\s-]+")
MIN_TERM_LENGTH = 3


def read_stopwords(path: str | Path) -> frozenset[str]:
    words: set[str] = set()
    for line in Path(path).read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0]
        words.update(w.lower() for w in line.split())
    return frozenset(words)


@lru_cache(maxsize=1)
def load_stopwords() -> frozenset[str]:
    words = read_stopwords(STOPWORDS_PATH)
    if settings.extra_stopwords_path:
        words = words | read_stopwords(settings.extra_stopwords_path)
    return words


def extract_terms(text: str, stopwords: frozenset[str] | None = None) -> list[str]:
    """
    Lower-case, keep [a-z0-9] plus hyphens, split on whitespace and hyphens,
    drop short tokens and stop words. Order is kept, duplicates are not removed.
    """
    stopwords = load_stopwords() if stopwords is None else stopwords
    cleaned = _NON_TERM_CHARS.sub(" ", text.strip().lower())
    return [
        w for w in _SPLIT.split(cleaned) if len(w) >= MIN_TERM_LENGTH and w not in stopwords
    ]


def merge_terms(*groups: list[str]) -> list[str]:
    """Concatenate term lists, dropping repeats but keeping first-seen order."""
    return list(dict.fromkeys(t for group in groups for t in group))
