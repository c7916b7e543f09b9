"""Text normalization: control characters, punctuation, case, stopwords."""

from __future__ import annotations

import logging
import re
import string
from collections.abc import Iterable, Sequence

from sklearn.feature_extraction.text import ENGLISH_STOP_WORDS

from speechcluster.config import DEFAULTS
from speechcluster.errors import InvalidArgument

logger = logging.getLogger("speechcluster")

_STOPWORDS_BY_LANGUAGE = {
    "english": ENGLISH_STOP_WORDS,
    "en": ENGLISH_STOP_WORDS,
}

SUPPORTED_LANGUAGES = frozenset(_STOPWORDS_BY_LANGUAGE)

_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")
_PUNCT_RE = re.compile(f"[{re.escape(string.punctuation)}]")


def stopwords_for(
    language: str = DEFAULTS.language,
    extra: Iterable[str] | None = None,
    keep: Iterable[str] | None = None,
) -> frozenset[str]:
    """Resolve the stopword set for *language*, plus *extra*, minus *keep*."""
    try:
        words = set(_STOPWORDS_BY_LANGUAGE[language.lower()])
    except KeyError:
        raise InvalidArgument(
            f"unsupported stopword language '{language}', "
            f"expected one of {sorted(_STOPWORDS_BY_LANGUAGE)}"
        ) from None
    if extra:
        words.update(w.lower() for w in extra)
    if keep:
        words.difference_update(w.lower() for w in keep)
    return frozenset(words)


def _stopword_pattern(stopwords: Iterable[str]) -> re.Pattern[str] | None:
    # Longest first so alternation never stops at a shorter prefix.
    words = sorted(stopwords, key=lambda w: (-len(w), w))
    if not words:
        return None
    return re.compile(r"\b(?:" + "|".join(map(re.escape, words)) + r")\b")


def normalize_text(text: str, *, stopwords: Iterable[str] = ()) -> str:
    """Clean one document.

    Control characters (newlines included) and ASCII punctuation are deleted
    outright, the text is lowercased, and whole-word stopwords are removed.
    Whitespace around removed words is left as is.
    """
    pattern = _stopword_pattern(stopwords)
    return _normalize(text, pattern)


def _normalize(text: str, pattern: re.Pattern[str] | None) -> str:
    text = _CONTROL_RE.sub("", text)
    text = _PUNCT_RE.sub("", text)
    text = text.lower()
    if pattern is not None:
        text = pattern.sub("", text)
    return text


def normalize_documents(
    texts: Sequence[str],
    language: str = DEFAULTS.language,
    extra_stopwords: Iterable[str] | None = None,
    keep_words: Iterable[str] | None = None,
) -> list[str]:
    """Normalize every document; output is aligned 1:1 with *texts*."""
    stopwords = stopwords_for(language, extra_stopwords, keep_words)
    pattern = _stopword_pattern(stopwords)
    cleaned = [_normalize(text, pattern) for text in texts]
    logger.info("Normalized %d documents (%d stopwords)", len(cleaned), len(stopwords))
    return cleaned
