"""Speller adapters.

A speller is anything with ``suggest(word) -> Sequence[str]`` returning
completions best first. The morphological spellers used in production
live outside this package; the adapters here wrap a plain word list or
an installed ``wn`` lexicon.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Speller(Protocol):
    def suggest(self, word: str) -> Sequence[str]: ...


class WordListSpeller:
    """Prefix completions from a fixed word list.

    Shorter completions rank first; ties are broken alphabetically.
    """

    def __init__(self, words: Iterable[str], *, limit: int = 10) -> None:
        self._words = sorted({w.strip() for w in words if w and w.strip()})
        self._folded = [w.casefold() for w in self._words]
        self._limit = limit

    @classmethod
    def from_file(cls, path: str | Path, **kwargs: Any) -> WordListSpeller:
        """Load one word per line; lines starting with ``#`` are skipped."""
        with open(path, encoding="utf-8") as f:
            words = [line.strip() for line in f if not line.startswith("#")]
        logger.debug(f"Loaded {len(words)} words from {path}")
        return cls(words, **kwargs)

    def __len__(self) -> int:
        return len(self._words)

    def suggest(self, word: str) -> list[str]:
        if not word:
            return []
        key = word.casefold()
        matches = [
            original
            for original, folded in zip(self._words, self._folded)
            if folded.startswith(key)
        ]
        matches.sort(key=lambda w: (len(w), w.casefold(), w))
        return matches[: self._limit]


class WordnetSpeller:
    """Prefix completions from the lemmas of an installed ``wn`` lexicon.

    Args:
        lexicon: Lexicon specifier, e.g. ``"oewn:2024"``.
        wordnet: An already constructed ``wn.Wordnet``; built lazily from
            ``lexicon`` when omitted.
        limit: Maximum number of completions per call.
    """

    def __init__(
        self,
        lexicon: str | None = None,
        *,
        wordnet: Any = None,
        limit: int = 10,
    ) -> None:
        self._lexicon = lexicon
        self._wordnet = wordnet
        self._limit = limit
        self._index: WordListSpeller | None = None

    def _load(self) -> WordListSpeller:
        if self._index is None:
            wordnet = self._wordnet
            if wordnet is None:
                import wn

                wordnet = wn.Wordnet(self._lexicon)
            lemmas: set[str] = set()
            for word in wordnet.words():
                lemmas.update(str(form) for form in word.forms())
            self._index = WordListSpeller(lemmas, limit=self._limit)
            logger.info(
                f"Loaded {len(self._index)} lemma forms from "
                f"{self._lexicon or 'wordnet'}"
            )
        return self._index

    def suggest(self, word: str) -> list[str]:
        return self._load().suggest(word)
