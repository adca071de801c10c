"""Domain model dataclasses and enums for user-dictionary."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

from user_dictionary.exceptions import ContextError

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class WordState(str, Enum):
    """Lifecycle state of a stored word.

    ``BLACKLISTED`` is kept for a future "never suggest" feature; nothing
    in this package moves a word into it.
    """

    CANDIDATE = "candidate"
    USER_WORD = "user_word"
    MANUALLY_ADDED = "manually_added"
    BLACKLISTED = "blacklisted"


LEARNED_STATES = frozenset({WordState.USER_WORD, WordState.MANUALLY_ADDED})


# ---------------------------------------------------------------------------
# Model dataclasses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class WordContext:
    """A word together with up to two tokens on either side of it."""

    word: str
    second_before: str | None = None
    first_before: str | None = None
    first_after: str | None = None
    second_after: str | None = None

    @classmethod
    def bare(cls, word: str) -> WordContext:
        return cls(word=word)

    @classmethod
    def from_cursor(
        cls,
        before: Sequence[str],
        word: str,
        after: Sequence[str] = (),
    ) -> WordContext:
        """Build a context window from the tokens around a cursor.

        Keeps the last two tokens of ``before`` and the first two of
        ``after``; empty tokens are dropped first.
        """
        before = [t for t in before if t]
        after = [t for t in after if t]
        return cls(
            word=word,
            second_before=before[-2] if len(before) >= 2 else None,
            first_before=before[-1] if before else None,
            first_after=after[0] if after else None,
            second_after=after[1] if len(after) >= 2 else None,
        )

    def validate(self) -> None:
        """Raise :class:`ContextError` if a two-away token lacks its neighbour."""
        if self.second_before is not None and self.first_before is None:
            raise ContextError(
                f"Context for {self.word!r} has second_before "
                f"{self.second_before!r} but no first_before"
            )
        if self.second_after is not None and self.first_after is None:
            raise ContextError(
                f"Context for {self.word!r} has second_after "
                f"{self.second_after!r} but no first_after"
            )

    def tokens(self) -> tuple[str | None, ...]:
        return (
            self.second_before,
            self.first_before,
            self.word,
            self.first_after,
            self.second_after,
        )


@dataclass(frozen=True, slots=True)
class WordRecord:
    """A stored word row."""

    id: int
    text: str
    locale: str
    state: WordState

    @property
    def is_learned(self) -> bool:
        return self.state in LEARNED_STATES
