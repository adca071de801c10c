"""UserDictionary: learns the words a user types and where they type them."""

from __future__ import annotations

import functools
import logging
import sqlite3
import threading
from collections.abc import Callable, Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any, TypeVar

from user_dictionary import db as _db
from user_dictionary.exceptions import DatabaseError
from user_dictionary.models import WordContext, WordRecord, WordState

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])


def _modifies_db(method: _F) -> _F:
    """Decorator: wraps mutation methods in a transaction (unless in batch)."""

    @functools.wraps(method)
    def wrapper(self: UserDictionary, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            if self._in_batch:
                return method(self, *args, **kwargs)
            with self._conn:
                return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


def _reads_db(method: _F) -> _F:
    """Decorator: serializes read methods with writers."""

    @functools.wraps(method)
    def wrapper(self: UserDictionary, *args: Any, **kwargs: Any) -> Any:
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class UserDictionary:
    """Persistent store of learned words and their context windows.

    A word seen once is a *candidate*; seeing it again makes it a
    *user word*. Words added explicitly are *manually added*. Only user
    words and manually added words are listed and suggested.

    Storage errors raise :class:`~user_dictionary.exceptions.DatabaseError`
    and are not handled here.

    An injected ``connection`` is configured on construction and closed
    by :meth:`close`. Open it with ``check_same_thread=False`` if the
    dictionary is queried from the suggestion worker.
    """

    def __init__(
        self,
        db_path: str | Path = ":memory:",
        *,
        connection: sqlite3.Connection | None = None,
    ) -> None:
        self._db_path = str(db_path)
        owned = connection is None
        self._conn = _db.connect(db_path) if owned else connection
        try:
            if not owned:
                _db.configure(self._conn)
            _db.check_schema_version(self._conn)
            _db.init_db(self._conn)
        except DatabaseError:
            if owned:
                self._conn.close()
            raise
        self._lock = threading.RLock()
        self._in_batch = False
        self._batch_depth = 0

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            self._conn.close()

    def __enter__(self) -> UserDictionary:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Batch context manager
    # ------------------------------------------------------------------

    @contextmanager
    def batch(self) -> Generator[None, None, None]:
        """Group multiple mutations into a single transaction."""
        with self._lock:
            self._batch_depth += 1
            if self._batch_depth == 1:
                self._in_batch = True
                self._conn.execute("BEGIN")
            try:
                yield
            except BaseException:
                if self._batch_depth == 1:
                    self._conn.rollback()
                    self._in_batch = False
                self._batch_depth -= 1
                raise
            else:
                self._batch_depth -= 1
                if self._batch_depth == 0:
                    self._conn.commit()
                    self._in_batch = False

    # ------------------------------------------------------------------
    # Learning
    # ------------------------------------------------------------------

    @_modifies_db
    def record_usage(self, context: WordContext, locale: str) -> WordRecord:
        """Record one observed use of ``context.word``.

        An unknown word becomes a candidate; a candidate seen again is
        promoted to a user word. Any other state is left alone. The
        context row is stored in every case.

        Raises:
            ContextError: if the context window is malformed.
        """
        context.validate()

        record = _db.find_word(self._conn, context.word, locale)
        if record is None:
            word_id = _db.insert_word(
                self._conn, context.word, locale, WordState.CANDIDATE
            )
            state = WordState.CANDIDATE
        else:
            word_id = record.id
            state = record.state
            if state is WordState.CANDIDATE:
                _db.update_state(self._conn, word_id, WordState.USER_WORD)
                state = WordState.USER_WORD
                logger.debug(f"Promoted {record.text!r} ({locale}) to user word")

        _db.insert_context(self._conn, context, word_id)
        return WordRecord(
            id=word_id, text=context.word.lower(), locale=locale, state=state
        )

    @_modifies_db
    def add_word_manually(self, text: str, locale: str) -> WordRecord:
        """Add ``text`` as a manually added word, whatever its current state."""
        record = _db.find_word(self._conn, text, locale)
        if record is not None:
            if record.state is not WordState.MANUALLY_ADDED:
                _db.update_state(self._conn, record.id, WordState.MANUALLY_ADDED)
            word_id = record.id
        else:
            word_id = _db.insert_word(
                self._conn, text, locale, WordState.MANUALLY_ADDED
            )
            _db.insert_context(self._conn, WordContext.bare(text), word_id)
        return WordRecord(
            id=word_id,
            text=text.lower(),
            locale=locale,
            state=WordState.MANUALLY_ADDED,
        )

    @_modifies_db
    def remove_word(self, text: str, locale: str) -> None:
        """Forget ``text`` and every context recorded for it."""
        removed = _db.delete_word(self._conn, text, locale)
        if removed:
            logger.debug(f"Removed {text.lower()!r} ({locale})")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @_reads_db
    def find_word(self, text: str, locale: str) -> WordRecord | None:
        return _db.find_word(self._conn, text, locale)

    @_reads_db
    def get_learned_words(self, locale: str) -> list[str]:
        return _db.list_learned_words(self._conn, locale)

    @_reads_db
    def get_contexts(self, text: str, locale: str) -> list[WordContext]:
        return _db.list_contexts(self._conn, text, locale)

    @_reads_db
    def suggest(
        self,
        query: str,
        locale: str,
        *,
        context: WordContext | None = None,
        match: str = "prefix",
        limit: int | None = None,
    ) -> list[str]:
        """Learned words matching ``query``, best first.

        Words previously used after the same preceding token as
        ``context`` rank first, then the most used words, then the rest
        alphabetically.

        Args:
            query: The text being typed; matched case-insensitively.
            locale: Locale to search in.
            context: Current context window, used for ranking only.
            match: ``"prefix"`` or ``"substring"``.
            limit: Maximum number of words to return.
        """
        if not query:
            return []
        first_before = context.first_before if context is not None else None
        rows = _db.find_learned_words(
            self._conn,
            query,
            locale,
            match=match,
            first_before=first_before,
            limit=limit,
        )
        return [row["text"] for row in rows]

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @_reads_db
    def dump_rows(self) -> dict[str, list[dict[str, Any]]]:
        """Raw stored rows of both tables."""
        return _db.dump_rows(self._conn)

    def reset(self) -> None:
        """Drop every table and recreate an empty schema."""
        with self._lock:
            _db.drop_tables(self._conn)
            _db.init_db(self._conn)
        logger.info(f"Reset user dictionary at {self._db_path}")
