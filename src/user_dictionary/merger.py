"""Merging user-dictionary and speller suggestions for the word being typed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from typing import Any

from user_dictionary.dictionary import UserDictionary
from user_dictionary.models import WordContext
from user_dictionary.speller import Speller
from user_dictionary.worker import CancellationToken, SuggestionWorker

logger = logging.getLogger(__name__)

DEFAULT_SPELLER_LIMIT = 3

# Sentinel for "use the bound handle"
_BOUND: Any = type("_BOUND", (), {"__repr__": lambda self: "<bound>"})()

Deliver = Callable[[list[str]], None]
Dispatch = Callable[[Callable[[], None]], Any]


def merge_suggestions(
    current_word: str,
    dictionary_suggestions: Sequence[str],
    speller_suggestions: Sequence[str],
    *,
    speller_limit: int = DEFAULT_SPELLER_LIMIT,
) -> list[str]:
    """Combine both sources into the list shown to the user.

    The literal ``current_word`` always comes first, followed by the
    dictionary suggestions and then the first ``speller_limit`` speller
    suggestions, each in its source's order. The limit applies to the raw
    speller output, before duplicates are dropped. Nothing is re-sorted
    across sources.
    """
    if not current_word:
        return []
    merged = [current_word]
    seen = {current_word}
    for suggestion in [
        *dictionary_suggestions,
        *speller_suggestions[:speller_limit],
    ]:
        if suggestion in seen:
            continue
        seen.add(suggestion)
        merged.append(suggestion)
    return merged


class SuggestionMerger:
    """Produces suggestion lists from an optional dictionary and speller.

    Both sources may be bound or unbound at any time; an unbound source
    simply contributes nothing. Asynchronous requests run on a single
    background worker, and a newer request always supersedes an older one.

    Args:
        dictionary: Learned-word store to query.
        speller: External speller to query.
        speller_limit: How many raw speller results to consider.
        match: Match mode passed to :meth:`UserDictionary.suggest`.
        dictionary_limit: Maximum number of dictionary results.
        dispatch: Runs a callback on the caller's execution context, e.g.
            a GUI toolkit's post-to-main-thread function. Defaults to
            ``call_soon_threadsafe`` of the event loop running when a
            request is made.
        worker: Worker to run requests on. A worker passed in is not
            closed by :meth:`close`.
    """

    def __init__(
        self,
        dictionary: UserDictionary | None = None,
        speller: Speller | None = None,
        *,
        speller_limit: int = DEFAULT_SPELLER_LIMIT,
        match: str = "prefix",
        dictionary_limit: int | None = None,
        dispatch: Dispatch | None = None,
        worker: SuggestionWorker | None = None,
    ) -> None:
        self.dictionary = dictionary
        self.speller = speller
        self.speller_limit = speller_limit
        self.match = match
        self.dictionary_limit = dictionary_limit
        self._dispatch = dispatch
        self._owns_worker = worker is None
        self._worker = worker if worker is not None else SuggestionWorker()
        self._latest: CancellationToken | None = None

    def bind_dictionary(self, dictionary: UserDictionary | None) -> None:
        self.dictionary = dictionary

    def bind_speller(self, speller: Speller | None) -> None:
        self.speller = speller

    def close(self) -> None:
        if self._owns_worker:
            self._worker.close()
        elif self._latest is not None:
            self._latest.cancel()

    def __enter__(self) -> SuggestionMerger:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Synchronous computation
    # ------------------------------------------------------------------

    def suggestions_for(
        self,
        current_word: str,
        locale: str,
        context: WordContext | None = None,
        token: CancellationToken | None = None,
        *,
        dictionary: Any = _BOUND,
        speller: Any = _BOUND,
    ) -> list[str]:
        """Compute the merged suggestion list.

        ``dictionary`` and ``speller`` default to the currently bound
        handles. Raises :class:`~user_dictionary.worker.Cancelled` if
        ``token`` is cancelled between steps.
        """
        if not current_word:
            return []
        if dictionary is _BOUND:
            dictionary = self.dictionary
        if speller is _BOUND:
            speller = self.speller
        token = token or CancellationToken()

        token.raise_if_cancelled()
        dictionary_suggestions: list[str] = []
        if dictionary is not None:
            dictionary_suggestions = dictionary.suggest(
                current_word,
                locale,
                context=context,
                match=self.match,
                limit=self.dictionary_limit,
            )

        token.raise_if_cancelled()
        speller_suggestions: list[str] = []
        if speller is not None:
            try:
                speller_suggestions = list(speller.suggest(current_word))
            except Exception as e:
                logger.warning(f"Speller failed for {current_word!r}: {e}")

        token.raise_if_cancelled()
        return merge_suggestions(
            current_word,
            dictionary_suggestions,
            speller_suggestions,
            speller_limit=self.speller_limit,
        )

    # ------------------------------------------------------------------
    # Asynchronous requests
    # ------------------------------------------------------------------

    def request_suggestions(
        self,
        current_word: str,
        context: WordContext | None,
        locale: str,
        deliver: Deliver,
    ) -> CancellationToken:
        """Compute suggestions in the background and hand them to ``deliver``.

        Any earlier request that has not delivered yet is cancelled and
        will never deliver. ``deliver`` runs through the dispatcher and is
        skipped if this request is superseded before it gets to run.
        An empty ``current_word`` dispatches ``[]`` without using the worker.

        Raises:
            RuntimeError: if no ``dispatch`` was configured and no event
                loop is running in the calling thread.
        """
        dispatch = self._caller_dispatch()
        if not current_word:
            self.cancel_all()
            token = CancellationToken()
            self._latest = token
            dispatch(lambda: self._deliver_if_current(token, [], deliver))
            return token

        # Snapshot the handles; they may be rebound while the job waits.
        dictionary = self.dictionary
        speller = self.speller

        def job(token: CancellationToken) -> None:
            suggestions = self.suggestions_for(
                current_word,
                locale,
                context,
                token,
                dictionary=dictionary,
                speller=speller,
            )
            if not token.cancelled:
                dispatch(
                    lambda: self._deliver_if_current(token, suggestions, deliver)
                )

        if self._latest is not None:
            self._latest.cancel()
        token = self._worker.submit(job)
        self._latest = token
        return token

    def cancel_all(self) -> None:
        """Cancel every request that has not delivered yet."""
        if self._latest is not None:
            self._latest.cancel()
        self._worker.cancel_all()

    def wait_idle(self, timeout: float | None = None) -> bool:
        """Block until the worker has nothing left to do."""
        return self._worker.idle(timeout)

    def _caller_dispatch(self) -> Dispatch:
        if self._dispatch is not None:
            return self._dispatch
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            raise RuntimeError(
                "request_suggestions needs a dispatch callable or a running "
                "event loop to deliver results on"
            ) from None
        return loop.call_soon_threadsafe

    @staticmethod
    def _deliver_if_current(
        token: CancellationToken, suggestions: list[str], deliver: Deliver
    ) -> None:
        if token.cancelled:
            logger.debug("Dropping suggestions from a superseded request")
            return
        deliver(suggestions)
