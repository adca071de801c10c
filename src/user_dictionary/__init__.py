"""user-dictionary: a context-aware user dictionary and suggestion merger."""

__version__ = "0.1.0"

from user_dictionary.dictionary import UserDictionary
from user_dictionary.exceptions import (
    ConfigError,
    ContextError,
    DatabaseError,
    UserDictionaryError,
)
from user_dictionary.merger import SuggestionMerger, merge_suggestions
from user_dictionary.models import WordContext, WordRecord, WordState
from user_dictionary.speller import Speller, WordListSpeller, WordnetSpeller
from user_dictionary.worker import CancellationToken, SuggestionWorker

__all__ = [
    # Service classes
    "UserDictionary",
    "SuggestionMerger",
    "SuggestionWorker",
    "CancellationToken",
    # Models
    "WordContext",
    "WordRecord",
    "WordState",
    # Spellers
    "Speller",
    "WordListSpeller",
    "WordnetSpeller",
    # Functions
    "merge_suggestions",
    # Exceptions
    "UserDictionaryError",
    "DatabaseError",
    "ContextError",
    "ConfigError",
]
