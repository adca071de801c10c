"""Custom exception hierarchy for user-dictionary."""


class UserDictionaryError(Exception):
    """Base exception for all user-dictionary errors."""


class DatabaseError(UserDictionaryError):
    """Storage failure: cannot open, create, read or write the store.

    Not meant to be recovered from. A store that cannot persist what it
    learns must stop rather than continue half-written.
    """


class ContextError(UserDictionaryError):
    """Malformed context window (second token without the first one)."""


class ConfigError(UserDictionaryError):
    """Invalid configuration file or value."""

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        super().__init__(message)
