"""Shared test fixtures for user-dictionary."""

import pytest

from user_dictionary import UserDictionary, WordContext

LOCALE = "en"


@pytest.fixture
def dictionary():
    """Create an in-memory user dictionary for testing."""
    with UserDictionary(":memory:") as d:
        yield d


@pytest.fixture
def dictionary_with_data(dictionary):
    """Dictionary where 'hello' and 'hi' have each been used three times."""
    contexts = [
        WordContext(second_before="I", first_before="said", word="hello"),
        WordContext(first_before="well", word="hello", first_after="there"),
        WordContext(word="hello", first_after="to", second_after="you"),
        WordContext(second_before="I", first_before="said", word="hi"),
        WordContext(first_before="say", word="hi", first_after="to"),
        WordContext(word="hi", first_after="there", second_after="Frank"),
    ]
    for context in contexts:
        dictionary.record_usage(context, LOCALE)
    return dictionary
