"""Tests for the word-list and wn-backed speller adapters."""

from user_dictionary.speller import Speller, WordListSpeller, WordnetSpeller


class FakeWord:
    def __init__(self, *forms):
        self._forms = forms

    def forms(self):
        return list(self._forms)


class FakeWordnet:
    def __init__(self, words):
        self._words = words
        self.calls = 0

    def words(self):
        self.calls += 1
        return list(self._words)


class TestWordListSpeller:

    def test_prefix_completions_shortest_first(self):
        speller = WordListSpeller(["helmet", "help", "hello", "shell", "he"])
        assert speller.suggest("hel") == ["help", "hello", "helmet"]

    def test_case_insensitive(self):
        speller = WordListSpeller(["Helsinki", "help"])
        assert speller.suggest("HEL") == ["help", "Helsinki"]

    def test_limit(self):
        speller = WordListSpeller(["ha", "hb", "hc", "hd"], limit=2)
        assert speller.suggest("h") == ["ha", "hb"]

    def test_empty_word(self):
        assert WordListSpeller(["a"]).suggest("") == []

    def test_blank_and_duplicate_entries(self):
        speller = WordListSpeller(["", "  ", "hey", "hey"])
        assert len(speller) == 1

    def test_from_file(self, tmp_path):
        path = tmp_path / "words.txt"
        path.write_text("# Northern Sami\nbeaivi\nbeana\n\ngiitu\n", encoding="utf-8")
        speller = WordListSpeller.from_file(path)
        assert len(speller) == 3
        assert speller.suggest("bea") == ["beana", "beaivi"]

    def test_satisfies_protocol(self):
        assert isinstance(WordListSpeller([]), Speller)


class TestWordnetSpeller:

    def test_suggests_from_lemma_forms(self):
        wordnet = FakeWordnet([
            FakeWord("help", "helped"),
            FakeWord("helmet"),
            FakeWord("dog"),
        ])
        speller = WordnetSpeller(wordnet=wordnet)
        assert speller.suggest("hel") == ["help", "helmet", "helped"]

    def test_index_built_once(self):
        wordnet = FakeWordnet([FakeWord("cat")])
        speller = WordnetSpeller(wordnet=wordnet)
        speller.suggest("c")
        speller.suggest("ca")
        assert wordnet.calls == 1

    def test_satisfies_protocol(self):
        assert isinstance(WordnetSpeller("oewn:2024"), Speller)
