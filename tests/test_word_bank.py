"""Tests for word bank loading and lookup."""

import json

import pytest

from core.errors import EmptyWordBank, UnknownWordList, WordBankLoadError
from core.models import WordList
from core.word_bank import WordBank, load_word_bank, read_word_list, save_word_list


class TestWordBank:
    """Test WordBank class."""

    def test_get_and_contains(self):
        bank = WordBank([WordList(name="animals", words=["cat", "dog"])])

        assert bank.contains("animals")
        assert not bank.contains("plants")
        assert bank.get_words("animals") == ["cat", "dog"]
        assert bank.get_words("plants") is None
        assert bank.get("plants") is None

    def test_set_replaces_existing(self):
        bank = WordBank([WordList(name="frequent", words=["old"])])
        bank.set(WordList(name="frequent", words=["new", "words"]))

        assert len(bank) == 1
        assert bank.get_words("frequent") == ["new", "words"]

    def test_snapshot_is_immutable_copy(self):
        word_list = WordList(name="animals", words=["cat", "dog"])
        bank = WordBank([word_list])
        snapshot = bank.snapshot("animals")

        bank.set(WordList(name="animals", words=["cow"]))

        assert snapshot == ("cat", "dog")

    def test_snapshot_unknown_list(self):
        with pytest.raises(UnknownWordList):
            WordBank().snapshot("english")

    def test_snapshot_empty_list(self):
        empty = WordList(name="empty", words=[])
        with pytest.raises(EmptyWordBank):
            WordBank([empty]).snapshot("empty")

    def test_names_sorted(self):
        bank = WordBank([
            WordList(name="b", words=["x"]),
            WordList(name="a", words=["y"]),
        ])
        assert bank.names() == ["a", "b"]


class TestWordListModel:
    """Validation of word list documents."""

    def test_aliases(self):
        word_list = WordList.model_validate({
            "name": "english",
            "words": ["a"],
            "noLazyMode": True,
            "orderedByFrequency": True,
        })
        assert word_list.no_lazy_mode
        assert word_list.ordered_by_frequency

    def test_field_names_accepted(self):
        word_list = WordList(name="mined", words=["a"], ordered_by_frequency=True)

        assert word_list.ordered_by_frequency
        assert word_list.model_dump(by_alias=True)["orderedByFrequency"] is True

    def test_unknown_keys_ignored(self):
        word_list = WordList.model_validate({"name": "x", "words": ["a"], "extra": 1})
        assert word_list.words == ["a"]

    @pytest.mark.parametrize("words", [[""], ["two words"], ["tab\there"]])
    def test_invalid_words(self, words):
        with pytest.raises(ValueError):
            WordList(name="bad", words=words)


class TestLoadWordBank:
    """Test loading word lists from disk."""

    def test_loads_all_files(self, words_dir):
        bank = load_word_bank(words_dir)

        assert bank.names() == ["animals", "english"]
        assert bank.get_words("animals") == ["cat", "dog"]
        assert bank.get("english").ordered_by_frequency

    def test_single_worker(self, words_dir):
        bank = load_word_bank(words_dir, max_workers=1)
        assert len(bank) == 2

    def test_missing_directory(self, tmp_path):
        with pytest.raises(WordBankLoadError):
            load_word_bank(tmp_path / "missing")

    def test_empty_directory(self, tmp_path):
        assert len(load_word_bank(tmp_path)) == 0

    def test_malformed_json_fails_whole_load(self, words_dir):
        (words_dir / "broken.json").write_text("{not json")

        with pytest.raises(WordBankLoadError):
            load_word_bank(words_dir)

    def test_invalid_document_fails_whole_load(self, words_dir):
        (words_dir / "bad.json").write_text(json.dumps({"name": "bad", "words": ["two words"]}))

        with pytest.raises(WordBankLoadError):
            load_word_bank(words_dir)

    def test_non_json_files_ignored(self, words_dir):
        (words_dir / "README.txt").write_text("not a word list")
        assert len(load_word_bank(words_dir)) == 2

    def test_read_word_list_missing_file(self, tmp_path):
        with pytest.raises(WordBankLoadError):
            read_word_list(tmp_path / "nope.json")


class TestSaveWordList:
    """Test writing word lists back to disk."""

    def test_save_and_reload(self, tmp_path):
        word_list = WordList(name="frequent", words=["dog", "cow"], ordered_by_frequency=True)
        path = save_word_list(word_list, tmp_path / "lists")

        assert path.name == "frequent.json"
        data = json.loads(path.read_text())
        assert data["orderedByFrequency"] is True

        assert read_word_list(path) == word_list
