"""Tests for target text generation."""

import random

import pytest

from core.errors import ConfigurationError, EmptyWordBank, InvalidTestSize
from core.text_generator import compute_line_offsets, generate_test


class TestComputeLineOffsets:
    """Test compute_line_offsets function."""

    def test_first_offset_is_zero(self):
        """A single word has one line starting at 0."""
        assert compute_line_offsets("hello", 3) == [0]

    def test_break_after_every_nth_space(self):
        """Lines start right after every second space."""
        #         0123456789012345678
        target = "aa bb cc dd ee ff g"
        assert compute_line_offsets(target, 2) == [0, 6, 12, 18]

    def test_one_word_per_line(self):
        assert compute_line_offsets("aa bb cc", 1) == [0, 3, 6]

    def test_invalid_words_per_line(self):
        with pytest.raises(InvalidTestSize):
            compute_line_offsets("aa bb", 0)


class TestGenerateTest:
    """Test generate_test function."""

    def test_cat_dog_scenario(self):
        """Four 3-letter words at two words per line break once at index 8."""
        test = generate_test(["cat", "dog"], 4, 2, random.Random(7))

        assert len(test.target) == 15
        assert all(word in ("cat", "dog") for word in test.target.split(" "))
        assert test.line_offsets == [0, 8]
        # Two boundaries beyond 0: the line break and the end of text
        assert test.line_boundaries == [0, 8, 15]

    def test_words_joined_by_single_spaces(self, rng):
        test = generate_test(["alpha", "beta", "gamma"], 10, 3, rng)
        words = test.target.split(" ")

        assert len(words) == 10
        assert "" not in words

    def test_same_seed_same_target(self):
        bank = ["one", "two", "three", "four"]
        first = generate_test(bank, 20, 5, random.Random(42))
        second = generate_test(bank, 20, 5, random.Random(42))

        assert first == second

    def test_draws_with_replacement(self, rng):
        """More words than the bank holds is fine."""
        test = generate_test(["solo"], 5, 2, rng)
        assert test.target == "solo solo solo solo solo"

    def test_empty_word_bank(self, rng):
        with pytest.raises(EmptyWordBank):
            generate_test([], 5, 2, rng)

    @pytest.mark.parametrize("size", [0, -3])
    def test_invalid_test_size(self, rng, size):
        with pytest.raises(InvalidTestSize):
            generate_test(["cat"], size, 2, rng)

    def test_errors_are_configuration_errors(self, rng):
        with pytest.raises(ConfigurationError):
            generate_test([], 1, 1, rng)

    def test_offsets_are_word_starts(self, rng):
        test = generate_test(["ab", "cde", "f"], 30, 4, rng)

        assert test.line_offsets[0] == 0
        assert test.line_offsets == sorted(test.line_offsets)
        for offset in test.line_offsets[1:]:
            assert test.target[offset - 1] == " "
            assert test.target[offset] != " "
