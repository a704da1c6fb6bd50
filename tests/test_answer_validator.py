"""Tests for answer_validator.py."""

import pytest

from hotseat.core.answer_validator import is_valid_option, normalize_option, validate_answer
from hotseat.core.errors import InvalidAnswerOption


class TestNormalize:

    @pytest.mark.parametrize("raw", ["a", " A", "a ", "\tA\n"])
    def test_trims_and_uppercases(self, raw):
        assert normalize_option(raw) == "A"

    @pytest.mark.parametrize("raw", ["E", "", "AB", None, 1])
    def test_rejects(self, raw):
        assert normalize_option(raw) is None
        assert not is_valid_option(raw)


class TestValidateAnswer:

    def test_correct_after_normalization(self):
        result = validate_answer(" b", "B")
        assert result.is_correct
        assert result.normalized_selected == "B"
        assert result.normalized_correct == "B"

    def test_incorrect(self):
        result = validate_answer("c", "d")
        assert not result.is_correct

    def test_bad_selected_side(self):
        with pytest.raises(InvalidAnswerOption) as excinfo:
            validate_answer("E", "A")
        assert excinfo.value.side == "selected"

    def test_bad_correct_side(self):
        with pytest.raises(InvalidAnswerOption) as excinfo:
            validate_answer("A", "Z")
        assert excinfo.value.side == "correct"
