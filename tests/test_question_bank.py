"""Tests for question_bank.py."""

from dataclasses import replace

import pytest

from hotseat.core.errors import ValidationError
from hotseat.core.services.question_bank import QuestionBank, question_set_errors


class TestQuestionSetErrors:

    def test_valid_set(self, make_question_set):
        assert question_set_errors(make_question_set("set-one")) == []

    def test_bad_id_and_count(self, make_question_set):
        short = make_question_set("x!", count=3)
        errors = question_set_errors(short)
        assert any("Set ID" in e for e in errors)
        assert any("exactly 20 questions" in e for e in errors)

    def test_numbering(self, make_question_set):
        question_set = make_question_set("set-one")
        questions = list(question_set.questions)
        questions[0], questions[1] = questions[1], questions[0]
        errors = question_set_errors(replace(question_set, questions=tuple(questions)))
        assert "Questions must be numbered 1..N in order" in errors


class TestQuestionBank:

    def test_add_and_get(self, make_question_set):
        bank = QuestionBank()
        bank.add_set(make_question_set("set-one"))
        assert bank.has_set("set-one")
        assert bank.get_set_count() == 1
        assert bank.get_question("set-one", 3).number == 3

    def test_add_rejects_invalid(self, make_question_set):
        bank = QuestionBank()
        with pytest.raises(ValidationError):
            bank.add_set(make_question_set("set-one", count=19))
        assert bank.get_set_count() == 0

    def test_configured_length(self, make_question_set):
        bank = QuestionBank(questions_per_set=5)
        bank.add_set(make_question_set("short", count=5))
        assert bank.get_question("short", 6) is None

    def test_missing_set(self):
        bank = QuestionBank()
        with pytest.raises(KeyError):
            bank.get_set("nope")
        with pytest.raises(KeyError):
            bank.remove_set("nope")

    def test_remove_and_clear(self, make_question_set):
        bank = QuestionBank()
        bank.add_set(make_question_set("set-one"))
        bank.add_set(make_question_set("set-two"))
        bank.remove_set("set-one")
        assert [s.set_id for s in bank.get_sets()] == ["set-two"]
        bank.clear()
        assert bank.get_sets() == []
