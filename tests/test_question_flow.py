"""Tests for question_flow.py.

Verifies:
- the strict NOT_LOADED -> ... -> ANSWER_VALIDATED order
- rejected actions leave the flow untouched
- the one-lifeline-per-question gate and the 50/50 filter
- hide and the rescue reopen path
"""

from dataclasses import replace

import pytest

from hotseat.core.errors import IllegalStateTransition, InvalidAnswerOption, InvalidQuestionData
from hotseat.core.models import LifelineType, QuestionState
from hotseat.core.services.question_flow import QuestionFlow


@pytest.fixture()
def question(make_question):
    return make_question("set-one", 1)


@pytest.fixture()
def shown_flow(question):
    flow = QuestionFlow()
    flow.load(question)
    flow.show()
    return flow


class TestOrder:

    def test_happy_path(self, question):
        flow = QuestionFlow()
        assert flow.state is QuestionState.NOT_LOADED
        flow.load(question)
        assert flow.state is QuestionState.LOADED_HOST_ONLY
        assert not flow.is_visible_to_public
        flow.show()
        assert flow.is_visible_to_public
        assert flow.select("b") == "B"
        flow.lock()
        assert flow.is_locked
        result = flow.validate()
        assert result.is_correct
        assert flow.state is QuestionState.ANSWER_VALIDATED

    def test_lock_before_select_raises_without_mutation(self, shown_flow):
        with pytest.raises(IllegalStateTransition) as excinfo:
            shown_flow.lock()
        assert excinfo.value.current_state == QuestionState.SHOWN_TO_PUBLIC.value
        assert shown_flow.state is QuestionState.SHOWN_TO_PUBLIC
        assert shown_flow.selected_answer is None

    def test_show_requires_loaded(self):
        with pytest.raises(IllegalStateTransition):
            QuestionFlow().show()

    def test_select_requires_public(self, question):
        flow = QuestionFlow()
        flow.load(question)
        with pytest.raises(IllegalStateTransition):
            flow.select("A")
        assert flow.selected_answer is None

    def test_load_twice_raises(self, shown_flow, question):
        with pytest.raises(IllegalStateTransition):
            shown_flow.load(question)

    def test_validate_requires_lock(self, shown_flow):
        shown_flow.select("A")
        with pytest.raises(IllegalStateTransition):
            shown_flow.validate()

    def test_lock_is_irrevocable(self, shown_flow):
        shown_flow.select("A")
        shown_flow.lock()
        with pytest.raises(IllegalStateTransition):
            shown_flow.select("B")
        assert shown_flow.selected_answer == "A"

    def test_change_selection_before_lock(self, shown_flow):
        shown_flow.select("A")
        shown_flow.select("c")
        assert shown_flow.selected_answer == "C"

    def test_invalid_option(self, shown_flow):
        with pytest.raises(InvalidAnswerOption):
            shown_flow.select("E")
        assert shown_flow.state is QuestionState.SHOWN_TO_PUBLIC

    def test_reset(self, shown_flow):
        shown_flow.select("A")
        shown_flow.reset()
        assert shown_flow.state is QuestionState.NOT_LOADED
        assert shown_flow.question is None
        assert shown_flow.selected_answer is None


class TestLoadValidation:

    def test_rejects_invalid_question_listing_every_problem(self, question):
        broken = replace(question, text="  ", options={"A": "x", "B": ""}, correct_answer="E")
        flow = QuestionFlow()
        with pytest.raises(InvalidQuestionData) as excinfo:
            flow.load(broken)
        assert len(excinfo.value.errors) >= 4
        assert flow.state is QuestionState.NOT_LOADED
        assert flow.question is None

    def test_rejects_missing_question(self):
        with pytest.raises(InvalidQuestionData):
            QuestionFlow().load(None)


class TestHide:

    def test_hide_returns_to_host_only(self, shown_flow):
        shown_flow.hide()
        assert shown_flow.state is QuestionState.LOADED_HOST_ONLY
        shown_flow.show()
        assert shown_flow.is_visible_to_public

    def test_cannot_hide_after_selection(self, shown_flow):
        shown_flow.select("A")
        with pytest.raises(IllegalStateTransition):
            shown_flow.hide()


class TestLifelineHooks:

    def test_block_reasons(self, question):
        flow = QuestionFlow()
        assert flow.lifeline_block_reason() == "no question is loaded"
        flow.load(question)
        assert flow.lifeline_block_reason() == "the question is not visible to the public"
        flow.show()
        assert flow.lifeline_block_reason() is None
        flow.select("A")
        flow.lock()
        assert flow.lifeline_block_reason() == "the answer is already locked"

    def test_one_lifeline_per_question(self, shown_flow):
        shown_flow.record_lifeline(LifelineType.FIFTY_FIFTY)
        with pytest.raises(IllegalStateTransition):
            shown_flow.record_lifeline(LifelineType.PHONE_A_FRIEND)
        assert shown_flow.lifeline_used is LifelineType.FIFTY_FIFTY

    def test_filter_drops_removed_selection(self, shown_flow):
        shown_flow.select("A")
        shown_flow.apply_filter(["D", "B"])
        assert shown_flow.filtered_options == ("B", "D")
        assert shown_flow.selected_answer is None
        assert shown_flow.state is QuestionState.SHOWN_TO_PUBLIC
        assert set(shown_flow.visible_options()) == {"B", "D"}

    def test_filter_keeps_surviving_selection(self, shown_flow):
        shown_flow.select("B")
        shown_flow.apply_filter(["B", "C"])
        assert shown_flow.selected_answer == "B"
        assert shown_flow.state is QuestionState.ANSWER_SELECTED

    def test_removed_option_cannot_be_selected(self, shown_flow):
        shown_flow.apply_filter(["B", "C"])
        with pytest.raises(InvalidAnswerOption):
            shown_flow.select("A")


class TestReopenForRescue:

    def _answer_wrong(self, flow):
        flow.select("A")
        flow.lock()
        flow.validate()

    def test_reopen_after_incorrect(self, shown_flow):
        self._answer_wrong(shown_flow)
        shown_flow.reopen_for_rescue()
        assert shown_flow.state is QuestionState.SHOWN_TO_PUBLIC
        assert shown_flow.is_reopened
        assert shown_flow.result is None

    def test_reopened_selection_needs_lifeline(self, shown_flow):
        self._answer_wrong(shown_flow)
        shown_flow.reopen_for_rescue()
        with pytest.raises(IllegalStateTransition):
            shown_flow.select("B")
        shown_flow.record_lifeline(LifelineType.PHONE_A_FRIEND)
        with pytest.raises(InvalidAnswerOption):
            shown_flow.select("A")
        assert shown_flow.select("B") == "B"

    def test_reopen_requires_incorrect(self, shown_flow):
        shown_flow.select("B")
        shown_flow.lock()
        shown_flow.validate()
        with pytest.raises(IllegalStateTransition):
            shown_flow.reopen_for_rescue()

    def test_cannot_hide_reopened(self, shown_flow):
        self._answer_wrong(shown_flow)
        shown_flow.reopen_for_rescue()
        with pytest.raises(IllegalStateTransition):
            shown_flow.hide()
