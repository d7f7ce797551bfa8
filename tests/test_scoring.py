"""
Tests for answer validation and server-side scoring
"""
import pytest

from app.exceptions import InvalidAnswer
from app.services.question_bank import BankQuestion
from app.services.submission_service import score_answers, validate_answers


def make_bank(count=10, correct_answer=2, options=4):
    return [
        BankQuestion(id=f"q{i}", options=[str(o) for o in range(options)], correct_answer=correct_answer)
        for i in range(1, count + 1)
    ]


class TestScoreAnswers:
    def test_seven_of_ten_correct(self):
        bank = make_bank()
        answers = {f"q{i}": 2 for i in range(1, 8)}
        answers.update({"q8": 0, "q9": 1, "q10": 3})

        result = score_answers(bank, answers, points_per_question=2)

        assert result.correct_count == 7
        assert result.score == 14
        assert result.total_questions == 10
        assert result.percentage == 70

    def test_unanswered_questions_score_zero(self):
        result = score_answers(make_bank(), {}, points_per_question=2)
        assert result.correct_count == 0
        assert result.score == 0
        assert result.percentage == 0

    def test_answers_for_unknown_questions_are_ignored(self):
        result = score_answers(make_bank(count=2), {"q1": 2, "bogus": 2}, points_per_question=2)
        assert result.correct_count == 1
        assert result.total_questions == 2

    def test_percentage_rounds_half_up(self):
        # 1 of 8 correct = 12.5%
        result = score_answers(make_bank(count=8), {"q1": 2}, points_per_question=1)
        assert result.percentage == 13

    def test_boolean_is_not_an_option_index(self):
        bank = [BankQuestion(id="q1", options=["a", "b"], correct_answer=1)]
        assert score_answers(bank, {"q1": True}).correct_count == 0

    def test_uses_configured_points_by_default(self):
        result = score_answers(make_bank(count=1), {"q1": 2})
        assert result.score == 2


class TestValidateAnswers:
    def test_in_range_answers_pass(self):
        validate_answers(make_bank(), {"q1": 0, "q2": 3, "q3": None})

    @pytest.mark.parametrize("value", [-1, 4, 99])
    def test_out_of_range_rejected(self, value):
        with pytest.raises(InvalidAnswer):
            validate_answers(make_bank(), {"q1": value})

    @pytest.mark.parametrize("value", ["2", 2.0, True, [1], {"a": 1}])
    def test_non_integer_rejected(self, value):
        with pytest.raises(InvalidAnswer):
            validate_answers(make_bank(), {"q1": value})

    def test_checks_against_question_option_count(self):
        bank = [BankQuestion(id="q1", options=["yes", "no"], correct_answer=0)]
        validate_answers(bank, {"q1": 1})
        with pytest.raises(InvalidAnswer):
            validate_answers(bank, {"q1": 2})

    def test_unknown_question_uses_fixed_ceiling(self):
        validate_answers(make_bank(count=1), {"other": 3}, max_options=4)
        with pytest.raises(InvalidAnswer):
            validate_answers(make_bank(count=1), {"other": 4}, max_options=4)
