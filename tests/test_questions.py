import pytest

from douquiz.fluid import (
    FluidProperty,
    FluidString,
    Prop,
    PropType,
    fluid_to_html,
    fluid_to_html_unmarked,
)
from douquiz.questions import (
    NotAQuestionError,
    Question,
    QuestionType,
    iter_questions,
    parse_question,
)


def _lines(*texts):
    return [FluidString(t) for t in texts]


def _quiz():
    lines = _lines(
        "Câu 1: What is 2+2? ",
        "A. 3 ",
        "B. 4 ",
        "C. 5 ",
        "D. 6 ",
        "Câu 2 [hard]: Năm? ",
        "Đáp án: 2024 ",
        "end ",
    )
    lines[2] = FluidString("B. 4 ", [FluidProperty(0, 5, [Prop(PropType.MARKED, "FFFF00")])])
    return lines


def test_multiple_choice_question():
    question, next_index = parse_question(_quiz(), 0)
    assert next_index == 5
    assert question.type == QuestionType.TN
    assert question.stype == "NONE"
    assert question.content == fluid_to_html(FluidString(" What is 2+2? ")) + "<br>"
    assert question.answers[0] == '<label class="ques_content"> 3 </label>'
    assert question.answers[1] == fluid_to_html_unmarked(FluidString(" 4 "))
    assert question.answers[3] == fluid_to_html_unmarked(FluidString(" 6 "))
    assert question.true_answers == [False, True, False, False]


def test_short_answer_question():
    question, next_index = parse_question(_quiz(), 5)
    assert next_index == 7
    assert question.type == QuestionType.TLN
    assert question.stype == "hard"
    assert question.content == fluid_to_html(FluidString(" Năm? ")) + "<br>"
    assert question.tln_answers == ["2", "0", "2", "4"]


def test_iter_questions_collects_all():
    questions = list(iter_questions(_quiz()))
    assert [q.type for q in questions] == [QuestionType.TN, QuestionType.TLN]
    assert questions[0] == parse_question(_quiz(), 0)[0]


def test_not_a_question():
    lines = _lines("Hello ", "world ")
    with pytest.raises(NotAQuestionError):
        parse_question(lines, 0)
    assert list(iter_questions(lines)) == []


def test_last_line_is_out_of_range():
    lines = _quiz()
    with pytest.raises(IndexError):
        parse_question(lines, len(lines) - 1)


def test_blank_line_stops_parsing():
    lines = _lines("   ", "Câu 1: q ", "Đáp án: 1 ", "end ")
    with pytest.raises(IndexError):
        parse_question(lines, 0)
    assert list(iter_questions(lines)) == []


def test_malformed_heading_raises():
    lines = _lines("Câu 1 without colon ", "more ", "end ")
    with pytest.raises(ValueError, match="heading") as info:
        parse_question(lines, 0)
    assert not isinstance(info.value, NotAQuestionError)


def test_multiline_content_and_answers():
    lines = _lines(
        "Câu 1: first ",
        "second ",
        "A. one ",
        "more ",
        "B. two ",
        "C. three ",
        "D. four ",
        "Câu 2: next ",
    )
    question, next_index = parse_question(lines, 0)
    assert question.content == (
        fluid_to_html(FluidString(" first ")) + "<br>" + fluid_to_html(FluidString("second ")) + "<br>"
    )
    assert question.answers[0] == (
        fluid_to_html_unmarked(FluidString(" one ")) + "<br>" + fluid_to_html_unmarked(FluidString("more "))
    )
    assert next_index == 7


def test_question_without_answers_is_dropped():
    lines = _lines("Câu 1: q ", "more ", "tail ")
    with pytest.raises(IndexError):
        parse_question(lines, 0)
    assert list(iter_questions(lines)) == []


def test_leading_spaces_shift_formatting():
    line = FluidString("  Câu 1: q ", [FluidProperty(9, 10, [Prop(PropType.BOLD, "")])])
    lines = [line, FluidString("Đáp án: x "), FluidString("end ")]
    question, _ = parse_question(lines, 0)
    expected = FluidString(" q ", [FluidProperty(1, 2, [Prop(PropType.BOLD, "")])])
    assert question.content == fluid_to_html(expected) + "<br>"
    assert "<b>q</b>" in question.content
    assert line.text == "  Câu 1: q "


def test_uppercase_answer_key_leaves_type_unset():
    lines = _lines("Câu 1: q ", "ĐÁP ÁN: 12 ", "end ")
    question, next_index = parse_question(lines, 0)
    assert question.type == QuestionType.NONE
    assert next_index == 1


def test_short_answer_padding():
    lines = _lines("Câu 1: q ", "Đáp án: 12", "end ")
    question, _ = parse_question(lines, 0)
    assert question.tln_answers == ["1", "2", "", ""]


def test_to_dict_keys():
    question = Question(type=QuestionType.TLN, stype="s", content="c", tln_answers=["1", "", "", ""])
    data = question.to_dict()
    assert data["type"] == 0x13
    assert data["TLNAnswers"] == ["1", "", "", ""]
    assert data["TNAnswers"] == [False] * 4
    assert set(data) == {"type", "stype", "content", "answers", "TNAnswers", "TLNAnswers"}