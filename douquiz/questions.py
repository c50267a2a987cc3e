"""Recognising quiz questions in formatted document lines."""

from __future__ import annotations

import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from enum import IntEnum

from douquiz.fluid import FluidString, PropType, fluid_to_html, fluid_to_html_unmarked

ANSWER_SLOTS = 4

_HEADING = "câu"
_ANSWER_KEY = "đáp án:"
_ANSWER_KEY_PREFIXES = ("đáp án:", "Đáp án:")
_CHOICE_PREFIXES = (("A.", "B."), ("B.", "C."), ("C.", "D."), ("D.", "Câu"))
_HEADING_MARK = re.compile(r"[:\[]")


class QuestionType(IntEnum):
    """Kinds of question: multiple choice (TN) or short numeric answer (TLN)."""

    NONE = 0
    TN = 0x12
    TLN = 0x13


class NotAQuestionError(ValueError):
    """Raised when a line does not open a question."""


def _empty_texts() -> list[str]:
    return [""] * ANSWER_SLOTS


def _no_flags() -> list[bool]:
    return [False] * ANSWER_SLOTS


@dataclass
class Question:
    """One parsed question with its choices or its short answer."""

    type: QuestionType = QuestionType.NONE
    stype: str = ""
    content: str = ""
    answers: list[str] = field(default_factory=_empty_texts)
    true_answers: list[bool] = field(default_factory=_no_flags)
    tln_answers: list[str] = field(default_factory=_empty_texts)

    def to_dict(self) -> dict:
        """Return the question in its JSON form."""
        return {
            "type": int(self.type),
            "stype": self.stype,
            "content": self.content,
            "answers": list(self.answers),
            "TNAnswers": list(self.true_answers),
            "TLNAnswers": list(self.tln_answers),
        }


def _lower(text: str) -> str:
    """Lower-case ``text`` without changing its length."""
    return "".join(c.lower() if len(c.lower()) == 1 else c for c in text)


def _line(lines: Sequence[FluidString], index: int) -> FluidString:
    if 0 <= index < len(lines):
        return lines[index].copy()
    return FluidString()


def _is_marked(line: FluidString) -> bool:
    return any(
        prop.type == PropType.MARKED and prop.value != "auto"
        for span in line.properties
        for prop in span.props
    )


def _parse_choice(
    lines: Sequence[FluidString], index: int, prefix: str, next_prefix: str
) -> tuple[str, bool, int]:
    last = len(lines) - 1
    current = _line(lines, index)
    correct = _is_marked(current)

    while not current.text.startswith(prefix):
        current.drop_first()
        if not current.text:
            index += 1
            if index > last:
                return "", correct, index
            current = _line(lines, index)

    current.drop_first(2)
    parts = [fluid_to_html_unmarked(current)]

    index += 1
    if index > last:
        return "".join(parts), correct, index
    current = _line(lines, index)

    while not current.text.startswith(next_prefix):
        parts.append("<br>" + fluid_to_html_unmarked(current))
        index += 1
        if index > last:
            return "".join(parts), correct, index
        current = _line(lines, index)

    return "".join(parts), correct, index


def parse_question(lines: Sequence[FluidString], index: int) -> tuple[Question, int]:
    """Parse the question starting at ``lines[index]``.

    Returns the question and the index of the line after it. Raises
    IndexError when there is nothing left to parse, NotAQuestionError when
    the line does not open a question, and ValueError when its heading is
    malformed.
    """
    if index >= len(lines) - 1:
        raise IndexError("no question left to parse")

    current = _line(lines, index)
    lowered = _lower(current.text)
    pos = len(lowered) - len(lowered.lstrip(" "))
    if pos == len(lowered):
        raise IndexError("no question left to parse")

    if not lowered.startswith(_HEADING, pos):
        raise NotAQuestionError(f"line {index} does not open a question")
    pos += len(_HEADING)

    mark = _HEADING_MARK.search(lowered, pos)
    if mark is None:
        raise ValueError(f"malformed question heading on line {index}")
    pos = mark.start()

    question = Question(stype="NONE")
    if lowered[pos] == "[":
        close = lowered.find("]", pos + 1)
        if close < 0:
            raise ValueError(f"malformed question heading on line {index}")
        question.stype = current.text[pos + 1 : close]
        pos = close + 1

    colon = lowered.find(":", pos)
    if colon < 0:
        raise ValueError(f"malformed question heading on line {index}")
    current.drop_first(colon + 1)

    content = [fluid_to_html(current) + "<br>"]
    index += 1
    current = _line(lines, index)
    while not current.text.startswith("A.") and not _lower(current.text).startswith(_ANSWER_KEY):
        content.append(fluid_to_html(current) + "<br>")
        if index >= len(lines) - 1:
            raise IndexError("question has no answers")
        index += 1
        current = _line(lines, index)
    question.content = "".join(content)

    if current.text.startswith("A."):
        question.type = QuestionType.TN
        answers, flags = [], []
        for prefix, next_prefix in _CHOICE_PREFIXES:
            text, correct, index = _parse_choice(lines, index, prefix, next_prefix)
            answers.append(text)
            flags.append(correct)
        question.answers = answers
        question.true_answers = flags
    elif current.text.startswith(_ANSWER_KEY_PREFIXES):
        question.type = QuestionType.TLN
        rest = current.text[len(_ANSWER_KEY):].lstrip(" ")[:ANSWER_SLOTS]
        question.tln_answers = list(rest) + [""] * (ANSWER_SLOTS - len(rest))
        index += 1

    return question, index


def iter_questions(lines: Sequence[FluidString]) -> Iterator[Question]:
    """Yield the questions at the start of ``lines`` until one cannot be parsed."""
    index = 0
    while True:
        try:
            question, index = parse_question(lines, index)
        except (IndexError, NotAQuestionError):
            return
        yield question