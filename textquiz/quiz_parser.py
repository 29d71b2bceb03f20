"""
Plain-text quiz parser.

Expected layout::

    1. What is the capital of France?
    a) London
    b) Paris
    ---
    1. b

Everything before the ``---`` line is the quiz body, everything after it is
the answer key. Lines that match neither a question, an option nor an answer
entry are skipped silently.
"""
import re
from typing import Optional

from .models import ParsedQuiz, Question

ANSWER_KEY_SEPARATOR = "---"
OPTION_LETTERS = "abcd"

QUESTION_RE = re.compile(r"^(\d+)\.\s(.+)")
OPTION_RE = re.compile(r"^([a-d])\)\s(.+)")
ANSWER_RE = re.compile(r"^(\d+)\.\s*([a-d])$")
LEADING_NUMBER_RE = re.compile(r"^\d+\.\s*")

SAMPLE_QUIZ = """1. What is the capital of France?
a) London
b) Paris
c) Berlin
d) Madrid

2. Which planet is known as the Red Planet?
a) Venus
b) Jupiter
c) Mars
d) Saturn

3. What is the chemical symbol for gold?
a) Au
b) Ag
c) Fe
d) Cu

---
1. b
2. c
3. a"""


def parse_quiz(text: str) -> ParsedQuiz:
    """
    Parse quiz text into ordered questions and an answer key.

    Question ids are taken verbatim from the text. They need not start at 1
    or be contiguous, although display numbering reads best when they do.

    Args:
        text: Full quiz text

    Returns:
        ParsedQuiz with the questions in encounter order
    """
    parsed = ParsedQuiz()
    current: Optional[Question] = None
    in_answer_key = False

    for line in text.split("\n"):
        line = line.rstrip("\r")

        if line.strip() == ANSWER_KEY_SEPARATOR:
            in_answer_key = True
            continue

        if in_answer_key:
            match = ANSWER_RE.match(line)
            if match:
                parsed.answer_key[int(match.group(1))] = match.group(2)
            continue

        match = QUESTION_RE.match(line)
        if match:
            if current is not None:
                parsed.questions.append(current)
            current = Question(id=int(match.group(1)), text=match.group(2).strip())
        elif current is not None:
            match = OPTION_RE.match(line)
            if match:
                current.options.append(match.group(2).strip())

    if current is not None:
        parsed.questions.append(current)

    return parsed


def strip_question_number(text: str) -> str:
    """Remove a leading ``<n>.`` from prompt text."""
    return LEADING_NUMBER_RE.sub("", text)


def option_letter(index: int) -> str:
    """Letter for a zero-based option index (0 -> 'a')."""
    return chr(ord("a") + index)


def letter_index(letter: str) -> int:
    """Zero-based option index for a letter ('a' -> 0)."""
    return ord(letter) - ord("a")
