"""
Quiz session state for the Text Quiz Bot.

A session owns the questions, the answer key and the user's current attempt.
All mutation goes through the transition methods below so that questions and
answer key never drift apart.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models import AnswerKey, Question, QuizResult
from .quiz_engine import QuizEngine, grade
from .quiz_parser import parse_quiz, strip_question_number

logger = logging.getLogger(__name__)


@dataclass
class QuizSession:
    """Working state of one quiz."""
    questions: List[Question] = field(default_factory=list)
    answer_key: AnswerKey = field(default_factory=dict)
    user_answers: Dict[int, str] = field(default_factory=dict)
    submitted: bool = False
    score: Optional[int] = None
    percentage: Optional[float] = None
    raw_text: str = ""

    def load(self, text: str) -> None:
        """
        Parse quiz text and replace the current state with it.

        Leading question numbers are stripped from the prompts for display.
        """
        parsed = parse_quiz(text)
        for question in parsed.questions:
            question.text = strip_question_number(question.text)

        self.questions = parsed.questions
        self.answer_key = parsed.answer_key
        self.raw_text = text
        self._clear_attempt()
        logger.info(
            f"Loaded quiz with {len(self.questions)} questions "
            f"and {len(self.answer_key)} answer key entries"
        )

    def select_answer(self, question_id: int, letter: str) -> None:
        """Record or overwrite the chosen letter for a question."""
        self.user_answers[question_id] = letter

    def submit(self) -> QuizResult:
        """Grade the current answers and mark the quiz as submitted."""
        result = grade(self.questions, self.answer_key, self.user_answers)
        self.score = result.score
        self.percentage = result.percentage
        self.submitted = True
        logger.info(f"Quiz submitted: {result.score}/{result.total} ({result.percentage}%)")
        return result

    def reset(self) -> None:
        """Clear the attempt but keep the same questions and answer key."""
        self._clear_attempt()

    def shuffle(self, engine: QuizEngine, shuffle_options: bool = True) -> None:
        """Reorder questions (and optionally options) and remap the answer key."""
        questions, answer_key = engine.shuffle_quiz(
            self.questions, self.answer_key, shuffle_options=shuffle_options
        )
        self.questions = questions
        self.answer_key = answer_key
        self._clear_attempt()

    def start_new(self) -> None:
        """Drop the quiz entirely."""
        self.questions = []
        self.answer_key = {}
        self.raw_text = ""
        self._clear_attempt()

    def get_question(self, question_id: int) -> Optional[Question]:
        for question in self.questions:
            if question.id == question_id:
                return question
        return None

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def answered_count(self) -> int:
        return sum(1 for q in self.questions if q.id in self.user_answers)

    def _clear_attempt(self) -> None:
        self.user_answers = {}
        self.submitted = False
        self.score = None
        self.percentage = None
