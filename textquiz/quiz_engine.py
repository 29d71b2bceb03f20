"""
Quiz engine core logic for the Text Quiz Bot.
Handles question/option shuffling and grading.
"""
import random
import logging
from typing import Dict, List, Optional, Tuple

from .models import AnswerKey, Question, QuestionResult, QuizResult
from .quiz_parser import letter_index, option_letter

logger = logging.getLogger(__name__)


def calculate_percentage(score: int, total: int) -> float:
    """Percentage rounded to two decimals; an empty quiz scores 0.0."""
    if total == 0:
        return 0.0
    return round(score / total * 100, 2)


def grade(questions: List[Question], answer_key: AnswerKey, user_answers: Dict[int, str]) -> QuizResult:
    """
    Score user answers against the answer key.

    A question counts as correct when the recorded letter equals the key
    entry for its id. Questions without a key entry can never be correct.

    Args:
        questions: Questions in display order
        answer_key: Mapping of question id to correct letter
        user_answers: Mapping of question id to selected letter

    Returns:
        QuizResult with totals and per-question breakdown
    """
    question_results = []
    score = 0

    for question in questions:
        selected = user_answers.get(question.id)
        correct_letter = answer_key.get(question.id)
        is_correct = selected is not None and selected == correct_letter
        if is_correct:
            score += 1

        correct_option = None
        if correct_letter is not None:
            index = letter_index(correct_letter)
            if 0 <= index < len(question.options):
                correct_option = question.options[index]

        question_results.append(QuestionResult(
            question_id=question.id,
            selected=selected,
            correct_letter=correct_letter,
            correct_option=correct_option,
            is_correct=is_correct
        ))

    total = len(questions)
    return QuizResult(
        score=score,
        total=total,
        percentage=calculate_percentage(score, total),
        question_results=question_results
    )


class QuizEngine:
    """Reorders quizzes while keeping the answer key consistent."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Initialize the engine.

        Args:
            rng: Random source, a fresh ``random.Random`` if None
        """
        self.rng = rng or random.Random()

    def shuffle_questions(self, questions: List[Question]) -> List[Question]:
        """
        Shuffle questions randomly.

        Args:
            questions: List of questions to shuffle

        Returns:
            New list with questions in random order
        """
        shuffled = list(questions)
        self.rng.shuffle(shuffled)
        return shuffled

    def shuffle_options(self, options: List[str]) -> List[int]:
        """
        Produce a random ordering of option positions.

        Returns:
            Original indices in their new order
        """
        order = list(range(len(options)))
        self.rng.shuffle(order)
        return order

    def shuffle_quiz(
        self,
        questions: List[Question],
        answer_key: AnswerKey,
        shuffle_options: bool = True
    ) -> Tuple[List[Question], AnswerKey]:
        """
        Shuffle question order and, independently, each question's options.

        Questions are renumbered 1..N in their new order and the answer key is
        rebuilt so each letter points at the new position of the option that
        was correct before. Inputs are left untouched.

        Args:
            questions: Current questions
            answer_key: Current answer key
            shuffle_options: Also reorder options within each question

        Returns:
            Tuple of (new questions, new answer key)
        """
        new_questions = []
        new_key: AnswerKey = {}

        for new_id, question in enumerate(self.shuffle_questions(questions), start=1):
            if shuffle_options:
                order = self.shuffle_options(question.options)
            else:
                order = list(range(len(question.options)))

            correct_letter = answer_key.get(question.id)
            if correct_letter is not None:
                original_index = letter_index(correct_letter)
                if original_index in order:
                    new_key[new_id] = option_letter(order.index(original_index))
                else:
                    logger.warning(
                        f"Answer '{correct_letter}' for question {question.id} "
                        f"has no matching option, dropping it from the key"
                    )

            new_questions.append(Question(
                id=new_id,
                text=question.text,
                options=[question.options[i] for i in order]
            ))

        logger.info(f"Shuffled {len(new_questions)} questions (options shuffled: {shuffle_options})")
        return new_questions, new_key
