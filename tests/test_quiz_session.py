"""
Unit tests for QuizSession state transitions.
"""
import random
import unittest

from textquiz.quiz_engine import QuizEngine
from textquiz.quiz_parser import SAMPLE_QUIZ, letter_index
from textquiz.quiz_session import QuizSession
from tests.test_fixtures import TestFixtures, TestDataValidation


class TestQuizSession(unittest.TestCase):
    """Test cases for the session transition methods."""

    def setUp(self):
        """Set up test fixtures."""
        self.session = TestFixtures.create_loaded_session()

    def test_load_replaces_state(self):
        self.session.select_answer(1, "b")
        self.session.submit()

        self.session.load(TestFixtures.create_quiz_text(2))

        self.assertEqual(self.session.total_questions, 2)
        self.assertEqual(self.session.answer_key, {1: "a", 2: "a"})
        self.assertEqual(self.session.user_answers, {})
        self.assertFalse(self.session.submitted)
        self.assertIsNone(self.session.score)
        self.assertIsNone(self.session.percentage)

    def test_load_strips_number_prefix_from_prompt(self):
        self.session.load("1. 1. Doubly numbered?\na) x\n---\n1. a")

        self.assertEqual(self.session.questions[0].text, "Doubly numbered?")

    def test_load_keeps_raw_text(self):
        self.assertEqual(self.session.raw_text, SAMPLE_QUIZ)
        self.assertTrue(TestDataValidation.validate_session(self.session))

    def test_select_answer_overwrites(self):
        self.session.select_answer(1, "a")
        self.session.select_answer(1, "b")

        self.assertEqual(self.session.user_answers, {1: "b"})
        self.assertEqual(self.session.answered_count, 1)

    def test_submit_without_answers(self):
        result = self.session.submit()

        self.assertEqual(result.score, 0)
        self.assertTrue(self.session.submitted)
        self.assertEqual(self.session.score, 0)
        self.assertEqual(self.session.percentage, 0.0)

    def test_submit_all_correct(self):
        for question_id, letter in TestFixtures.SAMPLE_ANSWER_KEY.items():
            self.session.select_answer(question_id, letter)

        result = self.session.submit()

        self.assertEqual(result.score, result.total)
        self.assertEqual(self.session.percentage, 100.0)

    def test_submit_empty_session(self):
        session = QuizSession()
        result = session.submit()

        self.assertEqual(result.total, 0)
        self.assertEqual(session.percentage, 0.0)

    def test_reset_keeps_questions_and_key(self):
        questions = list(self.session.questions)
        answer_key = dict(self.session.answer_key)
        self.session.select_answer(1, "b")
        self.session.submit()

        self.session.reset()

        self.assertEqual(self.session.questions, questions)
        self.assertEqual(self.session.answer_key, answer_key)
        self.assertEqual(self.session.user_answers, {})
        self.assertFalse(self.session.submitted)
        self.assertIsNone(self.session.score)
        self.assertIsNone(self.session.percentage)

    def test_shuffle_clears_attempt_and_keeps_key_consistent(self):
        self.session.select_answer(1, "b")
        self.session.submit()

        self.session.shuffle(QuizEngine(random.Random(3)))

        self.assertEqual(self.session.user_answers, {})
        self.assertFalse(self.session.submitted)
        self.assertIsNone(self.session.score)
        self.assertTrue(TestDataValidation.validate_session(self.session))
        for question in self.session.questions:
            correct = question.options[letter_index(self.session.answer_key[question.id])]
            self.assertEqual(correct, TestFixtures.SAMPLE_CORRECT_OPTIONS[question.text])

    def test_shuffled_quiz_can_be_answered_perfectly(self):
        self.session.shuffle(QuizEngine(random.Random(11)))
        for question_id, letter in self.session.answer_key.items():
            self.session.select_answer(question_id, letter)

        self.assertEqual(self.session.submit().percentage, 100.0)

    def test_start_new_clears_everything(self):
        self.session.select_answer(1, "b")
        self.session.submit()

        self.session.start_new()

        self.assertEqual(self.session.questions, [])
        self.assertEqual(self.session.answer_key, {})
        self.assertEqual(self.session.user_answers, {})
        self.assertEqual(self.session.raw_text, "")
        self.assertFalse(self.session.submitted)
        self.assertIsNone(self.session.score)

    def test_get_question(self):
        self.assertEqual(self.session.get_question(2).options[2], "Mars")
        self.assertIsNone(self.session.get_question(42))


if __name__ == '__main__':
    unittest.main()
