"""
Integration tests for Text Quiz Bot.
Tests complete quiz flows through the controller with real components.
"""
import logging
import random
import unittest

from textquiz.config_manager import ConfigManager
from textquiz.quiz_controller import QuizController, SessionState
from textquiz.quiz_engine import QuizEngine
from textquiz.quiz_parser import SAMPLE_QUIZ
from tests.test_fixtures import TestFixtures, TestDataValidation


class TestCompleteQuizFlow(unittest.TestCase):
    """Test complete quiz flow from paste to new quiz."""

    def setUp(self):
        """Set up integration test environment."""
        logging.disable(logging.CRITICAL)
        self.config_manager = ConfigManager()
        self.quiz_controller = QuizController(self.config_manager, QuizEngine(random.Random(2024)))
        self.channel_id = 555

    def tearDown(self):
        logging.disable(logging.NOTSET)

    def test_full_quiz_lifecycle(self):
        """Load, answer, submit, redo, shuffle, answer again, and clear."""
        channel = self.channel_id

        # Load
        result = self.quiz_controller.load_quiz(channel, SAMPLE_QUIZ)
        self.assertTrue(result['success'])
        session = self.quiz_controller.get_session(channel)
        self.assertTrue(TestDataValidation.validate_session(session))

        # First attempt: two right, one wrong
        self.quiz_controller.select_answer(channel, 1, "b")
        self.quiz_controller.select_answer(channel, 2, "c")
        self.quiz_controller.select_answer(channel, 3, "b")
        submitted = self.quiz_controller.submit(channel)['result']
        self.assertEqual((submitted.score, submitted.total, submitted.percentage), (2, 3, 66.67))

        # Redo keeps the same quiz
        self.quiz_controller.redo(channel)
        self.assertEqual(self.quiz_controller.get_session_state(channel), SessionState.IN_PROGRESS)
        self.assertEqual(session.answer_key, TestFixtures.SAMPLE_ANSWER_KEY)

        # Shuffle, then answer using the remapped key
        self.quiz_controller.shuffle(channel)
        session = self.quiz_controller.get_session(channel)
        self.assertTrue(TestDataValidation.validate_session(session))
        for question_id, letter in session.answer_key.items():
            self.quiz_controller.select_answer(channel, question_id, letter)
        perfect = self.quiz_controller.submit(channel)['result']
        self.assertEqual(perfect.score, perfect.total)
        self.assertEqual(perfect.percentage, 100.0)
        for item in perfect.question_results:
            question = session.get_question(item.question_id)
            self.assertEqual(item.correct_option, TestFixtures.SAMPLE_CORRECT_OPTIONS[question.text])

        # New quiz
        self.quiz_controller.start_new(channel)
        self.assertIsNone(self.quiz_controller.get_session(channel))
        self.assertEqual(self.quiz_controller.get_session_state(channel), SessionState.INACTIVE)

    def test_repeated_shuffles_stay_consistent(self):
        self.quiz_controller.load_quiz(self.channel_id, TestFixtures.create_quiz_text(10))

        for _ in range(25):
            self.quiz_controller.shuffle(self.channel_id)
            session = self.quiz_controller.get_session(self.channel_id)
            self.assertTrue(TestDataValidation.validate_session(session))
            for question in session.questions:
                letter = session.answer_key[question.id]
                self.assertTrue(question.options["abcd".index(letter)].startswith("Right"))

    def test_shuffle_questions_only(self):
        self.config_manager.set_shuffle_options(False)
        self.quiz_controller.load_quiz(self.channel_id, TestFixtures.create_quiz_text(6))

        self.quiz_controller.shuffle(self.channel_id)

        session = self.quiz_controller.get_session(self.channel_id)
        self.assertEqual(set(session.answer_key.values()), {"a"})

    def test_replacing_quiz_resets_attempt(self):
        self.quiz_controller.load_quiz(self.channel_id, SAMPLE_QUIZ)
        self.quiz_controller.select_answer(self.channel_id, 1, "b")
        self.quiz_controller.submit(self.channel_id)

        self.quiz_controller.load_quiz(self.channel_id, TestFixtures.create_quiz_text(4))

        progress = self.quiz_controller.get_session_progress(self.channel_id)
        self.assertEqual(progress['total_questions'], 4)
        self.assertEqual(progress['answered'], 0)
        self.assertFalse(progress['submitted'])
        self.assertIsNone(progress['score'])


if __name__ == '__main__':
    unittest.main()
