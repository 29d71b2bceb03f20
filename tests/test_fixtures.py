"""
Test fixtures and sample data for Text Quiz Bot tests.
"""
from typing import List
from unittest.mock import Mock, AsyncMock
import discord

from textquiz.models import Question, QuizSettings
from textquiz.quiz_parser import SAMPLE_QUIZ
from textquiz.quiz_session import QuizSession


class TestFixtures:
    """Centralized test fixtures for all test modules."""

    SAMPLE_ANSWER_KEY = {1: "b", 2: "c", 3: "a"}

    # Correct option text per sample question, in sample order
    SAMPLE_CORRECT_OPTIONS = {
        "What is the capital of France?": "Paris",
        "Which planet is known as the Red Planet?": "Mars",
        "What is the chemical symbol for gold?": "Au",
    }

    @staticmethod
    def create_sample_questions() -> List[Question]:
        """Create the questions of the sample quiz."""
        return [
            Question(1, "What is the capital of France?", ["London", "Paris", "Berlin", "Madrid"]),
            Question(2, "Which planet is known as the Red Planet?", ["Venus", "Jupiter", "Mars", "Saturn"]),
            Question(3, "What is the chemical symbol for gold?", ["Au", "Ag", "Fe", "Cu"]),
        ]

    @staticmethod
    def create_sample_quiz_settings() -> QuizSettings:
        return QuizSettings(shuffle_options=True, reveal_answers=True, max_text_length=4000)

    @staticmethod
    def create_loaded_session() -> QuizSession:
        """Session loaded with the sample quiz."""
        session = QuizSession()
        session.load(SAMPLE_QUIZ)
        return session

    @staticmethod
    def create_quiz_text(question_count: int, with_key: bool = True) -> str:
        """Build a well-formed quiz whose correct answer is always 'a'."""
        blocks = []
        for number in range(1, question_count + 1):
            blocks.append(
                f"{number}. Question {number}?\n"
                f"a) Right {number}\n"
                f"b) Wrong {number}b\n"
                f"c) Wrong {number}c\n"
                f"d) Wrong {number}d\n"
            )
        text = "\n".join(blocks)
        if with_key:
            text += "\n---\n" + "\n".join(f"{n}. a" for n in range(1, question_count + 1))
        return text


class MockDiscordObjects:
    """Mock Discord objects for testing bot functionality."""

    @staticmethod
    def create_mock_interaction(channel_id: int = 12345, user_id: int = 67890) -> Mock:
        """Create mock Discord interaction."""
        interaction = Mock(spec=discord.Interaction)
        interaction.channel_id = channel_id
        interaction.user = Mock()
        interaction.user.id = user_id
        interaction.response = Mock()
        interaction.response.is_done.return_value = False
        interaction.response.send_message = AsyncMock()
        interaction.response.send_modal = AsyncMock()
        interaction.followup = Mock()
        interaction.followup.send = AsyncMock()
        return interaction

    @staticmethod
    def sent_embed(interaction: Mock) -> discord.Embed:
        """Embed passed to the first response.send_message call."""
        call_args = interaction.response.send_message.call_args
        return call_args.kwargs['embed']


class TestDataValidation:
    """Validation helpers for test assertions."""

    @staticmethod
    def validate_question(question: Question) -> bool:
        """Validate Question object structure."""
        return (
            isinstance(question.id, int) and
            question.id > 0 and
            isinstance(question.text, str) and
            len(question.text) > 0 and
            isinstance(question.options, list) and
            len(question.options) <= 4
        )

    @staticmethod
    def validate_session(session: QuizSession) -> bool:
        """Answer key ids must exist and question ids must be unique."""
        ids = [q.id for q in session.questions]
        return (
            len(ids) == len(set(ids)) and
            all(key in ids for key in session.answer_key) and
            all(TestDataValidation.validate_question(q) for q in session.questions)
        )
