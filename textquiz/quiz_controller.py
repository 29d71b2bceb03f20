"""
Quiz session controller for the Text Quiz Bot.
Manages quiz sessions, answers, scoring and shuffling per Discord channel.
"""
import logging
from typing import Dict, Optional, List, Any
from enum import Enum

from .models import QuizResult
from .quiz_engine import QuizEngine
from .quiz_session import QuizSession
from .config_manager import ConfigManager


class SessionState(Enum):
    """Enumeration of possible quiz session states."""
    INACTIVE = "inactive"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"


class QuizControllerError(Exception):
    """Base exception for quiz controller errors."""
    pass


class SessionNotFoundError(QuizControllerError):
    """Raised when attempting to operate on a non-existent session."""
    pass


class InvalidSessionStateError(QuizControllerError):
    """Raised when session is in an invalid state for the requested operation."""
    pass


class QuizTextError(QuizControllerError):
    """Raised when pasted quiz text cannot be turned into a quiz."""
    pass


class QuizController:
    """
    Orchestrates quiz sessions across Discord channels.

    Each channel holds at most one quiz. Operations return result dictionaries
    with ``success``, ``message`` and ``user_message`` keys so the bot can
    respond without inspecting exceptions.
    """

    def __init__(self, config_manager: ConfigManager, quiz_engine: Optional[QuizEngine] = None):
        """
        Initialize the quiz controller.

        Args:
            config_manager: Instance for managing configuration
            quiz_engine: Engine used for shuffling, a default one if None
        """
        self.logger = logging.getLogger(__name__)
        self.config_manager = config_manager
        self.quiz_engine = quiz_engine or QuizEngine()

        # Sessions mapped by channel ID
        self._sessions: Dict[int, QuizSession] = {}
        self._session_errors: Dict[int, List[str]] = {}

        self.logger.info("QuizController initialized")

    def get_session(self, channel_id: int) -> Optional[QuizSession]:
        """
        Get the quiz session for a channel.

        Args:
            channel_id: Discord channel identifier

        Returns:
            QuizSession if one exists, None otherwise
        """
        return self._sessions.get(channel_id)

    def has_session(self, channel_id: int) -> bool:
        """Check if a channel has a loaded quiz."""
        return channel_id in self._sessions

    def get_session_state(self, channel_id: int) -> SessionState:
        session = self._sessions.get(channel_id)

        if session is None:
            return SessionState.INACTIVE

        if session.submitted:
            return SessionState.SUBMITTED

        return SessionState.IN_PROGRESS

    def _require_session(self, channel_id: int) -> QuizSession:
        session = self._sessions.get(channel_id)
        if session is None:
            raise SessionNotFoundError(f"No quiz loaded in channel {channel_id}")
        return session

    def load_quiz(self, channel_id: int, text: str) -> Dict[str, Any]:
        """
        Parse quiz text and make it the channel's current quiz.

        Args:
            channel_id: Discord channel identifier
            text: Raw quiz text

        Returns:
            Dictionary with operation results and session info
        """
        try:
            max_length = self.config_manager.get_max_text_length()
            if len(text) > max_length:
                raise QuizTextError(f"Quiz text is {len(text)} characters, limit is {max_length}")

            session = QuizSession()
            session.load(text)

            if not session.questions:
                raise QuizTextError("No questions found in quiz text")

            missing = [q.id for q in session.questions if q.id not in session.answer_key]
            if missing:
                self.logger.warning(f"Channel {channel_id}: questions without answer key entries: {missing}")

            ids = [q.id for q in session.questions]
            duplicates = sorted({qid for qid in ids if ids.count(qid) > 1})
            if duplicates:
                self.logger.warning(f"Channel {channel_id}: question numbers used more than once: {duplicates}")

            self._sessions[channel_id] = session
            self._session_errors.pop(channel_id, None)
            self.logger.info(f"Loaded quiz for channel {channel_id}: {session.total_questions} questions")

            return {
                'success': True,
                'message': f"Quiz loaded with {session.total_questions} questions",
                'session_info': self.get_session_progress(channel_id),
                'missing_answers': missing,
                'duplicate_ids': duplicates
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "load_quiz")

    def select_answer(self, channel_id: int, question_id: int, letter: str) -> Dict[str, Any]:
        """
        Record the user's answer for one question.

        The letter is not checked against the number of options; an
        out-of-range letter simply never matches the key.
        """
        try:
            session = self._require_session(channel_id)

            if session.submitted:
                raise InvalidSessionStateError("Quiz already submitted")

            if session.get_question(question_id) is None:
                raise InvalidSessionStateError(f"Question {question_id} does not exist")

            session.select_answer(question_id, letter)
            self.logger.debug(f"Channel {channel_id}: question {question_id} -> {letter}")

            return {
                'success': True,
                'message': f"Answer {letter} recorded for question {question_id}",
                'answered': session.answered_count,
                'total_questions': session.total_questions
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "select_answer")

    def submit(self, channel_id: int) -> Dict[str, Any]:
        """
        Score the channel's quiz.

        Returns:
            Dictionary with the QuizResult under ``result``
        """
        try:
            session = self._require_session(channel_id)

            if session.submitted:
                raise InvalidSessionStateError("Quiz already submitted")

            result: QuizResult = session.submit()
            self.logger.info(
                f"Channel {channel_id} submitted: {result.score}/{result.total} ({result.percentage}%)"
            )

            return {
                'success': True,
                'message': f"Score {result.score}/{result.total}",
                'result': result
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "submit")

    def redo(self, channel_id: int) -> Dict[str, Any]:
        """Clear answers and score but keep the same questions."""
        try:
            session = self._require_session(channel_id)
            session.reset()
            self.logger.info(f"Channel {channel_id}: quiz reset for another attempt")

            return {
                'success': True,
                'message': "Quiz reset",
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "redo")

    def shuffle(self, channel_id: int) -> Dict[str, Any]:
        """Shuffle questions and options, clearing the current attempt."""
        try:
            session = self._require_session(channel_id)
            shuffle_options = self.config_manager.get_shuffle_options()
            session.shuffle(self.quiz_engine, shuffle_options=shuffle_options)
            self.logger.info(f"Channel {channel_id}: quiz shuffled")

            return {
                'success': True,
                'message': "Quiz shuffled",
                'session_info': self.get_session_progress(channel_id)
            }

        except Exception as e:
            return self._handle_session_error(channel_id, e, "shuffle")

    def start_new(self, channel_id: int) -> Dict[str, Any]:
        """Discard the channel's quiz so a new one can be pasted."""
        session = self._sessions.pop(channel_id, None)
        self._session_errors.pop(channel_id, None)

        if session is None:
            return {
                'success': True,
                'message': "No quiz to clear",
                'had_session': False
            }

        session.start_new()
        self.logger.info(f"Channel {channel_id}: quiz cleared")
        return {
            'success': True,
            'message': "Quiz cleared",
            'had_session': True
        }

    def get_session_progress(self, channel_id: int) -> Optional[Dict[str, Any]]:
        """
        Get progress information for a session.

        Returns:
            Dictionary with progress information, or None if no session
        """
        session = self._sessions.get(channel_id)
        if session is None:
            return None

        return {
            'total_questions': session.total_questions,
            'answered': session.answered_count,
            'submitted': session.submitted,
            'score': session.score,
            'percentage': session.percentage,
            'state': self.get_session_state(channel_id).value
        }

    def get_session_status_summary(self, channel_id: int) -> str:
        """Human-readable one-line summary of the channel's quiz."""
        progress = self.get_session_progress(channel_id)

        if progress is None:
            return "No quiz loaded in this channel."

        parts = [f"Questions: {progress['total_questions']}"]
        parts.append(f"Answered: {progress['answered']}/{progress['total_questions']}")

        if progress['submitted']:
            parts.append(f"Score: {progress['score']}/{progress['total_questions']} ({progress['percentage']:.2f}%)")
        else:
            parts.append("Status: In progress")

        return " | ".join(parts)

    def get_error_summary(self, channel_id: int) -> Dict[str, Any]:
        errors = self._session_errors.get(channel_id, [])
        return {
            'error_count': len(errors),
            'recent_errors': errors[-5:]
        }

    def _handle_session_error(self, channel_id: int, error: Exception, operation: str) -> Dict[str, Any]:
        """
        Log an operation failure and convert it into a result dictionary.

        Args:
            channel_id: Discord channel identifier
            error: The exception that occurred
            operation: Name of the operation that failed

        Returns:
            Dictionary with error handling results
        """
        if isinstance(error, QuizControllerError):
            self.logger.warning(f"{operation} rejected for channel {channel_id}: {error}")
        else:
            self.logger.error(f"Error in {operation} for channel {channel_id}: {error}", exc_info=True)

        self._session_errors.setdefault(channel_id, []).append(f"{operation}: {error}")
        # Keep only the last 10 errors
        self._session_errors[channel_id] = self._session_errors[channel_id][-10:]

        return {
            'success': False,
            'error': str(error),
            'operation': operation,
            'user_message': self._get_user_friendly_error_message(error, operation)
        }

    def _get_user_friendly_error_message(self, error: Exception, operation: str) -> str:
        if isinstance(error, SessionNotFoundError):
            return "❌ No quiz loaded in this channel. Paste one with `/quiz`."

        elif isinstance(error, QuizTextError):
            if "limit" in str(error):
                return f"❌ {error}. Please shorten the quiz."
            return ("❌ No questions found. Check that questions look like `1. Question text` "
                    "and options like `a) Option`. Use `/sample` to see the format.")

        elif isinstance(error, InvalidSessionStateError):
            if "submitted" in str(error).lower():
                return "❌ This quiz has already been submitted. Use `/redo` to try again."
            return f"❌ {error}."

        else:
            return f"❌ An unexpected error occurred during {operation}. Please try again."
