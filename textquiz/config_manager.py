"""
Configuration manager for Text Quiz Bot settings.
"""
import logging
from typing import Dict, Any, List

from .models import QuizSettings


class ConfigManager:
    """Manages bot configuration settings and quiz parameters."""

    # Default configuration values
    DEFAULT_SHUFFLE_OPTIONS = True
    DEFAULT_REVEAL_ANSWERS = True
    DEFAULT_MAX_TEXT_LENGTH = 4000  # Discord modal text input limit

    # Validation limits
    MIN_TEXT_LENGTH = 20
    MAX_TEXT_LENGTH = 4000

    def __init__(self):
        """Initialize ConfigManager with default settings."""
        self.logger = logging.getLogger(__name__)
        self._global_settings = QuizSettings()

    def get_quiz_settings(self) -> QuizSettings:
        """
        Get current quiz settings.

        Returns:
            Copy of the current QuizSettings
        """
        return QuizSettings(
            shuffle_options=self._global_settings.shuffle_options,
            reveal_answers=self._global_settings.reveal_answers,
            max_text_length=self._global_settings.max_text_length
        )

    def _set_flag(self, name: str, value: bool, on_text: str, off_text: str) -> Dict[str, Any]:
        if not isinstance(value, bool):
            error_msg = f"{name} must be a boolean, got {type(value).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected true/false, got {type(value).__name__}"
            }

        setattr(self._global_settings, name, value)
        text = on_text if value else off_text
        self.logger.info(f"{name} set to {value}")
        return {
            'success': True,
            'new_value': value,
            'message': f"{name} set to {value}",
            'user_message': f"✅ {text}"
        }

    def set_shuffle_options(self, shuffle_options: bool) -> Dict[str, Any]:
        """
        Set whether /shuffle also reorders the options inside each question.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        return self._set_flag(
            'shuffle_options', shuffle_options,
            "Shuffling will reorder questions and their options",
            "Shuffling will reorder questions only"
        )

    def get_shuffle_options(self) -> bool:
        return self._global_settings.shuffle_options

    def toggle_shuffle_options(self) -> Dict[str, Any]:
        return self.set_shuffle_options(not self._global_settings.shuffle_options)

    def set_reveal_answers(self, reveal_answers: bool) -> Dict[str, Any]:
        """
        Set whether results show the correct option for each question.

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        return self._set_flag(
            'reveal_answers', reveal_answers,
            "Results will show the correct answers",
            "Results will show the score only"
        )

    def get_reveal_answers(self) -> bool:
        return self._global_settings.reveal_answers

    def toggle_reveal_answers(self) -> Dict[str, Any]:
        return self.set_reveal_answers(not self._global_settings.reveal_answers)

    def set_max_text_length(self, length: int) -> Dict[str, Any]:
        """
        Set the maximum accepted quiz text length with validation.

        Args:
            length: Maximum number of characters

        Returns:
            Dictionary with success status, error message, and user-friendly message
        """
        # bool is a subclass of int
        if not isinstance(length, int) or isinstance(length, bool):
            error_msg = f"Max text length must be an integer, got {type(length).__name__}"
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Invalid input: Expected a number, got {type(length).__name__}"
            }

        if length < self.MIN_TEXT_LENGTH or length > self.MAX_TEXT_LENGTH:
            error_msg = (f"Max text length must be between {self.MIN_TEXT_LENGTH} "
                         f"and {self.MAX_TEXT_LENGTH}")
            self.logger.error(error_msg)
            return {
                'success': False,
                'error': error_msg,
                'user_message': f"❌ Out of range: {error_msg}"
            }

        self._global_settings.max_text_length = length
        self.logger.info(f"Max text length set to {length}")
        return {
            'success': True,
            'message': f"Max text length set to {length}",
            'user_message': f"✅ Quizzes may be up to {length} characters"
        }

    def get_max_text_length(self) -> int:
        return self._global_settings.max_text_length

    def apply_config(self, quiz_config: Dict[str, Any]) -> List[str]:
        """
        Apply the ``quiz`` section of config.json.

        Invalid values are logged and skipped so defaults stay in place.

        Returns:
            User-friendly messages for every value that was rejected
        """
        rejected = []
        setters = {
            'shuffle_options': self.set_shuffle_options,
            'reveal_answers': self.set_reveal_answers,
            'max_text_length': self.set_max_text_length,
        }
        for key, setter in setters.items():
            if key not in quiz_config:
                continue
            result = setter(quiz_config[key])
            if not result['success']:
                self.logger.warning(f"Ignoring config value quiz.{key}: {result['error']}")
                rejected.append(result['user_message'])
        return rejected

    def reset_to_defaults(self) -> None:
        """Reset all settings to their default values."""
        self._global_settings = QuizSettings(
            shuffle_options=self.DEFAULT_SHUFFLE_OPTIONS,
            reveal_answers=self.DEFAULT_REVEAL_ANSWERS,
            max_text_length=self.DEFAULT_MAX_TEXT_LENGTH
        )
        self.logger.info("All settings reset to default values")

    def validate_settings(self) -> Dict[str, Any]:
        """
        Validate current settings and return validation results.

        Returns:
            Dictionary with validation results and any issues found
        """
        validation_result = {
            "valid": True,
            "issues": []
        }

        for name in ('shuffle_options', 'reveal_answers'):
            value = getattr(self._global_settings, name)
            if not isinstance(value, bool):
                validation_result["valid"] = False
                validation_result["issues"].append(f"Invalid {name} setting: {value}")

        length = self._global_settings.max_text_length
        if (not isinstance(length, int) or
                length < self.MIN_TEXT_LENGTH or
                length > self.MAX_TEXT_LENGTH):
            validation_result["valid"] = False
            validation_result["issues"].append(f"Invalid max text length: {length}")

        return validation_result

    def get_settings_summary(self) -> str:
        """
        Get a formatted summary of current settings.

        Returns:
            Human-readable string describing current settings
        """
        shuffle_str = "questions and options" if self._global_settings.shuffle_options else "questions only"
        reveal_str = "shown" if self._global_settings.reveal_answers else "hidden"

        return (
            f"Quiz Settings:\n"
            f"• Shuffle: {shuffle_str}\n"
            f"• Correct answers after submit: {reveal_str}\n"
            f"• Max quiz length: {self._global_settings.max_text_length} characters"
        )
