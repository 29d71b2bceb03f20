"""
Core data models for the Text Quiz Bot.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

# Question id -> correct option letter ('a'-'d')
AnswerKey = Dict[int, str]


@dataclass
class Question:
    """Represents a single quiz question."""
    id: int
    text: str
    options: List[str] = field(default_factory=list)


@dataclass
class ParsedQuiz:
    """Output of the text parser: ordered questions plus the answer key."""
    questions: List[Question] = field(default_factory=list)
    answer_key: AnswerKey = field(default_factory=dict)


@dataclass
class QuestionResult:
    """Grading outcome for one question."""
    question_id: int
    selected: Optional[str]
    correct_letter: Optional[str]
    correct_option: Optional[str]
    is_correct: bool


@dataclass
class QuizResult:
    """Score of a submitted quiz."""
    score: int
    total: int
    percentage: float
    question_results: List[QuestionResult] = field(default_factory=list)


@dataclass
class QuizSettings:
    """Configuration settings for quiz sessions."""
    shuffle_options: bool = True
    reveal_answers: bool = True
    max_text_length: int = 4000

