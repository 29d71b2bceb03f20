"""
Discord embeds and UI components for presenting quizzes.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Awaitable, Callable

import discord

from .models import QuizResult
from .quiz_parser import SAMPLE_QUIZ, option_letter
from .quiz_session import QuizSession

if TYPE_CHECKING:
    from .bot import QuizBot

logger = logging.getLogger(__name__)

# Discord embed limits
MAX_FIELDS = 25
MAX_FIELD_NAME = 256
MAX_FIELD_VALUE = 1024
MAX_EMBED_TOTAL = 6000
OVERFLOW_RESERVE = 100

COLOR_QUIZ = 0x6699ff
COLOR_SUCCESS = 0x00ff00
COLOR_WARNING = 0xffaa00
COLOR_ERROR = 0xff0000


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"


def format_options(session: QuizSession, question_id: int, options: list) -> str:
    """Render option lines, marking the user's current selection."""
    if not options:
        return "*No options*"

    selected = session.user_answers.get(question_id)
    lines = []
    for index, option in enumerate(options):
        letter = option_letter(index)
        marker = "🔘" if letter == selected else "⚪"
        lines.append(f"{marker} **{letter})** {option}")
    return "\n".join(lines)


def build_quiz_embed(session: QuizSession) -> discord.Embed:
    """Embed showing every question with its options."""
    embed = discord.Embed(
        title="📝 Quiz",
        description=(
            f"{session.total_questions} questions · answered "
            f"{session.answered_count}/{session.total_questions}"
        ),
        color=COLOR_QUIZ
    )

    for display_number, question in enumerate(session.questions[:MAX_FIELDS], start=1):
        embed.add_field(
            name=_truncate(f"{display_number}. {question.text}", MAX_FIELD_NAME),
            value=_truncate(format_options(session, question.id, question.options), MAX_FIELD_VALUE),
            inline=False
        )

    footer = "Answer with /answer, then press Submit"
    if session.total_questions > MAX_FIELDS:
        footer = f"Showing the first {MAX_FIELDS} questions · " + footer
    embed.set_footer(text=footer)
    return embed


def build_results_embed(result: QuizResult, reveal_answers: bool = True) -> discord.Embed:
    """Embed with the score and, optionally, the correct answers."""
    if result.total and result.score == result.total:
        color = COLOR_SUCCESS
    elif result.percentage >= 50:
        color = COLOR_WARNING
    else:
        color = COLOR_ERROR

    embed = discord.Embed(
        title="🏁 Quiz Results",
        description=f"Score: **{result.score}/{result.total}** ({result.percentage:.2f}%)",
        color=color
    )
    embed.set_footer(text="Redo to try again, Shuffle for a new order, New Quiz to paste another")

    if reveal_answers:
        lines = []
        for display_number, item in enumerate(result.question_results, start=1):
            status = "✅" if item.is_correct else "❌"
            selected = item.selected or "-"
            if item.correct_letter is None:
                correct = "no answer key entry"
            elif item.correct_option is None:
                correct = item.correct_letter
            else:
                correct = f"{item.correct_letter}) {item.correct_option}"
            lines.append(_truncate(f"{status} **{display_number}.** you: {selected} · correct: {correct}", MAX_FIELD_VALUE))

        # Split into fields to respect the value limit
        chunks = []
        chunk = []
        for line in lines:
            if chunk and sum(len(l) + 1 for l in chunk) + len(line) > MAX_FIELD_VALUE:
                chunks.append(chunk)
                chunk = []
            chunk.append(line)
        if chunk:
            chunks.append(chunk)

        # One field and some characters stay free for the overflow note
        budget = MAX_EMBED_TOTAL - len(embed) - OVERFLOW_RESERVE
        shown = 0
        for chunk in chunks:
            value = "\n".join(chunk)
            if len(embed.fields) >= MAX_FIELDS - 1 or len("Answers") + len(value) > budget:
                break
            embed.add_field(name="Answers", value=value, inline=False)
            budget -= len("Answers") + len(value)
            shown += len(chunk)

        hidden = len(lines) - shown
        if hidden:
            embed.add_field(name="…", value=f"{hidden} more answers not shown", inline=False)

    return embed


def build_sample_embed() -> discord.Embed:
    embed = discord.Embed(
        title="📋 Sample Quiz",
        description=f"```\n{SAMPLE_QUIZ}\n```",
        color=COLOR_QUIZ
    )
    embed.set_footer(text="Copy this text and paste it into /quiz")
    return embed


class QuizTextModal(discord.ui.Modal, title="Start a Quiz"):
    """Modal with a paragraph input for pasting quiz text."""

    quiz_text = discord.ui.TextInput(
        label="Quiz text",
        style=discord.TextStyle.paragraph,
        placeholder="Paste your quiz text here...",
        required=True,
        max_length=4000
    )

    def __init__(
        self,
        on_quiz_text: Callable[[discord.Interaction, str], Awaitable[None]],
        max_length: int = 4000
    ):
        super().__init__()
        self.on_quiz_text = on_quiz_text
        self.quiz_text.max_length = max_length

    async def on_submit(self, interaction: discord.Interaction) -> None:
        await self.on_quiz_text(interaction, self.quiz_text.value)

    async def on_error(self, interaction: discord.Interaction, error: Exception) -> None:
        logger.error(f"Error handling quiz text modal: {error}", exc_info=True)
        if not interaction.response.is_done():
            await interaction.response.send_message("❌ Failed to load the quiz. Please try again.", ephemeral=True)


class QuizControlsView(discord.ui.View):
    """Buttons that drive the channel's quiz session."""

    def __init__(self, bot: QuizBot, timeout: float = 900):
        super().__init__(timeout=timeout)
        self.bot = bot

    @discord.ui.button(label="Submit", style=discord.ButtonStyle.success, emoji="✅")
    async def submit_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self.bot.handle_submit(interaction)

    @discord.ui.button(label="Redo", style=discord.ButtonStyle.secondary, emoji="🔁")
    async def redo_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self.bot.handle_redo(interaction)

    @discord.ui.button(label="Shuffle", style=discord.ButtonStyle.primary, emoji="🔀")
    async def shuffle_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self.bot.handle_shuffle(interaction)

    @discord.ui.button(label="New Quiz", style=discord.ButtonStyle.danger, emoji="🆕")
    async def new_quiz_button(self, interaction: discord.Interaction, button: discord.ui.Button) -> None:
        await self.bot.handle_new_quiz(interaction)
