import discord
from discord import app_commands
from discord.ext import commands
import logging
import asyncio
import functools
from typing import Optional
import os

from .config_manager import ConfigManager
from .quiz_controller import QuizController
from .quiz_parser import OPTION_LETTERS
from .views import (
    QuizControlsView,
    QuizTextModal,
    build_quiz_embed,
    build_results_embed,
    build_sample_embed,
    COLOR_ERROR,
    COLOR_QUIZ,
    COLOR_SUCCESS,
)

logger = logging.getLogger(__name__)

ANSWER_CHOICES = [app_commands.Choice(name=letter, value=letter) for letter in OPTION_LETTERS]


class QuizBot(commands.Bot):
    """Discord bot for running quizzes pasted as plain text"""

    def __init__(self, config=None):
        # Slash commands only need the guilds intent
        intents = discord.Intents.none()
        intents.guilds = True

        command_prefix = '!'
        if config and 'bot' in config:
            command_prefix = config['bot'].get('command_prefix', '!')

        super().__init__(
            command_prefix=command_prefix,  # Fallback prefix, mainly using slash commands
            intents=intents,
            help_command=None
        )

        self.app_config = config or {}

        self.config_manager: Optional[ConfigManager] = None
        self.quiz_controller: Optional[QuizController] = None

    async def setup_hook(self):
        """Called when the bot is starting up"""
        try:
            logger.info("Setting up bot components...")

            self.config_manager = ConfigManager()

            if self.app_config:
                self.apply_configuration()

            self.quiz_controller = QuizController(self.config_manager)

            await self.setup_commands()

            logger.info("Bot setup completed successfully")

        except Exception as e:
            logger.error(f"Error during bot setup: {e}")
            raise

    def apply_configuration(self):
        """Apply settings from configuration file to managers."""
        quiz_config = self.app_config.get('quiz', {})
        rejected = self.config_manager.apply_config(quiz_config)
        if rejected:
            logger.warning(f"{len(rejected)} configuration values were rejected, using defaults for them")
        else:
            logger.info("Configuration applied successfully")

    async def setup_commands(self):
        """Register all slash commands"""
        @self.tree.command(name="help", description="Display available commands and the quiz format")
        async def help_command(interaction: discord.Interaction):
            await self.handle_help(interaction)

        @self.tree.command(name="quiz", description="Paste a quiz and start it")
        @app_commands.describe(shuffled="Start with questions and options already shuffled")
        async def quiz_command(interaction: discord.Interaction, shuffled: bool = False):
            await self.handle_quiz(interaction, shuffled)

        @self.tree.command(name="sample", description="Show a sample quiz in the expected format")
        async def sample_command(interaction: discord.Interaction):
            await self.handle_sample(interaction)

        @self.tree.command(name="answer", description="Choose an answer for a question")
        @app_commands.describe(question="Question number", choice="Option letter")
        @app_commands.choices(choice=ANSWER_CHOICES)
        async def answer_command(interaction: discord.Interaction, question: int, choice: app_commands.Choice[str]):
            await self.handle_answer(interaction, question, choice.value)

        @self.tree.command(name="submit", description="Submit your answers and see the score")
        async def submit_command(interaction: discord.Interaction):
            await self.handle_submit(interaction)

        @self.tree.command(name="redo", description="Clear your answers and try the same quiz again")
        async def redo_command(interaction: discord.Interaction):
            await self.handle_redo(interaction)

        @self.tree.command(name="shuffle", description="Shuffle questions and options")
        async def shuffle_command(interaction: discord.Interaction):
            await self.handle_shuffle(interaction)

        @self.tree.command(name="new_quiz", description="Discard the current quiz")
        async def new_quiz_command(interaction: discord.Interaction):
            await self.handle_new_quiz(interaction)

        @self.tree.command(name="status", description="Show the current quiz")
        async def status_command(interaction: discord.Interaction):
            await self.handle_status(interaction)

        @self.tree.command(name="shuffle_options", description="Toggle whether shuffling also reorders options")
        async def shuffle_options_command(interaction: discord.Interaction):
            await self.handle_shuffle_options(interaction)

        @self.tree.command(name="reveal_answers", description="Toggle showing correct answers after submit")
        async def reveal_answers_command(interaction: discord.Interaction):
            await self.handle_reveal_answers(interaction)

        logger.info("Slash commands registered successfully")

    async def on_ready(self):
        """Called when the bot has successfully connected to Discord"""
        logger.info(f"Bot is ready! Logged in as {self.user}")
        logger.info(f"Bot is in {len(self.guilds)} guilds")
        print(f"🤖 {self.user} is Ready and Online!")

        try:
            synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} slash commands")
            print(f"⚡ Synced {len(synced)} slash commands")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync slash commands: {e}")
            print(f"❌ Failed to sync slash commands: {e}")

    async def on_error(self, event, *args, **kwargs):
        """Handle general bot errors"""
        logger.error(f"An error occurred in event {event}", exc_info=True)

    async def handle_discord_api_error(self, error: Exception, operation: str, interaction: discord.Interaction = None) -> bool:
        """
        Handle Discord API errors with appropriate retry logic and user feedback.

        Args:
            error: The Discord API error
            operation: Description of the operation that failed
            interaction: Discord interaction object (optional)

        Returns:
            True if the operation should be retried, False otherwise
        """
        if isinstance(error, discord.HTTPException):
            if error.status == 429:  # Rate limited
                retry_after = getattr(error, 'retry_after', 5)
                logger.warning(f"Rate limited during {operation}, waiting {retry_after}s")
                await asyncio.sleep(retry_after)
                return True

            elif error.status in [500, 502, 503, 504]:
                logger.warning(f"Discord server error during {operation}: {error.status}")
                await asyncio.sleep(2)
                return True

            elif error.status == 403:
                logger.error(f"Permission denied during {operation}: {error}")
                if interaction:
                    await self.send_error_response(
                        interaction,
                        "Bot doesn't have permission to perform this action. Please check bot permissions.",
                        "❌ Permission Error"
                    )
                return False

            else:
                logger.error(f"Discord API error during {operation}: {error}")
                if interaction:
                    await self.send_error_response(
                        interaction,
                        "Discord API error occurred. Please try again in a moment.",
                        "❌ Discord Error"
                    )
                return False

        logger.error(f"Unexpected error during {operation}: {error}")
        if interaction:
            await self.send_error_response(
                interaction,
                "An unexpected error occurred. Please try again.",
                "❌ Unexpected Error"
            )
        return False

    async def _run_with_retry(self, operation: str, interaction: discord.Interaction, handler, max_retries: int = 2):
        """Run a response coroutine factory, retrying on transient Discord errors."""
        for attempt in range(max_retries):
            try:
                await handler()
                return
            except discord.HTTPException as e:
                if await self.handle_discord_api_error(e, operation, interaction) and attempt < max_retries - 1:
                    continue
                return
            except Exception as e:
                logger.error(f"Error in {operation} command: {e}", exc_info=True)
                await self.send_error_response(interaction, f"Failed to {operation.replace('_', ' ')}", "❌ Command Error")
                return

    async def _run_command(self, operation: str, interaction: discord.Interaction, action, respond):
        """
        Apply a state change once, then send its response with retries.

        Args:
            operation: Operation name used in logs and error messages
            interaction: Discord interaction to respond to
            action: Callable returning the controller result
            respond: Coroutine function taking that result and sending the reply
        """
        try:
            result = action()
        except Exception as e:
            logger.error(f"Error in {operation} command: {e}", exc_info=True)
            await self.send_error_response(interaction, f"Failed to {operation.replace('_', ' ')}", "❌ Command Error")
            return

        await self._run_with_retry(operation, interaction, lambda: respond(result))

    async def handle_help(self, interaction: discord.Interaction):
        """Handle /help command"""
        async def respond():
            help_embed = discord.Embed(
                title="🎯 Quiz Bot Commands",
                description="Paste a plain-text quiz, answer it, and get your score",
                color=COLOR_SUCCESS
            )
            help_embed.add_field(
                name="🎮 Quiz Commands",
                value=(
                    "`/quiz [shuffled]` - Paste a quiz and start it, optionally shuffled\n"
                    "`/sample` - Show a sample quiz\n"
                    "`/answer <question> <choice>` - Choose an answer\n"
                    "`/submit` - Submit and see your score\n"
                    "`/redo` - Try the same quiz again\n"
                    "`/shuffle` - Shuffle questions and options\n"
                    "`/new_quiz` - Discard the current quiz\n"
                    "`/status` - Show the current quiz"
                ),
                inline=False
            )
            help_embed.add_field(
                name="⚙️ Settings",
                value=(
                    "`/shuffle_options` - Toggle option shuffling\n"
                    "`/reveal_answers` - Toggle correct answers in results"
                ),
                inline=False
            )
            help_embed.add_field(
                name="📄 Quiz Format",
                value=(
                    "```\n1. Question text\na) Option\nb) Option\n\n---\n1. b\n```"
                ),
                inline=False
            )
            help_embed.add_field(
                name="Current Settings",
                value=f"```\n{self.config_manager.get_settings_summary()}\n```",
                inline=False
            )
            await interaction.response.send_message(embed=help_embed, ephemeral=True)

        await self._run_with_retry("show_help", interaction, respond)

    async def handle_quiz(self, interaction: discord.Interaction, shuffled: bool = False):
        """Handle /quiz command by opening the paste modal"""
        async def respond():
            modal = QuizTextModal(
                functools.partial(self.handle_quiz_text, shuffled=shuffled),
                max_length=self.config_manager.get_max_text_length()
            )
            await interaction.response.send_modal(modal)

        await self._run_with_retry("open_quiz", interaction, respond)

    def _load_quiz(self, channel_id: int, text: str, shuffled: bool) -> dict:
        result = self.quiz_controller.load_quiz(channel_id, text)
        if result['success'] and shuffled:
            shuffle_result = self.quiz_controller.shuffle(channel_id)
            if not shuffle_result['success']:
                return shuffle_result
        return result

    async def handle_quiz_text(self, interaction: discord.Interaction, text: str, shuffled: bool = False):
        """Load pasted quiz text, optionally shuffle it, and show the quiz"""
        channel_id = interaction.channel_id

        async def respond(result):
            if not result['success']:
                await self.send_error_response(interaction, result['user_message'], "❌ Quiz Not Loaded")
                return

            session = self.quiz_controller.get_session(channel_id)
            embed = build_quiz_embed(session)
            if shuffled:
                embed.title = "🔀 Shuffled Quiz"

            # Ids are renumbered by a shuffle, so look at the current session
            missing = [q.id for q in session.questions if q.id not in session.answer_key]
            if missing:
                embed.add_field(
                    name="⚠️ Missing Answer Key Entries",
                    value=f"Questions {', '.join(str(q) for q in missing)} can't be scored as correct.",
                    inline=False
                )
            if result.get('duplicate_ids'):
                duplicates = ", ".join(str(q) for q in result['duplicate_ids'])
                embed.add_field(
                    name="⚠️ Duplicate Question Numbers",
                    value=f"Numbers {duplicates} are used more than once and share one answer.",
                    inline=False
                )
            await interaction.response.send_message(embed=embed, view=QuizControlsView(self))

        await self._run_command(
            "load_quiz", interaction,
            lambda: self._load_quiz(channel_id, text, shuffled),
            respond
        )

    async def handle_sample(self, interaction: discord.Interaction):
        """Handle /sample command"""
        async def respond():
            await interaction.response.send_message(embed=build_sample_embed(), ephemeral=True)

        await self._run_with_retry("show_sample", interaction, respond)

    def _select_displayed_answer(self, channel_id: int, position: int, choice: str) -> dict:
        session = self.quiz_controller.get_session(channel_id)
        if session is not None and not 1 <= position <= session.total_questions:
            logger.warning(f"Channel {channel_id}: answer for question {position} outside 1..{session.total_questions}")
            return {
                'success': False,
                'error': f"Question {position} does not exist",
                'user_message': (f"❌ Question {position} does not exist. "
                                 f"This quiz has questions 1 to {session.total_questions}.")
            }

        # Question numbers are display positions; map them to ids
        question_id = session.questions[position - 1].id if session is not None else position
        return self.quiz_controller.select_answer(channel_id, question_id, choice)

    async def handle_answer(self, interaction: discord.Interaction, question: int, choice: str):
        """Handle /answer command"""
        async def respond(result):
            if not result['success']:
                await self.send_error_response(interaction, result['user_message'], "❌ Answer Not Recorded")
                return

            await interaction.response.send_message(
                f"✅ Question {question}: **{choice}** "
                f"({result['answered']}/{result['total_questions']} answered)",
                ephemeral=True
            )

        await self._run_command(
            "record_answer", interaction,
            lambda: self._select_displayed_answer(interaction.channel_id, question, choice),
            respond
        )

    async def handle_submit(self, interaction: discord.Interaction):
        """Handle /submit command and Submit button"""
        async def respond(result):
            if not result['success']:
                await self.send_error_response(interaction, result['user_message'], "❌ Submit Failed")
                return

            embed = build_results_embed(result['result'], self.config_manager.get_reveal_answers())
            await interaction.response.send_message(embed=embed, view=QuizControlsView(self))

        await self._run_command(
            "submit_quiz", interaction,
            lambda: self.quiz_controller.submit(interaction.channel_id),
            respond
        )

    async def _send_current_quiz(self, interaction: discord.Interaction, title: str):
        session = self.quiz_controller.get_session(interaction.channel_id)
        embed = build_quiz_embed(session)
        embed.title = title
        await interaction.response.send_message(embed=embed, view=QuizControlsView(self))

    async def handle_redo(self, interaction: discord.Interaction):
        """Handle /redo command and Redo button"""
        async def respond(result):
            if not result['success']:
                await self.send_error_response(interaction, result['user_message'], "❌ Redo Failed")
                return
            await self._send_current_quiz(interaction, "🔁 Quiz Reset")

        await self._run_command(
            "redo_quiz", interaction,
            lambda: self.quiz_controller.redo(interaction.channel_id),
            respond
        )

    async def handle_shuffle(self, interaction: discord.Interaction):
        """Handle /shuffle command and Shuffle button"""
        async def respond(result):
            if not result['success']:
                await self.send_error_response(interaction, result['user_message'], "❌ Shuffle Failed")
                return
            await self._send_current_quiz(interaction, "🔀 Quiz Shuffled")

        await self._run_command(
            "shuffle_quiz", interaction,
            lambda: self.quiz_controller.shuffle(interaction.channel_id),
            respond
        )

    async def handle_new_quiz(self, interaction: discord.Interaction):
        """Handle /new_quiz command and New Quiz button"""
        async def respond(result):
            if result['had_session']:
                message = "The quiz was cleared. Use `/quiz` to paste a new one."
            else:
                message = "There was no quiz in this channel. Use `/quiz` to paste one."
            await self.send_info_response(interaction, message, "🆕 New Quiz")

        await self._run_command(
            "start_new_quiz", interaction,
            lambda: self.quiz_controller.start_new(interaction.channel_id),
            respond
        )

    async def handle_status(self, interaction: discord.Interaction):
        """Handle /status command"""
        async def respond():
            session = self.quiz_controller.get_session(interaction.channel_id)
            if session is None:
                embed = discord.Embed(
                    title="ℹ️ No Quiz Loaded",
                    description="There is no quiz in this channel. Use `/quiz` to paste one or `/sample` to see the format.",
                    color=COLOR_QUIZ
                )
                await interaction.response.send_message(embed=embed, ephemeral=True)
                return

            embed = build_quiz_embed(session)
            embed.add_field(
                name="📊 Status",
                value=self.quiz_controller.get_session_status_summary(interaction.channel_id),
                inline=False
            )
            await interaction.response.send_message(embed=embed, view=QuizControlsView(self))

        await self._run_with_retry("show_status", interaction, respond)

    async def handle_shuffle_options(self, interaction: discord.Interaction):
        """Handle /shuffle_options command"""
        async def respond(result):
            await self._send_setting_result(interaction, result, "🔀 Shuffle Setting Updated")

        await self._run_command(
            "toggle_shuffle_options", interaction,
            self.config_manager.toggle_shuffle_options,
            respond
        )

    async def handle_reveal_answers(self, interaction: discord.Interaction):
        """Handle /reveal_answers command"""
        async def respond(result):
            await self._send_setting_result(interaction, result, "👀 Results Setting Updated")

        await self._run_command(
            "toggle_reveal_answers", interaction,
            self.config_manager.toggle_reveal_answers,
            respond
        )

    async def _send_setting_result(self, interaction: discord.Interaction, result: dict, title: str):
        if not result['success']:
            await self.send_error_response(interaction, result['user_message'], "❌ Configuration Error")
            return
        embed = discord.Embed(title=title, description=result['user_message'], color=COLOR_SUCCESS)
        await interaction.response.send_message(embed=embed)

    async def _send_embed(self, interaction: discord.Interaction, embed: discord.Embed):
        if interaction.response.is_done():
            await interaction.followup.send(embed=embed, ephemeral=True)
        else:
            await interaction.response.send_message(embed=embed, ephemeral=True)

    async def send_error_response(self, interaction: discord.Interaction, message: str, title: str = "❌ Error"):
        """Send formatted error response to user"""
        try:
            embed = discord.Embed(title=title, description=message, color=COLOR_ERROR)
            embed.set_footer(text="If this error persists, try using /help for available commands")
            await self._send_embed(interaction, embed)
        except discord.HTTPException:
            logger.error("Failed to send error response to user")

    async def send_info_response(self, interaction: discord.Interaction, message: str, title: str = "ℹ️ Information"):
        """Send formatted info response to user"""
        try:
            embed = discord.Embed(title=title, description=message, color=COLOR_QUIZ)
            await self._send_embed(interaction, embed)
        except discord.HTTPException:
            logger.error("Failed to send info response to user")


async def run_bot(token=None, config=None):
    """Run the bot with proper error handling"""
    if not token:
        token = os.getenv('DISCORD_BOT_TOKEN')

    if not token:
        logger.error("No Discord bot token provided")
        return

    bot = QuizBot(config)

    try:
        logger.info("Starting Text Quiz Bot...")
        await bot.start(token)
    except discord.LoginFailure:
        logger.error("Invalid bot token provided")
    except discord.HTTPException as e:
        logger.error(f"HTTP error occurred: {e}")
    finally:
        if not bot.is_closed():
            await bot.close()
