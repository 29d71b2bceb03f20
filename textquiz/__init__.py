"""
Text Quiz Bot: run plain-text quizzes in Discord.
"""
