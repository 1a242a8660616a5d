"""Topic-grouped multiple-choice quizzes for the terminal."""

__version__ = "0.1.0"
