from .dataset import (
    Question,
    QuizDataset,
    Topic,
    load_dataset,
    load_default_dataset,
    parse_dataset,
)
from .errors import DatasetError, QuestionOutOfRange, QuizError
from .indexer import QuestionIndexer
from .navigator import (
    KeyBinding,
    KeyDispatcher,
    KeyboardNavigator,
    KeyMap,
    NavKey,
)
from .scoring import ScoreTracker
from .session import QuizPhase, QuizSession, SessionSnapshot, SubmitResult
from .validator import NO_ANSWER_MESSAGE, AnswerValidator, OptionFeedback

__all__ = [
    "Question",
    "QuizDataset",
    "Topic",
    "load_dataset",
    "load_default_dataset",
    "parse_dataset",
    "DatasetError",
    "QuestionOutOfRange",
    "QuizError",
    "QuestionIndexer",
    "KeyBinding",
    "KeyDispatcher",
    "KeyboardNavigator",
    "KeyMap",
    "NavKey",
    "ScoreTracker",
    "QuizPhase",
    "QuizSession",
    "SessionSnapshot",
    "SubmitResult",
    "NO_ANSWER_MESSAGE",
    "AnswerValidator",
    "OptionFeedback",
]
