"""Database model exports."""

from .mistake import QuestionMistake
from .record import GlobalRecord

__all__ = [
    "GlobalRecord",
    "QuestionMistake",
]
