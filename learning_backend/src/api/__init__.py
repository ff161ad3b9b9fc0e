"""
API package initialization.

Exports shared schema models for external use.
"""

# Re-export commonly used schema models
from .schemas import GenerateIn, NotesOut, QuestionOut, QuizOut, GenerationOut, ErrorDetail  # noqa: F401
