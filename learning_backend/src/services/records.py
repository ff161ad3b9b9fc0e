from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class QuestionRecord:
    """A single multiple-choice question in canonical shape."""
    id: str
    prompt: str
    options: Tuple[str, ...] = ()
    answer_key: Optional[str] = None
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "prompt": self.prompt,
            "options": list(self.options),
            "answer_key": self.answer_key,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class NotesRecord:
    """Study notes; body_markdown is always a string."""
    title: str
    summary: str
    body_markdown: str
    kind: str = field(default="notes", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "summary": self.summary,
            "body_markdown": self.body_markdown,
        }


@dataclass(frozen=True)
class QuizRecord:
    """
    A titled, ordered sequence of questions.

    raw_text holds the unparsed oracle output when extraction failed. It is a
    diagnostic aid only and is left out of to_dict().
    """
    title: str
    questions: Tuple[QuestionRecord, ...] = ()
    raw_text: Optional[str] = None
    kind: str = field(default="quiz", init=False)

    @property
    def degraded(self) -> bool:
        return self.raw_text is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "title": self.title,
            "questions": [q.to_dict() for q in self.questions],
        }


@dataclass(frozen=True)
class GenerationResult:
    """Successful outcome of one generate() call."""
    notes: NotesRecord
    quiz: QuizRecord

    def to_dict(self) -> Dict[str, Any]:
        return {"notes": self.notes.to_dict(), "quiz": self.quiz.to_dict()}
