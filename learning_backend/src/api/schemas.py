from typing import List, Optional
from pydantic import BaseModel, Field

from src.services.markdown import markdown_to_html
from src.services.records import GenerationResult, NotesRecord, QuestionRecord, QuizRecord


def option_labels(count: int) -> List[str]:
    """Display labels by position: A, B, C, ..."""
    return [chr(ord("A") + i) for i in range(count)]


# PUBLIC_INTERFACE
class GenerateIn(BaseModel):
    """Input model for generating notes and a quiz."""
    topic: Optional[str] = Field(default=None, description="Topic to study. Blank uses the default topic.")


# PUBLIC_INTERFACE
class NotesOut(BaseModel):
    """Study notes payload."""
    kind: str = Field(default="notes", description="Always 'notes'.")
    title: str = Field(..., description="Title of the notes.")
    summary: str = Field(..., description="Short summary (tl;dr). May be empty.")
    body_markdown: str = Field(..., description="Notes body as Markdown, or the raw model output when it was unparseable.")
    body_html: str = Field(..., description="body_markdown rendered as light, escaped HTML.")

    @classmethod
    def from_record(cls, notes: NotesRecord) -> "NotesOut":
        return cls(
            title=notes.title,
            summary=notes.summary,
            body_markdown=notes.body_markdown,
            body_html=markdown_to_html(notes.body_markdown),
        )


# PUBLIC_INTERFACE
class QuestionOut(BaseModel):
    """A single multiple-choice question."""
    id: str = Field(..., description="Question identifier, 'q1', 'q2', ... when the model gave none.")
    prompt: str = Field(..., description="Question prompt text.")
    options: List[str] = Field(default_factory=list, description="Answer options in display order (usually 4).")
    labels: List[str] = Field(default_factory=list, description="Display label for each option: A, B, C, ...")
    answer_key: Optional[str] = Field(default=None, description="Correct answer as given by the model, usually a letter.")
    explanation: str = Field(default="", description="Why the answer is correct.")

    @classmethod
    def from_record(cls, question: QuestionRecord) -> "QuestionOut":
        return cls(
            id=question.id,
            prompt=question.prompt,
            options=list(question.options),
            labels=option_labels(len(question.options)),
            answer_key=question.answer_key,
            explanation=question.explanation,
        )


# PUBLIC_INTERFACE
class QuizOut(BaseModel):
    """Quiz payload."""
    kind: str = Field(default="quiz", description="Always 'quiz'.")
    title: str = Field(..., description="Title of the quiz.")
    questions: List[QuestionOut] = Field(default_factory=list, description="Questions in order. Empty when the model output was unparseable.")
    raw_text: Optional[str] = Field(default=None, description="Unparsed model output, present only when the quiz could not be decoded.")

    @classmethod
    def from_record(cls, quiz: QuizRecord) -> "QuizOut":
        return cls(
            title=quiz.title,
            questions=[QuestionOut.from_record(q) for q in quiz.questions],
            raw_text=quiz.raw_text,
        )


# PUBLIC_INTERFACE
class GenerationOut(BaseModel):
    """Full result of one generation request."""
    notes: NotesOut
    quiz: QuizOut

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GenerationOut":
        return cls(notes=NotesOut.from_record(result.notes), quiz=QuizOut.from_record(result.quiz))


# PUBLIC_INTERFACE
class ErrorDetail(BaseModel):
    """Classified failure returned in the 'detail' field of error responses."""
    kind: str = Field(..., description="'configuration', 'transport' or 'rejection'.")
    stage: Optional[str] = Field(default=None, description="'notes' or 'quiz' for oracle failures.")
    message: str = Field(..., description="Human-readable description.")
    notes: Optional[NotesOut] = Field(default=None, description="Notes obtained before a quiz-stage failure.")
