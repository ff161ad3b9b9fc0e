import enum
import json
from collections.abc import Mapping
from typing import Any, List, Tuple

from src.services.extraction import NOT_FOUND
from src.services.records import NotesRecord, QuestionRecord, QuizRecord

MAX_OPTIONS = 26
MISSING_PROMPT = "Question text unavailable"

# Lettered option mappings are read in this order before any other keys.
_LETTER_ORDER = ("A", "B", "C", "D")

_TITLE_FIELDS = ("title",)
_SUMMARY_FIELDS = ("summary", "tl;dr", "tldr")
_BODY_FIELDS = ("body_markdown", "bodyMarkdown", "body_md", "body")
_QUESTIONS_FIELDS = ("questions",)

_ID_FIELDS = ("id",)
_ANSWER_FIELDS = ("answer_key", "answerKey", "answer", "correct", "correct_option", "correctOption")
_EXPLANATION_FIELDS = ("explanation", "explain")
_OPTIONS_FIELDS = ("options", "choices")


class InputDialect(enum.Enum):
    """Accepted external shapes of a single quiz question."""
    SEQUENCE = "sequence"                # {"prompt"|"q": ..., "options": [..]}
    LETTERED_MAPPING = "lettered"        # {"question": ..., "options": {"A": .., "B": ..}}
    LOOSE = "loose"                      # anything else, best effort


# Where each dialect reads its prompt from. Options, answer and explanation
# share the field names in the tables above.
_PROMPT_FIELDS = {
    InputDialect.SEQUENCE: ("prompt", "q", "question"),
    InputDialect.LETTERED_MAPPING: ("question",),
    InputDialect.LOOSE: ("prompt", "q", "question", "text", "stem"),
}


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple))


def _pick(source: Mapping, names: Tuple[str, ...]) -> Any:
    """Return the first value under any of names that is neither None nor an empty string."""
    for name in names:
        value = source.get(name)
        if value is None or value == "":
            continue
        return value
    return None


def _as_text(value: Any) -> str:
    """Coerce a parsed value to text; structured values become JSON, never dropped."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False, indent=2)
    return str(value)


def _option_text(option: Any) -> str:
    # {"id": "c1", "text": "..."} style choices
    if isinstance(option, Mapping) and isinstance(option.get("text"), str):
        return option["text"]
    return _as_text(option)


def lettered_options(mapping: Mapping) -> List[Any]:
    """
    Turn a letter-keyed option mapping into an ordered list of its values.

    Keys A, B, C, D come first in that fixed order, followed by all other keys
    in their original order.
    """
    ordered = [mapping[letter] for letter in _LETTER_ORDER if letter in mapping]
    ordered.extend(v for k, v in mapping.items() if k not in _LETTER_ORDER)
    return ordered


def _finish_options(raw: List[Any]) -> Tuple[str, ...]:
    return tuple(_option_text(o) for o in raw[:MAX_OPTIONS])


# PUBLIC_INTERFACE
def resolve_dialect(element: Any) -> InputDialect:
    """Decide which input dialect a raw question element is written in."""
    if not isinstance(element, Mapping):
        return InputDialect.LOOSE
    if any(_is_sequence(element.get(name)) for name in _OPTIONS_FIELDS):
        return InputDialect.SEQUENCE
    if element.get("question") is not None:
        return InputDialect.LETTERED_MAPPING
    return InputDialect.LOOSE


def _options_for(element: Mapping, dialect: InputDialect) -> Tuple[str, ...]:
    if dialect is InputDialect.SEQUENCE:
        for name in _OPTIONS_FIELDS:
            if _is_sequence(element.get(name)):
                return _finish_options(list(element[name]))

    raw = _pick(element, _OPTIONS_FIELDS)
    if isinstance(raw, Mapping):
        # Only the lettered dialect reorders keys; loose elements keep insertion order.
        if dialect is InputDialect.LETTERED_MAPPING:
            return _finish_options(lettered_options(raw))
        return _finish_options(list(raw.values()))
    if _is_sequence(raw):
        return _finish_options(list(raw))
    return ()


# PUBLIC_INTERFACE
def normalize_question(element: Any, position: int) -> QuestionRecord:
    """
    Normalize one raw question element into a QuestionRecord.

    Args:
        element: Parsed question in any accepted dialect (or any other value).
        position: 1-based position in the quiz, used to synthesize a missing id.

    Returns:
        QuestionRecord in canonical shape.
    """
    dialect = resolve_dialect(element)
    fallback_id = f"q{position}"

    if not isinstance(element, Mapping):
        prompt = _as_text(element) if element not in (None, "") else MISSING_PROMPT
        return QuestionRecord(id=fallback_id, prompt=prompt)

    raw_id = _pick(element, _ID_FIELDS)
    raw_prompt = _pick(element, _PROMPT_FIELDS[dialect])
    raw_answer = _pick(element, _ANSWER_FIELDS)

    return QuestionRecord(
        id=_as_text(raw_id) if raw_id is not None else fallback_id,
        prompt=_as_text(raw_prompt) if raw_prompt is not None else MISSING_PROMPT,
        options=_options_for(element, dialect),
        answer_key=_as_text(raw_answer) if raw_answer is not None else None,
        explanation=_as_text(_pick(element, _EXPLANATION_FIELDS)),
    )


def _unwrap(value: Any, key: str, own_fields: Tuple[str, ...]) -> Any:
    # Combined {"notes": {...}, "quiz": {...}} payloads carry each record under its own key.
    if isinstance(value, Mapping) and not any(f in value for f in own_fields):
        inner = value.get(key)
        if isinstance(inner, Mapping):
            return inner
    return value


def notes_fallback_title(topic: str) -> str:
    return f"{topic} — notes"


def quiz_fallback_title(topic: str) -> str:
    return f"{topic} — quiz"


# PUBLIC_INTERFACE
def normalize_notes(value: Any, fallback_raw_text: str, topic: str) -> NotesRecord:
    """
    Coerce an extraction result into a NotesRecord. Never raises.

    When nothing usable was extracted the record is degraded: the whole raw
    oracle output becomes the body so nothing is lost.
    """
    value = _unwrap(value, "notes", _TITLE_FIELDS + _BODY_FIELDS)
    if value is NOT_FOUND or not isinstance(value, Mapping):
        return NotesRecord(
            title=notes_fallback_title(topic),
            summary="",
            body_markdown=fallback_raw_text or "",
        )

    title = _pick(value, _TITLE_FIELDS)
    return NotesRecord(
        title=_as_text(title) if title is not None else notes_fallback_title(topic),
        summary=_as_text(_pick(value, _SUMMARY_FIELDS)),
        body_markdown=_as_text(_pick(value, _BODY_FIELDS)),
    )


def _question_elements(raw: Any) -> List[Any]:
    if raw is None:
        return []
    if _is_sequence(raw):
        return list(raw)
    if isinstance(raw, Mapping):
        return list(raw.values())
    return []


# PUBLIC_INTERFACE
def normalize_quiz(value: Any, fallback_raw_text: str, topic: str) -> QuizRecord:
    """
    Coerce an extraction result into a QuizRecord. Never raises.

    Accepts a mapping with a "questions" list or keyed mapping, or a bare
    top-level list of questions. Anything else degrades to an empty quiz
    whose raw_text keeps the original oracle output.
    """
    value = _unwrap(value, "quiz", _TITLE_FIELDS + _QUESTIONS_FIELDS)
    if _is_sequence(value):
        value = {"questions": value}
    if value is NOT_FOUND or not isinstance(value, Mapping):
        return QuizRecord(title=quiz_fallback_title(topic), questions=(), raw_text=fallback_raw_text or "")

    title = _pick(value, _TITLE_FIELDS)
    elements = _question_elements(value.get("questions"))
    questions = tuple(normalize_question(el, idx) for idx, el in enumerate(elements, start=1))
    return QuizRecord(
        title=_as_text(title) if title is not None else quiz_fallback_title(topic),
        questions=questions,
    )
