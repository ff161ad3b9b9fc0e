import logging
from typing import Callable, Optional, TypeVar

from src.services.errors import OracleError, StageFailure
from src.services.extraction import extract_structured, is_found
from src.services.normalizer import normalize_notes, normalize_quiz
from src.services.oracle import TextCompletionOracle
from src.services.prompts import SYSTEM_INSTRUCTION, notes_prompt, quiz_prompt
from src.services.records import GenerationResult, NotesRecord, QuizRecord

logger = logging.getLogger(__name__)

DEFAULT_TOPIC = "Buffer overflow"

RecordT = TypeVar("RecordT")


# PUBLIC_INTERFACE
def decode_response(raw_text: str, normalize: Callable[..., RecordT], topic: str) -> RecordT:
    """
    Decode raw oracle text into a domain record.

    Extraction and normalization are shared by every stage; only the
    normalization function differs. Malformed output never raises here, it
    yields a degraded record instead.

    Args:
        raw_text: Text returned by the oracle.
        normalize: normalize_notes or normalize_quiz.
        topic: Topic used for fallback titles.

    Returns:
        The record produced by normalize.
    """
    value = extract_structured(raw_text)
    if not is_found(value):
        logger.warning("No JSON found in oracle output for topic '%s' (%d chars); degrading", topic, len(raw_text or ""))
    return normalize(value, raw_text, topic)


def resolve_topic(topic: Optional[str]) -> str:
    """Return the stripped topic, or DEFAULT_TOPIC when it is blank."""
    topic = (topic or "").strip()
    return topic or DEFAULT_TOPIC


class GenerationOrchestrator:
    """
    Produces study notes and a quiz grounded on them for one topic.

    The orchestrator keeps no state besides its oracle, so a single instance
    can be shared across concurrent requests.
    """

    # PUBLIC_INTERFACE
    def __init__(self, oracle: TextCompletionOracle) -> None:
        self.oracle = oracle

    async def _ask(self, stage: str, prompt: str, notes: Optional[NotesRecord] = None) -> str:
        logger.info("Requesting %s from oracle", stage)
        try:
            return await self.oracle.complete(SYSTEM_INSTRUCTION, prompt)
        except OracleError as e:
            logger.error("Oracle failed during %s stage: %s", stage, e)
            raise StageFailure(stage, e, notes=notes) from e

    # PUBLIC_INTERFACE
    async def generate_notes(self, topic: str) -> NotesRecord:
        raw = await self._ask("notes", notes_prompt(topic))
        return decode_response(raw, normalize_notes, topic)

    # PUBLIC_INTERFACE
    async def generate_quiz(self, topic: str, notes: NotesRecord) -> QuizRecord:
        raw = await self._ask("quiz", quiz_prompt(topic, notes.body_markdown), notes=notes)
        return decode_response(raw, normalize_quiz, topic)

    # PUBLIC_INTERFACE
    async def generate(self, topic: Optional[str]) -> GenerationResult:
        """
        Generate notes, then a quiz seeded with the notes body.

        Args:
            topic: Subject to study; blank means DEFAULT_TOPIC.

        Returns:
            GenerationResult with both records, possibly degraded.

        Raises:
            StageFailure: the oracle was unreachable or rejected a request.
                A quiz-stage failure carries the notes already obtained.
        """
        topic = resolve_topic(topic)
        notes = await self.generate_notes(topic)
        quiz = await self.generate_quiz(topic, notes)
        logger.info("Generated notes and %d questions for '%s'", len(quiz.questions), topic)
        return GenerationResult(notes=notes, quiz=quiz)
