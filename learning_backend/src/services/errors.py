from typing import Optional


class GenerationError(Exception):
    """Base class for failures surfaced to callers of the generation service."""

    kind = "generation"


# PUBLIC_INTERFACE
class ConfigurationError(GenerationError):
    """Required oracle credential or endpoint is missing; no request was attempted."""

    kind = "configuration"


class OracleError(GenerationError):
    """Base class for failures while calling the text completion oracle."""

    kind = "oracle"


# PUBLIC_INTERFACE
class OracleTransportError(OracleError):
    """Network-level failure (connection refused, DNS, timeout) calling the oracle."""

    kind = "transport"


# PUBLIC_INTERFACE
class OracleRejectionError(OracleError):
    """The oracle answered, but with a non-success status or an unusable payload."""

    kind = "rejection"

    def __init__(self, message: str, status_code: Optional[int] = None, body: Optional[str] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


# PUBLIC_INTERFACE
class StageFailure(GenerationError):
    """
    Classified top-level failure of one generation stage.

    Attributes:
        stage: "notes" or "quiz".
        kind: classification copied from the underlying oracle error
              ("transport" or "rejection").
        detail: human-readable description of the failure.
        notes: NotesRecord already obtained before a quiz-stage failure, else None.
    """

    def __init__(self, stage: str, cause: OracleError, notes=None) -> None:
        self.stage = stage
        self.kind = cause.kind
        self.detail = str(cause)
        self.cause = cause
        self.notes = notes
        super().__init__(f"{stage} stage failed ({self.kind}): {self.detail}")
