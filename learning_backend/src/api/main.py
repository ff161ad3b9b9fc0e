import logging
import os
from functools import lru_cache

from fastapi import Depends, FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

from src.config import cors_origins, load_oracle_settings
from src.services.errors import ConfigurationError, StageFailure
from src.services.generator import GenerationOrchestrator
from src.services.oracle import build_oracle
from src.api.schemas import ErrorDetail, GenerateIn, GenerationOut, NotesOut

# Load environment variables from a .env file if present
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger(__name__)

openapi_tags = [
    {"name": "System", "description": "System and service endpoints"},
    {"name": "Generation", "description": "Study notes and quiz generation"},
]

app = FastAPI(
    title="Learning Engine Backend",
    description="Generates study notes and a multiple-choice quiz for a topic using a language model.",
    version="0.1.0",
    openapi_tags=openapi_tags,
)

# CORS configuration to allow frontend integration (adjust origins in env if needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_STAGE_FAILURE_STATUS = status.HTTP_502_BAD_GATEWAY


@lru_cache(maxsize=1)
def _get_orchestrator_singleton() -> GenerationOrchestrator:
    """
    Internal cached constructor for the orchestrator. Settings come from the
    environment (ORACLE_MODE, OPENAI_API_KEY, OPENAI_BASE_URL, OPENAI_MODEL,
    ORACLE_TIMEOUT_SECONDS). Failures are not cached, so fixing the
    environment takes effect on the next request.
    """
    settings = load_oracle_settings()
    logger.info("Using %s oracle (model=%s)", settings.mode, settings.model)
    return GenerationOrchestrator(build_oracle(settings))


# PUBLIC_INTERFACE
def get_orchestrator() -> GenerationOrchestrator:
    """Return the shared orchestrator, or fail with 500 when the oracle is misconfigured."""
    try:
        return _get_orchestrator_singleton()
    except ConfigurationError as e:
        logger.error("Oracle misconfigured: %s", e)
        detail = ErrorDetail(kind=e.kind, message=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail.model_dump())


@app.get("/", summary="Health Check", tags=["System"])
def health_check():
    """
    Health check endpoint.

    Returns:
        JSON payload with a simple 'Healthy' message and the configured oracle mode.
    """
    mode = os.getenv("ORACLE_MODE") or "openai"
    return {"message": "Healthy", "oracle_mode": mode}


@app.post(
    "/api/generate",
    response_model=GenerationOut,
    summary="Generate study notes and a quiz",
    description="Asks the language model for notes on the topic, then for an 8-question quiz grounded on those notes.",
    tags=["Generation"],
    responses={
        500: {"model": ErrorDetail, "description": "Oracle misconfigured"},
        502: {"model": ErrorDetail, "description": "Oracle unreachable or rejected the request"},
    },
)
async def generate(
    payload: GenerateIn,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerationOut:
    """
    Generate notes and a quiz for a topic.

    Args:
        payload: Pydantic model containing the topic (blank means the default topic).

    Returns:
        GenerationOut: Notes and quiz. Unparseable model output still yields a
        valid payload (raw notes body and/or an empty question list).

    Raises:
        HTTPException 502 if the oracle could not be reached or rejected a request.
    """
    try:
        result = await orchestrator.generate(payload.topic)
    except StageFailure as e:
        detail = ErrorDetail(
            kind=e.kind,
            stage=e.stage,
            message=e.detail,
            notes=NotesOut.from_record(e.notes) if e.notes is not None else None,
        )
        raise HTTPException(status_code=_STAGE_FAILURE_STATUS, detail=detail.model_dump())
    return GenerationOut.from_result(result)
