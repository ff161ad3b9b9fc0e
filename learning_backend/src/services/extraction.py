import json
import re
from typing import Any, Optional


class _NotFound:
    """Sentinel type for text that holds no parseable JSON value."""

    _instance: Optional["_NotFound"] = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


# JSON null parses to None, so absence needs its own marker.
NOT_FOUND = _NotFound()

# Any ``` block: group 1 is the language tag (possibly empty), group 2 the interior.
_FENCED_BLOCK_REGEX = re.compile(r"```[ \t]*([\w+.-]*)[ \t]*\r?\n?(.*?)```", re.DOTALL)

# Blocks tagged with anything else (python, c, ...) are never parsed.
_DATA_BLOCK_TAGS = ("", "json")


def _parse_json(candidate: str) -> Any:
    """Strictly parse a candidate string, returning NOT_FOUND on any decode error."""
    candidate = candidate.strip()
    if not candidate:
        return NOT_FOUND
    try:
        return json.loads(candidate)
    except ValueError:
        return NOT_FOUND


def _from_fenced_block(text: str) -> Any:
    for match in _FENCED_BLOCK_REGEX.finditer(text):
        if match.group(1).strip().lower() in _DATA_BLOCK_TAGS:
            return _parse_json(match.group(2))
    return NOT_FOUND


def _from_brace_span(text: str) -> Any:
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        return NOT_FOUND
    return _parse_json(text[start : end + 1])


# PUBLIC_INTERFACE
def extract_structured(text: Optional[str]) -> Any:
    """
    Pull a single JSON value out of free-form model output.

    Strategies, first success wins:
        1. The first fenced code block that is untagged or tagged json,
           parsed strictly. Blocks in other languages are skipped.
        2. The span from the first '{' to the last '}' in the whole text.

    Malformed JSON (trailing commas, unquoted keys, ...) is not repaired; it
    simply fails the strategy. Bracket balancing is left to the JSON parser.

    Args:
        text: Raw oracle output. None or empty text yields NOT_FOUND.

    Returns:
        The parsed value (dict, list, str, number, bool or None), or NOT_FOUND.
    """
    if not text:
        return NOT_FOUND

    value = _from_fenced_block(text)
    if value is not NOT_FOUND:
        return value
    return _from_brace_span(text)


def is_found(value: Any) -> bool:
    """True when value is an extraction result rather than the NOT_FOUND sentinel."""
    return value is not NOT_FOUND
