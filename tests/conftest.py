"""
Pytest configuration and shared fixtures.
"""
import json
from typing import List, Tuple, Union

import pytest

from src.services.errors import OracleError


class FakeOracle:
    """
    Scripted oracle: returns (or raises) the queued replies in order and
    records every prompt it was given.
    """

    def __init__(self, *replies: Union[str, OracleError]) -> None:
        self.replies = list(replies)
        self.calls: List[Tuple[str, str]] = []

    async def complete(self, system_instruction: str, user_prompt: str) -> str:
        self.calls.append((system_instruction, user_prompt))
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture
def fake_oracle_factory():
    return FakeOracle


@pytest.fixture
def notes_reply():
    """Notes reply wrapped in prose and a json fence."""
    payload = {
        "type": "study_notes",
        "title": "SQLi",
        "tl;dr": "short",
        "body_md": "# SQLi\n...",
    }
    return "Here you go:\n```json\n" + json.dumps(payload) + "\n```"


@pytest.fixture
def quiz_reply():
    payload = {
        "type": "quiz",
        "title": "SQLi Quiz",
        "questions": [
            {
                "question": "What does SQLi target?",
                "options": {"A": "The database", "B": "The CPU", "C": "The GPU", "D": "The NIC"},
                "answer": "A",
                "explanation": "Injected SQL runs against the database.",
            },
            {
                "id": "custom",
                "q": "Best defence?",
                "options": ["Parameterized queries", "Longer passwords", "Firewalls", "CAPTCHAs"],
                "correct": "A",
                "explain": "Parameters keep data out of the query structure.",
            },
        ],
    }
    return json.dumps(payload)
