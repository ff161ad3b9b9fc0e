"""
Tests for the chat-completions oracle client, with the network stubbed by httpx.MockTransport.
"""
import json

import httpx
import pytest

from src.config import OracleSettings, load_oracle_settings
from src.services.errors import ConfigurationError, OracleRejectionError, OracleTransportError
from src.services.extraction import extract_structured
from src.services.normalizer import normalize_notes, normalize_quiz
from src.services.oracle import ChatCompletionsOracle, SampleOracle, build_oracle
from src.services.prompts import SYSTEM_INSTRUCTION, is_quiz_prompt, notes_prompt, quiz_prompt

SETTINGS = OracleSettings(api_key="sk-test", base_url="https://llm.example/v1", model="test-model", timeout_seconds=5)


def _completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.mark.asyncio
async def test_complete_sends_chat_request():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion('{"title": "ok"}'))

    oracle = ChatCompletionsOracle(SETTINGS, transport=httpx.MockTransport(handler))
    text = await oracle.complete("system", "user")

    assert text == '{"title": "ok"}'
    assert seen["url"] == "https://llm.example/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "system"},
        {"role": "user", "content": "user"},
    ]


@pytest.mark.asyncio
async def test_non_success_status_is_rejection():
    transport = httpx.MockTransport(lambda request: httpx.Response(401, text="invalid api key"))
    oracle = ChatCompletionsOracle(SETTINGS, transport=transport)

    with pytest.raises(OracleRejectionError) as excinfo:
        await oracle.complete("s", "u")

    assert excinfo.value.status_code == 401
    assert excinfo.value.body == "invalid api key"
    assert excinfo.value.kind == "rejection"


@pytest.mark.asyncio
async def test_missing_completion_is_rejection():
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []}))
    oracle = ChatCompletionsOracle(SETTINGS, transport=transport)

    with pytest.raises(OracleRejectionError):
        await oracle.complete("s", "u")


@pytest.mark.asyncio
async def test_connection_error_is_transport_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    oracle = ChatCompletionsOracle(SETTINGS, transport=httpx.MockTransport(handler))

    with pytest.raises(OracleTransportError) as excinfo:
        await oracle.complete("s", "u")
    assert "connection refused" in str(excinfo.value)


@pytest.mark.asyncio
async def test_timeout_is_transport_failure():
    def handler(request):
        raise httpx.ReadTimeout("read timed out", request=request)

    oracle = ChatCompletionsOracle(SETTINGS, transport=httpx.MockTransport(handler))

    with pytest.raises(OracleTransportError) as excinfo:
        await oracle.complete("s", "u")
    assert "timed out" in str(excinfo.value)


def test_missing_api_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        ChatCompletionsOracle(OracleSettings(api_key=""))


class TestSampleOracle:

    @pytest.mark.asyncio
    async def test_sample_notes_decode(self):
        raw = await SampleOracle().complete(SYSTEM_INSTRUCTION, notes_prompt("Buffer overflow"))
        notes = normalize_notes(extract_structured(raw), raw, "Buffer overflow")
        assert notes.title == "TEST: Buffer Overflow (sample)"
        assert notes.summary == "This is a test response."

    @pytest.mark.asyncio
    async def test_sample_quiz_decode(self):
        raw = await SampleOracle().complete(SYSTEM_INSTRUCTION, quiz_prompt("Buffer overflow", "notes"))
        quiz = normalize_quiz(extract_structured(raw), raw, "Buffer overflow")
        assert quiz.title == "TEST Quiz"
        assert quiz.questions[0].options == ("One", "Two", "Three", "Four")
        assert quiz.questions[0].answer_key == "A"

    @pytest.mark.asyncio
    async def test_topic_mentioning_quiz_still_gets_notes(self):
        raw = await SampleOracle().complete(SYSTEM_INSTRUCTION, notes_prompt("Write a multiple-choice quiz"))
        assert "TEST: Buffer Overflow (sample)" in raw

    def test_stage_detection_follows_prompt_builders(self):
        assert is_quiz_prompt(quiz_prompt("XSS", "notes body"))
        assert not is_quiz_prompt(notes_prompt("XSS"))


class TestSettings:

    def test_defaults(self):
        settings = load_oracle_settings({})
        assert settings.mode == "openai"
        assert settings.api_key == ""
        assert settings.base_url == "https://api.openai.com/v1"
        assert settings.timeout_seconds == 60.0

    def test_values_from_env(self):
        settings = load_oracle_settings(
            {
                "ORACLE_MODE": "Sample",
                "OPENAI_API_KEY": " sk-x ",
                "OPENAI_BASE_URL": "http://localhost:11434/v1/",
                "OPENAI_MODEL": "llama3",
                "ORACLE_TIMEOUT_SECONDS": "12.5",
            }
        )
        assert settings.mode == "sample"
        assert settings.api_key == "sk-x"
        assert settings.base_url == "http://localhost:11434/v1"
        assert settings.model == "llama3"
        assert settings.timeout_seconds == 12.5

    @pytest.mark.parametrize("env", [{"ORACLE_MODE": "magic"}, {"ORACLE_TIMEOUT_SECONDS": "soon"}])
    def test_invalid_values(self, env):
        with pytest.raises(ConfigurationError):
            load_oracle_settings(env)

    @pytest.mark.parametrize(
        "base_url",
        ["api.openai.com/v1", "http://localhost:abc/v1", "ftp://llm.example/v1", "https:///v1"],
    )
    def test_malformed_endpoint_is_configuration_error(self, base_url):
        settings = load_oracle_settings({"OPENAI_API_KEY": "sk-x", "OPENAI_BASE_URL": base_url})
        with pytest.raises(ConfigurationError) as excinfo:
            build_oracle(settings)
        assert "OPENAI_BASE_URL" in str(excinfo.value)

    @pytest.mark.parametrize("base_url", ["http://localhost:11434/v1", "https://llm.example/v1"])
    def test_valid_endpoint_is_accepted(self, base_url):
        settings = OracleSettings(api_key="sk-x", base_url=base_url)
        settings.require_credentials()
        assert ChatCompletionsOracle(settings).endpoint == f"{base_url}/chat/completions"

    def test_build_oracle_by_mode(self):
        assert isinstance(build_oracle(OracleSettings(mode="sample")), SampleOracle)
        assert isinstance(build_oracle(SETTINGS), ChatCompletionsOracle)
        with pytest.raises(ConfigurationError):
            build_oracle(OracleSettings(mode="openai"))
