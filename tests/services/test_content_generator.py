import asyncio
from types import SimpleNamespace

import anthropic
import httpx
import pytest
from tenacity import wait_none

from campaign_service.core.exceptions import GenerationFailure, GeneratorUnavailableError
from campaign_service.services import content_generator
from campaign_service.services.content_generator import AIContentGenerator, extract_json

ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"


def reply(text):
    return SimpleNamespace(content=[SimpleNamespace(type="text", text=text)])


class ScriptedMessages:
    """Stands in for `client.messages`; each call pops the next outcome."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def make_generator(outcomes):
    generator = AIContentGenerator(api_key="test-key", model="test-model")
    messages = ScriptedMessages(outcomes)
    generator.client = SimpleNamespace(messages=messages)
    return generator, messages


@pytest.fixture(autouse=True)
def no_backoff(monkeypatch):
    monkeypatch.setattr(content_generator, "wait_exponential", lambda **kwargs: wait_none())


def generate(generator, **kwargs):
    return asyncio.run(
        generator.generate_json(system_prompt="system", user_prompt="user", **kwargs)
    )


class TestExtractJson:
    def test_plain_json(self):
        assert extract_json('[{"content": "hi"}]') == [{"content": "hi"}]

    def test_fenced_json_block(self):
        text = 'Here you go:\n```json\n[{"content": "hi"}]\n```\nEnjoy!'
        assert extract_json(text) == [{"content": "hi"}]

    def test_unlabelled_fence(self):
        assert extract_json('```\n{"a": 1}\n```') == {"a": 1}

    def test_garbage_is_a_generation_failure(self):
        with pytest.raises(GenerationFailure):
            extract_json("Sorry, I cannot help with that.")


def test_missing_api_key_disables_generation(monkeypatch):
    monkeypatch.setattr(content_generator.settings, "ANTHROPIC_API_KEY", None)
    generator = AIContentGenerator()

    assert not generator.is_available()
    with pytest.raises(GeneratorUnavailableError):
        generate(generator)


def test_request_carries_prompts_and_sampling_settings():
    generator, messages = make_generator([reply('[{"content": "x"}]')])

    assert generate(generator, max_tokens=1536, temperature=0.8) == [{"content": "x"}]

    call = messages.calls[0]
    assert call["system"] == "system"
    assert call["messages"] == [{"role": "user", "content": "user"}]
    assert (call["max_tokens"], call["temperature"], call["model"]) == (1536, 0.8, "test-model")


def test_transient_errors_are_retried():
    request = httpx.Request("POST", ANTHROPIC_URL)
    generator, messages = make_generator(
        [anthropic.APIConnectionError(request=request), reply('[{"content": "ok"}]')]
    )

    assert generate(generator, max_retries=2) == [{"content": "ok"}]
    assert len(messages.calls) == 2


def test_unparseable_reply_is_retried_then_fails():
    generator, messages = make_generator([reply("nope"), reply("still nope"), reply("no")])

    with pytest.raises(GenerationFailure):
        generate(generator, max_retries=2)
    assert len(messages.calls) == 3


def test_bad_request_is_not_retried():
    request = httpx.Request("POST", ANTHROPIC_URL)
    response = httpx.Response(400, request=request)
    error = anthropic.BadRequestError("bad prompt", response=response, body=None)
    generator, messages = make_generator([error, reply("[]")])

    with pytest.raises(GenerationFailure):
        generate(generator, max_retries=2)
    assert len(messages.calls) == 1
