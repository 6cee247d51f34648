"""
Unit tests for TranslationClient and prompt construction.
"""
from unittest.mock import AsyncMock

import pytest

from erbify.core.exceptions import ServiceError, ServiceResponseError, ServiceAuthenticationError
from erbify.core.llm.base import LLMProvider, LLMResponse
from erbify.core.llm.client import TranslationClient
from erbify.prompts import SYSTEM_PROMPT, generate_conversion_prompt
from erbify.utils.unified_logger import UnifiedLogger, LogLevel


class FakeProvider(LLMProvider):
    """Provider returning canned answers and recording prompts."""

    def __init__(self, answer="<p>hi</p>", error=None):
        super().__init__("fake-model")
        self.answer = answer
        self.error = error
        self.prompts = []

    async def generate(self, prompt, system_prompt=None):
        self.prompts.append((prompt, system_prompt))
        if self.error:
            raise self.error
        return LLMResponse(content=self.answer, prompt_tokens=3, completion_tokens=2,
                           finish_reason="STOP")


@pytest.fixture
def debug_entries():
    return []


@pytest.fixture
def debug_logger(debug_entries):
    return UnifiedLogger(console_output=False, enable_colors=False, min_level=LogLevel.DEBUG,
                         storage_callback=debug_entries.append)


class TestConversionPrompt:
    """Tests for generate_conversion_prompt."""

    def test_haml_prompt(self):
        prompt = generate_conversion_prompt("%p= title\n", "haml")

        assert prompt.system == SYSTEM_PROMPT
        assert prompt.user == (
            "Convert the following HAML code to valid ERB (Embedded Ruby).\n"
            "Do not include any markdown formatting, backticks, or explanation.\n"
            "Return ONLY the raw ERB code.\n"
            "\n"
            "HAML Code:\n"
            "%p= title\n"
        )

    def test_source_format_label(self):
        prompt = generate_conversion_prompt("p = title", "slim")
        assert prompt.user.startswith("Convert the following SLIM code")
        assert "SLIM Code:\np = title" in prompt.user


class TestTranslationClient:
    """Tests for TranslationClient.translate."""

    @pytest.mark.asyncio
    async def test_sends_one_request_with_prompt(self, debug_logger):
        provider = FakeProvider()
        client = TranslationClient(provider, logger=debug_logger)

        result = await client.translate("%p hi\n", "haml")

        assert result == "<p>hi</p>"
        assert len(provider.prompts) == 1
        user, system = provider.prompts[0]
        assert system == SYSTEM_PROMPT
        assert user.endswith("HAML Code:\n%p hi\n")

    @pytest.mark.asyncio
    async def test_answer_is_sanitized(self, debug_logger):
        provider = FakeProvider(answer="```erb\n<p><%= title %></p>\n```\n")
        client = TranslationClient(provider, logger=debug_logger)

        assert await client.translate("%p= title", "haml") == "<p><%= title %></p>"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("answer", ["", "   \n", "```erb\n```"])
    async def test_empty_answer_is_an_error(self, debug_logger, answer):
        client = TranslationClient(FakeProvider(answer=answer), logger=debug_logger)

        with pytest.raises(ServiceResponseError) as exc_info:
            await client.translate("%p hi", "haml")
        assert exc_info.value.recoverable is True

    @pytest.mark.asyncio
    async def test_service_errors_pass_through(self, debug_logger):
        error = ServiceAuthenticationError("API key not valid")
        client = TranslationClient(FakeProvider(error=error), logger=debug_logger)

        with pytest.raises(ServiceAuthenticationError) as exc_info:
            await client.translate("%p hi", "haml")
        assert exc_info.value is error

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_wrapped(self, debug_logger):
        client = TranslationClient(FakeProvider(error=KeyError("candidates")), logger=debug_logger)

        with pytest.raises(ServiceError) as exc_info:
            await client.translate("%p hi", "haml")
        assert isinstance(exc_info.value.__cause__, KeyError)
        assert exc_info.value.recoverable is True

    @pytest.mark.asyncio
    async def test_request_and_response_are_logged(self, debug_logger, debug_entries):
        client = TranslationClient(FakeProvider(), logger=debug_logger)

        await client.translate("%p hi", "haml")

        types = [e['type'] for e in debug_entries]
        assert types == ['llm_request', 'llm_response']
        assert debug_entries[0]['data']['model'] == "fake-model"
        assert debug_entries[1]['data']['completion_tokens'] == 2

    @pytest.mark.asyncio
    async def test_context_manager_closes_provider(self, debug_logger):
        provider = FakeProvider()
        provider.close = AsyncMock()

        async with TranslationClient(provider, logger=debug_logger) as client:
            await client.translate("%p hi", "haml")

        provider.close.assert_awaited_once()
