"""
Google Gemini provider implementation.

This module provides the GeminiProvider class for interacting with
Google's Gemini generateContent API over httpx.
"""

from typing import Optional
import httpx

from erbify.config import GEMINI_API_BASE, GEMINI_MODEL, GEMINI_THINKING_LEVEL, REQUEST_TIMEOUT, LANE_COUNT
from erbify.core.exceptions import (
    ServiceError,
    ServiceAuthenticationError,
    ServiceConnectionError,
    ServiceRateLimitError,
    ServiceResponseError,
)
from ..base import LLMProvider, LLMResponse


# 4xx statuses that are worth another attempt
_RETRYABLE_CLIENT_STATUSES = {408, 409, 425}


class GeminiProvider(LLMProvider):
    """
    Provider for Google Gemini API.

    Configuration:
        api_key: Google AI API key (required)
        model: Gemini model name
        thinking_level: Value for generationConfig.thinkingConfig.thinkingLevel,
            empty to omit the thinking config

    Example:
        >>> provider = GeminiProvider(api_key="AI...")
        >>> response = await provider.generate("Convert: %p Hello")
    """

    def __init__(self, api_key: str, model: str = GEMINI_MODEL,
                 thinking_level: str = GEMINI_THINKING_LEVEL,
                 temperature: Optional[float] = None,
                 timeout: float = REQUEST_TIMEOUT,
                 max_connections: int = LANE_COUNT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(model, timeout=timeout, max_connections=max_connections,
                         transport=transport)
        self.api_key = api_key
        self.thinking_level = thinking_level
        self.temperature = temperature
        self.api_endpoint = f"{GEMINI_API_BASE}/models/{model}:generateContent"

    def _build_payload(self, prompt: str, system_prompt: Optional[str]) -> dict:
        payload = {
            "contents": [{
                "role": "user",
                "parts": [{
                    "text": prompt
                }]
            }]
        }

        generation_config = {}
        if self.thinking_level:
            generation_config["thinkingConfig"] = {"thinkingLevel": self.thinking_level}
        if self.temperature is not None:
            generation_config["temperature"] = self.temperature
        if generation_config:
            payload["generationConfig"] = generation_config

        if system_prompt:
            payload["systemInstruction"] = {
                "parts": [{
                    "text": system_prompt
                }]
            }
        return payload

    async def generate(self, prompt: str,
                       system_prompt: Optional[str] = None) -> LLMResponse:
        """
        Generate text using Gemini API.

        Args:
            prompt: The user prompt (content to convert)
            system_prompt: Optional system prompt (role/instructions)

        Returns:
            LLMResponse with content and token usage info

        Raises:
            ServiceConnectionError: On timeouts and transport failures
            ServiceAuthenticationError: If the key is rejected (401/403)
            ServiceRateLimitError: If the quota is exhausted (429)
            ServiceResponseError: If the answer cannot be parsed or holds no text
            ServiceError: For any other HTTP error status
        """
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key
        }
        payload = self._build_payload(prompt, system_prompt)

        client = await self._get_client()
        try:
            response = await client.post(
                self.api_endpoint,
                headers=headers,
                json=payload
            )
            response.raise_for_status()
        except httpx.TimeoutException as e:
            raise ServiceConnectionError(f"Gemini API timeout: {e}", {'model': self.model}) from e
        except httpx.HTTPStatusError as e:
            raise self._status_error(e) from e
        except httpx.TransportError as e:
            raise ServiceConnectionError(f"Gemini API connection error: {e}", {'model': self.model}) from e

        try:
            response_json = response.json()
        except ValueError as e:
            raise ServiceResponseError(f"Gemini API returned invalid JSON: {e}") from e

        return self._parse_response(response_json)

    def _status_error(self, error: httpx.HTTPStatusError) -> ServiceError:
        """Map an HTTP error status to the matching service exception."""
        status = error.response.status_code
        body = error.response.text[:500]
        context = {'status': status, 'model': self.model}

        if status in (401, 403):
            return ServiceAuthenticationError(f"Gemini API rejected the API key: {body}", context)
        if status == 429:
            retry_after = None
            header = error.response.headers.get("retry-after")
            if header:
                try:
                    retry_after = float(header)
                except ValueError:
                    retry_after = None
            return ServiceRateLimitError(f"Gemini API quota exceeded: {body}", retry_after, context)

        recoverable = status >= 500 or status in _RETRYABLE_CLIENT_STATUSES
        return ServiceError(f"Gemini API HTTP error {status}: {body}", context, recoverable=recoverable)

    def _parse_response(self, response_json: dict) -> LLMResponse:
        """Extract text and token usage from a generateContent answer."""
        candidates = response_json.get("candidates") or []
        if not candidates:
            feedback = response_json.get("promptFeedback", {})
            block_reason = feedback.get("blockReason")
            if block_reason:
                raise ServiceResponseError(f"Gemini API blocked the prompt: {block_reason}")
            raise ServiceResponseError("Gemini API returned no candidates")

        candidate = candidates[0]
        parts = candidate.get("content", {}).get("parts", [])
        # Thinking models may return thought parts before the answer
        response_text = "".join(
            part.get("text", "") for part in parts if not part.get("thought")
        )

        usage_metadata = response_json.get("usageMetadata", {})
        return LLMResponse(
            content=response_text,
            prompt_tokens=usage_metadata.get("promptTokenCount", 0),
            completion_tokens=usage_metadata.get("candidatesTokenCount", 0),
            finish_reason=candidate.get("finishReason", "")
        )
