"""
Translation client: one template in, one converted template out.
"""

import time
from typing import Optional

from erbify.config import TARGET_FORMAT
from erbify.core.exceptions import ServiceError, ServiceResponseError
from erbify.prompts import generate_conversion_prompt
from erbify.utils.unified_logger import UnifiedLogger, LogType, get_logger
from .base import LLMProvider
from .utils.sanitizer import ResponseSanitizer


class TranslationClient:
    """
    Sends template source to the translation service and returns clean output.

    Each ``translate`` call issues exactly one request through the provider.
    Answers go through ResponseSanitizer before they are returned.
    """

    def __init__(self, provider: LLMProvider,
                 sanitizer: Optional[ResponseSanitizer] = None,
                 target_format: str = TARGET_FORMAT,
                 logger: Optional[UnifiedLogger] = None):
        self.provider = provider
        self.sanitizer = sanitizer or ResponseSanitizer()
        self.target_format = target_format
        self.logger = logger or get_logger()

    async def translate(self, text: str, source_format: str) -> str:
        """
        Convert template text from ``source_format`` to the target dialect.

        Args:
            text: Raw source template
            source_format: Dialect tag of ``text``, e.g. "haml"

        Returns:
            Sanitized converted text

        Raises:
            ServiceError: If the request fails or the answer is empty
        """
        prompt = generate_conversion_prompt(text, source_format, self.target_format)
        self.logger.debug("Service request", LogType.LLM_REQUEST, {
            'model': self.provider.model,
            'prompt': prompt.user
        })

        start = time.monotonic()
        try:
            response = await self.provider.generate(prompt.user, system_prompt=prompt.system)
        except ServiceError:
            raise
        except Exception as e:
            # Anything the provider did not map is still a service failure
            raise ServiceError(f"Translation request failed: {e}") from e

        self.logger.debug("Service response", LogType.LLM_RESPONSE, {
            'execution_time': time.monotonic() - start,
            'prompt_tokens': response.prompt_tokens,
            'completion_tokens': response.completion_tokens,
            'response': response.content
        })

        converted = self.sanitizer.sanitize(response.content)
        if not converted:
            raise ServiceResponseError("Translation service returned an empty answer",
                                       {'finish_reason': response.finish_reason or 'unknown'})
        return converted

    async def close(self):
        await self.provider.close()

    async def __aenter__(self) -> "TranslationClient":
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
