"""
Base classes and data structures for translation service providers.

This module defines the abstract base class that all providers must implement,
as well as the LLMResponse container they return.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional
import httpx

from erbify.config import REQUEST_TIMEOUT, LANE_COUNT


@dataclass
class LLMResponse:
    """Response from the service with token usage information"""
    content: str
    prompt_tokens: int = 0  # Number of tokens in the prompt
    completion_tokens: int = 0  # Number of tokens in the response
    finish_reason: str = ""  # Provider-reported stop reason, if any


class LLMProvider(ABC):
    """Abstract base class for translation service providers"""

    def __init__(self, model: str, timeout: float = REQUEST_TIMEOUT,
                 max_connections: int = LANE_COUNT,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the provider.

        Args:
            model: Model name/identifier
            timeout: Transport timeout in seconds
            max_connections: Connection pool size, one per concurrent lane
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.model = model
        self.timeout = timeout
        self.max_connections = max(1, max_connections)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create a persistent HTTP client with connection pooling"""
        if self._client is None:
            self._client = httpx.AsyncClient(
                limits=httpx.Limits(max_keepalive_connections=self.max_connections,
                                    max_connections=self.max_connections),
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport
            )
        return self._client

    async def close(self):
        """Close the HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    @abstractmethod
    async def generate(self, prompt: str,
                       system_prompt: Optional[str] = None) -> LLMResponse:
        """
        Generate text from prompt with a single request.

        Args:
            prompt: The user prompt (content to process)
            system_prompt: Optional system prompt (role/instructions)

        Returns:
            LLMResponse object with content and token usage info

        Raises:
            ServiceError: On any transport, authentication, quota or response problem
        """
        pass
