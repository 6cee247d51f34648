"""
Translation service provider implementations.

Providers:
    - gemini: Google Gemini API
"""

from .gemini import GeminiProvider

__all__ = ["GeminiProvider"]
