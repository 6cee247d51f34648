"""
Helpers for processing translation service answers.
"""

from .sanitizer import ResponseSanitizer, sanitize

__all__ = ["ResponseSanitizer", "sanitize"]
