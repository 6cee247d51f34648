"""
Cleanup of translation service answers.

Generative models often wrap code in markdown fences even when told not to.
This module removes those fences so the answer can be written to disk as-is.
"""

import re
from typing import Optional


# One or more fences in column 0, each with an optional language annotation
# ("```", "```erb", "```html.erb"). Indented fences are template content.
FENCE_PATTERN = re.compile(r"^(?:```[\w.+-]*)+", re.MULTILINE)


class ResponseSanitizer:
    """
    Strips incidental formatting from translation service answers.

    Example:
        >>> ResponseSanitizer().sanitize("```erb\\n<p><%= title %></p>\\n```")
        '<p><%= title %></p>'
    """

    def __init__(self, pattern: re.Pattern = FENCE_PATTERN):
        self._pattern = pattern

    def sanitize(self, raw_text: Optional[str]) -> str:
        """
        Remove fence markers found in column 0, then trim the result.

        Indented fences and fence-like text inside a line are left alone,
        except an opening fence that trimming brings to the start.

        Args:
            raw_text: Answer as returned by the service

        Returns:
            Cleaned text, or an empty string for empty input
        """
        if not raw_text:
            return ""
        # Trimming can bring an indented opening fence to column 0, so repeat
        # until nothing changes; every changing pass shortens the text.
        text = raw_text
        while True:
            cleaned = self._pattern.sub("", text).strip()
            if cleaned == text:
                return cleaned
            text = cleaned


_default_sanitizer = ResponseSanitizer()


def sanitize(raw_text: Optional[str]) -> str:
    """Sanitize with the default fence pattern."""
    return _default_sanitizer.sanitize(raw_text)
