"""
Prompt construction for template dialect conversion.
"""
from typing import NamedTuple


class PromptPair(NamedTuple):
    """A pair of system and user prompts for the translation service."""
    system: str
    user: str


SYSTEM_PROMPT = "You are an expert Ruby on Rails developer."


def _target_description(target_format: str) -> str:
    if target_format.lower() == "erb":
        return "valid ERB (Embedded Ruby)"
    return f"valid {target_format.upper()}"


def generate_conversion_prompt(source_text: str, source_format: str,
                               target_format: str = "erb") -> PromptPair:
    """
    Build the instruction asking the service to rewrite a template.

    The source text is embedded verbatim after a label naming its dialect.

    Args:
        source_text: Full contents of the template file
        source_format: Dialect tag of the input, e.g. "haml"
        target_format: Dialect tag of the output

    Returns:
        PromptPair with the role line and the conversion request
    """
    source_label = source_format.upper()
    target_label = target_format.upper()

    user = (
        f"Convert the following {source_label} code to {_target_description(target_format)}.\n"
        f"Do not include any markdown formatting, backticks, or explanation.\n"
        f"Return ONLY the raw {target_label} code.\n"
        f"\n"
        f"{source_label} Code:\n"
        f"{source_text}"
    )
    return PromptPair(system=SYSTEM_PROMPT, user=user)
