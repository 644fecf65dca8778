"""Whitespace-level beautifier for submitted JavaScript."""

import re
from typing import Optional

from .exceptions import InvalidRequestError
from .languages import DEFAULT_LANGUAGE

FORMAT_MESSAGE = "Code formatted successfully! ✨"


def format_code(code: Optional[str], language: Optional[str] = DEFAULT_LANGUAGE) -> str:
    """
    Reflow code so each statement and block sits on its own line.

    This is a regex pass, not a parser: string literals containing braces
    or semicolons get reflowed too. Languages other than JavaScript are
    returned unchanged.
    """
    if not code:
        raise InvalidRequestError("Code is required")

    if (language or DEFAULT_LANGUAGE) != "javascript":
        return code

    formatted = re.sub(r"\s+", " ", code)
    formatted = re.sub(r"\s*\{\s*", " {\n  ", formatted)
    formatted = re.sub(r"\s*\}\s*", "\n}\n", formatted)
    formatted = re.sub(r"\s*;\s*", ";\n  ", formatted)
    formatted = re.sub(r"\n\s*\n", "\n", formatted)
    return formatted.strip()
