"""
Static validation of submitted source text.

The scan is advisory: plain substring matching that flags constructs a
submission has no business using. It is not a security boundary; the
sandbox's own restrictions are what keep executed code contained.
"""

from typing import List, Optional, Tuple

from .exceptions import InvalidRequestError, UnsupportedLanguageError
from .languages import DEFAULT_LANGUAGE, is_supported
from .models import ValidationReport

VALID_MESSAGE = "Code syntax is valid! ✅"
INVALID_MESSAGE = "Code has syntax errors. Please fix them before running. ❌"

# (patterns, message) pairs; any pattern present in the source triggers the message
RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("eval(", "Function("),
     "Use of eval() or Function() constructor is not allowed for security reasons"),
    (("process.", "require("),
     "Node.js specific APIs are not allowed"),
    (("global.", "globalThis.", "window."),
     "Global object access is not allowed"),
]


def find_violations(code: str) -> List[str]:
    """Return the message of every rule the code trips, in rule order."""
    return [message for patterns, message in RULES if any(p in code for p in patterns)]


def scan_code(code: str, syntax_error: Optional[str] = None) -> ValidationReport:
    """
    Build a validation report for code without executing anything.

    Args:
        code: Submitted source text
        syntax_error: Parser message from a prior syntax check, if any
    """
    errors = []
    if syntax_error:
        errors.append(f"Syntax error: {syntax_error}")
    else:
        errors.extend(find_violations(code))

    is_valid = not errors
    return ValidationReport(
        is_valid=is_valid,
        errors=errors,
        message=VALID_MESSAGE if is_valid else INVALID_MESSAGE,
    )


def validate_code(code: Optional[str], language: Optional[str], sandbox_factory) -> ValidationReport:
    """
    Parse code with the interpreter (no execution) and scan it.

    Raises:
        InvalidRequestError: code is missing
        UnsupportedLanguageError: language cannot be validated
    """
    if not code or not code.strip():
        raise InvalidRequestError("Code is required")

    language = language or DEFAULT_LANGUAGE
    if not is_supported(language):
        raise UnsupportedLanguageError(language)

    syntax_error = sandbox_factory.create().check_syntax(code)
    return scan_code(code, syntax_error)
