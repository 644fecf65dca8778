"""
Exception hierarchy for the grading service.

Request-level errors carry the HTTP status they map to. Sandbox and
statistics errors are raised internally and never reach the caller of
the grading flow.
"""

from typing import Optional


class JudgeError(Exception):
    """Base exception for all grading service errors."""

    kind = "JudgeError"
    http_status = 500

    def __init__(self, message: str = "An error occurred while grading") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidRequestError(JudgeError):
    """Raised when a request is missing required fields or is malformed."""

    kind = "InvalidRequest"
    http_status = 400

    def __init__(self, message: str = "Question ID and code are required") -> None:
        super().__init__(message)


class QuestionNotFoundError(JudgeError):
    """Raised when a question ID does not resolve to a question."""

    kind = "NotFound"
    http_status = 404

    def __init__(self, question_id: Optional[str] = None) -> None:
        if question_id:
            message = f"Question not found: {question_id}"
        else:
            message = "Question not found"
        super().__init__(message)
        self.question_id = question_id


class NoTestCasesError(JudgeError):
    """Raised when a question has no test cases to grade against."""

    kind = "NoTestCases"
    http_status = 400

    def __init__(self, message: str = "No test cases available for this question") -> None:
        super().__init__(message)


class UnsupportedLanguageError(JudgeError):
    """Raised when a submission declares a language we cannot run."""

    kind = "UnsupportedLanguage"
    http_status = 400

    def __init__(self, language: str) -> None:
        super().__init__(
            f"Language {language} is not supported yet. Only JavaScript is supported."
        )
        self.language = language


class SandboxUnavailableError(JudgeError):
    """Raised when the JavaScript interpreter cannot be found or started."""

    kind = "SandboxUnavailable"
    http_status = 500

    def __init__(
        self, message: str = "Node.js executable not found. Install Node.js or set node_path."
    ) -> None:
        super().__init__(message)


class SandboxExecutionError(JudgeError):
    """
    Raised when a single execution unit fails inside the sandbox.

    reason is one of "syntax_error", "runtime_error", "timeout", "memory_error".
    """

    kind = "SandboxExecutionError"

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message or reason)
        self.reason = reason


class StatisticsUpdateError(JudgeError):
    """Raised when a question's running statistics cannot be updated."""

    kind = "StatisticsUpdateError"

    def __init__(self, question_id: str, message: str = "") -> None:
        detail = f": {message}" if message else ""
        super().__init__(f"Failed to update statistics for question {question_id}{detail}")
        self.question_id = question_id


class BankLoadError(JudgeError):
    """Raised when a question bank cannot be read, decrypted or parsed."""

    kind = "BankLoadError"

    def __init__(self, message: str = "Failed to load or decrypt the question bank") -> None:
        super().__init__(message)
