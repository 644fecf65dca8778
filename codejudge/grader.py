"""
Grader module for running submissions against a question's test cases.

Provides the Grader class which validates a grading request, executes the
submission once per test case in a fresh sandbox, compares outputs and
records the attempt against the question's running statistics.
"""

import time
import logging
from typing import List, Optional

from .exceptions import (
    InvalidRequestError,
    NoTestCasesError,
    QuestionNotFoundError,
    SandboxExecutionError,
    UnsupportedLanguageError,
)
from .languages import DEFAULT_LANGUAGE, is_supported
from .models import (
    STATUS_CORRECT,
    Question,
    SubmissionResult,
    Summary,
    TestCase,
    TestCaseOutcome,
)
from .sandbox import SandboxFactory, build_execution_unit

logger = logging.getLogger(__name__)

ALL_PASSED_MESSAGE = "🎉 All tests passed! Great job!"


def exact_match(actual_output: str, expected_output: str) -> bool:
    """
    Strict string equality.

    No whitespace stripping, numeric tolerance or reordering: "[0,1]" and
    "[0, 1]" are different answers.
    """
    return actual_output == str(expected_output)


class Grader:
    """Handles test case execution and output validation."""

    def __init__(self, repository, sandbox_factory: SandboxFactory):
        """
        Args:
            repository: Question store providing find_by_id() and
                record_grading_stats()
            sandbox_factory: Creates the isolated context for each test case
        """
        self.repository = repository
        self.sandbox_factory = sandbox_factory

    # ===== REQUEST VALIDATION =====

    def _resolve_question(self, question_id: Optional[str], code: Optional[str], language: str) -> Question:
        if not question_id or not str(question_id).strip() or not code or not code.strip():
            raise InvalidRequestError()

        if not is_supported(language):
            raise UnsupportedLanguageError(language)

        question = self.repository.find_by_id(str(question_id))
        if question is None:
            raise QuestionNotFoundError(str(question_id))

        if not question.test_cases:
            raise NoTestCasesError()

        return question

    # ===== TEST EXECUTION =====

    def grade_submission(
        self,
        question_id: Optional[str],
        code: Optional[str],
        language: Optional[str] = DEFAULT_LANGUAGE
    ) -> SubmissionResult:
        """
        Run the submission against every test case of a question.

        Args:
            question_id: ID of the question to grade against
            code: Submitted source code
            language: Declared language of the submission

        Returns:
            SubmissionResult with one outcome per test case, in order

        Raises:
            InvalidRequestError: question_id or code missing
            UnsupportedLanguageError: language is not runnable
            QuestionNotFoundError: question_id does not resolve
            NoTestCasesError: question has no test cases
        """
        language = language or DEFAULT_LANGUAGE
        question = self._resolve_question(question_id, code, language)

        outcomes: List[TestCaseOutcome] = []
        for i, test_case in enumerate(question.test_cases, start=1):
            outcomes.append(self._run_test_case(question, test_case, i, code))

        summary = Summary.from_outcomes(outcomes)
        if summary.passed_tests == summary.total_tests:
            message = ALL_PASSED_MESSAGE
        else:
            message = f"Tests completed. {summary.passed_tests}/{summary.total_tests} tests passed."

        logger.info(
            "Graded question %s: %d/%d passed, score=%d, status=%s",
            question.id, summary.passed_tests, summary.total_tests, summary.score, summary.status
        )

        self._record_attempt(question.id, summary)

        return SubmissionResult(results=outcomes, summary=summary, message=message)

    def _run_test_case(self, question: Question, test_case: TestCase, test_num: int, code: str) -> TestCaseOutcome:
        """Execute one test case; execution failures become a failed outcome."""
        source = build_execution_unit(code, test_case.input)
        sandbox = self.sandbox_factory.for_question(question)

        start_time = time.time()
        try:
            output = sandbox.run(source)
        except SandboxExecutionError as e:
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.debug("Test %d of question %s failed with %s: %s", test_num, question.id, e.reason, e.message)
            return TestCaseOutcome(
                test_case=test_num,
                input=test_case.input,
                expected_output=test_case.expected_output,
                actual_output=None,
                passed=False,
                execution_time_ms=elapsed_ms,
                error=e.message or e.reason,
                description=test_case.description,
            )
        elapsed_ms = int((time.time() - start_time) * 1000)

        passed = exact_match(output.text, test_case.expected_output)
        logger.debug("Test %d of question %s %s in %d ms", test_num, question.id,
                     "passed" if passed else "failed", elapsed_ms)

        return TestCaseOutcome(
            test_case=test_num,
            input=test_case.input,
            expected_output=test_case.expected_output,
            actual_output=None if output.is_null else output.text,
            passed=passed,
            execution_time_ms=elapsed_ms,
            description=test_case.description,
        )

    # ===== STATISTICS =====

    def _record_attempt(self, question_id: str, summary: Summary) -> None:
        """Update the question's statistics; failures are logged, never raised."""
        try:
            self.repository.record_grading_stats(
                question_id,
                summary.status == STATUS_CORRECT,
                summary.total_execution_time_ms
            )
        except Exception:
            logger.exception("Error updating question statistics for %s", question_id)
