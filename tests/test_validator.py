"""
Tests for validator module.

Tests static code validation including:
- Forbidden construct detection
- Syntax error reporting
- Language and empty-code rejection
"""

import pytest
from unittest.mock import Mock
from pathlib import Path

# Add parent directory to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from codejudge.exceptions import InvalidRequestError, UnsupportedLanguageError
from codejudge.validator import (
    INVALID_MESSAGE,
    VALID_MESSAGE,
    find_violations,
    scan_code,
    validate_code,
)


def _factory(syntax_error=None):
    factory = Mock()
    factory.create.return_value.check_syntax.return_value = syntax_error
    return factory


class TestFindViolations:
    """Test the substring rules."""

    def test_clean_code(self):
        assert find_violations("function solution(a, b) { return a + b; }") == []

    @pytest.mark.parametrize("code,fragment", [
        ("eval('1 + 1')", "eval()"),
        ("new Function('return 1')()", "Function()"),
        ("process.exit(1)", "Node.js"),
        ("const fs = require('fs')", "Node.js"),
        ("globalThis.x = 1", "Global object"),
        ("window.alert(1)", "Global object"),
    ])
    def test_flagged_constructs(self, code, fragment):
        violations = find_violations(code)

        assert len(violations) == 1
        assert fragment in violations[0]

    def test_multiple_rules_reported_in_order(self):
        violations = find_violations("eval(x); require('fs'); global.y = 1")

        assert len(violations) == 3
        assert "eval" in violations[0]
        assert "Node.js" in violations[1]
        assert "Global" in violations[2]

    def test_matching_is_textual(self):
        """Patterns inside strings and comments still count."""
        assert find_violations("// never call eval(") != []


class TestScanCode:
    """Test report construction."""

    def test_valid_report(self):
        report = scan_code("function f() {}")

        assert report.is_valid
        assert report.errors == []
        assert report.message == VALID_MESSAGE

    def test_syntax_error_only_reports_syntax(self):
        report = scan_code("eval(", syntax_error="Unexpected end of input")

        assert not report.is_valid
        assert report.errors == ["Syntax error: Unexpected end of input"]
        assert report.message == INVALID_MESSAGE

    def test_wire_keys(self):
        assert scan_code("x").to_dict() == {"isValid": True, "errors": [], "message": VALID_MESSAGE}


class TestValidateCode:
    """Test the full validation entry point."""

    def test_parses_with_sandbox(self):
        factory = _factory()

        report = validate_code("function f() { return 1; }", "javascript", factory)

        assert report.is_valid
        factory.create.return_value.check_syntax.assert_called_once_with("function f() { return 1; }")

    def test_syntax_error_from_sandbox(self):
        report = validate_code("function f( {", "javascript", _factory("Unexpected token '{'"))

        assert not report.is_valid
        assert report.errors == ["Syntax error: Unexpected token '{'"]

    def test_default_language(self):
        assert validate_code("let x = 1;", None, _factory()).is_valid

    @pytest.mark.parametrize("code", [None, "", "  \n "])
    def test_missing_code(self, code):
        with pytest.raises(InvalidRequestError):
            validate_code(code, "javascript", _factory())

    def test_unsupported_language(self):
        factory = _factory()

        with pytest.raises(UnsupportedLanguageError):
            validate_code("print(1)", "python", factory)

        factory.create.assert_not_called()
