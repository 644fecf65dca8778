"""
Command-line interface for the grading service.

Usage:
    codejudge serve --config config.json
    codejudge grade --bank banks/sample_bank.json --question two-sum --file solution.js
    codejudge validate --file solution.js
    codejudge format --file solution.js
    codejudge languages
    codejudge init-config --out config.json
"""

import argparse
import getpass
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import uvicorn

from . import __version__
from .bank import load_bank
from .config_loader import configure_logging, create_sample_config, load_config
from .exceptions import JudgeError
from .formatter import format_code
from .grader import Grader
from .languages import LANGUAGES, LANGUAGES_MESSAGE
from .models import JudgeConfig
from .repository import QuestionRepository
from .sandbox import SandboxFactory
from .validator import validate_code

logger = logging.getLogger(__name__)


def _read_key_input(args) -> Optional[str]:
    if getattr(args, 'password', False):
        return getpass.getpass("Enter bank password: ")
    if getattr(args, 'key_file', None):
        return Path(args.key_file).read_text(encoding='utf-8').strip()
    return None


def build_services(config: JudgeConfig, bank_path: Optional[str] = None, key_input: Optional[str] = None):
    """
    Wire repository, sandbox factory and grader from configuration.

    Returns:
        Tuple of (repository, sandbox_factory, grader)
    """
    bank_path = bank_path or config.bank_path
    if bank_path:
        questions = load_bank(Path(bank_path), key_input)
    else:
        logger.warning("No question bank configured; grading requests will return NotFound")
        questions = []

    repository = QuestionRepository(questions, config.stats_path)
    sandbox_factory = SandboxFactory(
        node_path=config.node_path,
        default_time_limit_ms=config.default_time_limit_ms,
        default_memory_limit_mb=config.default_memory_limit_mb,
    )
    return repository, sandbox_factory, Grader(repository, sandbox_factory)


def _read_code(path: str) -> str:
    return Path(path).read_text(encoding='utf-8')


def cmd_serve(args, config: JudgeConfig) -> int:
    from .api import create_app

    repository, sandbox_factory, grader = build_services(config, args.bank, _read_key_input(args))
    app = create_app(grader, sandbox_factory, repository)
    host = args.host or config.host
    port = args.port or config.port
    logger.info("Starting Code Judge %s on %s:%s", __version__, host, port)
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def cmd_grade(args, config: JudgeConfig) -> int:
    _, _, grader = build_services(config, args.bank, _read_key_input(args))
    result = grader.grade_submission(args.question, _read_code(args.file), args.language)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0 if result.all_passed else 1

    print(f"Running {result.summary.total_tests} tests...")
    for outcome in result.results:
        mark = "PASS" if outcome.passed else "FAIL"
        print(f"  [{mark}] Test {outcome.test_case} ({outcome.execution_time_ms} ms)")
        if not outcome.passed:
            if outcome.error:
                print(f"         Error: {outcome.error[:200]}")
            else:
                print(f"         Expected: {outcome.expected_output!r}")
                print(f"         Got:      {outcome.actual_output!r}")
    summary = result.summary
    print("")
    print(f"Score: {summary.score}% ({summary.status})")
    print(result.message)
    return 0 if result.all_passed else 1


def cmd_validate(args, config: JudgeConfig) -> int:
    sandbox_factory = SandboxFactory(config.node_path, config.default_time_limit_ms,
                                     config.default_memory_limit_mb)
    report = validate_code(_read_code(args.file), args.language, sandbox_factory)
    print(report.message)
    for error in report.errors:
        print(f"  - {error}")
    return 0 if report.is_valid else 1


def cmd_format(args, config: JudgeConfig) -> int:
    formatted = format_code(_read_code(args.file), args.language)
    if args.in_place:
        Path(args.file).write_text(formatted + "\n", encoding='utf-8')
    else:
        print(formatted)
    return 0


def cmd_languages(args, config: JudgeConfig) -> int:
    for lang in LANGUAGES:
        state = "supported" if lang.supported else "not supported"
        print(f"{lang.id:<12} {lang.name:<12} {lang.extension:<6} {state}")
    print(LANGUAGES_MESSAGE)
    return 0


def cmd_init_config(args, config: JudgeConfig) -> int:
    create_sample_config(Path(args.out))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="codejudge",
        description="Grade interview question submissions in a JavaScript sandbox."
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="Path to config.json")

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_bank_args(p):
        p.add_argument("--bank", help="Question bank (.json or encrypted); overrides config")
        p.add_argument("--key-file", help="Fernet key file for encrypted banks")
        p.add_argument("--password", action="store_true", help="Prompt for the bank password")

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    add_bank_args(serve)
    serve.add_argument("--host", help="Bind address; overrides config")
    serve.add_argument("--port", type=int, help="Port; overrides config")
    serve.set_defaults(func=cmd_serve)

    grade = subparsers.add_parser("grade", help="Grade a solution file against a question")
    add_bank_args(grade)
    grade.add_argument("--question", required=True, help="Question ID")
    grade.add_argument("--file", required=True, help="Solution source file")
    grade.add_argument("--language", default="javascript")
    grade.add_argument("--json", action="store_true", help="Print the raw result as JSON")
    grade.set_defaults(func=cmd_grade)

    validate = subparsers.add_parser("validate", help="Check syntax and disallowed constructs")
    validate.add_argument("--file", required=True)
    validate.add_argument("--language", default="javascript")
    validate.set_defaults(func=cmd_validate)

    fmt = subparsers.add_parser("format", help="Reflow a solution file")
    fmt.add_argument("--file", required=True)
    fmt.add_argument("--language", default="javascript")
    fmt.add_argument("--in-place", action="store_true")
    fmt.set_defaults(func=cmd_format)

    languages = subparsers.add_parser("languages", help="List submission languages")
    languages.set_defaults(func=cmd_languages)

    init_config = subparsers.add_parser("init-config", help="Write a sample config.json")
    init_config.add_argument("--out", default="config.json")
    init_config.set_defaults(func=cmd_init_config)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(Path(args.config) if args.config else None)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    configure_logging(config)

    try:
        return args.func(args, config)
    except JudgeError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
