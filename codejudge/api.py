"""
HTTP API for grading, validating and formatting submissions.

Routes mirror the interview-prep client: /api/code/execute,
/api/code/validate, /api/code/format, /api/code/languages and
/api/questions/{id}/stats. Errors are returned as
{"error": <kind>, "message": <text>} with the status of the exception.
"""

import logging
from typing import Optional, Union

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field, field_validator

from . import __version__
from .exceptions import JudgeError, QuestionNotFoundError
from .formatter import FORMAT_MESSAGE, format_code
from .grader import Grader
from .languages import LANGUAGES, LANGUAGES_MESSAGE
from .repository import QuestionRepository
from .sandbox import SandboxFactory
from .validator import validate_code

logger = logging.getLogger(__name__)


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: Optional[Union[str, int]] = Field(default=None, alias="questionId")
    code: Optional[str] = None
    language: Optional[str] = None

    @field_validator("question_id")
    @classmethod
    def _id_as_string(cls, value):
        # bank ids are stored as strings, so 7 and "7" name the same question
        return None if value is None else str(value)


class CodeRequest(BaseModel):
    code: Optional[str] = None
    language: Optional[str] = None


def create_app(grader: Grader, sandbox_factory: SandboxFactory, repository: QuestionRepository) -> FastAPI:
    """Build the FastAPI application around already-configured services."""
    app = FastAPI(title="Code Judge", version=__version__)

    @app.exception_handler(JudgeError)
    async def handle_judge_error(request: Request, exc: JudgeError):
        if exc.http_status >= 500:
            logger.error("%s on %s: %s", exc.kind, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content={"error": exc.kind, "message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "InvalidRequest", "message": "Malformed request body"}
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "ServerError", "message": "Server error during code execution"}
        )

    @app.post("/api/code/execute")
    def execute(body: ExecuteRequest):
        result = grader.grade_submission(body.question_id, body.code, body.language)
        return result.to_dict()

    @app.post("/api/code/validate")
    def validate(body: CodeRequest):
        report = validate_code(body.code, body.language, sandbox_factory)
        return report.to_dict()

    @app.post("/api/code/format")
    def format_(body: CodeRequest):
        formatted = format_code(body.code, body.language)
        return {"originalCode": body.code, "formattedCode": formatted, "message": FORMAT_MESSAGE}

    @app.get("/api/code/languages")
    def languages():
        return {"languages": [lang.to_dict() for lang in LANGUAGES], "message": LANGUAGES_MESSAGE}

    @app.get("/api/questions/{question_id}/stats")
    def question_stats(question_id: str):
        stats = repository.get_stats(question_id)
        if stats is None:
            raise QuestionNotFoundError(question_id)
        return {"questionId": question_id, **stats.to_dict()}

    return app
