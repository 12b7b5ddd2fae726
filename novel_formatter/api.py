from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Body, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from novel_formatter.errors import InvalidUtf8Error, printable
from novel_formatter.formatting.config import FormatConfig
from novel_formatter.formatting.fixer import FormatResult, format_bytes, format_txt
from novel_formatter.logging_setup import ensure_file_logging, log_dir_from_env
from novel_formatter.models import (
    ErrorEnvelope,
    FormatOptions,
    FormatRequest,
    FormatResponse,
    IssueOut,
    QuoteIssueOut,
)
from novel_formatter.report import render_issue_log

logger = logging.getLogger(__name__)

WORKDIR = Path(__file__).resolve().parent.parent
DEFAULT_LOG_DIR = WORKDIR / "output" / "logs"

MAX_UPLOAD_BYTES = 200 * 1024 * 1024


def _error_code_for_status(status_code: int) -> str:
    if status_code == 404:
        return "not_found"
    if status_code in {400, 413, 422}:
        return "bad_request"
    return "internal_error"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": ErrorEnvelope(code=_error_code_for_status(status_code), message=message).model_dump()},
    )


def _format_from_options(opts: FormatOptions) -> FormatConfig:
    return FormatConfig(
        format_chapter_titles=bool(opts.format_chapter_titles),
        blank_lines_before_title=int(opts.blank_lines_before_title),
        blank_lines_after_title=int(opts.blank_lines_after_title),
        replace_curly_quotes=bool(opts.replace_curly_quotes),
        normalize_quote_levels=bool(opts.normalize_quote_levels),
        move_trailing_open_quotes=bool(opts.move_trailing_open_quotes),
        check_quote_pairing=bool(opts.check_quote_pairing),
        check_paragraph_punctuation=bool(opts.check_paragraph_punctuation),
    )


def _parse_options_json(options: str | None) -> FormatOptions:
    if not options:
        return FormatOptions()
    try:
        data = json.loads(options)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"options must be valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="options must be a JSON object")
    try:
        return FormatOptions.model_validate(data)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"invalid options: {e}") from e


def _result_to_response(result: FormatResult) -> FormatResponse:
    return FormatResponse(
        # Bytes that were not valid UTF-8 outside any chapter cannot travel in JSON.
        text=printable(result.text),
        quote_issues=[
            QuoteIssueOut(
                title=printable(item.title),
                title_line_no=item.title_line_no,
                issue=IssueOut(kind=str(item.issue.kind), line_no=item.issue.line_no, note=item.issue.note),
            )
            for item in result.quote_issues
        ],
        paragraph_issues=[
            IssueOut(kind=str(issue.kind), line_no=issue.line_no, note=issue.note) for issue in result.paragraph_issues
        ],
        stats=dict(result.stats),
        log=render_issue_log(result.quote_issues, result.paragraph_issues),
    )


def _invalid_utf8(e: InvalidUtf8Error) -> HTTPException:
    return HTTPException(status_code=400, detail="\n".join(e.diagnostic_lines()))


async def _read_upload_limited(upload: UploadFile, limit: int) -> bytes:
    total = 0
    parts: list[bytes] = []
    while True:
        chunk = await upload.read(1024 * 1024)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise HTTPException(status_code=413, detail=f"file too large (> {limit} bytes)")
        parts.append(chunk)
    return b"".join(parts)


@asynccontextmanager
async def _lifespan(_app: FastAPI) -> AsyncIterator[None]:
    log_file = ensure_file_logging(log_dir=log_dir_from_env() or DEFAULT_LOG_DIR)
    logger.info("file logging enabled: %s", log_file)
    yield


app = FastAPI(lifespan=_lifespan)


@app.exception_handler(HTTPException)
async def _http_exception_handler(_request: Request, exc: HTTPException):
    return _error(int(exc.status_code), str(exc.detail))


@app.exception_handler(RequestValidationError)
async def _validation_exception_handler(_request: Request, exc: RequestValidationError):
    msg = "bad request"
    errors = exc.errors()
    if errors:
        msg = errors[0].get("msg") or msg
    return _error(400, msg)


@app.exception_handler(Exception)
async def _unhandled_exception_handler(_request: Request, exc: Exception):
    logger.exception("unhandled error")
    return _error(500, str(exc))


@app.get("/healthz")
async def healthz():
    return {"ok": True}


@app.post("/api/v1/format", response_model=FormatResponse)
async def format_text(body: FormatRequest = Body(...)):
    try:
        result = format_txt(body.text, _format_from_options(body.options))
    except InvalidUtf8Error as e:
        raise _invalid_utf8(e) from e
    return _result_to_response(result)


@app.post("/api/v1/format/file", response_model=FormatResponse)
async def format_file(file: UploadFile = File(...), options: str | None = Form(None)):
    opts = _parse_options_json(options)
    data = await _read_upload_limited(file, MAX_UPLOAD_BYTES)
    try:
        result = format_bytes(data, _format_from_options(opts))
    except InvalidUtf8Error as e:
        raise _invalid_utf8(e) from e
    logger.info("formatted upload %s (%s bytes)", file.filename or "<unnamed>", len(data))
    return _result_to_response(result)
