"""
FastAPI application for the code runner.

This module configures the FastAPI application, registers the health
check and the execute route, and enforces authentication via an optional
API key.  The route is a thin shell around
:class:`coderunner.pipeline.ExecutionPipeline`: rejected submissions map to
400, every handled outcome (including compile failures and timeouts) to
200, and anything unexpected to a 500 whose body never leaks the cause.
"""

from __future__ import annotations

import logging
from typing import Dict

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..config import Config
from ..errors import InvalidInputError, UnsupportedLanguageError
from ..models import ExecuteResponse, SubmissionRequest
from ..pipeline import ExecutionPipeline


logger = logging.getLogger("coderunner")

if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter("[coderunner] %(levelname)s - %(message)s")
    handler.setFormatter(formatter)
    logger.addHandler(handler)

logger.setLevel(logging.INFO)

INTERNAL_ERROR_MESSAGE = "An internal server error occurred. Please check server logs."


config = Config.from_env()

logger.info(
    "Loaded config: source_dir=%s, output_dir=%s, allowed_langs=%s, max_exec=%s",
    config.source_dir,
    config.output_dir,
    config.allowed_langs,
    config.max_execution_seconds,
)

pipeline = ExecutionPipeline(config)


app = FastAPI(title="Code Runner", version="0.1.0")


@app.middleware("http")
async def authenticate(request, call_next):
    """Middleware to enforce API key authentication on all requests."""
    path = request.url.path
    method = request.method
    client = getattr(request.client, "host", "unknown")

    logger.info("Incoming request: %s %s from %s", method, path, client)

    if config.api_key:
        provided_key = request.headers.get("x-api-key")
        if provided_key != config.api_key:
            logger.warning("Invalid API key for %s %s from %s", method, path, client)
            return JSONResponse(status_code=401, content={"detail": "Invalid API key"})

    response = await call_next(request)
    logger.info("Response: %s %s -> %s", method, path, response.status_code)
    return response


@app.get("/health")
async def health() -> Dict[str, str]:
    """Return a simple health check response."""
    return {"status": "ok"}


@app.post("/api/v1/execute", response_model=ExecuteResponse)
def execute(req: SubmissionRequest):
    """Compile (if needed) and run a snippet, returning its output.

    Declared synchronous so FastAPI runs the blocking pipeline in its
    worker thread pool instead of on the event loop.
    """
    try:
        result = pipeline.execute(req)
    except (InvalidInputError, UnsupportedLanguageError) as exc:
        logger.warning("[/api/v1/execute] Rejected submission: %s", exc)
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception:
        logger.exception("[/api/v1/execute] Error during code execution")
        error = ExecuteResponse(
            output="",
            error=INTERNAL_ERROR_MESSAGE,
            language=req.language,
            info="",
            status="internal_error",
        )
        return JSONResponse(status_code=500, content=error.model_dump())

    return ExecuteResponse(
        output=result.output,
        error=result.error,
        language=result.language,
        info=result.info,
        status=result.status.value,
    )
