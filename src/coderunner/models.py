"""Pydantic models for request and response bodies.

These models express the JSON structure of the execute endpoint.  The
request model doubles as the immutable submission handed to the pipeline.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SubmissionRequest(BaseModel):
    """Request body for running a snippet."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="Language tag: 'java', 'cpp', 'py' or 'c'.")
    code: str = Field(..., description="Source code to compile and run.")
    input: Optional[str] = Field(
        default="", description="Standard input to pass to the program."
    )


class ExecuteResponse(BaseModel):
    """Response body for code execution."""

    output: str
    error: str
    language: str
    info: str
    status: str = Field(
        ...,
        description=(
            "One of 'completed', 'runtime_error', 'compile_error', 'timeout', "
            "'toolchain_unavailable' or, on server faults, 'internal_error'."
        ),
    )
