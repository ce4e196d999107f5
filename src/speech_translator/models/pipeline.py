"""Pydantic models for translation jobs and their results."""

import uuid
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Where in the request lifecycle a failure happened."""

    validation = "validation"
    admission = "admission"
    recognition = "recognition"
    translation = "translation"
    synthesis = "synthesis"
    internal = "internal"


def _new_job_id() -> str:
    return str(uuid.uuid4())[:8]


class TranslationJob(BaseModel):
    """One uploaded clip waiting for, or going through, the pipeline."""

    job_id: str = Field(default_factory=_new_job_id)
    audio: bytes = Field(..., repr=False)
    target_lang: str | None = None
    submitted_at: datetime = Field(default_factory=datetime.now)


class Transcript(BaseModel):
    """Recognized text plus the source language, when the service reports one."""

    text: str
    language: str | None = None


class PipelineSuccess(BaseModel):
    job_id: str
    status: Literal["succeeded"] = "succeeded"
    audio: bytes = Field(..., repr=False)

    @property
    def ok(self) -> bool:
        return True


class PipelineFailure(BaseModel):
    job_id: str
    status: Literal["failed"] = "failed"
    stage: Stage
    error: str
    reason: str

    @property
    def ok(self) -> bool:
        return False


PipelineResult = PipelineSuccess | PipelineFailure
