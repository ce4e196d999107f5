"""Failure taxonomy for the translation pipeline."""

from src.speech_translator.models.pipeline import Stage


class PipelineError(Exception):
    """Base class for every failure the pipeline reports to callers."""

    stage: Stage = Stage.internal

    def __init__(self, reason: str, stage: Stage | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        if stage is not None:
            self.stage = stage

    @property
    def kind(self) -> str:
        return type(self).__name__


class ValidationError(PipelineError):
    """Missing or empty input."""

    stage = Stage.validation


class RecognitionFailed(PipelineError):
    stage = Stage.recognition


class TranslationFailed(PipelineError):
    stage = Stage.translation


class SynthesisFailed(PipelineError):
    stage = Stage.synthesis


class StageTimeout(PipelineError):
    """An external call did not finish before its deadline."""

    def __init__(self, stage: Stage, timeout: float) -> None:
        super().__init__(f"{stage.value} did not complete within {timeout:g}s", stage)
        self.timeout = timeout


class InternalError(PipelineError):
    stage = Stage.internal


class QueueFull(PipelineError):
    """Raised at submission time when the waiting backlog is at capacity."""

    stage = Stage.admission
