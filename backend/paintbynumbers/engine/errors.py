"""Pipeline exception hierarchy."""

from __future__ import annotations


class PipelineError(Exception):
    """Base class for failures raised by the generation pipeline."""


class InvalidInputError(PipelineError):
    """The raster or the run parameters cannot be processed."""


class StageError(PipelineError):
    """A stage raised while running; wraps the original exception."""

    def __init__(self, stage_id: str, cause: BaseException) -> None:
        super().__init__(f"{stage_id}: {cause}")
        self.stage_id = stage_id
        self.cause = cause
