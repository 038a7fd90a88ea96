"""Error hierarchy for schedule extraction and reconciliation.

Per-page extraction failures are recoverable: the page is reported as
failed and processing continues with the next one. Validation failures
mean the input itself is unusable and are raised to the caller.
"""


class ScheduleEngineError(Exception):
    """Base exception for all schedule engine errors."""

    pass


class ExtractionError(ScheduleEngineError):
    """A page could not be rendered or recognized."""

    pass


class PageTimeoutError(ExtractionError):
    """Rendering or recognition of a page exceeded its time budget."""

    def __init__(self, page: int, stage: str, timeout: float):
        self.page = page
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"Page {page} {stage} timed out after {timeout:g}s")


class NoScheduleFoundError(ScheduleEngineError):
    """No page of the document yielded a day header or entry."""

    pass


class ValidationError(ScheduleEngineError):
    """Input file or authoritative schedule is malformed."""

    pass
