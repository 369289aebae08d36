"""
Error taxonomy for the job extraction pipeline.

FetchError      - retrieval of the page (locally or via the scrape worker) failed
ExtractionError - content was retrieved but no usable record came out of it
JsonParseError  - model output could not be recovered as JSON
WorkerError     - the headless browser worker failed internally
"""
from typing import Any, Dict, Optional


class PipelineError(Exception):
    """Base class for extraction pipeline errors."""
    pass


class FetchError(PipelineError):
    """Raised when a page cannot be retrieved."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ExtractionError(PipelineError):
    """
    Raised when neither site plugins nor the LLM produced a viable record.

    Carries the best-effort partial data and the stage that failed so callers
    can show something useful.
    """

    def __init__(self, message: str, stage: str = "extraction",
                 partial_data: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.stage = stage
        self.partial_data = partial_data


class JsonParseError(PipelineError):
    """Raised after every JSON recovery strategy has failed."""

    def __init__(self, preview: str, parser_error: str):
        super().__init__(
            f"Failed to parse AI JSON after cleanup. Preview: {preview}\nError: {parser_error}"
        )
        self.preview = preview
        self.parser_error = parser_error


class WorkerError(PipelineError):
    """Raised by the scrape worker when browser launch or navigation fails."""
    pass
