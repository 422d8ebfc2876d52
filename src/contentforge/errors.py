"""Error taxonomy shared by the adapters, the normalizer and the HTTP layer.

Every error raised on purpose inside the service derives from ``ForgeError``
and carries the HTTP status it should be reported with, so the outermost
exception handler can render it without inspecting the type.
"""

from __future__ import annotations

from typing import Any

from fastapi import status


class ForgeError(Exception):
    """Base class for all errors raised by ContentForge.

    Attributes:
        message: Human-readable error description.
        status_code: HTTP status the error is reported with.
        details: Structured context for logs (stage, upstream status, raw text).
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details: dict[str, Any] = dict(details or {})
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


class ValidationError(ForgeError):
    """Request body has the wrong shape or violates a bound."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(ForgeError):
    """Unsupported language, tone or content type."""

    status_code = status.HTTP_400_BAD_REQUEST


class ExtractionError(ForgeError):
    """Source text is too short or the source could not be parsed."""

    status_code = status.HTTP_400_BAD_REQUEST


class InvalidVideoUrlError(ExtractionError):
    """The value does not look like a YouTube URL or video id."""


class TranscriptDisabledError(ExtractionError):
    """The video owner disabled transcripts."""


class NotFoundError(ForgeError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str, **kwargs: Any):
        super().__init__(f"{resource} not found", **kwargs)


class UpstreamError(ForgeError):
    """An external API answered with a failure or could not be reached.

    ``upstream_status`` holds the external service's status code when one was
    received; ``status_code`` is what our caller sees (400 when the failure
    stems from user input such as a bad PDF URL, 500 otherwise).
    """

    def __init__(self, message: str, *, upstream_status: int | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.upstream_status = upstream_status
        if upstream_status is not None:
            self.details.setdefault("upstream_status", upstream_status)


class UpstreamTimeoutError(UpstreamError):
    """An external call was aborted by its timeout."""


class EmptyCompletionError(UpstreamError):
    """The completion API answered successfully with no content."""


class TranscriptFetchError(UpstreamError):
    """The transcript service failed for a reason other than missing data."""


class GenerationError(ForgeError):
    """Model output could not be turned into the requested content.

    ``raw_text`` keeps the unparsed model output for diagnostics; it is logged
    but never sent to the client.
    """

    def __init__(self, message: str, *, raw_text: str | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.raw_text = raw_text


class StructuralValidationError(GenerationError):
    """Parsed model output does not match the script structure."""

    def __init__(self, message: str, *, scene_index: int | None = None, **kwargs: Any):
        if scene_index is not None:
            message = f"Scene {scene_index}: {message}"
        super().__init__(message, **kwargs)
        self.scene_index = scene_index
