from __future__ import annotations

import asyncio
import io
import re
from typing import Any
from urllib.parse import unquote

import httpx
from fastapi import status
from pypdf import PdfReader
from pypdf.errors import PyPdfError

from contentforge.config import USER_AGENT
from contentforge.errors import ExtractionError, UpstreamError, UpstreamTimeoutError
from contentforge.log_config import logger

PDF_CONTENT_TYPE = "application/pdf"
MAX_PROCESSED_LINES = 15
MIN_PROCESSED_LINE_LENGTH = 10

_WHITESPACE = re.compile(r"\s+")
_SENTENCE_END = re.compile(r"(?<=[.!?])\s+")


class PdfFetcher:
    """Download a PDF over HTTP, rejecting anything that is not served as a PDF.

    Failures to reach the URL are reported as client errors: the URL came from
    the caller.
    """

    def __init__(self, timeout: float = 30.0, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    async def fetch(self, url: str) -> bytes:
        logger.info("Fetching PDF from %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": USER_AGENT},
                transport=self.transport,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException as exc:
            logger.warning("PDF fetch timed out after %.1fs url=%s", self.timeout, url)
            raise UpstreamTimeoutError(
                f"PDF fetch timed out after {self.timeout:g}s",
                status_code=status.HTTP_400_BAD_REQUEST,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("PDF fetch failed url=%s: %s", url, exc)
            raise UpstreamError("Failed to fetch PDF", status_code=status.HTTP_400_BAD_REQUEST) from exc

        if not response.is_success:
            logger.error("PDF fetch failed status=%s url=%s", response.status_code, url)
            raise UpstreamError(
                f"Failed to fetch PDF (Status {response.status_code})",
                status_code=status.HTTP_400_BAD_REQUEST,
                upstream_status=response.status_code,
            )

        content_type = response.headers.get("content-type", "")
        if PDF_CONTENT_TYPE not in content_type.lower():
            logger.warning("Rejected non-PDF content type=%s url=%s", content_type, url)
            raise ExtractionError("URL does not point to a PDF file", details={"content_type": content_type})

        logger.info("Downloaded PDF bytes=%d", len(response.content))
        return response.content


def _read_text_runs(data: bytes) -> list[str]:
    reader = PdfReader(io.BytesIO(data))
    runs: list[str] = []
    for page in reader.pages:
        page_runs: list[str] = []

        def visit(text: str, *_: Any) -> None:
            page_runs.append(text)

        page.extract_text(visitor_text=visit)
        runs.extend(page_runs)
    logger.debug("Read %d text runs from %d pages", len(runs), len(reader.pages))
    return runs


def join_text_runs(runs: list[str]) -> str:
    # percent-escapes in runs are decoded; malformed escapes are kept verbatim
    return " ".join(
        cleaned for cleaned in (_WHITESPACE.sub(" ", unquote(run)).strip() for run in runs) if cleaned
    )


async def extract_pdf_text(data: bytes) -> str:
    """Concatenate every positioned text run of the document in page order.

    Raises:
        ExtractionError: When the bytes are not a readable PDF.

    """
    try:
        runs = await asyncio.to_thread(_read_text_runs, data)
    except (PyPdfError, ValueError, KeyError, TypeError) as exc:
        logger.warning("PDF parser error: %s", exc)
        raise ExtractionError("Unable to parse PDF document") from exc
    text = join_text_runs(runs)
    logger.info("Extracted %d characters from PDF", len(text))
    return text


def extract_pdf_lines(text: str) -> list[str]:
    segments = (segment.strip() for segment in _SENTENCE_END.split(text))
    return [segment for segment in segments if len(segment) >= MIN_PROCESSED_LINE_LENGTH][:MAX_PROCESSED_LINES]
