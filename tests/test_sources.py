from typing import NamedTuple

import httpx
import pytest
from youtube_transcript_api import NoTranscriptFound, TranscriptsDisabled, VideoUnavailable

from contentforge.errors import (
    ExtractionError,
    InvalidVideoUrlError,
    NotFoundError,
    TranscriptDisabledError,
    TranscriptFetchError,
    UpstreamError,
    UpstreamTimeoutError,
)
from contentforge.sources import (
    PdfFetcher,
    Transcript,
    TranscriptFetcher,
    TranscriptItem,
    ensure_source_length,
    extract_pdf_lines,
    extract_pdf_text,
    extract_video_id,
)
from contentforge.sources.pdf import join_text_runs

VIDEO_ID = "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "url",
    [
        f"https://www.youtube.com/watch?v={VIDEO_ID}",
        f"https://www.youtube.com/watch?feature=share&v={VIDEO_ID}&t=42",
        f"https://youtu.be/{VIDEO_ID}?si=abc",
        f"https://www.youtube.com/shorts/{VIDEO_ID}",
        f"https://www.youtube.com/embed/{VIDEO_ID}",
        f"  {VIDEO_ID}  ",
    ],
)
def test_extract_video_id(url: str) -> None:
    assert extract_video_id(url) == VIDEO_ID


@pytest.mark.parametrize(
    "url",
    ["https://example.com/video", "https://www.youtube.com/watch?v=short", "not a url", ""],
)
def test_extract_video_id_rejects_other_urls(url: str) -> None:
    with pytest.raises(InvalidVideoUrlError, match="Invalid YouTube URL"):
        extract_video_id(url)


def test_transcript_text_and_duration() -> None:
    transcript = Transcript(
        video_id=VIDEO_ID,
        items=[
            TranscriptItem(text=" Never gonna ", offset=0.0, duration=2.5),
            TranscriptItem(text="give you up", offset=2.5, duration=3.0),
        ],
    )

    assert transcript.text == "Never gonna give you up"
    assert transcript.duration == 5.5
    assert Transcript(video_id=VIDEO_ID, items=[]).duration == 0.0


class FakeSnippet(NamedTuple):
    text: str
    start: float
    duration: float


class FakeTrack:
    def __init__(self, language_code: str, snippets: list[FakeSnippet]):
        self.language_code = language_code
        self.snippets = snippets

    def fetch(self) -> list[FakeSnippet]:
        return self.snippets


class FakeTrackList:
    def __init__(self, tracks: list[FakeTrack]):
        self.tracks = tracks

    def find_transcript(self, language_codes: list[str]) -> FakeTrack:
        for code in language_codes:
            for track in self.tracks:
                if track.language_code == code:
                    return track
        raise NoTranscriptFound(VIDEO_ID, language_codes, self)

    def __iter__(self):
        return iter(self.tracks)


class FakeTranscriptApi:
    def __init__(self, tracks: list[FakeTrack] | None = None, error: Exception | None = None):
        self.tracks = tracks or []
        self.error = error
        self.listed: list[str] = []

    def list(self, video_id: str) -> FakeTrackList:
        self.listed.append(video_id)
        if self.error is not None:
            raise self.error
        return FakeTrackList(self.tracks)


def _track(code: str, text: str) -> FakeTrack:
    return FakeTrack(code, [FakeSnippet(text, 0.0, 1.5), FakeSnippet("more words", 1.5, 2.0)])


@pytest.mark.asyncio
async def test_transcript_fetcher_prefers_requested_language() -> None:
    api = FakeTranscriptApi([_track("en", "hello"), _track("pt", "olá")])

    transcript = await TranscriptFetcher(api).fetch(VIDEO_ID, "pt-BR")

    assert api.listed == [VIDEO_ID]
    assert transcript.language == "pt"
    assert transcript.text == "olá more words"
    assert transcript.duration == 3.5


@pytest.mark.asyncio
async def test_transcript_fetcher_falls_back_to_english_then_first_track() -> None:
    english = await TranscriptFetcher(FakeTranscriptApi([_track("de", "hallo"), _track("en", "hello")])).fetch(
        VIDEO_ID, "es-ES"
    )
    first = await TranscriptFetcher(FakeTranscriptApi([_track("de", "hallo")])).fetch(VIDEO_ID, "es-ES")

    assert english.language == "en"
    assert first.language == "de"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("api", "expected"),
    [
        (FakeTranscriptApi(error=TranscriptsDisabled(VIDEO_ID)), TranscriptDisabledError),
        (FakeTranscriptApi(error=VideoUnavailable(VIDEO_ID)), NotFoundError),
        (FakeTranscriptApi([]), NotFoundError),
        (FakeTranscriptApi([FakeTrack("en", [])]), NotFoundError),
        (FakeTranscriptApi(error=RuntimeError("network down")), TranscriptFetchError),
    ],
)
async def test_transcript_fetcher_maps_errors(api: FakeTranscriptApi, expected: type[Exception]) -> None:
    with pytest.raises(expected):
        await TranscriptFetcher(api).fetch(VIDEO_ID)


def test_transcript_error_statuses() -> None:
    assert TranscriptDisabledError("disabled").status_code == 400
    assert NotFoundError("Transcript").message == "Transcript not found"
    assert NotFoundError("Transcript").status_code == 404
    assert TranscriptFetchError("failed").status_code == 500


def _pdf_fetcher(handler) -> PdfFetcher:
    return PdfFetcher(timeout=5, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_pdf_fetcher_returns_bytes() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, headers={"content-type": "application/pdf"}, content=b"%PDF-1.4 data")

    data = await _pdf_fetcher(handler).fetch("https://files.example.com/doc.pdf")

    assert data == b"%PDF-1.4 data"
    assert seen[0].headers["User-Agent"] == "ContentForge/1.0"


@pytest.mark.asyncio
async def test_pdf_fetcher_rejects_failed_status() -> None:
    fetcher = _pdf_fetcher(lambda request: httpx.Response(404))

    with pytest.raises(UpstreamError) as exc_info:
        await fetcher.fetch("https://files.example.com/missing.pdf")

    assert exc_info.value.message == "Failed to fetch PDF (Status 404)"
    assert exc_info.value.status_code == 400
    assert exc_info.value.upstream_status == 404


@pytest.mark.asyncio
async def test_pdf_fetcher_rejects_other_content_types() -> None:
    fetcher = _pdf_fetcher(lambda request: httpx.Response(200, headers={"content-type": "text/html"}, text="<html>"))

    with pytest.raises(ExtractionError, match="URL does not point to a PDF file"):
        await fetcher.fetch("https://files.example.com/page")


@pytest.mark.asyncio
async def test_pdf_fetcher_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(UpstreamTimeoutError) as exc_info:
        await _pdf_fetcher(handler).fetch("https://files.example.com/slow.pdf")

    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
@pytest.mark.parametrize("data", [b"", b"this is not a pdf document"])
async def test_extract_pdf_text_rejects_malformed_documents(data: bytes) -> None:
    with pytest.raises(ExtractionError, match="Unable to parse PDF document"):
        await extract_pdf_text(data)


def test_join_text_runs_collapses_whitespace() -> None:
    assert join_text_runs(["Hello\n", "  ", "big\t world", ""]) == "Hello big world"


def test_join_text_runs_decodes_escapes() -> None:
    assert join_text_runs(["Caf%C3%A9%20menu", "50% off"]) == "Café menu 50% off"


def test_extract_pdf_lines() -> None:
    text = "Short. This sentence is long enough! Another useful sentence? Ok."

    assert extract_pdf_lines(text) == ["This sentence is long enough!", "Another useful sentence?"]
    assert len(extract_pdf_lines("A sentence of text. " * 40)) == 15


def test_ensure_source_length() -> None:
    assert ensure_source_length("x" * 100, 100, "caption generation") == "x" * 100
    with pytest.raises(ExtractionError) as exc_info:
        ensure_source_length("x" * 99, 100, "caption generation")
    assert exc_info.value.details == {"length": 99, "minimum": 100}
