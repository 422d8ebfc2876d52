from __future__ import annotations

import asyncio
import re

from pydantic import BaseModel
from youtube_transcript_api import (
    CouldNotRetrieveTranscript,
    NoTranscriptFound,
    TranscriptsDisabled,
    VideoUnavailable,
    YouTubeTranscriptApi,
)

from contentforge.catalog import transcript_language
from contentforge.errors import InvalidVideoUrlError, NotFoundError, TranscriptDisabledError, TranscriptFetchError
from contentforge.log_config import logger

FALLBACK_TRANSCRIPT_LANGUAGE = "en"

_ID = r"[A-Za-z0-9_-]{11}"
_BARE_ID = re.compile(rf"^{_ID}$")
_URL_PATTERNS = (
    re.compile(rf"youtube(?:-nocookie)?\.com/watch\?(?:[^#]*&)?v=({_ID})(?![A-Za-z0-9_-])"),
    re.compile(rf"youtu\.be/({_ID})(?![A-Za-z0-9_-])"),
    re.compile(rf"youtube(?:-nocookie)?\.com/(?:embed|shorts|v|live)/({_ID})(?![A-Za-z0-9_-])"),
)


def extract_video_id(url: str) -> str:
    value = url.strip()
    if _BARE_ID.match(value):
        return value
    for pattern in _URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)
    logger.warning("Failed to extract video id from %s", value)
    raise InvalidVideoUrlError("Invalid YouTube URL")


class TranscriptItem(BaseModel):
    text: str
    offset: float
    duration: float = 0


class Transcript(BaseModel):
    video_id: str
    language: str | None = None
    items: list[TranscriptItem]

    @property
    def text(self) -> str:
        return " ".join(stripped for stripped in (item.text.strip() for item in self.items) if stripped)

    @property
    def duration(self) -> float:
        """Seconds from the start of the video to the end of the last item."""
        return max((item.offset + item.duration for item in self.items), default=0.0)


def _preferred_languages(language: str | None) -> list[str]:
    languages = [transcript_language(language)] if language else []
    if FALLBACK_TRANSCRIPT_LANGUAGE not in languages:
        languages.append(FALLBACK_TRANSCRIPT_LANGUAGE)
    return languages


class TranscriptFetcher:
    """Fetch video transcripts, preferring the requested language then English.

    When neither is available the first listed track is used.
    """

    def __init__(self, api: YouTubeTranscriptApi | None = None):
        self.api = api or YouTubeTranscriptApi()

    def _fetch_sync(self, video_id: str, languages: list[str]) -> tuple[str | None, list[TranscriptItem]]:
        transcript_list = self.api.list(video_id)
        try:
            transcript = transcript_list.find_transcript(languages)
        except NoTranscriptFound:
            transcript = next(iter(transcript_list), None)
            if transcript is None:
                raise
        fetched = transcript.fetch()
        items = [TranscriptItem(text=snippet.text, offset=snippet.start, duration=snippet.duration) for snippet in fetched]
        return transcript.language_code, items

    async def fetch(self, video_id: str, language: str | None = None) -> Transcript:
        languages = _preferred_languages(language)
        logger.info("Fetching transcript video_id=%s languages=%s", video_id, languages)
        try:
            language_code, items = await asyncio.to_thread(self._fetch_sync, video_id, languages)
        except TranscriptsDisabled as exc:
            raise TranscriptDisabledError(
                "Transcripts are disabled for this video", details={"video_id": video_id}
            ) from exc
        except (NoTranscriptFound, VideoUnavailable) as exc:
            raise NotFoundError("Transcript", details={"video_id": video_id}) from exc
        except CouldNotRetrieveTranscript as exc:
            logger.error("Transcript fetch failed video_id=%s: %s", video_id, exc)
            raise TranscriptFetchError("Failed to fetch transcript", details={"video_id": video_id}) from exc
        except Exception as exc:
            logger.error("Transcript fetch failed video_id=%s: %s", video_id, exc)
            raise TranscriptFetchError("Failed to fetch transcript", details={"video_id": video_id}) from exc

        if not items:
            raise NotFoundError("Transcript", details={"video_id": video_id})

        transcript = Transcript(video_id=video_id, language=language_code, items=items)
        logger.info("Fetched transcript items=%d characters=%d", len(items), len(transcript.text))
        return transcript
