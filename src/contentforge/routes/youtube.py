from __future__ import annotations

from fastapi import APIRouter, Depends

from contentforge.dependencies import (
    get_caption_service,
    get_combined_service,
    get_script_service,
    get_transcript_fetcher,
)
from contentforge.log_config import logger
from contentforge.routes.utils import format_captions
from contentforge.schema import (
    MIN_CAPTION_SOURCE_LENGTH,
    MIN_SCRIPT_TEXT_LENGTH,
    CaptionsResponse,
    CombinedResponse,
    ScriptResponse,
    TranscriptRequest,
    TranscriptResponse,
    YoutubeCaptionsRequest,
    YoutubeCombinedRequest,
    YoutubeScriptRequest,
)
from contentforge.services import CaptionService, CombinedService, ScriptService
from contentforge.sources import TranscriptFetcher, ensure_source_length, extract_video_id

router = APIRouter(prefix="/api/youtube", tags=["youtube"])


async def _load_transcript_text(url: str, language: str | None, fetcher: TranscriptFetcher) -> str:
    video_id = extract_video_id(url)
    transcript = await fetcher.fetch(video_id, language)
    return transcript.text


@router.post("/transcript", response_model=TranscriptResponse)
async def get_transcript(
    request: TranscriptRequest,
    fetcher: TranscriptFetcher = Depends(get_transcript_fetcher),
) -> TranscriptResponse:
    video_id = extract_video_id(request.url)
    transcript = await fetcher.fetch(video_id, request.language)
    logger.info("youtube.transcript video_id=%s items=%d", video_id, len(transcript.items))
    return TranscriptResponse(videoId=video_id, transcript=transcript.text, duration=transcript.duration)


@router.post("/captions", response_model=CaptionsResponse)
async def generate_youtube_captions(
    request: YoutubeCaptionsRequest,
    fetcher: TranscriptFetcher = Depends(get_transcript_fetcher),
    service: CaptionService = Depends(get_caption_service),
) -> CaptionsResponse:
    logger.info("youtube.captions request language=%s count=%d", request.language, request.count)
    text = await _load_transcript_text(request.url, request.language, fetcher)
    ensure_source_length(text, MIN_CAPTION_SOURCE_LENGTH, "caption generation")
    captions = await service.generate(text, request.language, request.count, request.tone, request.niche)
    return CaptionsResponse(captions=format_captions(captions))


@router.post("/script", response_model=ScriptResponse)
async def generate_youtube_script(
    request: YoutubeScriptRequest,
    fetcher: TranscriptFetcher = Depends(get_transcript_fetcher),
    service: ScriptService = Depends(get_script_service),
) -> ScriptResponse:
    logger.info("youtube.script request language=%s", request.language)
    text = await _load_transcript_text(request.url, request.language, fetcher)
    ensure_source_length(text, MIN_SCRIPT_TEXT_LENGTH, "script generation")
    script = await service.generate(text, request.language, request.tone, request.niche)
    return ScriptResponse(script=script)


@router.post("/combined", response_model=CombinedResponse)
async def generate_youtube_combined(
    request: YoutubeCombinedRequest,
    fetcher: TranscriptFetcher = Depends(get_transcript_fetcher),
    service: CombinedService = Depends(get_combined_service),
) -> CombinedResponse:
    logger.info("youtube.combined request language=%s count=%d", request.language, request.count)
    text = await _load_transcript_text(request.url, request.language, fetcher)
    ensure_source_length(text, MIN_CAPTION_SOURCE_LENGTH, "combined generation")
    result = await service.generate(text, request.language, request.count, request.tone, request.niche)
    return CombinedResponse(captions=format_captions(result.captions), script=result.script)
