from __future__ import annotations

from fastapi import APIRouter, Depends

from contentforge.dependencies import get_caption_service, get_combined_service, get_script_service
from contentforge.log_config import logger
from contentforge.routes.utils import format_captions
from contentforge.schema import (
    CaptionsResponse,
    CombinedResponse,
    ScriptResponse,
    TextCaptionsRequest,
    TextCombinedRequest,
    TextScriptRequest,
)
from contentforge.services import CaptionService, CombinedService, ScriptService

router = APIRouter(prefix="/api/text", tags=["text"])


@router.post("/captions", response_model=CaptionsResponse)
async def generate_text_captions(
    request: TextCaptionsRequest,
    service: CaptionService = Depends(get_caption_service),
) -> CaptionsResponse:
    logger.info(
        "text.captions request language=%s count=%d tone=%s niche=%s",
        request.language,
        request.count,
        request.tone,
        request.niche,
    )
    captions = await service.generate(request.text, request.language, request.count, request.tone, request.niche)
    return CaptionsResponse(captions=format_captions(captions))


@router.post("/script", response_model=ScriptResponse)
async def generate_text_script(
    request: TextScriptRequest,
    service: ScriptService = Depends(get_script_service),
) -> ScriptResponse:
    logger.info("text.script request language=%s tone=%s niche=%s", request.language, request.tone, request.niche)
    script = await service.generate(request.text, request.language, request.tone, request.niche)
    return ScriptResponse(script=script)


@router.post("/combined", response_model=CombinedResponse)
async def generate_text_combined(
    request: TextCombinedRequest,
    service: CombinedService = Depends(get_combined_service),
) -> CombinedResponse:
    logger.info("text.combined request language=%s count=%d tone=%s", request.language, request.count, request.tone)
    result = await service.generate(request.text, request.language, request.count, request.tone, request.niche)
    return CombinedResponse(captions=format_captions(result.captions), script=result.script)
