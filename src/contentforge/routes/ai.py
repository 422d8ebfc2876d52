from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from contentforge.dependencies import get_caption_service, get_script_service, get_text_service
from contentforge.log_config import logger
from contentforge.routes.utils import format_captions
from contentforge.schema import AiRequest
from contentforge.services import CaptionService, ScriptService, TextService

router = APIRouter(prefix="/api", tags=["ai"])


@router.post("/ai")
async def generate_content(
    request: AiRequest,
    captions: CaptionService = Depends(get_caption_service),
    scripts: ScriptService = Depends(get_script_service),
    texts: TextService = Depends(get_text_service),
) -> dict[str, Any]:
    logger.info("ai request type=%s language=%s", request.type, request.language)
    result: Any
    if request.type == "captions":
        generated = await captions.generate(request.content, request.language, request.count, request.tone, request.niche)
        result = [item.model_dump() for item in format_captions(generated)]
    elif request.type == "script":
        script = await scripts.generate(request.content, request.language, request.tone, request.niche)
        result = script.model_dump()
    else:
        result = await texts.generate(request.type, request.content, request.language, request.tone, request.niche)
    return {"success": True, request.type: result}
