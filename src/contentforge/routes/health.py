from __future__ import annotations

import time
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Depends, Response, status

from contentforge.dependencies import get_caption_service, get_completion_client
from contentforge.llm import CompletionClient
from contentforge.log_config import logger
from contentforge.routes.utils import format_captions
from contentforge.schema import ApiStatus, HealthResponse
from contentforge.services import CaptionService

router = APIRouter(prefix="/api/health", tags=["health"])

AI_TEST_CONTENT = "This is a test message to verify the AI service is working correctly."


@router.get("", response_model=HealthResponse)
async def check_health(
    response: Response,
    client: CompletionClient = Depends(get_completion_client),
) -> HealthResponse:
    started = time.perf_counter()
    healthy = await client.ping()
    latency_ms = int((time.perf_counter() - started) * 1000)
    logger.info("health probe api=%s latency_ms=%d", "up" if healthy else "down", latency_ms)
    if not healthy:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        success=healthy,
        status=ApiStatus(api="up" if healthy else "down", latency_ms=latency_ms),
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.get("/ai-test")
async def test_ai(service: CaptionService = Depends(get_caption_service)) -> dict[str, Any]:
    captions = await service.generate(AI_TEST_CONTENT, "en-US", 1, "Casual", "general")
    return {
        "success": True,
        "test": [item.model_dump() for item in format_captions(captions)],
        "timestamp": datetime.now(UTC).isoformat(),
    }
