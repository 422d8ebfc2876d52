from __future__ import annotations

from fastapi import APIRouter, Depends

from contentforge.dependencies import get_caption_service, get_combined_service, get_pdf_fetcher, get_script_service
from contentforge.log_config import logger
from contentforge.routes.utils import format_captions, load_pdf_text
from contentforge.schema import (
    MIN_CAPTION_SOURCE_LENGTH,
    MIN_SCRIPT_DOCUMENT_LENGTH,
    CaptionItem,
    CaptionsResponse,
    CombinedResponse,
    PdfCaptionsRequest,
    PdfCombinedRequest,
    PdfProcessRequest,
    PdfProcessResponse,
    PdfScriptRequest,
    ScriptResponse,
)
from contentforge.services import CaptionService, CombinedService, ScriptService
from contentforge.sources import PdfFetcher, ensure_source_length, extract_pdf_lines

router = APIRouter(prefix="/api/pdf", tags=["pdf"])


@router.post("/process", response_model=PdfProcessResponse)
async def process_pdf(
    request: PdfProcessRequest,
    fetcher: PdfFetcher = Depends(get_pdf_fetcher),
) -> PdfProcessResponse:
    text = await load_pdf_text(request.url, fetcher)
    lines = extract_pdf_lines(text)
    logger.info("pdf.process extracted %d segments", len(lines))
    return PdfProcessResponse(content=[CaptionItem(id=index, content=line) for index, line in enumerate(lines)])


@router.post("/captions", response_model=CaptionsResponse)
async def generate_pdf_captions(
    request: PdfCaptionsRequest,
    fetcher: PdfFetcher = Depends(get_pdf_fetcher),
    service: CaptionService = Depends(get_caption_service),
) -> CaptionsResponse:
    logger.info("pdf.captions request language=%s count=%d tone=%s", request.language, request.count, request.tone)
    text = await load_pdf_text(request.url, fetcher)
    ensure_source_length(text, MIN_CAPTION_SOURCE_LENGTH, "caption generation")
    captions = await service.generate(text, request.language, request.count, request.tone, request.niche)
    return CaptionsResponse(captions=format_captions(captions))


@router.post("/script", response_model=ScriptResponse)
async def generate_pdf_script(
    request: PdfScriptRequest,
    fetcher: PdfFetcher = Depends(get_pdf_fetcher),
    service: ScriptService = Depends(get_script_service),
) -> ScriptResponse:
    logger.info("pdf.script request language=%s tone=%s", request.language, request.tone)
    text = await load_pdf_text(request.url, fetcher)
    ensure_source_length(text, MIN_SCRIPT_DOCUMENT_LENGTH, "script generation")
    script = await service.generate(text, request.language, request.tone, request.niche)
    return ScriptResponse(script=script)


@router.post("/combined", response_model=CombinedResponse)
async def generate_pdf_combined(
    request: PdfCombinedRequest,
    fetcher: PdfFetcher = Depends(get_pdf_fetcher),
    service: CombinedService = Depends(get_combined_service),
) -> CombinedResponse:
    logger.info("pdf.combined request language=%s count=%d tone=%s", request.language, request.count, request.tone)
    text = await load_pdf_text(request.url, fetcher)
    ensure_source_length(text, MIN_SCRIPT_DOCUMENT_LENGTH, "combined generation")
    result = await service.generate(text, request.language, request.count, request.tone, request.niche)
    return CombinedResponse(captions=format_captions(result.captions), script=result.script)
