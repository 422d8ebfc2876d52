"""Generation orchestrators.

Each service is a small stateless object wrapping a ``CompletionClient``:
prompt assembly, one completion call and normalization of the answer. Errors
are never swallowed; the failing stage is recorded in ``details`` and the
error is re-raised.
"""

from __future__ import annotations

import asyncio
from typing import NamedTuple

from contentforge.catalog import DEFAULT_LANGUAGE, DEFAULT_NICHE, DEFAULT_TONE
from contentforge.errors import ConfigurationError, ForgeError
from contentforge.llm import CompletionClient
from contentforge.log_config import logger
from contentforge.parser import parse_captions, parse_script
from contentforge.prompt import build_prompt
from contentforge.schema import ScriptStructure

FREE_TEXT_TYPES = ("summary", "expertise", "variation")


class CaptionService:
    def __init__(self, client: CompletionClient):
        self.client = client

    async def generate(
        self,
        content: str,
        language: str = DEFAULT_LANGUAGE,
        count: int = 1,
        tone: str = DEFAULT_TONE,
        niche: str = DEFAULT_NICHE,
    ) -> list[str]:
        logger.info(
            "Starting caption generation length=%d language=%s count=%d tone=%s niche=%s",
            len(content),
            language,
            count,
            tone,
            niche,
        )
        try:
            prompt = build_prompt("captions", content, language, tone, niche, count)
            text = await self.client.complete(prompt.system_prompt, prompt.user_prompt, expect_json=False)
            captions = parse_captions(text, count)
        except ForgeError as exc:
            exc.details.setdefault("stage", "captions")
            logger.error("Caption generation failed: %s", exc.message)
            raise
        logger.info("Generated %d captions", len(captions))
        return captions


class ScriptService:
    def __init__(self, client: CompletionClient):
        self.client = client

    async def generate(
        self,
        content: str,
        language: str = DEFAULT_LANGUAGE,
        tone: str = DEFAULT_TONE,
        niche: str = DEFAULT_NICHE,
    ) -> ScriptStructure:
        logger.info(
            "Starting script generation length=%d language=%s tone=%s niche=%s",
            len(content),
            language,
            tone,
            niche,
        )
        try:
            prompt = build_prompt("script", content, language, tone, niche)
            text = await self.client.complete(prompt.system_prompt, prompt.user_prompt, expect_json=True)
            script = parse_script(text)
        except ForgeError as exc:
            exc.details.setdefault("stage", "script")
            logger.error("Script generation failed: %s", exc.message)
            raise
        logger.info("Generated script with %d scenes", len(script.scenes))
        return script


class CombinedResult(NamedTuple):
    captions: list[str]
    script: ScriptStructure


class CombinedService:
    """Run caption and script generation concurrently, all or nothing.

    The first failure cancels the sibling task and is re-raised; a partial
    result is never returned.
    """

    def __init__(self, client: CompletionClient):
        self.captions = CaptionService(client)
        self.scripts = ScriptService(client)

    async def generate(
        self,
        content: str,
        language: str = DEFAULT_LANGUAGE,
        count: int = 1,
        tone: str = DEFAULT_TONE,
        niche: str = DEFAULT_NICHE,
    ) -> CombinedResult:
        logger.info("Starting combined generation length=%d language=%s count=%d", len(content), language, count)
        caption_task = asyncio.create_task(self.captions.generate(content, language, count, tone, niche))
        script_task = asyncio.create_task(self.scripts.generate(content, language, tone, niche))
        tasks = (caption_task, script_task)

        try:
            _, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise

        failures = [task.exception() for task in tasks if task.done() and not task.cancelled() and task.exception()]
        if failures:
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            logger.error("Combined generation failed: %s", failures[0])
            raise failures[0]

        return CombinedResult(captions=caption_task.result(), script=script_task.result())


class TextService:
    """Free-form generation for summaries, expertise areas and variations."""

    def __init__(self, client: CompletionClient):
        self.client = client

    async def generate(
        self,
        content_type: str,
        content: str,
        language: str = DEFAULT_LANGUAGE,
        tone: str = DEFAULT_TONE,
        niche: str = DEFAULT_NICHE,
    ) -> str:
        if content_type not in FREE_TEXT_TYPES:
            raise ConfigurationError(f"Unsupported content type: {content_type}")
        logger.info("Starting %s generation length=%d language=%s", content_type, len(content), language)
        try:
            prompt = build_prompt(content_type, content, language, tone, niche)
            text = await self.client.complete(prompt.system_prompt, prompt.user_prompt)
        except ForgeError as exc:
            exc.details.setdefault("stage", content_type)
            logger.error("%s generation failed: %s", content_type.capitalize(), exc.message)
            raise
        return text.strip()
