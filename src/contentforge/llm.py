from __future__ import annotations

import asyncio
from typing import Any

import httpx
from any_llm import acompletion

from contentforge.errors import EmptyCompletionError, UpstreamError, UpstreamTimeoutError
from contentforge.log_config import logger, preview
from contentforge.parser import extract_text_from_response

DEFAULT_PROVIDER = "deepseek"
DEFAULT_MODEL = "deepseek-chat"
DEFAULT_BASE_URL = "https://api.deepseek.com"

JSON_ONLY_INSTRUCTION = "IMPORTANT: You must respond with valid JSON only, no additional text or markdown formatting."
JSON_TEMPERATURE = 0.2
CREATIVE_TEMPERATURE = 0.7
MAX_TOKENS = 2000


class CompletionClient:
    """Single-shot access to the hosted chat-completion API.

    One request per call, bounded by ``timeout``; failures are reported as
    ``UpstreamError`` (non-success status or transport failure),
    ``UpstreamTimeoutError`` or ``EmptyCompletionError``. There is no retry.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        *,
        timeout: float = 30.0,
        health_timeout: float = 2.0,
        base_url: str = DEFAULT_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.health_timeout = health_timeout
        self.base_url = base_url.rstrip("/")
        self.transport = transport

    @property
    def model_input(self) -> str:
        return self.model if ":" in self.model else f"{DEFAULT_PROVIDER}:{self.model}"

    def build_request(self, system_prompt: str, user_prompt: str, expect_json: bool = False) -> dict[str, Any]:
        final_system_prompt = f"{system_prompt}\n{JSON_ONLY_INSTRUCTION}" if expect_json else system_prompt
        return {
            "model": self.model_input,
            "messages": [
                {"role": "system", "content": final_system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "api_key": self.api_key,
            "temperature": JSON_TEMPERATURE if expect_json else CREATIVE_TEMPERATURE,
            "max_tokens": MAX_TOKENS,
            "stream": False,
        }

    async def complete(self, system_prompt: str, user_prompt: str, expect_json: bool = False) -> str:
        completion_kwargs = self.build_request(system_prompt, user_prompt, expect_json)
        logger.debug(
            "completion request model=%s expect_json=%s system=%r user=%r",
            self.model_input,
            expect_json,
            preview(system_prompt),
            preview(user_prompt),
        )

        try:
            response = await asyncio.wait_for(acompletion(**completion_kwargs), timeout=self.timeout)
        except asyncio.TimeoutError as exc:
            logger.error("Completion API timed out after %.1fs", self.timeout)
            raise UpstreamTimeoutError(f"AI generation timed out after {self.timeout:g}s") from exc
        except Exception as exc:
            upstream_status = getattr(exc, "status_code", None)
            logger.error("Completion API request failed status=%s: %s", upstream_status, exc)
            message = (
                f"AI generation failed: completion API returned status {upstream_status}"
                if upstream_status
                else "AI generation failed: completion API request could not be completed"
            )
            raise UpstreamError(message, upstream_status=upstream_status, details={"cause": str(exc)}) from exc

        text = extract_text_from_response(response)
        if not text:
            logger.error("Empty response content from completion API")
            raise EmptyCompletionError("Received empty response from AI service")

        logger.debug("completion response length=%d preview=%r", len(text), preview(text))
        return text

    async def ping(self) -> bool:
        """Probe the provider's model listing with the short health timeout."""
        try:
            async with httpx.AsyncClient(timeout=self.health_timeout, transport=self.transport) as client:
                response = await client.get(
                    f"{self.base_url}/models",
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Completion API health probe failed: %s", exc)
            return False
        if not response.is_success:
            logger.warning("Completion API health probe returned status=%s", response.status_code)
        return response.is_success
