from __future__ import annotations

import json
import re
from enum import Enum
from typing import Any, NamedTuple

from pydantic import ValidationError as PydanticValidationError

from contentforge.errors import GenerationError, StructuralValidationError
from contentforge.log_config import logger, preview
from contentforge.schema import Scene, ScriptStructure

MIN_CAPTION_LENGTH = 5

_ENUMERATION_PREFIX = re.compile(r"^(?:\s*(?:\d+\s*[.):\-]|[-*•–—]))+\s*")
_CAPTION_LABEL = re.compile(r"^caption\s*\d*\s*[:.)\-]\s*", flags=re.IGNORECASE)
_WRAPPING_QUOTES = re.compile(r"""^["“”]([^"“”]*)["“”]$""")
_WHITESPACE = re.compile(r"\s+")
_CODE_FENCE = re.compile(r"```(?:json)?", flags=re.IGNORECASE)
_LINE_BREAKS = re.compile(r"[\r\n]+")
_OBJECT = re.compile(r"\{[\s\S]*\}")

REQUIRED_SCENE_FIELDS = ("sceneId", "type", "visual", "narration")


def extract_text_from_response(response: Any) -> str | None:
    parts: list[str] = []
    choices = getattr(response, "choices", None) or []
    for choice in choices:
        message = getattr(choice, "message", None)
        if not message:
            continue
        content = getattr(message, "content", None)
        if isinstance(content, str):
            parts.append(content)
        elif isinstance(content, list):
            for block in content:
                if isinstance(block, dict):
                    text = block.get("text")
                    if isinstance(text, str):
                        parts.append(text)
    combined = "".join(parts).strip()
    return combined or None


def _strip_labels(line: str) -> str:
    return _CAPTION_LABEL.sub("", _ENUMERATION_PREFIX.sub("", line)).strip()


def clean_caption_line(line: str) -> str:
    # quotes are removed only when they enclose the whole caption
    cleaned = _WRAPPING_QUOTES.sub(r"\1", _strip_labels(line.strip()))
    return _WHITESPACE.sub(" ", _strip_labels(cleaned)).strip()


def _is_preamble(line: str) -> bool:
    return line.endswith(":")


def parse_captions(text: str, count: int) -> list[str]:
    """Turn newline-separated model output into exactly ``count`` captions.

    Raises:
        GenerationError: When fewer than ``count`` usable lines remain.

    """
    captions = [
        cleaned
        for cleaned in (clean_caption_line(line) for line in text.splitlines())
        if len(cleaned) >= MIN_CAPTION_LENGTH and not _is_preamble(cleaned)
    ]
    if not captions:
        raise GenerationError("No valid captions were generated", raw_text=text)
    if len(captions) < count:
        logger.warning("Insufficient captions generated expected=%d received=%d", count, len(captions))
        raise GenerationError(
            f"Only generated {len(captions)}/{count} captions",
            raw_text=text,
            details={"expected": count, "received": len(captions)},
        )
    return captions[:count]


class JsonStrategy(str, Enum):
    DIRECT = "direct"
    FENCED = "fenced"
    BRACES = "braces"


class LooseJson(NamedTuple):
    value: dict[str, Any]
    strategy: JsonStrategy


def strip_code_fences(text: str) -> str:
    """Drop ```json / ``` markers and fold line breaks into spaces."""
    cleaned = _CODE_FENCE.sub("", text)
    return _LINE_BREAKS.sub(" ", cleaned).strip()


def extract_json_object(text: str) -> LooseJson:
    """Find a JSON object in free-form model output.

    Strategies are tried in order: the text as is, the text with code fences
    and line breaks removed, then the greedy span from the first ``{`` to the
    last ``}`` of the fence-free text. Nothing further is guessed.

    Raises:
        GenerationError: When no strategy yields a JSON object.

    """
    if not text or not text.strip():
        raise GenerationError("Empty response from AI service", raw_text=text)

    fence_free = strip_code_fences(text)
    candidates: list[tuple[JsonStrategy, str]] = [
        (JsonStrategy.DIRECT, text.strip()),
        (JsonStrategy.FENCED, fence_free),
    ]
    match = _OBJECT.search(fence_free)
    if match:
        candidates.append((JsonStrategy.BRACES, match.group(0)))

    for strategy, candidate in candidates:
        try:
            value = json.loads(candidate)
        except (json.JSONDecodeError, TypeError):
            logger.debug("JSON extraction strategy=%s failed", strategy.value)
            continue
        if isinstance(value, dict):
            logger.debug("JSON extraction strategy=%s succeeded", strategy.value)
            return LooseJson(value, strategy)
        logger.debug("JSON extraction strategy=%s produced %s, not an object", strategy.value, type(value).__name__)

    logger.error("Invalid JSON in model response: %s", preview(text, 300))
    raise GenerationError("Invalid JSON format in script response", raw_text=text)


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (dict, list)):
        return bool(value)
    return True


def validate_script(data: dict[str, Any]) -> ScriptStructure:
    """Check parsed model output against the script structure.

    ``scenes`` is read from the top level, falling back to ``script.scenes``.

    Raises:
        StructuralValidationError: Naming the first offending scene index.

    """
    scenes = data.get("scenes")
    if scenes is None and isinstance(data.get("script"), dict):
        scenes = data["script"].get("scenes")
    if scenes is None:
        raise StructuralValidationError("Invalid script structure: missing scenes array")
    if not isinstance(scenes, list):
        raise StructuralValidationError("Invalid script structure: scenes must be an array")
    if not scenes:
        raise StructuralValidationError("Invalid script structure: scenes must not be empty")

    parsed: list[Scene] = []
    seen_ids: set[str] = set()
    for index, raw_scene in enumerate(scenes):
        if not isinstance(raw_scene, dict):
            raise StructuralValidationError("scene must be an object", scene_index=index)
        for field in REQUIRED_SCENE_FIELDS:
            if not _present(raw_scene.get(field)):
                raise StructuralValidationError(f"missing {field}", scene_index=index)
        visual = raw_scene["visual"]
        if not isinstance(visual, dict) or not _present(visual.get("description")):
            raise StructuralValidationError("missing visual.description", scene_index=index)
        narration = raw_scene["narration"]
        if not isinstance(narration, dict) or not _present(narration.get("text")):
            raise StructuralValidationError("missing narration.text", scene_index=index)

        scene_id = str(raw_scene["sceneId"]).strip()
        if scene_id in seen_ids:
            raise StructuralValidationError(f"duplicate sceneId {scene_id!r}", scene_index=index)
        seen_ids.add(scene_id)

        try:
            parsed.append(Scene.model_validate({**raw_scene, "sceneId": scene_id}))
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            location = ".".join(str(part) for part in first["loc"])
            raise StructuralValidationError(f"invalid {location}: {first['msg']}", scene_index=index) from exc

    return ScriptStructure(scenes=parsed)


def parse_script(text: str) -> ScriptStructure:
    extracted = extract_json_object(text)
    try:
        return validate_script(extracted.value)
    except StructuralValidationError as exc:
        exc.raw_text = text
        logger.error("Script structure rejected: %s", exc.message)
        raise
