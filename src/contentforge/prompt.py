from __future__ import annotations

from typing import Annotated, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from contentforge.catalog import DEFAULT_NICHE, DEFAULT_TONE, LanguageConfig, get_language, normalize_tone
from contentforge.errors import ConfigurationError

ContentType = Literal["captions", "script", "summary", "expertise", "variation"]


class PromptPair(BaseModel):
    model_config = ConfigDict(frozen=True)

    system_prompt: str
    user_prompt: str


class _PromptParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: str
    language: str
    tone: str = DEFAULT_TONE
    niche: str = DEFAULT_NICHE


class CaptionPromptParams(_PromptParams):
    kind: Literal["captions"] = "captions"
    count: int = Field(default=1, ge=1, le=5)


class ScriptPromptParams(_PromptParams):
    kind: Literal["script"] = "script"


class SummaryPromptParams(_PromptParams):
    kind: Literal["summary"] = "summary"


class ExpertisePromptParams(_PromptParams):
    kind: Literal["expertise"] = "expertise"


class VariationPromptParams(_PromptParams):
    kind: Literal["variation"] = "variation"


PromptParams = Annotated[
    Union[
        CaptionPromptParams,
        ScriptPromptParams,
        SummaryPromptParams,
        ExpertisePromptParams,
        VariationPromptParams,
    ],
    Field(discriminator="kind"),
]

_PARAMS_BY_TYPE: dict[str, type[_PromptParams]] = {
    "captions": CaptionPromptParams,
    "script": ScriptPromptParams,
    "summary": SummaryPromptParams,
    "expertise": ExpertisePromptParams,
    "variation": VariationPromptParams,
}

CAPTION_STYLE_RULES = """Style rules for every caption:
- Structure: open with a hook, add one or two lines of context, close with a clear call to action.
- Hashtags: 2 to 4 relevant hashtags, placed together at the very end of the caption. Never more than 4.
- Emojis: only at the end of a sentence, at most one per sentence, and never two emojis next to each other.
- Plain text only: no markdown, no bold or italics, no numbering, no bullet points, no quotation marks around the caption.
- Each caption must stand on its own and differ clearly in angle from the others.
- Write each caption on a single line and separate captions with a line break."""

SCRIPT_GUIDE = """Write a short-form video (Reel/Short) script that stops the scroll and converts.

Hook (0-3 seconds): open with a bold, surprising or relatable line or text overlay that speaks to the audience's pain points or desires.
Body (4-45 seconds): state the problem, break the solution into bite-sized steps, and add quick proof (a stat, a before/after, a testimonial). Use simple language, 2-3 searchable keywords and keep the narration under 100 words.
Call to action (last 3-5 seconds): tell viewers exactly what to do next ("Follow for part 2", "Save this for later").
Total length: 30 to 60 seconds across all scenes."""

SCRIPT_SHAPE = """{
  "scenes": [
    {
      "sceneId": "scene-1",            // unique id for this scene
      "type": "intro",                 // one of: intro | scene | closing
      "visual": {
        "description": "...",          // what the viewer sees
        "elements": ["...", "..."]     // props, overlays, b-roll
      },
      "narration": {
        "text": "...",                 // exact words spoken or shown
        "keyPoints": ["..."],          // ideas this scene must land
        "steps": []                    // ordered steps, empty when not a how-to
      },
      "duration": 5,                   // seconds
      "platform": {}                   // optional platform-specific hints
    }
  ]
}"""


def _captions(params: CaptionPromptParams, language: LanguageConfig) -> PromptPair:
    plural = "caption" if params.count == 1 else "captions"
    system_prompt = f"""You write social media captions for the "{params.niche}" niche.
{language.system_prompt}
Generate exactly {params.count} distinct Instagram {plural} in a {params.tone.lower()} tone.

{CAPTION_STYLE_RULES}

Return only the {plural}, one per line, with nothing before or after them."""
    user_prompt = f"Content:\n{params.content}\n\nGenerate {params.count} {plural} (newline separated):"
    return PromptPair(system_prompt=system_prompt, user_prompt=user_prompt)


def _script(params: ScriptPromptParams, language: LanguageConfig) -> PromptPair:
    system_prompt = f"""{SCRIPT_GUIDE}

Audience niche: {params.niche}
Tone: {params.tone}
{language.system_prompt}

Respond with PLAIN JSON only, without markdown or code fences, using exactly this structure (the comments explain each field and must not appear in your answer):
{SCRIPT_SHAPE}

Use "intro" for the first scene and "closing" for the last. Return ONLY the JSON object without any additional text or comments."""
    user_prompt = f"Content:\n{params.content}\n\nGenerate script JSON:"
    return PromptPair(system_prompt=system_prompt, user_prompt=user_prompt)


def _summary(params: SummaryPromptParams, language: LanguageConfig) -> PromptPair:
    return PromptPair(
        system_prompt=(
            f"Write a concise summary for a {params.niche} audience in a {params.tone.lower()} tone. "
            f"{language.system_prompt}"
        ),
        user_prompt=f"Content:\n{params.content}",
    )


def _expertise(params: ExpertisePromptParams, language: LanguageConfig) -> PromptPair:
    return PromptPair(
        system_prompt=(
            "Identify the areas of expertise demonstrated in the content, one per line, "
            f"relevant to the {params.niche} niche. {language.system_prompt}"
        ),
        user_prompt=f"Analyze:\n{params.content}",
    )


def _variation(params: VariationPromptParams, language: LanguageConfig) -> PromptPair:
    return PromptPair(
        system_prompt=(
            f"Rewrite the content as a fresh variation in a {params.tone.lower()} tone for the "
            f"{params.niche} niche, keeping its meaning. {language.system_prompt}"
        ),
        user_prompt=f"Original:\n{params.content}",
    )


_RENDERERS: dict[str, Callable[..., PromptPair]] = {
    "captions": _captions,
    "script": _script,
    "summary": _summary,
    "expertise": _expertise,
    "variation": _variation,
}


def render_prompt(params: PromptParams) -> PromptPair:
    language = get_language(params.language)
    renderer = _RENDERERS.get(params.kind)
    if renderer is None:
        raise ConfigurationError(f"Unsupported content type: {params.kind}")
    return renderer(params, language)


def build_prompt(
    content_type: str,
    content: str,
    language: str,
    tone: str = DEFAULT_TONE,
    niche: str = DEFAULT_NICHE,
    count: int = 1,
) -> PromptPair:
    """Build the system/user prompt pair for one content type.

    Raises:
        ConfigurationError: For an unknown content type, language or tone, or
            a caption count outside 1-5.

    """
    params_type = _PARAMS_BY_TYPE.get(content_type)
    if params_type is None:
        raise ConfigurationError(f"Unsupported content type: {content_type}")
    fields = {
        "content": content,
        "language": language,
        "tone": normalize_tone(tone),
        "niche": niche,
    }
    if params_type is CaptionPromptParams:
        fields["count"] = count
    try:
        params = params_type(**fields)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Invalid prompt parameters for {content_type}") from exc
    return render_prompt(params)
