from __future__ import annotations

from typing import Annotated, Any, List, Literal

from pydantic import AfterValidator, AliasChoices, BaseModel, ConfigDict, Field, field_validator

from contentforge.catalog import DEFAULT_LANGUAGE, DEFAULT_NICHE, DEFAULT_TONE, LanguageCode, normalize_tone
from contentforge.errors import ConfigurationError
from contentforge.prompt import ContentType

MAX_TEXT_LENGTH = 5000
MIN_CAPTION_SOURCE_LENGTH = 100
MIN_SCRIPT_TEXT_LENGTH = 50
MIN_SCRIPT_DOCUMENT_LENGTH = 250


def _list_or_empty(value: Any) -> Any:
    return [] if value is None else value


class Visual(BaseModel):
    description: str
    elements: List[str] = Field(default_factory=list)

    _null_elements = field_validator("elements", mode="before")(_list_or_empty)


class Narration(BaseModel):
    text: str
    keyPoints: List[str] = Field(default_factory=list)
    steps: List[str] = Field(default_factory=list)

    _null_lists = field_validator("keyPoints", "steps", mode="before")(_list_or_empty)


class Scene(BaseModel):
    model_config = ConfigDict(extra="ignore")

    sceneId: str
    type: str
    visual: Visual
    narration: Narration
    duration: float = 0
    platform: dict[str, Any] = Field(default_factory=dict)

    @field_validator("duration", mode="before")
    @classmethod
    def _null_duration(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("platform", mode="before")
    @classmethod
    def _null_platform(cls, value: Any) -> Any:
        return {} if value is None else value


class ScriptStructure(BaseModel):
    scenes: List[Scene]


class _GenerationOptions(BaseModel):
    tone: str = DEFAULT_TONE
    niche: str = Field(default=DEFAULT_NICHE, min_length=3, max_length=50)

    @field_validator("tone")
    @classmethod
    def _normalize_tone(cls, value: str) -> str:
        try:
            return normalize_tone(value)
        except ConfigurationError as exc:
            raise ValueError(exc.message) from exc


class _CaptionOptions(_GenerationOptions):
    count: int = Field(default=1, ge=1, le=5)


def _check_http_url(value: str) -> str:
    value = value.strip()
    if not value.startswith(("http://", "https://")):
        msg = "url must be an http(s) URL"
        raise ValueError(msg)
    return value


HttpUrlStr = Annotated[str, AfterValidator(_check_http_url)]


class TextCaptionsRequest(_CaptionOptions):
    text: str = Field(min_length=MIN_CAPTION_SOURCE_LENGTH, max_length=MAX_TEXT_LENGTH)
    language: LanguageCode


class TextScriptRequest(_GenerationOptions):
    text: str = Field(min_length=MIN_SCRIPT_TEXT_LENGTH, max_length=MAX_TEXT_LENGTH)
    language: LanguageCode = DEFAULT_LANGUAGE


class TextCombinedRequest(_CaptionOptions):
    text: str = Field(min_length=MIN_CAPTION_SOURCE_LENGTH, max_length=MAX_TEXT_LENGTH)
    language: LanguageCode


class PdfProcessRequest(BaseModel):
    url: HttpUrlStr = Field(validation_alias=AliasChoices("url", "pdfUrl"))


class PdfCaptionsRequest(_CaptionOptions):
    url: HttpUrlStr = Field(validation_alias=AliasChoices("url", "pdfUrl"))
    language: LanguageCode


class PdfScriptRequest(_GenerationOptions):
    url: HttpUrlStr = Field(validation_alias=AliasChoices("url", "pdfUrl"))
    language: LanguageCode


class PdfCombinedRequest(PdfCaptionsRequest):
    pass


class TranscriptRequest(BaseModel):
    url: str = Field(min_length=1)
    language: LanguageCode | None = None


class YoutubeCaptionsRequest(_CaptionOptions):
    url: str = Field(min_length=1)
    language: LanguageCode = DEFAULT_LANGUAGE


class YoutubeScriptRequest(_GenerationOptions):
    url: str = Field(min_length=1)
    language: LanguageCode = DEFAULT_LANGUAGE


class YoutubeCombinedRequest(YoutubeCaptionsRequest):
    pass


class AiRequest(_CaptionOptions):
    type: ContentType
    content: str = Field(min_length=MIN_SCRIPT_TEXT_LENGTH, max_length=MAX_TEXT_LENGTH)
    language: LanguageCode = DEFAULT_LANGUAGE


class CaptionItem(BaseModel):
    id: int
    content: str
    type: Literal["text"] = "text"


class CaptionsResponse(BaseModel):
    success: bool = True
    captions: List[CaptionItem]


class ScriptResponse(BaseModel):
    success: bool = True
    script: ScriptStructure


class CombinedResponse(BaseModel):
    success: bool = True
    captions: List[CaptionItem]
    script: ScriptStructure


class PdfProcessResponse(BaseModel):
    success: bool = True
    content: List[CaptionItem]


class TranscriptResponse(BaseModel):
    success: bool = True
    videoId: str
    transcript: str
    duration: float


class UploadResponse(BaseModel):
    success: bool = True
    secure_url: str
    public_id: str


class ApiStatus(BaseModel):
    api: Literal["up", "down"]
    latency_ms: int


class HealthResponse(BaseModel):
    success: bool = True
    status: ApiStatus
    timestamp: str
