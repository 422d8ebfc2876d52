from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from contentforge.errors import ConfigurationError

LanguageCode = Literal["en-US", "es-ES", "pt-BR"]
Tone = Literal["Casual", "Formal", "Humorous", "Inspirational", "Professional"]

DEFAULT_LANGUAGE: LanguageCode = "en-US"
DEFAULT_TONE: Tone = "Casual"
DEFAULT_NICHE = "general"

TONES: tuple[str, ...] = ("Casual", "Formal", "Humorous", "Inspirational", "Professional")


class LanguageConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    display_name: str
    system_prompt: str


LANGUAGES: dict[str, LanguageConfig] = {
    "en-US": LanguageConfig(
        code="en-US",
        display_name="American English",
        system_prompt="Respond in clear American English. Make sure to use the correct grammar and punctuation.",
    ),
    "es-ES": LanguageConfig(
        code="es-ES",
        display_name="Spanish",
        system_prompt="Responde en español claro. Asegúrate de usar la gramática y puntuación correcta.",
    ),
    "pt-BR": LanguageConfig(
        code="pt-BR",
        display_name="Brazilian Portuguese",
        system_prompt="Responda em português brasileiro claro. Tenha cuidado com a gramática e a pontuação.",
    ),
}


def get_language(code: str) -> LanguageConfig:
    language = LANGUAGES.get(code)
    if language is None:
        raise ConfigurationError(
            f"Unsupported language: {code}",
            details={"supported": sorted(LANGUAGES)},
        )
    return language


def normalize_tone(value: str) -> str:
    """Map a tone label case-insensitively onto its canonical spelling."""
    for tone in TONES:
        if tone.lower() == value.strip().lower():
            return tone
    raise ConfigurationError(f"Unsupported tone: {value}", details={"supported": list(TONES)})


def transcript_language(code: str) -> str:
    # "pt-BR" -> "pt"; transcript tracks are keyed by ISO-639-1 codes
    return get_language(code).code.split("-", 1)[0]
