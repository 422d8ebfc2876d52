from fastapi import Depends

from contentforge.config import ForgeConfig
from contentforge.llm import CompletionClient
from contentforge.services import CaptionService, CombinedService, ScriptService, TextService
from contentforge.sources import PdfFetcher, TranscriptFetcher
from contentforge.storage import CloudinaryStorage

_config: ForgeConfig | None = None


def set_config(config: ForgeConfig) -> None:
    """Set the global config instance."""
    global _config  # noqa: PLW0603
    _config = config


def get_config() -> ForgeConfig:
    """Get the global config instance."""
    if _config is None:
        msg = "Config not initialized"
        raise RuntimeError(msg)
    return _config


def get_completion_client(config: ForgeConfig = Depends(get_config)) -> CompletionClient:
    return CompletionClient(
        api_key=config.deepseek_api_key,
        model=config.deepseek_model,
        timeout=config.completion_timeout,
        health_timeout=config.health_timeout,
        base_url=config.deepseek_base_url,
    )


def get_caption_service(client: CompletionClient = Depends(get_completion_client)) -> CaptionService:
    return CaptionService(client)


def get_script_service(client: CompletionClient = Depends(get_completion_client)) -> ScriptService:
    return ScriptService(client)


def get_combined_service(client: CompletionClient = Depends(get_completion_client)) -> CombinedService:
    return CombinedService(client)


def get_text_service(client: CompletionClient = Depends(get_completion_client)) -> TextService:
    return TextService(client)


def get_pdf_fetcher(config: ForgeConfig = Depends(get_config)) -> PdfFetcher:
    return PdfFetcher(timeout=config.pdf_fetch_timeout)


def get_transcript_fetcher() -> TranscriptFetcher:
    return TranscriptFetcher()


def get_storage(config: ForgeConfig = Depends(get_config)) -> CloudinaryStorage:
    return CloudinaryStorage(
        cloud_name=config.cloudinary_cloud_name,
        api_key=config.cloudinary_api_key,
        api_secret=config.cloudinary_api_secret,
        upload_preset=config.cloudinary_upload_preset,
    )
