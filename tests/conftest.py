import json
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from contentforge.config import ForgeConfig
from contentforge.dependencies import get_completion_client, get_pdf_fetcher, get_storage, get_transcript_fetcher
from contentforge.errors import ForgeError
from contentforge.server import create_app
from contentforge.sources import Transcript, TranscriptItem
from contentforge.storage import UploadResult

SCRIPT_PAYLOAD: dict[str, Any] = {
    "scenes": [
        {
            "sceneId": "scene-1",
            "type": "intro",
            "visual": {"description": "Close-up of a coffee cup", "elements": ["steam", "text overlay"]},
            "narration": {"text": "Your morning coffee is lying to you.", "keyPoints": ["hook"], "steps": []},
            "duration": 3,
        },
        {
            "sceneId": "scene-2",
            "type": "closing",
            "visual": {"description": "Host points at the camera", "elements": []},
            "narration": {"text": "Follow for part 2.", "keyPoints": [], "steps": []},
            "duration": 4,
        },
    ]
}

CAPTIONS_OUTPUT = """1. Coffee first, questions later. Here is why your brew matters ☕ #coffee #morning
2. "Three tweaks turn a bland cup into a ritual. Save this for tomorrow 🙌 #coffeetime #barista"
- Stop wasting beans. Grind right before brewing and taste the difference ✨ #coffeelover #brew"""

LONG_TEXT = (
    "Coffee brewing is a craft that rewards small adjustments. Grinding beans right before brewing keeps "
    "aromatic oils intact, water just off the boil extracts sweetness without bitterness, and a simple "
    "scale removes the guesswork from every cup."
)


class FakeCompletionClient:
    """Stands in for ``CompletionClient``; answers by whether JSON was requested."""

    def __init__(self) -> None:
        self.captions_text = CAPTIONS_OUTPUT
        self.script_text = json.dumps(SCRIPT_PAYLOAD)
        self.free_text = "  A short summary.  "
        self.error: ForgeError | None = None
        self.script_error: ForgeError | None = None
        self.healthy = True
        self.calls: list[dict[str, Any]] = []

    async def complete(self, system_prompt: str, user_prompt: str, expect_json: bool = False) -> str:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt, "expect_json": expect_json})
        if self.error is not None:
            raise self.error
        if expect_json:
            if self.script_error is not None:
                raise self.script_error
            return self.script_text
        if "caption" in system_prompt:
            return self.captions_text
        return self.free_text

    async def ping(self) -> bool:
        return self.healthy


class FakePdfFetcher:
    def __init__(self) -> None:
        self.urls: list[str] = []

    async def fetch(self, url: str) -> bytes:
        self.urls.append(url)
        return b"%PDF-1.4 fake"


class FakeTranscriptFetcher:
    def __init__(self) -> None:
        self.text = LONG_TEXT
        self.requests: list[tuple[str, str | None]] = []

    async def fetch(self, video_id: str, language: str | None = None) -> Transcript:
        self.requests.append((video_id, language))
        return Transcript(
            video_id=video_id,
            language="en",
            items=[
                TranscriptItem(text=self.text, offset=0.0, duration=12.5),
                TranscriptItem(text="", offset=12.5, duration=2.0),
            ],
        )


class FakeStorage:
    def __init__(self) -> None:
        self.uploads: list[tuple[bytes, str]] = []

    async def upload(self, data: bytes, filename: str) -> UploadResult:
        self.uploads.append((data, filename))
        return UploadResult(
            secure_url=f"https://res.cloudinary.com/demo/raw/upload/{filename}",
            public_id=f"1700000000000-{filename}",
        )


def make_config(**overrides: Any) -> ForgeConfig:
    values: dict[str, Any] = {
        "deepseek_api_key": "test-deepseek-key",
        "cloudinary_cloud_name": "demo",
        "cloudinary_api_key": "cloud-key",
        "cloudinary_api_secret": "cloud-secret",
        "cloudinary_upload_preset": "preset",
        "environment": "development",
        "cors_origin": "https://app.example.com",
    }
    values.update(overrides)
    return ForgeConfig(_env_file=None, **values)


@pytest.fixture
def config() -> ForgeConfig:
    return make_config()


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def pdf_fetcher() -> FakePdfFetcher:
    return FakePdfFetcher()


@pytest.fixture
def transcript_fetcher() -> FakeTranscriptFetcher:
    return FakeTranscriptFetcher()


@pytest.fixture
def storage() -> FakeStorage:
    return FakeStorage()


@pytest.fixture
def app(
    config: ForgeConfig,
    fake_client: FakeCompletionClient,
    pdf_fetcher: FakePdfFetcher,
    transcript_fetcher: FakeTranscriptFetcher,
    storage: FakeStorage,
) -> FastAPI:
    application = create_app(config)
    application.dependency_overrides[get_completion_client] = lambda: fake_client
    application.dependency_overrides[get_pdf_fetcher] = lambda: pdf_fetcher
    application.dependency_overrides[get_transcript_fetcher] = lambda: transcript_fetcher
    application.dependency_overrides[get_storage] = lambda: storage
    return application


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
