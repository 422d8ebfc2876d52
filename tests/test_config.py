from pathlib import Path

import pytest
from pydantic import ValidationError

from contentforge.config import ForgeConfig, load_config

from .conftest import make_config

REQUIRED_ENV = {
    "DEEPSEEK_API_KEY": "env-deepseek-key",
    "CLOUDINARY_CLOUD_NAME": "env-cloud",
    "CLOUDINARY_API_KEY": "env-cloud-key",
    "CLOUDINARY_API_SECRET": "env-cloud-secret",
    "CLOUDINARY_UPLOAD_PRESET": "env-preset",
}

OPTIONAL_ENV = (
    "ENVIRONMENT",
    "PORT",
    "DEEPSEEK_MODEL",
    "COMPLETION_TIMEOUT",
    "HEALTH_TIMEOUT",
    "RATE_LIMIT_MAX",
    "RATE_LIMIT_WINDOW",
    "MAX_JSON_BYTES",
)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in [*REQUIRED_ENV, *OPTIONAL_ENV]:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env: pytest.MonkeyPatch) -> None:
    config = make_config()

    assert config.port == 3000
    assert config.deepseek_model == "deepseek-chat"
    assert config.completion_timeout == 30.0
    assert config.health_timeout == 2.0
    assert config.rate_limit == "100/900 seconds"
    assert config.max_json_bytes == 10 * 1024 * 1024
    assert config.is_development is True


def test_missing_required_settings_fail(clean_env: pytest.MonkeyPatch) -> None:
    with pytest.raises(ValidationError) as exc_info:
        ForgeConfig(_env_file=None)

    missing = {error["loc"][0] for error in exc_info.value.errors()}
    assert missing == {name.lower() for name in REQUIRED_ENV}


def test_settings_read_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)
    clean_env.setenv("ENVIRONMENT", "production")
    clean_env.setenv("PORT", "8080")

    config = ForgeConfig(_env_file=None)

    assert config.deepseek_api_key == "env-deepseek-key"
    assert config.port == 8080
    assert config.is_development is False


def test_cors_origin_must_be_http_url() -> None:
    assert make_config(cors_origin="https://app.example.com/").cors_origin == "https://app.example.com"
    with pytest.raises(ValidationError):
        make_config(cors_origin="app.example.com")


def test_environment_is_restricted() -> None:
    with pytest.raises(ValidationError):
        make_config(environment="staging")


def test_load_config_resolves_env_references(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)
    clean_env.setenv("YAML_DEEPSEEK_KEY", "yaml-deepseek-key")
    config_file = tmp_path / "config.yml"
    config_file.write_text(
        "deepseek_api_key: ${YAML_DEEPSEEK_KEY}\nport: 4000\nlog_level: DEBUG\n",
        encoding="utf-8",
    )

    config = load_config(str(config_file))

    assert config.deepseek_api_key == "yaml-deepseek-key"
    assert config.port == 4000
    assert config.log_level == "DEBUG"
    assert config.cloudinary_cloud_name == "env-cloud"


def test_load_config_without_file_uses_environment(clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)

    config = load_config(str(tmp_path / "missing.yml"))

    assert config.deepseek_api_key == "env-deepseek-key"


def test_rate_limit_read_from_environment(clean_env: pytest.MonkeyPatch) -> None:
    for name, value in REQUIRED_ENV.items():
        clean_env.setenv(name, value)
    clean_env.setenv("RATE_LIMIT_MAX", "20")
    clean_env.setenv("RATE_LIMIT_WINDOW", "60")

    assert ForgeConfig(_env_file=None).rate_limit == "20/60 seconds"


def test_rate_limit_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        make_config(rate_limit_max=0)
