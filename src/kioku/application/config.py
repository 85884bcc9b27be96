from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from kioku.domain.constants import DEFAULT_PROGRESS_ENDPOINT, REQUEST_TIMEOUT


def _config_files() -> list[Path]:
    return [
        Path.home() / ".config/kioku/config.toml",
        Path.home() / ".kioku.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for kioku.
    Supports loading from:
    1. Config file (~/.config/kioku/config.toml or ~/.kioku.toml)
    2. Environment variables (KIOKU_*)
    3. Manual overrides (CLI / API)
    """

    model_config = SettingsConfigDict(
        env_prefix="KIOKU_",
        extra="ignore",
    )

    # Paths
    store_path: Path = Field(
        default_factory=lambda: Path.home() / ".config/kioku/mastery.json"
    )
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/kioku/logs")

    # Remote backend (sync is disabled when api_base_url is unset)
    api_base_url: str | None = None
    progress_endpoint: str = DEFAULT_PROGRESS_ENDPOINT
    api_token: str | None = None
    user_id: int | None = None
    request_timeout: float = REQUEST_TIMEOUT
    sync_enabled: bool = True

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # Find the first existing file
        toml_file = next((f for f in _config_files() if f.exists()), None)

        # Earlier sources win: overrides, then env, then the TOML file
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("store_path", "log_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @field_validator("api_base_url", mode="before")
    @classmethod
    def strip_base_url(cls, v: Any) -> str | None:
        if not v:
            return None
        return str(v).rstrip("/")

    @property
    def remote_sync_active(self) -> bool:
        return self.sync_enabled and self.api_base_url is not None


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/kioku/config.toml (if exists)
    3. Environment variables (KIOKU_*)
    4. cli_overrides (passed from Typer or the API), None values ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
