from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from hsk_trainer.domain.constants import DEFAULT_REQUEUE_OFFSET, DEFAULT_STORAGE_KEY


def _default_data_dir() -> Path:
    return Path.home() / ".local/share/hsk-trainer"


def _config_files() -> list[Path]:
    return [
        Path.home() / ".config/hsk-trainer/config.toml",
        Path.home() / ".hsk-trainer.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for hsk-trainer.
    Supports loading from:
    1. Environment variables (HSK_*)
    2. Config file (~/.config/hsk-trainer/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="HSK_",
        extra="ignore",
    )

    # Storage
    backend: Literal["json", "sqlite", "memory"] = "json"
    data_dir: Path = Field(default_factory=_default_data_dir)
    progress_file: Path | None = None
    progress_db: Path | None = None
    storage_key: str = DEFAULT_STORAGE_KEY

    # Content
    vocab_path: Path | None = None

    # Session
    requeue_offset: int = Field(default=DEFAULT_REQUEUE_OFFSET, ge=1)

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

        toml_file = next((f for f in _config_files() if f.exists()), None)

        # Earlier sources win: CLI overrides, then environment, then file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("progress_file", "progress_db", "vocab_path", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path | None:
        if v is None or v == "":
            return None
        return Path(v).expanduser()

    @field_validator("data_dir", mode="before")
    @classmethod
    def expand_data_dir(cls, v: Any) -> Path:
        # An empty value (e.g. HSK_DATA_DIR="") means the default location.
        if v is None or v == "":
            return _default_data_dir()
        return Path(v).expanduser()

    @property
    def resolved_progress_file(self) -> Path:
        return self.progress_file or self.data_dir / "progress.json"

    @property
    def resolved_progress_db(self) -> Path:
        return self.progress_db or self.data_dir / "progress.sqlite3"


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/hsk-trainer/config.toml (if exists)
    3. Environment variables (HSK_*)
    4. cli_overrides (passed from Typer; None values are ignored)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
