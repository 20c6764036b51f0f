from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    output_dir: Path = Path("./output")
    layout_yaml_path: Path = Path("./album.yaml")
    font_name: str = "DejaVu Sans"
    subtitle: str = "Ett fotoalbum genererat av REMI Story"
    # None keeps remote fetches unbounded; a hung server blocks the build.
    fetch_timeout_s: float | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ALBUM_",
        env_file_encoding="utf-8",
    )

    @field_validator("fetch_timeout_s")
    @classmethod
    def timeout_must_be_positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("fetch_timeout_s must be greater than 0")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log_level: {v}")
        return level
