from pathlib import Path
from typing import Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

class Settings(BaseSettings):
    project_dir: Path = Path("./site")
    max_dimension: int = 1920
    thumb_max_width: int = 500
    quality: int = 85
    conversion_quality: int = 95
    placeholder_name: str = ".gitkeep"
    cleanup_policy: Literal["processed", "all"] = "processed"
    allow_overwrite: bool = False
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="GALLERY_",
        env_file_encoding="utf-8",
        frozen=True,
    )

    @field_validator("max_dimension", "thumb_max_width")
    @classmethod
    def dimension_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("maximum dimensions must be at least 1 pixel")
        return v

    @field_validator("quality", "conversion_quality")
    @classmethod
    def quality_must_be_percentage(cls, v: int) -> int:
        if not 1 <= v <= 100:
            raise ValueError("quality must be between 1 and 100")
        return v

    @field_validator("log_level")
    @classmethod
    def log_level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(LOG_LEVELS)}")
        return level

    @property
    def inbox_dir(self) -> Path:
        return self.project_dir / "uploads"

    @property
    def public_dir(self) -> Path:
        return self.project_dir / "public"

    @property
    def full_dir(self) -> Path:
        return self.public_dir / "img" / "full"

    @property
    def thumb_dir(self) -> Path:
        return self.public_dir / "img" / "thumb"

    @property
    def manifest_path(self) -> Path:
        return self.public_dir / "data.json"
