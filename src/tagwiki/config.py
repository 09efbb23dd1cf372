"""Application configuration."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from tagwiki.core.models import TagMatch


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path("data")
    page_extension: str = ".md"
    frontend_dir: Path = Path("client/build")
    debug: bool = False
    app_title: str = "TagWiki"
    host: str = "127.0.0.1"
    port: int = 4600
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]
    tag_match: TagMatch = TagMatch.SUBSTRING

    model_config = SettingsConfigDict(
        env_prefix="TAGWIKI_",
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()
