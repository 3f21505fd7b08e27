from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import List


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    # App
    environment: str = "development"
    log_level: str = "INFO"
    # Probes
    probe_timeout_seconds: float = 5.0
    page_timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0"
    # Refuse targets that resolve to loopback / private ranges
    block_private_networks: bool = True
    # PDF export
    # reportlab built-in CID font with Japanese glyphs
    pdf_font: str = "HeiseiKakuGo-W5"
    pdf_filename: str = "website_report.pdf"
    # CORS: the UI is deployed on a separate origin
    cors_origins: List[str] = ["*"]


@lru_cache()
def get_settings() -> Settings:
    return Settings()
