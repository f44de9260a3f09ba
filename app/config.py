from enum import Enum
import logging
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.logging import RichHandler


ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    env: Env = Env.local
    assets_dir: Path = ASSETS_DIR
    html_dir: Path = ASSETS_DIR / "html"
    log_level: str = "INFO"

    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    max_output_tokens: int = 1400

    whatsapp_access_token: str | None = None
    whatsapp_phone_number_id: str | None = None
    whatsapp_recipient: str | None = None
    whatsapp_api_version: str = "v19.0"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )
