from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings(BaseSettings):  # load FOGLINE_* key=value pairs from the environment or .env
    """Local (per peer) settings. Rules constants live in the game package: both peers must agree on them."""

    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'fogline.db'}"
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "fogline_errors.log"
    DEFAULT_DISPLAY_NAME: str = "Player"

    model_config = SettingsConfigDict(
        env_prefix="FOGLINE_",
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
