"""
Chatter Service Configuration
"""

from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # ===== Service =====
    SERVICE_NAME: str = Field(default="markov-chatter", env="SERVICE_NAME")  # type: ignore
    SERVICE_VERSION: str = Field(default="1.0.0", env="SERVICE_VERSION")  # type: ignore
    HOST: str = Field(default="0.0.0.0", env="HOST")  # type: ignore
    PORT: int = Field(default=8000, env="PORT")  # type: ignore
    LOG_LEVEL: str = Field(default="info", env="LOG_LEVEL")  # type: ignore
    DEBUG: bool = Field(default=False, env="DEBUG")  # type: ignore

    # ===== CORS =====
    CORS_ORIGINS: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"], env="CORS_ORIGINS"  # type: ignore
    )

    # ===== Markov Chain =====
    MARKOV_ORDER: int = Field(default=1, ge=1, env="MARKOV_ORDER")  # type: ignore
    MARKOV_MAX_LENGTH: int = Field(default=50, ge=0, env="MARKOV_MAX_LENGTH")  # type: ignore
    MARKOV_RANDOM_SEED: Optional[int] = Field(default=None, env="MARKOV_RANDOM_SEED")  # type: ignore

    # ===== Tokenizer =====
    TOKENIZER_LOWERCASE: bool = Field(default=False, env="TOKENIZER_LOWERCASE")  # type: ignore
    TOKENIZER_SPLIT_PUNCTUATION: bool = Field(default=True, env="TOKENIZER_SPLIT_PUNCTUATION")  # type: ignore

    # ===== Persistence =====
    CHAIN_FILE: str = Field(default="markov-chain.json", env="CHAIN_FILE")  # type: ignore
    SAVE_INTERVAL: int = Field(default=3600, ge=0, env="SAVE_INTERVAL")  # type: ignore

    # ===== Channel Bot =====
    BOT_NICK: str = Field(default="markov", env="BOT_NICK")  # type: ignore
    BOT_COMMAND: str = Field(default="!markov", env="BOT_COMMAND")  # type: ignore
    REPLY_CHANCE: float = Field(default=0.01, ge=0.0, le=1.0, env="REPLY_CHANCE")  # type: ignore
    BOT_IGNORE: List[str] = Field(default=[], env="BOT_IGNORE")  # type: ignore
    FALLBACK_REPLY: str = Field(default="", env="FALLBACK_REPLY")  # type: ignore

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
