"""
Runtime configuration for the local Llama service.
Values come from the environment (a .env file is honoured) and are read once.
"""
import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BASE_URL = "http://127.0.0.1:1234"
DEFAULT_TIMEOUT = 120.0
DEFAULT_FALLBACK_MODEL = "meta-llama-3.1-8b-instruct"


class LlamaSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    base_url: str = DEFAULT_BASE_URL
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    fallback_model: str = Field(default=DEFAULT_FALLBACK_MODEL, min_length=1)

    @field_validator("base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @classmethod
    def from_env(cls) -> "LlamaSettings":
        load_dotenv()
        return cls(
            base_url=os.getenv("LLAMA_BASE_URL") or DEFAULT_BASE_URL,
            timeout=float(os.getenv("LLAMA_TIMEOUT") or DEFAULT_TIMEOUT),
            fallback_model=os.getenv("LLAMA_FALLBACK_MODEL") or DEFAULT_FALLBACK_MODEL,
        )


@lru_cache(maxsize=1)
def get_settings() -> LlamaSettings:
    """Process-wide settings, loaded on first use."""
    return LlamaSettings.from_env()
