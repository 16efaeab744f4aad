from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

DEFAULT_MODEL = "gpt-4o-mini"


class LlmConfig(BaseSettings):
    """Configuration settings for the upstream chat-completion model.

    The API key is optional at construction time so the service can start
    and answer health checks without it; requests that need the model are
    rejected with a configuration error instead.
    """

    api_key: Optional[str] = Field(None, alias="OPENAI_API_KEY")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")
    model: str = Field(DEFAULT_MODEL, alias="MODEL")
    timeout: float = Field(30, alias="LLM_TIMEOUT")

    @field_validator("model")
    def validate_model(cls, value: str) -> str:
        value = value.strip()
        return value or DEFAULT_MODEL

    @field_validator("timeout")
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("LLM_TIMEOUT must be positive")
        return value

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)


@lru_cache()
def get_llm_config() -> LlmConfig:
    """Return a cached language model configuration."""

    return LlmConfig()
