"""Application settings loaded from environment variables."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_file() -> str | None:
    if os.getenv("PYTEST_CURRENT_TEST"):
        return None
    return ".env"


class Settings(BaseSettings):
    """Todo agent configuration. All values come from environment variables."""

    # Anthropic (task planning and tool calling)
    anthropic_api_key: str = Field(default="")
    chat_model: str = Field(default="claude-sonnet-4-5-20250929")
    max_tokens: int = Field(default=4096)

    # OpenAI (image generation)
    openai_api_key: str = Field(default="")
    image_model: str = Field(default="gpt-image-1")
    image_size: str = Field(default="1024x1024")
    image_quality: str = Field(default="medium")

    # Input limits
    max_prompt_length: int = Field(default=10_000)
    max_image_prompt_length: int = Field(default=1000)

    # Orchestration
    max_tool_rounds: int = Field(default=25)
    tool_pacing_delay: float = Field(default=0.1)
    carry_conversation_history: bool = Field(default=False)
    system_prompt_path: Path | None = Field(default=None)

    # Logging
    log_level: str = Field(default="INFO")

    model_config = SettingsConfigDict(env_file=_env_file(), env_file_encoding="utf-8")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        if os.getenv("PYTEST_CURRENT_TEST"):
            return (init_settings,)
        return (init_settings, env_settings, dotenv_settings, file_secret_settings)


settings = Settings()
