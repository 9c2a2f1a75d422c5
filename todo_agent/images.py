"""Image generation — OpenAI GPT-Image-1 behind a prompt-in/data-URL-out contract."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

import openai

from todo_agent.config import settings
from todo_agent.errors import InvalidArgumentError, ProviderError

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = logging.getLogger(__name__)

VALID_SIZES = {"1024x1024", "1024x1536", "1536x1024"}
VALID_QUALITIES = {"low", "medium", "high"}

_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    """Return a lazily-initialised AsyncOpenAI singleton."""
    global _client  # noqa: PLW0603
    if _client is None:
        _client = openai.AsyncOpenAI(api_key=settings.openai_api_key)
    return _client


class ImageGenerator(Protocol):
    async def generate(self, prompt: str) -> str:
        """Render ``prompt`` and return an inline image reference."""
        ...


class OpenAIImageGenerator:
    """Generates PNG images and returns them as ``data:`` URLs."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        model: str | None = None,
        size: str | None = None,
        quality: str | None = None,
    ) -> None:
        self._client = client
        self._model = model or settings.image_model
        self._size = size or settings.image_size
        self._quality = quality or settings.image_quality

        if self._size not in VALID_SIZES:
            valid = ", ".join(sorted(VALID_SIZES))
            msg = f"Invalid size '{self._size}'. Must be one of: {valid}"
            raise InvalidArgumentError(msg)
        if self._quality not in VALID_QUALITIES:
            valid = ", ".join(sorted(VALID_QUALITIES))
            msg = f"Invalid quality '{self._quality}'. Must be one of: {valid}"
            raise InvalidArgumentError(msg)

    async def generate(self, prompt: str) -> str:
        if not prompt or not prompt.strip():
            msg = "Prompt cannot be null or whitespace."
            raise InvalidArgumentError(msg)
        limit = settings.max_image_prompt_length
        if len(prompt) > limit:
            msg = f"Prompt cannot exceed {limit} characters."
            raise InvalidArgumentError(msg)

        client = self._client or _get_client()
        logger.info("Generating image with prompt: %s", prompt)
        try:
            response = await client.images.generate(
                model=self._model,
                prompt=prompt,
                size=self._size,
                quality=self._quality,
                n=1,
            )
        except openai.OpenAIError as exc:
            logger.exception("OpenAI image generation failed")
            raise ProviderError(f"Image generation failed: {exc}") from exc

        image_b64 = response.data[0].b64_json if response.data else None
        if not image_b64:
            msg = "No image data returned from OpenAI."
            raise ProviderError(msg)

        logger.info("Image generated (%d base64 chars)", len(image_b64))
        return f"data:image/png;base64,{image_b64}"
