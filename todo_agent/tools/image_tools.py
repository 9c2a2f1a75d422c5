"""Image generation tool and the inline image marker format."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pydantic import Field

from todo_agent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from todo_agent.images import ImageGenerator

logger = logging.getLogger(__name__)

_IMAGE_MARKER_RE = re.compile(r"\[IMAGE:(data:image/[^\]\s]+)\]")


def image_marker(data_url: str) -> str:
    """Wrap an image reference so a renderer can find it in free text."""
    return f"[IMAGE:{data_url}]"


def extract_images(text: str) -> tuple[str, list[str]]:
    """Split ``text`` into marker-free text and the image URLs it carried."""
    urls = _IMAGE_MARKER_RE.findall(text)
    cleaned = _IMAGE_MARKER_RE.sub("", text).strip()
    return cleaned, urls


class GenerateImageParams(ToolParams):
    prompt: str = Field(description="Detailed description of the image to generate")


class GenerateImageTool(BaseTool):
    name = "generate_image"
    description = (
        "Generates an image from a text description. Use when the user asks "
        "for images, visualizations, or creative art."
    )
    params_model = GenerateImageParams

    def __init__(self, images: ImageGenerator) -> None:
        self._images = images

    async def execute(self, prompt: str) -> ToolResult:
        try:
            data_url = await self._images.generate(prompt)
        except Exception as exc:
            logger.warning("Image generation failed: %s", exc)
            return ToolResult(error=f"Error generating image: {exc}")

        return ToolResult(data=f"Generated image: {prompt}\n{image_marker(data_url)}")
