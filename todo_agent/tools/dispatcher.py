"""Tool dispatcher — routes model tool calls to typed handlers."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from todo_agent.tools.base import BaseTool, ToolParams, ToolResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class ToolDef:
    """Internal representation of a registered tool."""

    name: str
    description: str
    handler: Callable[..., Awaitable[ToolResult]]
    params_model: type[ToolParams] | None = None


class ToolDispatcher:
    """Maps a tool name to its handler and parameter model.

    Arguments are validated against the parameter model once, here. Every
    outcome, including unknown tools, malformed arguments and handler
    crashes, comes back as a ``ToolResult`` so the model can react to it
    on its next round. Only cancellation escapes.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDef] = {}

    def register(self, tool_instance: BaseTool) -> None:
        """Register a tool instance."""
        self._tools[tool_instance.name] = ToolDef(
            name=tool_instance.name,
            description=tool_instance.description,
            handler=tool_instance.execute,
            params_model=tool_instance.params_model,
        )

    def get(self, name: str) -> ToolDef | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    @property
    def tool_names(self) -> list[str]:
        """All registered tool names."""
        return list(self._tools.keys())

    def get_schemas(self) -> list[dict[str, Any]]:
        """Generate Claude-compatible tool schemas for all registered tools."""
        return [self._tool_schema(t) for t in self._tools.values()]

    async def execute(self, name: str, arguments: Any) -> ToolResult:
        """Execute a tool by name with the given arguments."""
        tool_def = self._tools.get(name)
        if tool_def is None:
            return ToolResult(error=f"Error: Unknown tool: {name}")

        if not isinstance(arguments, dict):
            return ToolResult(error=f"Error: Arguments for '{name}' must be a JSON object.")

        logger.info("Tool '%s' called with %s", name, _preview(arguments))

        if tool_def.params_model is not None:
            try:
                params = tool_def.params_model.model_validate(arguments)
            except ValidationError as exc:
                logger.warning("Tool '%s' rejected arguments: %s", name, exc)
                return ToolResult(
                    error=f"Error: Invalid arguments for '{name}': {_describe(exc)}"
                )
            kwargs = params.model_dump()
        else:
            kwargs = dict(arguments)

        t0 = time.monotonic()
        try:
            result = await tool_def.handler(**kwargs)
        except Exception as exc:
            elapsed = time.monotonic() - t0
            logger.exception("Tool '%s' failed in %.2fs", name, elapsed)
            return ToolResult(error=f"Error: {exc}")

        elapsed = time.monotonic() - t0
        if result.success:
            logger.info("Tool '%s' succeeded in %.2fs", name, elapsed)
        else:
            logger.warning("Tool '%s' returned error in %.2fs: %s", name, elapsed, result.error)
        return result

    @staticmethod
    def _tool_schema(tool_def: ToolDef) -> dict[str, Any]:
        """Build a single Claude tool schema dict."""
        if tool_def.params_model is not None:
            input_schema = tool_def.params_model.model_json_schema()
        else:
            input_schema = {"type": "object", "properties": {}}

        return {
            "name": tool_def.name,
            "description": tool_def.description,
            "input_schema": input_schema,
        }


def _describe(exc: ValidationError) -> str:
    """Flatten pydantic errors into ``field: message`` pairs."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _preview(arguments: dict[str, Any], limit: int = 200) -> str:
    text = repr(arguments)
    return text if len(text) <= limit else text[:limit] + "..."
