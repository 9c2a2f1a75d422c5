"""Base types for the tool-calling framework."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these. ``data`` holds the success text and
    ``error`` the failure text, already phrased for the model (for example
    ``"Error: Completion notes cannot be empty."``).
    """

    data: str | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        """Text for the tool-result turn."""
        if self.error:
            return self.error
        return self.data or ""


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. The JSON schema is auto-generated
    via model_json_schema() for the model's tool definitions; aliases are
    the wire names.
    """

    model_config = ConfigDict(populate_by_name=True)


class BaseTool(ABC):
    """Abstract base for tool implementations.

    Tools hold the session collaborators they act on (task store, image
    generator), so each session builds its own set.

    Example::

        class MyTool(BaseTool):
            name = "my_tool"
            description = "Does a thing"
            params_model = MyToolParams

            async def execute(self, **kwargs) -> ToolResult:
                return ToolResult(data="done")
    """

    name: str = ""
    description: str = ""
    params_model: type[ToolParams] | None = None

    @abstractmethod
    async def execute(self, **kwargs: Any) -> ToolResult:
        """Execute the tool with validated parameters."""
        ...
