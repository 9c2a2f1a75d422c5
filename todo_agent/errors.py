"""Exception types shared across the agent."""


class TodoAgentError(Exception):
    """Base class for agent errors."""


class InvalidArgumentError(TodoAgentError, ValueError):
    """Input failed a shape, length or blankness check at a component boundary."""


class ProviderError(TodoAgentError):
    """The language-model or image backend failed."""


class PromptInProgressError(TodoAgentError):
    """A session already has a prompt being processed."""
