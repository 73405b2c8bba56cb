"""Error taxonomy shared across the retrieval, model and tool layers."""


class AdvisorError(Exception):
    """Base class for all advisor errors."""


class PersistenceError(AdvisorError):
    """A read or write against the backing store failed."""


class EmbeddingError(AdvisorError):
    """The embedding provider failed for a reason other than quota."""


class CompletionError(AdvisorError):
    """The completion provider failed."""


class QuotaExceededError(CompletionError):
    """The model provider signalled a rate limit or exhausted quota (HTTP 429)."""


class ModelUnavailableError(CompletionError):
    """The requested model does not exist or is not accessible (HTTP 404)."""


class UnknownToolError(AdvisorError):
    """A tool name was requested that has no registered handler."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class ToolRegistryError(AdvisorError):
    """Registered handlers disagree with the declared tool schemas."""


class ProviderCallError(AdvisorError):
    """A capability provider (email, calendar, CRM, task store) call failed."""
