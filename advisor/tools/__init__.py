"""Tool framework — import tool modules here to register them."""

# Import tool modules so their @registry.tool() decorators execute.
# Every declared tool is always registered; a tool whose provider is not
# configured fails at call time with a ProviderCallError.
from advisor.tools import calendar, gmail, hubspot, tasks  # noqa: F401
from advisor.tools.registry import registry

__all__ = ["registry"]
