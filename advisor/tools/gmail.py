"""Gmail tools — search and send email."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import Field

from advisor.tools.base import ToolParams, ToolResult
from advisor.tools.registry import registry

if TYPE_CHECKING:
    from advisor.integrations.base import Providers

logger = logging.getLogger(__name__)

_CATEGORY = "gmail"


class SearchEmailsParams(ToolParams):
    query: str = Field(description="Gmail search query")
    max_results: int = Field(default=10, alias="maxResults", ge=1, le=100)


@registry.tool(name="search_emails", category=_CATEGORY, params_model=SearchEmailsParams)
async def search_emails(query: str, max_results: int, providers: Providers) -> ToolResult:
    emails = await providers.require_email().search(query, max_results)
    return ToolResult(data={"emails": emails})


class SendEmailParams(ToolParams):
    to: str = Field(description="Recipient email address")
    subject: str
    body: str
    thread_id: str | None = Field(default=None, alias="threadId")


@registry.tool(name="send_email", category=_CATEGORY, params_model=SendEmailParams)
async def send_email(
    to: str,
    subject: str,
    body: str,
    thread_id: str | None,
    providers: Providers,
) -> ToolResult:
    sent = await providers.require_email().send(to, subject, body, thread_id)
    return ToolResult(data=sent)
