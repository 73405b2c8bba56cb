"""HubSpot tools — contacts and notes."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from advisor.tools.base import ToolParams, ToolResult
from advisor.tools.registry import registry

if TYPE_CHECKING:
    from advisor.integrations.base import Providers

_CATEGORY = "hubspot"


class SearchContactsParams(ToolParams):
    query: str
    limit: int = Field(default=10, ge=1, le=100)


@registry.tool(
    name="search_hubspot_contacts", category=_CATEGORY, params_model=SearchContactsParams
)
async def search_hubspot_contacts(query: str, limit: int, providers: Providers) -> ToolResult:
    contacts = await providers.require_crm().search_contacts(query, limit)
    return ToolResult(data={"contacts": contacts})


class CreateContactParams(ToolParams):
    email: str
    first_name: str | None = Field(default=None, alias="firstName")
    last_name: str | None = Field(default=None, alias="lastName")
    company: str | None = None
    phone: str | None = None


@registry.tool(
    name="create_hubspot_contact", category=_CATEGORY, params_model=CreateContactParams
)
async def create_hubspot_contact(
    email: str,
    first_name: str | None,
    last_name: str | None,
    company: str | None,
    phone: str | None,
    providers: Providers,
) -> ToolResult:
    contact = await providers.require_crm().create_contact(
        {
            "email": email,
            "firstName": first_name,
            "lastName": last_name,
            "company": company,
            "phone": phone,
        }
    )
    return ToolResult(data={"contact": contact})


class AddNoteParams(ToolParams):
    contact_id: str = Field(alias="contactId")
    content: str


@registry.tool(name="add_hubspot_note", category=_CATEGORY, params_model=AddNoteParams)
async def add_hubspot_note(contact_id: str, content: str, providers: Providers) -> ToolResult:
    note = await providers.require_crm().add_note(contact_id, content)
    return ToolResult(data={"note": note})
