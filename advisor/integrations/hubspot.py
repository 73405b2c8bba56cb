"""HubSpot CRM provider over the CRM v3 REST API."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from advisor.errors import ProviderCallError

logger = logging.getLogger(__name__)

# Contact-to-note association defined by HubSpot.
NOTE_TO_CONTACT_ASSOCIATION = {
    "associationCategory": "HUBSPOT_DEFINED",
    "associationTypeId": 1,
}

_CONTACT_PROPERTY_NAMES = {
    "email": "email",
    "firstName": "firstname",
    "lastName": "lastname",
    "company": "company",
    "phone": "phone",
}

DEFAULT_CONTACT_PROPERTIES = ["email", "firstname", "lastname", "company", "phone"]
LIFECYCLE_PROPERTIES = ["lifecyclestage", "hs_lead_status"]


def contact_properties(fields: dict[str, Any]) -> dict[str, Any]:
    """Map contact fields to HubSpot property names, dropping empty values."""
    properties: dict[str, Any] = {}
    for key, value in fields.items():
        if value is None or value == "":
            continue
        properties[_CONTACT_PROPERTY_NAMES.get(key, key)] = value
    return properties


class HubSpotProvider:
    """CRM provider for a single HubSpot portal.

    *transport* lets tests substitute an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://api.hubapi.com",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 20,
    ) -> None:
        self._access_token = access_token
        self._base_url = base_url.rstrip("/")
        self._transport = transport
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._access_token}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                headers=self._headers(),
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.exception("HubSpot %s %s failed", method, path)
            raise ProviderCallError(f"HubSpot request failed: {exc}") from exc

        if resp.status_code >= 400:
            msg = f"HubSpot API returned {resp.status_code}: {resp.text[:300]}"
            raise ProviderCallError(msg)
        return resp.json() if resp.content else {}

    async def search_contacts(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        data = await self._request(
            "POST",
            "/crm/v3/objects/contacts/search",
            json={"query": query, "limit": limit, "properties": DEFAULT_CONTACT_PROPERTIES},
        )
        return data.get("results", [])

    async def get_contact(self, contact_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/crm/v3/objects/contacts/{contact_id}",
            params={"properties": ",".join([*DEFAULT_CONTACT_PROPERTIES, *LIFECYCLE_PROPERTIES])},
        )

    async def create_contact(self, fields: dict[str, Any]) -> dict[str, Any]:
        contact = await self._request(
            "POST",
            "/crm/v3/objects/contacts",
            json={"properties": contact_properties(fields)},
        )
        logger.info("Created HubSpot contact: %s", contact.get("id"))
        return contact

    async def add_note(self, contact_id: str, content: str) -> dict[str, Any]:
        body = {
            "properties": {
                "hs_note_body": content,
                "hs_timestamp": datetime.now(UTC).isoformat(),
            },
            "associations": [
                {
                    "to": {"id": contact_id},
                    "types": [NOTE_TO_CONTACT_ASSOCIATION],
                }
            ],
        }
        note = await self._request("POST", "/crm/v3/objects/notes", json=body)
        logger.info("Added HubSpot note %s to contact %s", note.get("id"), contact_id)
        return note

    async def get_note(self, note_id: str) -> dict[str, Any]:
        return await self._request(
            "GET",
            f"/crm/v3/objects/notes/{note_id}",
            params={"properties": "hs_note_body,hs_timestamp", "associations": "contacts"},
        )
