"""Azure DevOps work item field catalog client."""

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from ..config import settings
from ..mapping.models import CatalogFetchError, FieldDefinition, TITLE_REFERENCE_NAME, ValueType

logger = logging.getLogger(__name__)


def _infer_value_type(type_name: Optional[str]) -> ValueType:
    if not type_name:
        return ValueType.STRING
    type_name = type_name.lower()
    if "integer" in type_name or "double" in type_name:
        return ValueType.NUMBER
    if "html" in type_name or "plaintext" in type_name or "history" in type_name:
        return ValueType.TEXT
    if "boolean" in type_name:
        return ValueType.BOOLEAN
    if "datetime" in type_name:
        return ValueType.DATETIME
    return ValueType.STRING


def field_definition_from_api(payload: dict[str, Any]) -> FieldDefinition:
    """Convert one field entry of the work item type fields API."""
    reference_name = payload.get("referenceName") or payload.get("name") or "Unknown"
    display_name = payload.get("name") or payload.get("referenceName") or "Unknown"

    return FieldDefinition(
        reference_name=reference_name,
        display_name=display_name,
        value_type=_infer_value_type(payload.get("type")),
        required=bool(payload.get("alwaysRequired")) or reference_name == TITLE_REFERENCE_NAME,
        read_only=bool(payload.get("readOnly")),
    )


class AzureDevOpsCatalogClient:
    """Fetches the field catalog of a work item type over the REST API."""

    def __init__(
        self,
        org_url: Optional[str] = None,
        pat: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        org_url = org_url or settings.ado_org_url
        if not org_url:
            raise ValueError("Azure DevOps organization URL is required (ADO_ORG_URL)")
        self.org_url = org_url.rstrip("/")
        self.pat = pat if pat is not None else settings.ado_pat
        self.api_version = api_version or settings.ado_api_version
        self.timeout = timeout or settings.catalog_fetch_timeout
        self._transport = transport

    async def __call__(self, project: str, item_type: str) -> list[FieldDefinition]:
        return await self.fetch_field_catalog(project, item_type)

    async def fetch_field_catalog(self, project: str, item_type: str) -> list[FieldDefinition]:
        """
        Fetch all fields of a work item type.

        Raises:
            CatalogFetchError: On HTTP errors, unreadable payloads or no fields
        """
        url = (
            f"{self.org_url}/{quote(project, safe='')}/_apis/wit/workitemtypes/"
            f"{quote(item_type, safe='')}/fields"
        )
        params = {"$expand": "all", "api-version": self.api_version}
        auth = ("", self.pat) if self.pat else None

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url, params=params, auth=auth)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise CatalogFetchError(f"Failed to fetch work item type fields: {e}") from e
        except ValueError as e:
            raise CatalogFetchError(f"Invalid field catalog response: {e}") from e

        entries = data.get("value") if isinstance(data, dict) else None
        if not entries:
            raise CatalogFetchError(f"No fields found for work item type: {item_type}")

        fields = [field_definition_from_api(entry) for entry in entries]
        logger.info(f"Fetched {len(fields)} fields for '{project}' / '{item_type}'")
        return fields
