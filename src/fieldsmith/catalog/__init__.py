"""Field catalog sources."""

from .client import AzureDevOpsCatalogClient, field_definition_from_api

__all__ = [
    "AzureDevOpsCatalogClient",
    "field_definition_from_api",
]
