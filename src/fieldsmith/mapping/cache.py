"""Field catalog cache keyed by project and work item type."""

import logging
from typing import Awaitable, Callable, Optional, Sequence

from pydantic import BaseModel, Field

from .models import CatalogFetchError, FieldDefinition
from .synonyms import DEFAULT_CATALOG

logger = logging.getLogger(__name__)

CatalogFetcher = Callable[[str, str], Awaitable[Sequence[FieldDefinition]]]


class CatalogLookup(BaseModel):
    """A catalog plus where it came from."""

    fields: list[FieldDefinition]
    from_cache: bool = False
    degraded: bool = False  # True when the built-in fallback catalog was used
    warning: Optional[str] = None


class FieldCatalogCache:
    """In-memory cache of field catalogs.

    Entries are created on the first successful fetch and live until they are
    invalidated. Failed fetches are never cached; the built-in fallback catalog
    is returned instead. There is no locking: concurrent misses on the same key
    may fetch twice, and both writers store the same catalog.
    """

    def __init__(
        self,
        fetcher: Optional[CatalogFetcher] = None,
        fallback: Sequence[FieldDefinition] = DEFAULT_CATALOG,
    ):
        self._cache: dict[tuple[str, str], tuple[FieldDefinition, ...]] = {}
        self._fetcher = fetcher
        self._fallback = tuple(fallback)

    async def lookup(self, project: str, item_type: str) -> CatalogLookup:
        """
        Get the catalog for a project and work item type.

        Args:
            project: Project name or ID
            item_type: Work item type (e.g. "Test Case")

        Returns:
            CatalogLookup; degraded with a warning if the fetch failed
        """
        key = (project, item_type)
        cached = self._cache.get(key)
        if cached is not None:
            return CatalogLookup(fields=list(cached), from_cache=True)

        try:
            fields = await self._fetch(project, item_type)
        except Exception as e:
            warning = (
                f"Failed to fetch field catalog for '{project}' / '{item_type}', "
                f"using built-in fields: {e}"
            )
            logger.warning(warning)
            return CatalogLookup(fields=list(self._fallback), degraded=True, warning=warning)

        self._cache[key] = fields
        logger.info(f"Cached {len(fields)} fields for '{project}' / '{item_type}'")
        return CatalogLookup(fields=list(fields))

    async def get(self, project: str, item_type: str) -> list[FieldDefinition]:
        """Get the catalog, falling back to the built-in fields on fetch failure."""
        return (await self.lookup(project, item_type)).fields

    async def _fetch(self, project: str, item_type: str) -> tuple[FieldDefinition, ...]:
        if self._fetcher is None:
            raise CatalogFetchError("No catalog fetcher configured")

        fields = tuple(await self._fetcher(project, item_type))
        if not fields:
            raise CatalogFetchError(f"No fields found for work item type: {item_type}")
        return fields

    def invalidate(self, project: Optional[str] = None, item_type: Optional[str] = None):
        """
        Drop cached catalogs.

        Clears the single entry when both project and item_type are given,
        otherwise clears everything.
        """
        if project is not None and item_type is not None:
            self._cache.pop((project, item_type), None)
        else:
            self._cache.clear()

    def contains(self, project: str, item_type: str) -> bool:
        return (project, item_type) in self._cache

    def size(self) -> int:
        """Get the number of cached catalogs."""
        return len(self._cache)
