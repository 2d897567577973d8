from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

__all__ = ["CredentialResolver"]


class CredentialResolver:
    """Maps a provider URL to a bearer token by first matching prefix.

    The table is read-only once built; lookup order is the table's insertion
    order.
    """

    def __init__(self, table: Optional[Mapping[str, str]] = None) -> None:
        self._table = MappingProxyType(dict(table or {}))

    @property
    def table(self) -> Mapping[str, str]:
        return self._table

    def resolve(self, provider_url: str) -> Optional[str]:
        for prefix, key in self._table.items():
            if provider_url.startswith(prefix):
                return key
        return None
