"""oraclevault.execution.address_book

Addresses to live collaborators. An address with nothing registered has no code.
"""

from __future__ import annotations

from typing import Any

from oraclevault.core.exceptions import ExternalCallError
from oraclevault.core.types import normalize_address


class AddressBook:
    """Resolves addresses to callable collaborators. Unknown address = no code."""

    def __init__(self, *entries: Any) -> None:
        self._entries: dict[str, Any] = {}
        for e in entries:
            self.register(e)

    def register(self, obj: Any, address: str | None = None) -> None:
        key = normalize_address(address or obj.address)
        self._entries[key] = obj

    def resolve(self, address: str) -> Any:
        key = normalize_address(address)
        obj = self._entries.get(key)
        if obj is None:
            raise ExternalCallError(f"no code at {key}")
        return obj

    def __contains__(self, address: object) -> bool:
        return isinstance(address, str) and normalize_address(address) in self._entries
