from __future__ import annotations

from typing import Iterator, Optional


class ConformanceMap:
    """resource IRI -> IRI of the first shape it was found to conform to."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def record(self, resource: str, shape: str) -> bool:
        """Store `resource -> shape` unless `resource` already has an entry."""
        key = str(resource)
        if key in self._entries:
            return False
        self._entries[key] = str(shape)
        return True

    def get(self, resource: str) -> Optional[str]:
        return self._entries.get(str(resource))

    def as_dict(self) -> dict[str, str]:
        return dict(self._entries)

    def __contains__(self, resource: object) -> bool:
        return str(resource) in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ConformanceMap({self._entries!r})"
