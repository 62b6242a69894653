"""Snapshot of which canonical works actually exist in the lexical store.

A WorkRegistry is immutable. Callers build one at startup (from_store) and pass
it to the planner and resolver; a rebuild produces a new object.
"""
from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from kol_hatorah.taxonomy import COLLECTIONS

logger = logging.getLogger(__name__)


class WorkRegistry:
    def __init__(self, works_by_collection: Optional[Mapping[str, Iterable[str]]] = None):
        works_by_collection = works_by_collection or {}
        self._works: Dict[str, FrozenSet[str]] = {
            collection: frozenset(works_by_collection.get(collection, ()))
            for collection in COLLECTIONS
        }
        self._by_lower: Dict[str, str] = {}
        for collection in COLLECTIONS:
            for work in sorted(self._works[collection]):
                self._by_lower.setdefault(work.lower(), work)

    @classmethod
    def from_rows(cls, rows: Iterable) -> "WorkRegistry":
        """Build from (type, work, count) rows as returned by list_works()."""
        grouped: Dict[str, set] = {c: set() for c in COLLECTIONS}
        for row in rows:
            collection = row.type if hasattr(row, "type") else row[0]
            work = row.work if hasattr(row, "work") else row[1]
            if collection in grouped and work:
                grouped[collection].add(work)
        return cls(grouped)

    @classmethod
    def from_store(cls, store) -> "WorkRegistry":
        registry = cls.from_rows(store.list_works())
        logger.info(
            "Work registry built: "
            + ", ".join(f"{c}={len(registry.works(c))}" for c in COLLECTIONS)
        )
        return registry

    def works(self, collection: str) -> FrozenSet[str]:
        return self._works.get(collection, frozenset())

    def collection_of(self, work: str) -> Optional[str]:
        """First collection (tanakh, mishnah, bavli order) holding ``work``."""
        for collection in COLLECTIONS:
            if work in self._works[collection]:
                return collection
        return None

    def find_work(self, name: str) -> Optional[str]:
        """Case-insensitive exact lookup of a canonical work name."""
        return self._by_lower.get((name or "").strip().lower())

    def __contains__(self, work: str) -> bool:
        return self.collection_of(work) is not None

    def __len__(self) -> int:
        return sum(len(w) for w in self._works.values())

    def as_dict(self) -> Dict[str, Tuple[str, ...]]:
        return {c: tuple(sorted(self._works[c])) for c in COLLECTIONS}


__all__ = ["WorkRegistry"]
