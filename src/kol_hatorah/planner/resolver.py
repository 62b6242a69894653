"""Scope resolution: map a Hebrew token to a corpus, division/seder or work."""
from __future__ import annotations

from typing import List, NamedTuple, Optional

from kol_hatorah.planner.registry import WorkRegistry
from kol_hatorah.planner.types import ScopeNode, ScopeNodeType
from kol_hatorah.taxonomy import (
    SEDARIM,
    SEDER_WORD,
    TANAKH_CORPUS_KEYWORDS,
    TANAKH_DIVISIONS,
    lookup_hebrew_work,
)

PREPOSITION_BET = "ב"


class ScopeResolution(NamedTuple):
    node: Optional[ScopeNode] = None
    work: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.node is not None or self.work is not None


NO_MATCH = ScopeResolution()


def _resolve_work(candidate: str, registry: WorkRegistry) -> Optional[str]:
    work = registry.find_work(candidate)
    if work:
        return work
    # folded geresh, as in "שמואל א'"
    return lookup_hebrew_work(candidate) or lookup_hebrew_work(candidate.rstrip("'").strip())


def _try_resolve(candidate: str, registry: WorkRegistry) -> ScopeResolution:
    if candidate in TANAKH_CORPUS_KEYWORDS:
        return ScopeResolution(node=ScopeNode(type=ScopeNodeType.CORPUS, name="tanakh"))
    if candidate in TANAKH_DIVISIONS:
        return ScopeResolution(node=ScopeNode(type=ScopeNodeType.SUBCORPUS, name=candidate))
    if candidate.startswith(f"{SEDER_WORD} "):
        seder = candidate[len(SEDER_WORD) + 1:].strip()
        if seder in SEDARIM:
            return ScopeResolution(node=ScopeNode(type=ScopeNodeType.SUBCORPUS, name=seder))
    work = _resolve_work(candidate, registry)
    if work:
        return ScopeResolution(node=ScopeNode(type=ScopeNodeType.WORK, name=work), work=work)
    return NO_MATCH


def resolve_scope_node(raw: str, registry: WorkRegistry) -> ScopeResolution:
    """Resolve ``raw`` against the taxonomy and the live registry.

    Order: Tanakh corpus keyword, division or "סדר <seder>", registry work
    (case-insensitive), static Hebrew tables. If nothing matches and the token
    starts with the preposition ב, that one letter is stripped and the lookup is
    retried once.
    """
    value = (raw or "").strip()
    if not value:
        return NO_MATCH

    primary = _try_resolve(value, registry)
    if primary.matched:
        return primary

    if value.startswith(PREPOSITION_BET) and len(value) > 1:
        return _try_resolve(value[1:], registry)
    return NO_MATCH


def expand_subcorpus(node: Optional[ScopeNode], registry: WorkRegistry) -> Optional[List[str]]:
    """Works of a division or seder that are present in the registry, in canonical order.

    Returns None for nodes that are not a known division or seder.
    """
    if node is None or node.type != ScopeNodeType.SUBCORPUS:
        return None
    if node.name in TANAKH_DIVISIONS:
        present = registry.works("tanakh")
        return [w for w in TANAKH_DIVISIONS[node.name] if w in present]
    if node.name in SEDARIM:
        present = registry.works("mishnah")
        return [w for w in SEDARIM[node.name] if w in present]
    return None


__all__ = ["ScopeResolution", "resolve_scope_node", "expand_subcorpus"]
