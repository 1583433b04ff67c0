"""Reverse-edge derivation and bidirectional edge checks across records."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Sequence, Tuple

from ..models import DeclarationRecord, FeatureGraph
from .feature_graph import iter_records

# (source kind, forward field, target kind, reverse field)
_EDGES: Tuple[Tuple[str, str, str, str], ...] = (
    ("screen", "used_components", "component", "used_in_screens"),
    ("screen", "used_actions", "action", "used_in_screens"),
    ("component", "used_components", "component", "used_in_components"),
    ("component", "used_actions", "action", "used_in_components"),
    ("action", "db_tables", "table", "used_in_actions"),
)


@dataclass(frozen=True)
class EdgeIssue:
    """A forward edge that is dangling or lacks its reverse declaration."""

    kind: str
    source_kind: str
    source: str
    target_kind: str
    target: str
    path: str

    @property
    def message(self) -> str:
        if self.kind == "missing-target":
            return f"{self.source_kind} {self.source} references unknown {self.target_kind} {self.target}"
        return f"{self.target_kind} {self.target} does not declare being used by {self.source_kind} {self.source}"


def _merge(declared: Sequence[str], derived: Iterable[str], own_name: str) -> List[str]:
    merged = list(declared)
    seen = set(merged)
    for name in derived:
        if name == own_name or name in seen:
            continue
        seen.add(name)
        merged.append(name)
    return merged


def merge_reverse_references(records: Sequence[DeclarationRecord]) -> List[DeclarationRecord]:
    """Return copies of ``records`` with reverse edges filled in.

    Declared values stay first; derived names follow in record order with
    duplicates and self references dropped. Input records are not mutated.
    """
    derived: Dict[Tuple[str, str, str], List[str]] = {}
    for record in records:
        for source_kind, forward, target_kind, reverse in _EDGES:
            if record.kind != source_kind:
                continue
            for target in getattr(record, forward):
                derived.setdefault((target_kind, target, reverse), []).append(record.name)

    merged: List[DeclarationRecord] = []
    for record in records:
        updates: Dict[str, List[str]] = {}
        for _, _, target_kind, reverse in _EDGES:
            if record.kind != target_kind or reverse in updates:
                continue
            names = derived.get((target_kind, record.name, reverse))
            if names:
                updates[reverse] = _merge(getattr(record, reverse), names, record.name)
        merged.append(replace(record, **updates) if updates else replace(record))
    return merged


def check_edge_consistency(graph: FeatureGraph) -> List[EdgeIssue]:
    """Report dangling forward edges and forward edges without a reverse edge.

    Names are looked up across every partition of the graph; a target that
    exists under any feature satisfies the lookup.
    """
    index: Dict[Tuple[str, str], List[DeclarationRecord]] = {}
    records = list(iter_records(graph))
    for record in records:
        index.setdefault((record.kind, record.name), []).append(record)

    issues: List[EdgeIssue] = []
    for record in records:
        for source_kind, forward, target_kind, reverse in _EDGES:
            if record.kind != source_kind:
                continue
            for target in getattr(record, forward):
                targets = index.get((target_kind, target))
                if not targets:
                    issues.append(
                        EdgeIssue("missing-target", source_kind, record.name, target_kind, target, record.path)
                    )
                    continue
                if not any(record.name in getattr(candidate, reverse) for candidate in targets):
                    issues.append(
                        EdgeIssue("missing-reverse", source_kind, record.name, target_kind, target, record.path)
                    )
    return issues


__all__ = ["EdgeIssue", "check_edge_consistency", "merge_reverse_references"]
