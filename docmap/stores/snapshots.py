"""Persistent feature-map snapshots and structural comparison between them."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from ..analyzers.feature_graph import graph_from_dict, graph_to_dict, iter_records, record_to_dict
from ..models import DeclarationRecord, FeatureGraph

_SNAPSHOT_VERSION = 1

SnapshotKey = Tuple[str, str]


@dataclass
class SnapshotChanges:
    """Records keyed by ``(path, name)`` that appeared, vanished or changed."""

    added: List[DeclarationRecord] = field(default_factory=list)
    removed: List[DeclarationRecord] = field(default_factory=list)
    changed: List[Tuple[DeclarationRecord, DeclarationRecord]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.changed)


class SnapshotStore:
    """Reads and writes the serialised feature graph of a repository."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> Optional[FeatureGraph]:
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError):
            return None
        if not isinstance(data, dict) or data.get("version") != _SNAPSHOT_VERSION:
            return None
        return graph_from_dict(data)

    def save(self, graph: FeatureGraph) -> Path:
        payload = {"version": _SNAPSHOT_VERSION, **graph_to_dict(graph)}
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return self._path


def _index(graph: Optional[FeatureGraph]) -> Dict[SnapshotKey, DeclarationRecord]:
    if graph is None:
        return {}
    index: Dict[SnapshotKey, DeclarationRecord] = {}
    for record in iter_records(graph):
        index.setdefault(record.key, record)
    return index


def _fingerprint(record: DeclarationRecord) -> Dict[str, object]:
    return {"kind": record.kind, **record_to_dict(record)}


def compare_snapshots(previous: Optional[FeatureGraph], current: Optional[FeatureGraph]) -> SnapshotChanges:
    """Structural change set between two graphs; either side may be missing."""
    before = _index(previous)
    after = _index(current)
    changes = SnapshotChanges()
    for key, record in after.items():
        old = before.get(key)
        if old is None:
            changes.added.append(record)
        elif _fingerprint(old) != _fingerprint(record):
            changes.changed.append((old, record))
    changes.removed = [record for key, record in before.items() if key not in after]
    return changes


__all__ = ["SnapshotChanges", "SnapshotStore", "compare_snapshots"]
