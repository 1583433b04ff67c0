"""Aggregate declaration records into a feature-partitioned graph."""

from __future__ import annotations

from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..models import (
    DeclarationRecord,
    FeatureGraph,
    FeatureGroup,
    TypeField,
    TypeItem,
    UtilityItem,
)
from ..parsers.declarations import FileAnnotations

_BUCKETS: Tuple[Tuple[str, str], ...] = (
    ("screens", "screen"),
    ("components", "component"),
    ("actions", "action"),
    ("tables", "table"),
)

# Serialised fields per kind, in output order.
_KIND_FIELDS: Dict[str, Tuple[Tuple[str, str], ...]] = {
    "screen": (
        ("route", "route"),
        ("usedComponents", "used_components"),
        ("usedActions", "used_actions"),
    ),
    "component": (
        ("usedInScreens", "used_in_screens"),
        ("usedInComponents", "used_in_components"),
        ("usedComponents", "used_components"),
        ("usedActions", "used_actions"),
    ),
    "action": (
        ("usedInScreens", "used_in_screens"),
        ("usedInComponents", "used_in_components"),
        ("dbTables", "db_tables"),
        ("actionType", "action_type"),
        ("authLevel", "auth_level"),
        ("inputSchema", "input_schema"),
        ("outputSchema", "output_schema"),
    ),
    "table": (("usedInActions", "used_in_actions"),),
}


def _timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def build_feature_graph(
    records: Iterable[DeclarationRecord],
    module_descriptions: Optional[Mapping[str, str]] = None,
    module_types: Optional[Mapping[str, List[TypeItem]]] = None,
    module_utilities: Optional[Mapping[str, List[UtilityItem]]] = None,
    *,
    generated_at: Optional[str] = None,
) -> FeatureGraph:
    """Partition records by ``feature`` and bucket them by kind.

    Records keep the order they are supplied in. Edges are copied as
    declared; nothing is validated here (see ``cross_refs``).
    """
    graph = FeatureGraph(
        module_descriptions=dict(module_descriptions or {}),
        module_types={key: list(value) for key, value in (module_types or {}).items()},
        module_utilities={key: list(value) for key, value in (module_utilities or {}).items()},
        generated_at=generated_at or _timestamp(),
    )
    apps: set[str] = set()
    for record in records:
        if record.feature:
            group = graph.features.setdefault(record.feature, FeatureGroup())
        else:
            group = graph.uncategorized
        group.add(record)
        if record.app and record.app != "Unknown":
            apps.add(record.app)
    graph.apps = sorted(apps)
    return graph


def collect_module_maps(
    files: Iterable[FileAnnotations],
) -> Tuple[Dict[str, str], Dict[str, List[TypeItem]], Dict[str, List[UtilityItem]]]:
    """Merge per-file module data keyed by module name.

    The longest description wins; types and utilities are unique by name,
    first occurrence kept.
    """
    descriptions: Dict[str, str] = {}
    types: Dict[str, List[TypeItem]] = {}
    utilities: Dict[str, List[UtilityItem]] = {}
    for annotations in files:
        module = annotations.module_name
        description = annotations.metadata.module_description
        if description and len(description) > len(descriptions.get(module, "")):
            descriptions[module] = description
        if annotations.types:
            bucket = types.setdefault(module, [])
            known = {item.name for item in bucket}
            bucket.extend(item for item in annotations.types if item.name not in known)
        if annotations.utilities:
            util_bucket = utilities.setdefault(module, [])
            util_known = {item.name for item in util_bucket}
            util_bucket.extend(item for item in annotations.utilities if item.name not in util_known)
    return descriptions, types, utilities


def iter_records(graph: FeatureGraph) -> Iterator[DeclarationRecord]:
    """Every record of the graph: features in insertion order, then uncategorized."""
    for group in graph.features.values():
        yield from group.records()
    yield from graph.uncategorized.records()


def find_records(graph: FeatureGraph, kind: str, name: str) -> List[DeclarationRecord]:
    return [record for record in iter_records(graph) if record.kind == kind and record.name == name]


def record_to_dict(record: DeclarationRecord) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "name": record.name,
        "path": record.path,
        "description": record.description,
    }
    if record.feature:
        payload["feature"] = record.feature
    for key, attribute in _KIND_FIELDS[record.kind]:
        value = getattr(record, attribute)
        if isinstance(value, list):
            payload[key] = list(value)
        elif value is not None:
            payload[key] = value
    if record.app:
        payload["app"] = record.app
    return payload


def record_from_dict(kind: str, payload: Mapping[str, Any]) -> Optional[DeclarationRecord]:
    name = payload.get("name")
    path = payload.get("path")
    if not isinstance(name, str) or not isinstance(path, str):
        return None
    record = DeclarationRecord(
        kind=kind,
        name=name,
        path=path,
        feature=payload.get("feature") if isinstance(payload.get("feature"), str) else None,
        description=payload.get("description") if isinstance(payload.get("description"), str) else "",
        app=payload.get("app") if isinstance(payload.get("app"), str) else None,
    )
    for key, attribute in _KIND_FIELDS[kind]:
        value = payload.get(key)
        if isinstance(getattr(record, attribute), list):
            if isinstance(value, list):
                setattr(record, attribute, [item for item in value if isinstance(item, str)])
        elif isinstance(value, str):
            setattr(record, attribute, value)
    return record


def _group_to_dict(group: FeatureGroup) -> Dict[str, List[Dict[str, Any]]]:
    return {bucket: [record_to_dict(record) for record in getattr(group, bucket)] for bucket, _ in _BUCKETS}


def _group_from_dict(payload: Any, feature: Optional[str]) -> FeatureGroup:
    group = FeatureGroup()
    if not isinstance(payload, dict):
        return group
    for bucket, kind in _BUCKETS:
        items = payload.get(bucket)
        if not isinstance(items, list):
            continue
        for item in items:
            if not isinstance(item, dict):
                continue
            record = record_from_dict(kind, item)
            if record is not None:
                if feature and not record.feature:
                    record.feature = feature
                group.add(record)
    return group


def graph_to_dict(graph: FeatureGraph) -> Dict[str, Any]:
    """JSON-ready document: features, uncategorized, module maps, apps, generatedAt."""
    return {
        "features": {name: _group_to_dict(group) for name, group in graph.features.items()},
        "uncategorized": _group_to_dict(graph.uncategorized),
        "moduleDescriptions": dict(graph.module_descriptions),
        "moduleTypes": {
            module: [_drop_empty(asdict(item)) for item in items] for module, items in graph.module_types.items()
        },
        "moduleUtilities": {
            module: [_drop_empty(asdict(item)) for item in items]
            for module, items in graph.module_utilities.items()
        },
        "apps": list(graph.apps),
        "generatedAt": graph.generated_at,
    }


def graph_from_dict(payload: Mapping[str, Any]) -> FeatureGraph:
    graph = FeatureGraph()
    features = payload.get("features")
    if isinstance(features, dict):
        for name, group in features.items():
            if isinstance(name, str):
                graph.features[name] = _group_from_dict(group, name)
    graph.uncategorized = _group_from_dict(payload.get("uncategorized"), None)
    descriptions = payload.get("moduleDescriptions")
    if isinstance(descriptions, dict):
        graph.module_descriptions = {
            key: value for key, value in descriptions.items() if isinstance(key, str) and isinstance(value, str)
        }
    types = payload.get("moduleTypes")
    if isinstance(types, dict):
        graph.module_types = {
            module: [_type_from_dict(item) for item in items if isinstance(item, dict)]
            for module, items in types.items()
            if isinstance(items, list)
        }
    utilities = payload.get("moduleUtilities")
    if isinstance(utilities, dict):
        graph.module_utilities = {
            module: [_utility_from_dict(item) for item in items if isinstance(item, dict)]
            for module, items in utilities.items()
            if isinstance(items, list)
        }
    apps = payload.get("apps")
    if isinstance(apps, list):
        graph.apps = [app for app in apps if isinstance(app, str)]
    generated_at = payload.get("generatedAt")
    graph.generated_at = generated_at if isinstance(generated_at, str) else ""
    return graph


def _drop_empty(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value not in (None, [], "")}


def _fields_from(items: Any) -> List[TypeField]:
    if not isinstance(items, list):
        return []
    return [
        TypeField(name=str(item.get("name", "")), type=str(item.get("type", "")), description=item.get("description"))
        for item in items
        if isinstance(item, dict)
    ]


def _type_from_dict(payload: Dict[str, Any]) -> TypeItem:
    return TypeItem(
        name=str(payload.get("name", "")),
        kind=str(payload.get("kind", "type")),
        description=payload.get("description"),
        fields=_fields_from(payload.get("fields")),
        values=[value for value in payload.get("values", []) if isinstance(value, str)],
        source_code=str(payload.get("source_code", "")),
    )


def _utility_from_dict(payload: Dict[str, Any]) -> UtilityItem:
    return UtilityItem(
        name=str(payload.get("name", "")),
        kind=str(payload.get("kind", "constant")),
        description=payload.get("description"),
        type=payload.get("type"),
        value=payload.get("value"),
        params=_fields_from(payload.get("params")),
    )


def bucket_names() -> Sequence[str]:
    return [bucket for bucket, _ in _BUCKETS]


__all__ = [
    "build_feature_graph",
    "bucket_names",
    "collect_module_maps",
    "find_records",
    "graph_from_dict",
    "graph_to_dict",
    "iter_records",
    "record_from_dict",
    "record_to_dict",
]
