"""Set-difference comparison between two ordered name lists."""

from __future__ import annotations

from typing import Iterable, List, Sequence

from ..models import DiffResult


def _ordered_unique(values: Iterable[str]) -> List[str]:
    seen: set[str] = set()
    ordered: List[str] = []
    for value in values:
        if value not in seen:
            seen.add(value)
            ordered.append(value)
    return ordered


def diff(declared: Sequence[str], actual: Sequence[str]) -> DiffResult:
    """Compare ``declared`` against ``actual`` by exact string membership.

    ``missing`` lists entries of ``actual`` absent from ``declared`` (in
    ``actual`` order); ``extra`` lists entries of ``declared`` absent from
    ``actual`` (in ``declared`` order). Nothing is trimmed or case-folded;
    repeated input values have no additional effect.
    """
    declared_set = set(declared)
    actual_set = set(actual)
    missing = _ordered_unique(name for name in actual if name not in declared_set)
    extra = _ordered_unique(name for name in declared if name not in actual_set)
    return DiffResult(missing=missing, extra=extra)


def detect_option_drift(existing: Sequence[str], defined: Sequence[str]) -> DiffResult:
    """Compare options present in an external system with their canonical list.

    The existing options play the ``declared`` role and the canonical
    definition the ``actual`` role, so ``missing`` are canonical options not
    yet created externally and ``extra`` are externally introduced options.
    Extra options are reported, never deleted.
    """
    return diff(existing, defined)


__all__ = ["detect_option_drift", "diff"]
