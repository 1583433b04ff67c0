"""Markdown rendering of a feature graph."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader

from ..analyzers.feature_graph import bucket_names
from ..models import FeatureGraph, FeatureGroup

_TEMPLATE = "feature_map.md.j2"

_BUCKET_TITLES = {
    "screens": "Screens",
    "components": "Components",
    "actions": "Actions",
    "tables": "Tables",
}


class MarkdownRenderer:
    """Renders a feature graph through a Jinja2 template.

    A custom ``templates_dir`` is searched before the bundled templates so a
    project can override ``feature_map.md.j2``.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render(self, graph: FeatureGraph, *, title: str = "Feature Map") -> str:
        template = self._env.get_template(_TEMPLATE)
        sections = [self._section(name, group) for name, group in graph.features.items()]
        if not graph.uncategorized.is_empty():
            sections.append(self._section("Uncategorized", graph.uncategorized))
        text = template.render(
            title=title,
            sections=sections,
            apps=graph.apps,
            modules=self._modules(graph),
            generated_at=graph.generated_at,
        )
        return text.rstrip() + "\n"

    @staticmethod
    def _section(name: str, group: FeatureGroup) -> Dict[str, object]:
        buckets = []
        for bucket in bucket_names():
            records = getattr(group, bucket)
            if records:
                buckets.append({"title": _BUCKET_TITLES[bucket], "records": records})
        return {"name": name, "buckets": buckets}

    @staticmethod
    def _modules(graph: FeatureGraph) -> List[Dict[str, object]]:
        names: List[str] = []
        for mapping in (graph.module_descriptions, graph.module_types, graph.module_utilities):
            for name in mapping:
                if name not in names:
                    names.append(name)
        return [
            {
                "name": name,
                "description": graph.module_descriptions.get(name),
                "types": graph.module_types.get(name, []),
                "utilities": graph.module_utilities.get(name, []),
            }
            for name in names
        ]

    @staticmethod
    def _create_env(templates_dir: Optional[Path]) -> Environment:
        directories = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(Path(__file__).with_name("templates")))
        loader = FileSystemLoader(directories)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


def render_markdown(graph: FeatureGraph, *, templates_dir: Path | None = None) -> str:
    return MarkdownRenderer(templates_dir).render(graph)


__all__ = ["MarkdownRenderer", "render_markdown"]
