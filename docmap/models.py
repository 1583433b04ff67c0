"""Core data models shared across docmap components."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

KINDS = ("screen", "component", "action", "table")

_BUCKET_BY_KIND = {
    "screen": "screens",
    "component": "components",
    "action": "actions",
    "table": "tables",
}


@dataclass
class FileMeta:
    """Metadata for an individual repository file."""

    path: str
    size: int
    language: Optional[str]
    role: str


@dataclass
class RepoManifest:
    """Normalized view of the repository for the extraction pipeline."""

    root: str
    files: List[FileMeta]

    def paths(self, role: Optional[str] = None) -> List[str]:
        return [meta.path for meta in self.files if role is None or meta.role == role]


@dataclass
class DeclarationSite:
    """A declaration located in raw source text."""

    name: str
    start: int
    comment: Optional[str] = None
    comment_start: Optional[int] = None
    form: str = "function"


@dataclass
class DeclarationRecord:
    """One documented screen, component, action or table."""

    kind: str
    name: str
    path: str
    feature: Optional[str] = None
    description: str = ""
    route: Optional[str] = None
    used_components: List[str] = field(default_factory=list)
    used_actions: List[str] = field(default_factory=list)
    used_in_screens: List[str] = field(default_factory=list)
    used_in_components: List[str] = field(default_factory=list)
    db_tables: List[str] = field(default_factory=list)
    used_in_actions: List[str] = field(default_factory=list)
    app: Optional[str] = None
    action_type: Optional[str] = None
    auth_level: Optional[str] = None
    input_schema: Optional[str] = None
    output_schema: Optional[str] = None

    @property
    def key(self) -> tuple[str, str]:
        return (self.path, self.name)


@dataclass
class FeatureGroup:
    """Per-kind buckets of records sharing one partition."""

    screens: List[DeclarationRecord] = field(default_factory=list)
    components: List[DeclarationRecord] = field(default_factory=list)
    actions: List[DeclarationRecord] = field(default_factory=list)
    tables: List[DeclarationRecord] = field(default_factory=list)

    def bucket(self, kind: str) -> List[DeclarationRecord]:
        return getattr(self, _BUCKET_BY_KIND[kind])

    def add(self, record: DeclarationRecord) -> None:
        self.bucket(record.kind).append(record)

    def records(self) -> List[DeclarationRecord]:
        return [*self.screens, *self.components, *self.actions, *self.tables]

    def is_empty(self) -> bool:
        return not (self.screens or self.components or self.actions or self.tables)


@dataclass
class TypeField:
    """Named, typed member of an interface or a function parameter list."""

    name: str
    type: str
    description: Optional[str] = None


@dataclass
class TypeItem:
    """Exported interface, type alias or enum documented in a module."""

    name: str
    kind: str
    description: Optional[str] = None
    fields: List[TypeField] = field(default_factory=list)
    values: List[str] = field(default_factory=list)
    source_code: str = ""


@dataclass
class UtilityItem:
    """Exported constant or helper function documented in a module."""

    name: str
    kind: str
    description: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None
    params: List[TypeField] = field(default_factory=list)


@dataclass
class FeatureGraph:
    """Records partitioned by feature label plus module descriptive maps."""

    features: Dict[str, FeatureGroup] = field(default_factory=dict)
    uncategorized: FeatureGroup = field(default_factory=FeatureGroup)
    module_descriptions: Dict[str, str] = field(default_factory=dict)
    module_types: Dict[str, List[TypeItem]] = field(default_factory=dict)
    module_utilities: Dict[str, List[UtilityItem]] = field(default_factory=dict)
    apps: List[str] = field(default_factory=list)
    generated_at: str = ""


@dataclass(frozen=True)
class DiffResult:
    """Names present on only one side of a comparison."""

    missing: List[str]
    extra: List[str]

    @property
    def valid(self) -> bool:
        return not self.missing and not self.extra


@dataclass
class FixResult:
    """Outcome of an annotation fixer."""

    changed: bool
    content: str
    changes: List[str] = field(default_factory=list)
