from dataclasses import dataclass, field
from typing import List, Dict, Optional, Iterator
from enum import Enum

from core.exceptions import GenerationError


class Tier(Enum):
    SYSTEM = "system"
    SUBSYSTEM = "subsystem"
    COMPONENT = "component"

    @property
    def level(self) -> int:
        """0 for the top of the hierarchy, growing downwards"""
        return TIER_ORDER.index(self)


TIER_ORDER = [Tier.SYSTEM, Tier.SUBSYSTEM, Tier.COMPONENT]


class ArtifactType(Enum):
    EXECUTABLE = "executable"
    STATIC_LIB = "static-lib"
    SHARED_LIB = "shared-lib"


class Language(Enum):
    C = "c"
    CPP = "cpp"

    @property
    def source_ext(self) -> str:
        return "cpp" if self is Language.CPP else "c"

    @property
    def header_ext(self) -> str:
        return "hpp" if self is Language.CPP else "h"


class IssueType(Enum):
    CIRCULAR = "circular"
    MISSING = "missing"
    VERSION_CONFLICT = "version-conflict"
    TRANSITIVE = "transitive"


class BuildSystem(Enum):
    MAKE = "make"
    CMAKE = "cmake"


class Complexity(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def max_dependencies(self) -> int:
        return {"low": 2, "medium": 4, "high": 6}[self.value]


class CrossDirection(Enum):
    SAME_TIER = "same-tier"
    HIGHER_TIER = "higher-tier"
    BOTH = "both"


@dataclass
class Module:
    """Domain entity representing a single header/source pair"""
    id: str
    name: str
    path: str
    language: Language
    artifact_id: str
    header_content: str = ""
    source_content: str = ""
    dependencies: List[str] = field(default_factory=list)
    lines_of_code: int = 0
    vulnerability: Optional[str] = None  # pattern key, set by the synthesizer

    def __hash__(self):
        return hash(self.id)

    @property
    def header_filename(self) -> str:
        return f"{self.name}.{self.language.header_ext}"

    @property
    def source_filename(self) -> str:
        return f"{self.name}.{self.language.source_ext}"


@dataclass
class Artifact:
    """Domain entity representing a unit of build output"""
    id: str
    name: str
    type: ArtifactType
    tier: Tier
    path: str
    system_id: str
    subsystem_id: str
    parent_id: Optional[str] = None
    modules: List[Module] = field(default_factory=list)
    dependencies: List[str] = field(default_factory=list)
    children: List[str] = field(default_factory=list)

    def __hash__(self):
        return hash(self.id)

    def add_dependency(self, dep_id: str) -> bool:
        """Append a dependency id unless it is this artifact or already listed"""
        if dep_id == self.id or dep_id in self.dependencies:
            return False
        self.dependencies.append(dep_id)
        return True

    @property
    def output_name(self) -> str:
        if self.type is ArtifactType.EXECUTABLE:
            return self.name
        if self.type is ArtifactType.SHARED_LIB:
            return f"lib{self.name}.so"
        return f"lib{self.name}.a"

    @property
    def total_lines(self) -> int:
        return sum(m.lines_of_code for m in self.modules)


@dataclass
class Component:
    id: str
    name: str
    artifact_id: str
    module_ids: List[str] = field(default_factory=list)


@dataclass
class Subsystem:
    id: str
    name: str
    artifact_id: str
    components: List[Component] = field(default_factory=list)


@dataclass
class System:
    id: str
    name: str
    subsystems: List[Subsystem] = field(default_factory=list)


@dataclass
class Enterprise:
    name: str
    systems: List[System] = field(default_factory=list)


@dataclass
class DependencyIssue:
    """Record of a deliberately injected graph defect"""
    type: IssueType
    artifacts: List[str]
    description: str
    missing: Optional[str] = None

    @property
    def subject(self) -> Optional[str]:
        return self.artifacts[0] if self.artifacts else None

    def to_dict(self) -> Dict:
        data = {
            'type': self.type.value,
            'artifacts': list(self.artifacts),
            'description': self.description,
        }
        if self.missing:
            data['missing'] = self.missing
        return data


@dataclass
class BuildFile:
    name: str
    path: str
    content: str


@dataclass
class CodebaseStats:
    total_artifacts: int
    total_modules: int
    total_lines: int
    executables: int
    libraries: int
    modules_by_language: Dict[str, int] = field(default_factory=dict)
    artifacts_by_tier: Dict[str, int] = field(default_factory=dict)
    total_dependencies: int = 0
    dangling_references: int = 0
    has_cycles: bool = False
    max_depth: int = 0


class ArtifactIndex:
    """Id-keyed arena over the flat artifact list, preserving creation order"""

    def __init__(self, artifacts: List[Artifact] = None):
        self._artifacts: List[Artifact] = []
        self._by_id: Dict[str, Artifact] = {}
        self._position: Dict[str, int] = {}
        for artifact in artifacts or []:
            self.add(artifact)

    def add(self, artifact: Artifact) -> None:
        if artifact.id in self._by_id:
            raise GenerationError("hierarchy", "duplicate artifact id", ref=artifact.id)
        self._position[artifact.id] = len(self._artifacts)
        self._by_id[artifact.id] = artifact
        self._artifacts.append(artifact)

    def get(self, artifact_id: str) -> Optional[Artifact]:
        return self._by_id.get(artifact_id)

    def position(self, artifact_id: str) -> int:
        return self._position[artifact_id]

    def resolved_dependencies(self, artifact: Artifact) -> List[Artifact]:
        """Dependencies that exist in the index; dangling ids are skipped"""
        return [self._by_id[d] for d in artifact.dependencies if d in self._by_id]

    def __contains__(self, artifact_id: str) -> bool:
        return artifact_id in self._by_id

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self._artifacts)

    def __len__(self) -> int:
        return len(self._artifacts)

    def __getitem__(self, position: int) -> Artifact:
        return self._artifacts[position]

    @property
    def artifacts(self) -> List[Artifact]:
        return list(self._artifacts)


@dataclass
class GeneratedCodebase:
    """Aggregate root for one generation run"""
    name: str
    seed: Optional[int]
    enterprise: Enterprise
    artifacts: List[Artifact]
    modules: List[Module]
    build_files: List[BuildFile]
    sbom: Dict
    issues: List[DependencyIssue]
    stats: CodebaseStats

    def find_file(self, path: str) -> Optional[BuildFile]:
        return next((f for f in self.build_files if f.path == path), None)
