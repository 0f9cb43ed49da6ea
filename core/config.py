from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Tuple, Type

from core.entities import (
    ArtifactType,
    BuildSystem,
    Complexity,
    CrossDirection,
    IssueType,
    Language,
    Tier,
)
from core.exceptions import InvalidConfigException


@dataclass(frozen=True)
class Range:
    min: int
    max: int

    def to_dict(self) -> Dict:
        return {'min': self.min, 'max': self.max}


@dataclass(frozen=True)
class TierSpec:
    count: int
    artifact_type: ArtifactType


@dataclass(frozen=True)
class TierConfig:
    systems: int = 2
    subsystem: TierSpec = TierSpec(3, ArtifactType.SHARED_LIB)
    component: TierSpec = TierSpec(4, ArtifactType.STATIC_LIB)
    modules_per_artifact: Range = Range(2, 6)


@dataclass(frozen=True)
class CrossDependencyConfig:
    enabled: bool = False
    probability: float = 0.3
    max_per_artifact: int = 2
    direction: CrossDirection = CrossDirection.HIGHER_TIER
    allowed_tiers: Tuple[Tier, ...] = (Tier.SUBSYSTEM, Tier.COMPONENT)


@dataclass(frozen=True)
class LanguageShare:
    language: Language
    percentage: float


@dataclass(frozen=True)
class CodebaseConfig:
    """Immutable generator input, mirrors the camelCase JSON document"""
    name: str = "test_codebase"
    tiers: TierConfig = TierConfig()
    lines_per_file: Range = Range(50, 200)
    build_system: BuildSystem = BuildSystem.MAKE
    dependency_complexity: Complexity = Complexity.MEDIUM
    cross_dependencies: CrossDependencyConfig = CrossDependencyConfig()
    language_distribution: Tuple[LanguageShare, ...] = (
        LanguageShare(Language.C, 70.0),
        LanguageShare(Language.CPP, 30.0),
    )
    dependency_issues: Tuple[IssueType, ...] = field(default_factory=tuple)
    include_vulnerabilities: bool = False

    def with_overrides(self, **changes) -> 'CodebaseConfig':
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CodebaseConfig':
        """Build a configuration from parsed JSON; absent keys take defaults"""
        if not isinstance(data, dict):
            raise InvalidConfigException(reason="expected a JSON object")

        default = cls()
        tiers_data = _section(data, 'tiers')
        enterprise = _section(tiers_data, 'enterprise', 'tiers.enterprise')
        subsystem = _section(tiers_data, 'subsystem', 'tiers.subsystem')
        component = _section(tiers_data, 'component', 'tiers.component')

        tiers = TierConfig(
            systems=_int(enterprise.get('systems', default.tiers.systems), 'tiers.enterprise.systems'),
            subsystem=TierSpec(
                count=_int(subsystem.get('count', default.tiers.subsystem.count), 'tiers.subsystem.count'),
                artifact_type=_enum(
                    ArtifactType,
                    subsystem.get('artifactType', default.tiers.subsystem.artifact_type.value),
                    'tiers.subsystem.artifactType'
                ),
            ),
            component=TierSpec(
                count=_int(component.get('count', default.tiers.component.count), 'tiers.component.count'),
                artifact_type=_enum(
                    ArtifactType,
                    component.get('artifactType', default.tiers.component.artifact_type.value),
                    'tiers.component.artifactType'
                ),
            ),
            modules_per_artifact=_range(
                component.get('modulesPerArtifact'),
                default.tiers.modules_per_artifact,
                'tiers.component.modulesPerArtifact'
            ),
        )

        cross_data = _section(data, 'crossDependencies')
        cross_default = default.cross_dependencies
        allowed = cross_data.get('allowedTiers', [t.value for t in cross_default.allowed_tiers])
        if not isinstance(allowed, list):
            raise InvalidConfigException('crossDependencies.allowedTiers', "expected a list")
        cross = CrossDependencyConfig(
            enabled=bool(cross_data.get('enabled', cross_default.enabled)),
            probability=_float(cross_data.get('probability', cross_default.probability),
                               'crossDependencies.probability'),
            max_per_artifact=_int(cross_data.get('maxPerArtifact', cross_default.max_per_artifact),
                                  'crossDependencies.maxPerArtifact'),
            direction=_enum(CrossDirection, cross_data.get('direction', cross_default.direction.value),
                            'crossDependencies.direction'),
            allowed_tiers=tuple(_enum(Tier, t, 'crossDependencies.allowedTiers') for t in allowed),
        )

        if 'languageDistribution' in data:
            distribution = _distribution(data['languageDistribution'])
        else:
            distribution = default.language_distribution

        issues = data.get('dependencyIssues', [])
        if not isinstance(issues, list):
            raise InvalidConfigException('dependencyIssues', "expected a list")

        return cls(
            name=str(data.get('name', default.name)),
            tiers=tiers,
            lines_per_file=_range(data.get('linesPerFile'), default.lines_per_file, 'linesPerFile'),
            build_system=_enum(BuildSystem, data.get('buildSystem', default.build_system.value), 'buildSystem'),
            dependency_complexity=_enum(
                Complexity,
                data.get('dependencyComplexity', default.dependency_complexity.value),
                'dependencyComplexity'
            ),
            cross_dependencies=cross,
            language_distribution=distribution,
            dependency_issues=tuple(_enum(IssueType, i, 'dependencyIssues') for i in issues),
            include_vulnerabilities=bool(data.get('includeVulnerabilities', default.include_vulnerabilities)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'tiers': {
                'enterprise': {'systems': self.tiers.systems},
                'subsystem': {
                    'count': self.tiers.subsystem.count,
                    'artifactType': self.tiers.subsystem.artifact_type.value,
                },
                'component': {
                    'count': self.tiers.component.count,
                    'artifactType': self.tiers.component.artifact_type.value,
                    'modulesPerArtifact': self.tiers.modules_per_artifact.to_dict(),
                },
            },
            'linesPerFile': self.lines_per_file.to_dict(),
            'buildSystem': self.build_system.value,
            'dependencyComplexity': self.dependency_complexity.value,
            'crossDependencies': {
                'enabled': self.cross_dependencies.enabled,
                'probability': self.cross_dependencies.probability,
                'maxPerArtifact': self.cross_dependencies.max_per_artifact,
                'direction': self.cross_dependencies.direction.value,
                'allowedTiers': [t.value for t in self.cross_dependencies.allowed_tiers],
            },
            'languageDistribution': [
                {'language': s.language.value, 'percentage': s.percentage}
                for s in self.language_distribution
            ],
            'dependencyIssues': [i.value for i in self.dependency_issues],
            'includeVulnerabilities': self.include_vulnerabilities,
        }


DEFAULT_CONFIG = CodebaseConfig()


def validate_config(config: CodebaseConfig) -> List[str]:
    """
    Human readable problems with a configuration.
    The generator tolerates every one of these; callers decide whether to reject.
    """
    problems = []

    if not config.name.strip():
        problems.append("name must not be empty")

    counts = {
        'tiers.enterprise.systems': config.tiers.systems,
        'tiers.subsystem.count': config.tiers.subsystem.count,
        'tiers.component.count': config.tiers.component.count,
    }
    for key, value in counts.items():
        if value < 0:
            problems.append(f"{key} must not be negative (got {value})")

    for key, rng in [('tiers.component.modulesPerArtifact', config.tiers.modules_per_artifact),
                     ('linesPerFile', config.lines_per_file)]:
        if rng.min < 0:
            problems.append(f"{key}.min must not be negative (got {rng.min})")
        if rng.min > rng.max:
            problems.append(f"{key}.min ({rng.min}) is greater than max ({rng.max})")

    cross = config.cross_dependencies
    if not 0.0 <= cross.probability <= 1.0:
        problems.append(f"crossDependencies.probability must be within [0, 1] (got {cross.probability})")
    if cross.max_per_artifact < 0:
        problems.append(f"crossDependencies.maxPerArtifact must not be negative (got {cross.max_per_artifact})")

    if not config.language_distribution:
        problems.append("languageDistribution must list at least one language")
    else:
        total = sum(s.percentage for s in config.language_distribution)
        if abs(total - 100.0) > 1e-6:
            problems.append(f"languageDistribution percentages must sum to 100 (got {total:g})")
        if any(s.percentage < 0 for s in config.language_distribution):
            problems.append("languageDistribution percentages must not be negative")

    return problems


def _section(data: Dict, key: str, path: str = None) -> Dict:
    value = data.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidConfigException(path or key, "expected an object")
    return value


def _enum(enum_cls: Type, value: Any, path: str):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(e.value for e in enum_cls)
        raise InvalidConfigException(path, f"'{value}' is not one of: {allowed}")


def _int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise InvalidConfigException(path, "expected an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise InvalidConfigException(path, f"expected an integer, got '{value}'")


def _float(value: Any, path: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        raise InvalidConfigException(path, f"expected a number, got '{value}'")


def _range(value: Any, default: Range, path: str) -> Range:
    if value is None:
        return default
    if not isinstance(value, dict):
        raise InvalidConfigException(path, "expected an object with 'min' and 'max'")
    return Range(
        min=_int(value.get('min', default.min), f"{path}.min"),
        max=_int(value.get('max', default.max), f"{path}.max"),
    )


def _distribution(value: Any) -> Tuple[LanguageShare, ...]:
    if not isinstance(value, list):
        raise InvalidConfigException('languageDistribution', "expected a list")
    shares = []
    for i, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise InvalidConfigException(f"languageDistribution[{i}]", "expected an object")
        shares.append(LanguageShare(
            language=_enum(Language, entry.get('language'), f"languageDistribution[{i}].language"),
            percentage=_float(entry.get('percentage', 0), f"languageDistribution[{i}].percentage"),
        ))
    return tuple(shares)
