from dataclasses import dataclass
from typing import Dict, List, Optional


@dataclass
class IssueDTO:
    """DTO for an injected dependency issue"""
    type: str
    artifacts: List[str]
    description: str
    missing: Optional[str] = None


@dataclass
class StatsDTO:
    total_artifacts: int
    total_modules: int
    total_lines: int
    executables: int
    libraries: int
    modules_by_language: Dict[str, int]
    artifacts_by_tier: Dict[str, int]
    total_dependencies: int
    dangling_references: int
    has_cycles: bool
    max_depth: int


@dataclass
class GenerationResultDTO:
    """DTO for a generation run"""
    run_id: Optional[str]
    name: str
    seed: Optional[int]
    stats: StatsDTO
    issues: List[IssueDTO]
    files: List[str]
