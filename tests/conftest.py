"""
Shared fixtures for the codebase generator tests.

Provides:
- A fully wired GenerationService (same adapters as the web shell)
- Small, seeded configurations
- A factory for hand-built artifacts when a test needs an exact graph
"""

from datetime import datetime, timezone

import numpy as np
import pytest

from core.config import CodebaseConfig, CrossDependencyConfig, Range, TierConfig, TierSpec
from core.entities import Artifact, ArtifactType, Complexity, Tier
from infrastructure.graph.networkx_adapter import NetworkXGraphAnalyzer
from main import create_generation_service

FIXED_TIMESTAMP = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
SEED = 20240115


@pytest.fixture
def service():
    return create_generation_service()


@pytest.fixture
def analyzer():
    return NetworkXGraphAnalyzer()


@pytest.fixture
def rng():
    return np.random.default_rng(SEED)


@pytest.fixture
def timestamp():
    return FIXED_TIMESTAMP


@pytest.fixture
def minimal_config():
    """One system, one subsystem, one component, exactly one module"""
    return CodebaseConfig(
        name="minimal",
        tiers=TierConfig(
            systems=1,
            subsystem=TierSpec(1, ArtifactType.SHARED_LIB),
            component=TierSpec(1, ArtifactType.STATIC_LIB),
            modules_per_artifact=Range(1, 2),
        ),
        dependency_complexity=Complexity.LOW,
        cross_dependencies=CrossDependencyConfig(enabled=False),
    )


@pytest.fixture
def medium_config():
    """2 systems x 2 subsystems x 3 components = 16 artifacts"""
    return CodebaseConfig(
        name="medium",
        tiers=TierConfig(
            systems=2,
            subsystem=TierSpec(2, ArtifactType.SHARED_LIB),
            component=TierSpec(3, ArtifactType.STATIC_LIB),
            modules_per_artifact=Range(2, 4),
        ),
        lines_per_file=Range(30, 60),
        dependency_complexity=Complexity.HIGH,
    )


@pytest.fixture
def artifact_factory():
    """Build an Artifact with sensible defaults for graph-only tests"""

    def make(artifact_id, tier=Tier.COMPONENT, dependencies=None, system_id="sys_000",
             subsystem_id="sys_000_sub_000", artifact_type=ArtifactType.STATIC_LIB):
        return Artifact(
            id=artifact_id,
            name=f"{artifact_id}_name",
            type=artifact_type,
            tier=tier,
            path=f"{system_id}/{subsystem_id}/{artifact_id}",
            system_id=system_id,
            subsystem_id=subsystem_id,
            dependencies=list(dependencies or []),
        )

    return make
