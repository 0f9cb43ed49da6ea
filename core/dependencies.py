import logging
from typing import Dict, List

import numpy as np

from core.config import CrossDependencyConfig
from core.entities import Artifact, ArtifactIndex, Complexity, CrossDirection, Module


class DependencyAssigner:
    """
    Index-ordered artifact edges plus module edges derived from them.

    An artifact may only depend on artifacts created before it, which is what
    keeps the base graph acyclic.
    """

    def __init__(self, rng: np.random.Generator):
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def assign_artifact_dependencies(self, artifacts: ArtifactIndex, complexity: Complexity) -> int:
        max_deps = complexity.max_dependencies
        added = 0

        for index, artifact in enumerate(artifacts):
            candidates = [
                artifacts[j] for j in range(index)
                if artifacts[j].id not in artifact.dependencies
            ]

            wanted = int(self.rng.integers(0, max_deps))
            count = min(wanted, len(candidates))
            if count == 0:
                continue

            picks = self.rng.choice(len(candidates), size=count, replace=False)
            for pick in picks:
                if artifact.add_dependency(candidates[int(pick)].id):
                    added += 1

        self.logger.info(f"Assigned {added} artifact dependencies (complexity={complexity.value})")
        return added

    def assign_module_dependencies(self, artifacts: ArtifactIndex) -> Dict[str, List[Module]]:
        """
        For each module, pick one module from every resolvable dependency artifact.
        Returns the chosen dependency modules keyed by module id.
        """
        resolved: Dict[str, List[Module]] = {}

        for artifact in artifacts:
            dep_artifacts = artifacts.resolved_dependencies(artifact)

            for module in artifact.modules:
                chosen: List[Module] = []
                for dep_artifact in dep_artifacts:
                    if not dep_artifact.modules:
                        continue
                    candidate = dep_artifact.modules[int(self.rng.integers(0, len(dep_artifact.modules)))]
                    if candidate.id == module.id or candidate.id in module.dependencies:
                        continue
                    module.dependencies.append(candidate.id)
                    chosen.append(candidate)
                resolved[module.id] = chosen

        total = sum(len(v) for v in resolved.values())
        self.logger.info(f"Assigned {total} module dependencies across {len(resolved)} modules")
        return resolved


class CrossDependencyInjector:
    """Extra edges between artifacts of different subsystems under tier-direction rules"""

    def __init__(self, policy: CrossDependencyConfig, rng: np.random.Generator):
        self.policy = policy
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def is_eligible(self, source: Artifact, target: Artifact) -> bool:
        allowed = self.policy.allowed_tiers
        if source.tier not in allowed or target.tier not in allowed:
            return False
        if source.id == target.id or target.id in source.dependencies:
            return False
        # Parent/child edges are ownership, not cross dependencies
        if source.subsystem_id == target.subsystem_id:
            return False

        same = target.tier is source.tier
        higher = target.tier.level < source.tier.level
        if self.policy.direction is CrossDirection.SAME_TIER:
            return same
        if self.policy.direction is CrossDirection.HIGHER_TIER:
            return higher
        return same or higher

    def inject(self, artifacts: ArtifactIndex) -> int:
        if not self.policy.enabled:
            return 0

        added = 0
        max_per_artifact = max(self.policy.max_per_artifact, 0)

        for index, artifact in enumerate(artifacts):
            if self.rng.random() >= self.policy.probability or max_per_artifact == 0:
                continue

            # Creation order applies to every non-injected edge, same-tier included
            candidates = [artifacts[j] for j in range(index) if self.is_eligible(artifact, artifacts[j])]
            if not candidates:
                continue

            wanted = int(self.rng.integers(1, max_per_artifact + 1))
            count = min(wanted, len(candidates))
            picks = self.rng.choice(len(candidates), size=count, replace=False)
            for pick in picks:
                target = candidates[int(pick)]
                if artifact.add_dependency(target.id):
                    added += 1
                    self.logger.debug(f"Cross dependency {artifact.id} ({artifact.tier.value}) -> "
                                      f"{target.id} ({target.tier.value})")

        self.logger.info(f"Injected {added} cross dependencies (direction={self.policy.direction.value})")
        return added
