import logging
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from core.config import CodebaseConfig, LanguageShare
from core.entities import (
    Artifact,
    ArtifactIndex,
    Component,
    Language,
    Module,
    Subsystem,
    System,
    Tier,
)
from core.exceptions import GenerationError

DEFAULT_LANGUAGE = Language.C


def select_language(distribution: Sequence[LanguageShare], rng: np.random.Generator) -> Language:
    """Cumulative-probability pick: first entry whose running sum exceeds a draw in [0, 100)"""
    draw = rng.random() * 100
    cumulative = 0.0

    for share in distribution:
        cumulative += share.percentage
        if draw < cumulative:
            return share.language

    # Distribution sums to less than the draw (or is empty)
    return distribution[0].language if distribution else DEFAULT_LANGUAGE


def sample_in_range(rng: np.random.Generator, low: int, high: int) -> int:
    """Uniform integer in [low, high); an empty or inverted range yields low"""
    low = max(low, 0)
    if high <= low:
        return low
    return int(rng.integers(low, high))


@dataclass
class Hierarchy:
    systems: List[System]
    artifacts: ArtifactIndex
    modules: List[Module]


class HierarchyBuilder:
    """Expands the tier configuration into systems, artifacts and empty modules"""

    def __init__(self, config: CodebaseConfig, rng: np.random.Generator):
        self.config = config
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def build(self) -> Hierarchy:
        tiers = self.config.tiers
        systems: List[System] = []
        artifacts = ArtifactIndex()
        modules: List[Module] = []
        module_ids = set()

        if not self.config.language_distribution:
            self.logger.warning(f"Empty language distribution, every module falls back to '{DEFAULT_LANGUAGE.value}'")
        if tiers.modules_per_artifact.max <= tiers.modules_per_artifact.min:
            self.logger.warning(
                f"modulesPerArtifact range [{tiers.modules_per_artifact.min}, {tiers.modules_per_artifact.max}) "
                f"is empty, using min for every component"
            )

        for s in range(max(tiers.systems, 0)):
            system_id = f"sys_{s:03d}"
            system_name = f"{self.config.name}_system_{s}"
            system = System(id=system_id, name=system_name)

            for ss in range(max(tiers.subsystem.count, 0)):
                subsystem_id = f"{system_id}_sub_{ss:03d}"
                subsystem_name = f"{system_name}_subsystem_{ss}"

                subsystem_artifact = Artifact(
                    id=f"artifact_{len(artifacts)}",
                    name=subsystem_name,
                    type=tiers.subsystem.artifact_type,
                    tier=Tier.SUBSYSTEM,
                    path=f"{system_name}/{subsystem_name}",
                    system_id=system_id,
                    subsystem_id=subsystem_id,
                    parent_id=system_id,
                )
                # Appended before its components so that ownership edges point backwards
                artifacts.add(subsystem_artifact)
                subsystem = Subsystem(id=subsystem_id, name=subsystem_name, artifact_id=subsystem_artifact.id)

                for c in range(max(tiers.component.count, 0)):
                    component_id = f"{subsystem_id}_comp_{c:03d}"
                    component_name = f"{subsystem_name}_component_{c}"

                    component_artifact = Artifact(
                        id=f"artifact_{len(artifacts)}",
                        name=component_name,
                        type=tiers.component.artifact_type,
                        tier=Tier.COMPONENT,
                        path=f"{subsystem_artifact.path}/{component_name}",
                        system_id=system_id,
                        subsystem_id=subsystem_id,
                        parent_id=subsystem_id,
                        dependencies=[subsystem_artifact.id],
                    )
                    artifacts.add(component_artifact)
                    subsystem_artifact.children.append(component_artifact.id)

                    component = Component(id=component_id, name=component_name, artifact_id=component_artifact.id)
                    count = sample_in_range(
                        self.rng, tiers.modules_per_artifact.min, tiers.modules_per_artifact.max
                    )

                    for m in range(count):
                        module = Module(
                            id=f"{component_id}_mod_{m:04d}",
                            name=f"{component_name}_module_{m}",
                            path=f"{component_artifact.path}/{component_name}_module_{m}",
                            language=select_language(self.config.language_distribution, self.rng),
                            artifact_id=component_artifact.id,
                        )
                        if module.id in module_ids:
                            raise GenerationError("hierarchy", "duplicate module id", ref=module.id)
                        module_ids.add(module.id)

                        component.module_ids.append(module.id)
                        component_artifact.modules.append(module)
                        modules.append(module)

                    subsystem.components.append(component)
                    self.logger.debug(f"{component_artifact.id}: {component_name} with {count} modules")

                system.subsystems.append(subsystem)

            systems.append(system)

        self.logger.info(
            f"Built hierarchy: {len(systems)} systems, {len(artifacts)} artifacts, {len(modules)} modules"
        )
        return Hierarchy(systems=systems, artifacts=artifacts, modules=modules)
