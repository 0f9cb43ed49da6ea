"""
Hierarchy builder tests.

Tests verify:
- Artifact and module counts per tier
- Id uniqueness and ownership edges
- Language sampling against the configured distribution
- Tolerance of zero counts and malformed distributions
"""

import numpy as np

from core.config import CodebaseConfig, LanguageShare, Range, TierConfig, TierSpec
from core.entities import ArtifactType, Language, Tier
from core.hierarchy import DEFAULT_LANGUAGE, HierarchyBuilder, sample_in_range, select_language


class TestSelectLanguage:
    """Tests for cumulative-probability language selection."""

    def test_converges_to_distribution(self, rng):
        distribution = (LanguageShare(Language.C, 70.0), LanguageShare(Language.CPP, 30.0))
        draws = [select_language(distribution, rng) for _ in range(10000)]

        c_share = draws.count(Language.C) / len(draws)
        assert abs(c_share - 0.70) < 0.03

    def test_single_language(self, rng):
        distribution = (LanguageShare(Language.CPP, 100.0),)
        assert {select_language(distribution, rng) for _ in range(100)} == {Language.CPP}

    def test_short_distribution_falls_back_to_first_entry(self, rng):
        distribution = (LanguageShare(Language.CPP, 0.0),)
        assert select_language(distribution, rng) is Language.CPP

    def test_empty_distribution_falls_back_to_default(self, rng):
        assert select_language((), rng) is DEFAULT_LANGUAGE


class TestSampleInRange:
    """Tests for half-open integer sampling."""

    def test_values_within_half_open_range(self, rng):
        values = {sample_in_range(rng, 2, 5) for _ in range(500)}
        assert values == {2, 3, 4}

    def test_empty_range_yields_low(self, rng):
        assert sample_in_range(rng, 3, 3) == 3

    def test_inverted_range_yields_low(self, rng):
        assert sample_in_range(rng, 7, 2) == 7

    def test_negative_low_clamped(self, rng):
        assert sample_in_range(rng, -4, -1) == 0


class TestHierarchyBuilder:
    """Tests for expanding tiers into artifacts and modules."""

    def test_artifact_counts(self, medium_config, rng):
        hierarchy = HierarchyBuilder(medium_config, rng).build()

        tiers = [a.tier for a in hierarchy.artifacts]
        assert len(hierarchy.systems) == 2
        assert tiers.count(Tier.SUBSYSTEM) == 4
        assert tiers.count(Tier.COMPONENT) == 12
        assert len(hierarchy.artifacts) == 16

    def test_ids_unique(self, medium_config, rng):
        hierarchy = HierarchyBuilder(medium_config, rng).build()

        artifact_ids = [a.id for a in hierarchy.artifacts]
        module_ids = [m.id for m in hierarchy.modules]
        assert len(artifact_ids) == len(set(artifact_ids))
        assert len(module_ids) == len(set(module_ids))

    def test_module_counts_within_range(self, medium_config, rng):
        hierarchy = HierarchyBuilder(medium_config, rng).build()

        for artifact in hierarchy.artifacts:
            if artifact.tier is Tier.COMPONENT:
                assert 2 <= len(artifact.modules) < 4
            else:
                assert artifact.modules == []

    def test_component_depends_on_subsystem(self, medium_config, rng):
        hierarchy = HierarchyBuilder(medium_config, rng).build()
        index = hierarchy.artifacts

        for artifact in index:
            if artifact.tier is not Tier.COMPONENT:
                continue
            parent = next(a for a in index if a.tier is Tier.SUBSYSTEM and a.subsystem_id == artifact.subsystem_id)
            assert artifact.dependencies == [parent.id]
            assert artifact.id in parent.children
            assert index.position(parent.id) < index.position(artifact.id)
            assert artifact.id not in parent.dependencies

    def test_tree_matches_artifacts(self, medium_config, rng):
        hierarchy = HierarchyBuilder(medium_config, rng).build()

        for system in hierarchy.systems:
            for subsystem in system.subsystems:
                assert hierarchy.artifacts.get(subsystem.artifact_id).tier is Tier.SUBSYSTEM
                for component in subsystem.components:
                    artifact = hierarchy.artifacts.get(component.artifact_id)
                    assert component.module_ids == [m.id for m in artifact.modules]

    def test_fixed_module_count_when_range_empty(self, rng):
        config = CodebaseConfig(tiers=TierConfig(
            systems=1,
            subsystem=TierSpec(1, ArtifactType.SHARED_LIB),
            component=TierSpec(2, ArtifactType.STATIC_LIB),
            modules_per_artifact=Range(3, 3),
        ))
        hierarchy = HierarchyBuilder(config, rng).build()
        assert len(hierarchy.modules) == 6

    def test_zero_systems_yields_nothing(self, rng):
        config = CodebaseConfig(tiers=TierConfig(systems=0))
        hierarchy = HierarchyBuilder(config, rng).build()

        assert hierarchy.systems == []
        assert len(hierarchy.artifacts) == 0
        assert hierarchy.modules == []

    def test_zero_subsystems_keeps_systems(self, rng):
        config = CodebaseConfig(tiers=TierConfig(systems=2, subsystem=TierSpec(0, ArtifactType.SHARED_LIB)))
        hierarchy = HierarchyBuilder(config, rng).build()

        assert len(hierarchy.systems) == 2
        assert len(hierarchy.artifacts) == 0

    def test_empty_distribution_uses_default_language(self, minimal_config, rng):
        config = minimal_config.with_overrides(language_distribution=())
        hierarchy = HierarchyBuilder(config, rng).build()
        assert all(m.language is DEFAULT_LANGUAGE for m in hierarchy.modules)

    def test_same_seed_same_hierarchy(self, medium_config):
        first = HierarchyBuilder(medium_config, np.random.default_rng(7)).build()
        second = HierarchyBuilder(medium_config, np.random.default_rng(7)).build()

        assert [m.id for m in first.modules] == [m.id for m in second.modules]
        assert [m.language for m in first.modules] == [m.language for m in second.modules]
