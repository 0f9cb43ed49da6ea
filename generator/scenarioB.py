import sys

from core.config import CodebaseConfig, CrossDependencyConfig, LanguageShare, Range, TierConfig, TierSpec
from core.entities import ArtifactType, BuildSystem, Complexity, CrossDirection, IssueType, Language, Tier
from generator.scenarioA import write_codebase

OUTPUT_DIR = "scenario_B_defective"
SEED = 4242


def build_scenario_B_config() -> CodebaseConfig:
    """
    Defect-laden fixture: every issue kind, cross-system edges, mixed C/C++ and
    CVE markers in every module. Tooling under test should flag all of it.
    """
    return CodebaseConfig(
        name="scenario_b_defective",
        tiers=TierConfig(
            systems=3,
            subsystem=TierSpec(2, ArtifactType.EXECUTABLE),
            component=TierSpec(3, ArtifactType.SHARED_LIB),
            modules_per_artifact=Range(1, 4),
        ),
        lines_per_file=Range(40, 120),
        build_system=BuildSystem.CMAKE,
        dependency_complexity=Complexity.HIGH,
        cross_dependencies=CrossDependencyConfig(
            enabled=True,
            probability=0.5,
            max_per_artifact=2,
            direction=CrossDirection.BOTH,
            allowed_tiers=(Tier.SUBSYSTEM, Tier.COMPONENT),
        ),
        language_distribution=(
            LanguageShare(Language.C, 60.0),
            LanguageShare(Language.CPP, 40.0),
        ),
        dependency_issues=(
            IssueType.CIRCULAR,
            IssueType.MISSING,
            IssueType.VERSION_CONFLICT,
            IssueType.TRANSITIVE,
        ),
        include_vulnerabilities=True,
    )


if __name__ == "__main__":
    from main import create_generation_service

    output_dir = sys.argv[1] if len(sys.argv) > 1 else OUTPUT_DIR
    codebase = create_generation_service().generate(build_scenario_B_config(), seed=SEED, include_graphs=True)
    count = write_codebase(codebase, output_dir)
    print(f"Generated {count} files in {output_dir}")
    print(f"{len(codebase.issues)} injected issues, {len(codebase.sbom['vulnerabilities'])} CVE entries, "
          f"{codebase.stats.dangling_references} dangling references")
