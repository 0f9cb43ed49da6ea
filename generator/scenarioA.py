import os
import sys

from core.config import CodebaseConfig, CrossDependencyConfig, LanguageShare, Range, TierConfig, TierSpec
from core.entities import ArtifactType, BuildSystem, Complexity, Language

OUTPUT_DIR = "scenario_A_clean"
SEED = 1337


def build_scenario_A_config() -> CodebaseConfig:
    """
    Clean fixture: a well-formed DAG, every reference resolvable, no CVE markers.
    Tooling under test should report nothing.
    """
    return CodebaseConfig(
        name="scenario_a_clean",
        tiers=TierConfig(
            systems=2,
            subsystem=TierSpec(2, ArtifactType.SHARED_LIB),
            component=TierSpec(3, ArtifactType.STATIC_LIB),
            modules_per_artifact=Range(2, 5),
        ),
        lines_per_file=Range(60, 150),
        build_system=BuildSystem.MAKE,
        dependency_complexity=Complexity.LOW,
        cross_dependencies=CrossDependencyConfig(enabled=False),
        language_distribution=(LanguageShare(Language.C, 100.0),),
        dependency_issues=(),
        include_vulnerabilities=False,
    )


def write_codebase(codebase, output_dir: str) -> int:
    for build_file in codebase.build_files:
        target = os.path.join(output_dir, build_file.path)
        os.makedirs(os.path.dirname(target) or ".", exist_ok=True)
        with open(target, "w") as f:
            f.write(build_file.content)
    return len(codebase.build_files)


if __name__ == "__main__":
    from main import create_generation_service

    output_dir = sys.argv[1] if len(sys.argv) > 1 else OUTPUT_DIR
    codebase = create_generation_service().generate(build_scenario_A_config(), seed=SEED, include_graphs=True)
    count = write_codebase(codebase, output_dir)
    print(f"Generated {count} files in {output_dir}")
    print(f"{codebase.stats.total_artifacts} artifacts, {codebase.stats.total_modules} modules, "
          f"{codebase.stats.total_lines} lines, acyclic: {not codebase.stats.has_cycles}")
