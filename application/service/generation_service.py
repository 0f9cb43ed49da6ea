import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from application.reports import issues_report, readme
from core.config import CodebaseConfig
from core.content import ContentSynthesizer
from core.dependencies import CrossDependencyInjector, DependencyAssigner
from core.entities import (
    ArtifactIndex,
    ArtifactType,
    BuildFile,
    BuildSystem,
    CodebaseStats,
    DependencyIssue,
    Enterprise,
    GeneratedCodebase,
    Module,
)
from core.exceptions import GenerationError
from core.hierarchy import HierarchyBuilder
from core.interface import IBuildFileGenerator, IGraphAnalyzer, IGraphExporter, ISbomExporter
from core.issues import IssueInjector


class GenerationService:
    """Use Case: Orchestrate the codebase generation pipeline"""

    def __init__(
        self,
        graph_analyzer: IGraphAnalyzer,
        sbom_exporter: ISbomExporter,
        build_generators: Dict[BuildSystem, IBuildFileGenerator],
        graph_exporters: Optional[List[IGraphExporter]] = None
    ):
        self.graph_analyzer = graph_analyzer
        self.sbom_exporter = sbom_exporter
        self.build_generators = build_generators
        self.graph_exporters = graph_exporters or []
        self.logger = logging.getLogger(__name__)

    def generate(
        self,
        config: CodebaseConfig,
        seed: Optional[int] = None,
        timestamp: Optional[datetime] = None,
        include_graphs: bool = False
    ) -> GeneratedCodebase:
        """Pure function of (config, seed, timestamp) when seed and timestamp are given"""
        if seed is None:
            seed = int(np.random.default_rng().integers(0, 2**31 - 1))
        rng = np.random.default_rng(seed)
        timestamp = timestamp or datetime.now(timezone.utc)

        self.logger.info(f"Generating '{config.name}' (seed={seed})")

        # Step 1: Hierarchy
        hierarchy = HierarchyBuilder(config, rng).build()
        artifacts = hierarchy.artifacts

        # Step 2: Index-ordered dependencies
        assigner = DependencyAssigner(rng)
        assigner.assign_artifact_dependencies(artifacts, config.dependency_complexity)

        # Step 3: Cross dependencies
        CrossDependencyInjector(config.cross_dependencies, rng).inject(artifacts)
        self._check_structure(artifacts)

        # Step 4: Module edges and content
        dependency_map = assigner.assign_module_dependencies(artifacts)
        ContentSynthesizer(rng, config.include_vulnerabilities).synthesize_all(
            hierarchy.modules, dependency_map, config.lines_per_file
        )

        # Step 5: Deliberate defects, applied last
        issues = IssueInjector(rng).inject(artifacts, config.dependency_issues)

        # Step 6: Exports
        enterprise = Enterprise(name=config.name, systems=hierarchy.systems)
        artifact_list = artifacts.artifacts
        stats = self.compute_stats(artifact_list, hierarchy.modules)
        serial_number = str(uuid.UUID(bytes=rng.bytes(16), version=4))
        sbom = self.sbom_exporter.export(
            config, enterprise, artifact_list, hierarchy.modules, issues, timestamp, serial_number
        )

        build_files = self._build_files(config, artifacts, sbom, issues, stats, timestamp)
        if include_graphs:
            for exporter in self.graph_exporters:
                build_files.append(BuildFile(
                    name=exporter.file_name,
                    path=exporter.file_name,
                    content=exporter.export(config.name, hierarchy.systems, artifact_list)
                ))

        self.logger.info(
            f"Generated '{config.name}': {stats.total_artifacts} artifacts, {stats.total_modules} modules, "
            f"{stats.total_lines} lines, {len(issues)} issues, {len(build_files)} files"
        )

        return GeneratedCodebase(
            name=config.name,
            seed=seed,
            enterprise=enterprise,
            artifacts=artifact_list,
            modules=hierarchy.modules,
            build_files=build_files,
            sbom=sbom,
            issues=issues,
            stats=stats
        )

    def export_graph(self, codebase: GeneratedCodebase, file_name: str) -> str:
        """Render one of the configured graph formats on demand"""
        for exporter in self.graph_exporters:
            if exporter.file_name == file_name:
                return exporter.export(codebase.name, codebase.enterprise.systems, codebase.artifacts)
        raise KeyError(file_name)

    def compute_stats(self, artifacts, modules: List[Module]) -> CodebaseStats:
        frame = pd.DataFrame([{
            'tier': a.tier.value,
            'type': a.type.value,
            'lines': a.total_lines,
            'dependencies': len(a.dependencies),
        } for a in artifacts], columns=['tier', 'type', 'lines', 'dependencies'])

        languages = pd.Series([m.language.value for m in modules], dtype=object)
        executables = int((frame['type'] == ArtifactType.EXECUTABLE.value).sum())
        dangling = self.graph_analyzer.find_dangling_references(artifacts)

        return CodebaseStats(
            total_artifacts=len(frame),
            total_modules=len(modules),
            total_lines=int(sum(m.lines_of_code for m in modules)),
            executables=executables,
            libraries=len(frame) - executables,
            modules_by_language={k: int(v) for k, v in languages.value_counts().items()},
            artifacts_by_tier={k: int(v) for k, v in frame.groupby('tier').size().items()},
            total_dependencies=int(frame['dependencies'].sum()),
            dangling_references=sum(len(v) for v in dangling.values()),
            has_cycles=bool(self.graph_analyzer.find_cycles(artifacts, limit=1)),
            max_depth=self.graph_analyzer.calculate_max_depth(artifacts),
        )

    def _check_structure(self, artifacts: ArtifactIndex) -> None:
        """Before issue injection the graph must be a fully resolvable DAG"""
        artifact_list = artifacts.artifacts
        dangling = self.graph_analyzer.find_dangling_references(artifact_list)
        if dangling:
            source = next(iter(dangling))
            raise GenerationError("dependency assignment", "unresolved dependency before issue injection", ref=source)

        cycles = self.graph_analyzer.find_cycles(artifact_list, limit=1)
        if cycles:
            raise GenerationError("dependency assignment", "cycle before issue injection", ref=cycles[0][0])

    def _build_files(
        self,
        config: CodebaseConfig,
        artifacts: ArtifactIndex,
        sbom: Dict,
        issues: List[DependencyIssue],
        stats: CodebaseStats,
        timestamp: datetime
    ) -> List[BuildFile]:
        generator = self.build_generators.get(config.build_system)
        if generator is None:
            raise GenerationError("export", f"no build generator for '{config.build_system.value}'")

        files = generator.generate(artifacts.artifacts, config.name)

        for artifact in artifacts:
            for module in artifact.modules:
                files.append(BuildFile(
                    name=module.header_filename,
                    path=f"{artifact.path}/{module.header_filename}",
                    content=module.header_content
                ))
                files.append(BuildFile(
                    name=module.source_filename,
                    path=f"{artifact.path}/{module.source_filename}",
                    content=module.source_content
                ))

        files.append(BuildFile(name="sbom.json", path="sbom.json", content=json.dumps(sbom, indent=2)))

        if issues:
            files.append(BuildFile(
                name="DEPENDENCY_ISSUES.md",
                path="DEPENDENCY_ISSUES.md",
                content=issues_report(issues, timestamp)
            ))

        files.append(BuildFile(name="README.md", path="README.md", content=readme(config, stats)))

        paths = [f.path for f in files]
        if len(paths) != len(set(paths)):
            raise GenerationError("export", "two build files share a path")
        return files
