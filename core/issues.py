import logging
from typing import Iterable, List

import numpy as np

from core.entities import ArtifactIndex, DependencyIssue, IssueType


class IssueInjector:
    """
    Deliberately breaks the graph guarantees established by the earlier stages.

    Structural issues (circular, missing, transitive) are applied to the
    artifacts in place; version conflicts are only recorded. Every issue is
    returned for the SBOM annotations and the issues report.
    """

    MAX_MISSING = 3

    def __init__(self, rng: np.random.Generator):
        self.rng = rng
        self.logger = logging.getLogger(__name__)

    def inject(self, artifacts: ArtifactIndex, issue_types: Iterable[IssueType]) -> List[DependencyIssue]:
        requested = set(issue_types or [])
        issues: List[DependencyIssue] = []

        if not requested:
            return issues

        # Fixed order so a given seed always yields the same report
        if IssueType.CIRCULAR in requested:
            issues.extend(self._inject_circular(artifacts))
        if IssueType.MISSING in requested:
            issues.extend(self._inject_missing(artifacts))
        if IssueType.VERSION_CONFLICT in requested:
            issues.extend(self._record_version_conflict(artifacts))
        if IssueType.TRANSITIVE in requested:
            issues.extend(self._inject_transitive(artifacts))

        for issue in issues:
            self.logger.info(f"Injected {issue.type.value} issue: {issue.description}")
        return issues

    def _inject_circular(self, artifacts: ArtifactIndex) -> List[DependencyIssue]:
        n = len(artifacts)
        if n < 3:
            self.logger.warning(f"Skipping circular issue: needs 3 artifacts, have {n}")
            return []

        # Percentile positions, nudged apart for small graphs so the cycle has three members
        i_a = int(n * 0.3)
        i_b = max(int(n * 0.5), i_a + 1)
        i_c = max(int(n * 0.7), i_b + 1)
        a, b, c = artifacts[i_a], artifacts[i_b], artifacts[i_c]

        a.add_dependency(b.id)
        b.add_dependency(c.id)
        c.add_dependency(a.id)

        return [DependencyIssue(
            type=IssueType.CIRCULAR,
            artifacts=[a.id, b.id, c.id],
            description=f"Circular dependency: {a.name} → {b.name} → {c.name} → {a.name}",
        )]

    def _inject_missing(self, artifacts: ArtifactIndex) -> List[DependencyIssue]:
        n = len(artifacts)
        count = min(self.MAX_MISSING, int(n * 0.1))
        issues = []

        for i in range(count):
            artifact = artifacts[int(self.rng.integers(0, n))]
            fake_dep = f"missing_artifact_{i}"
            artifact.add_dependency(fake_dep)

            issues.append(DependencyIssue(
                type=IssueType.MISSING,
                artifacts=[artifact.id],
                description=f"{artifact.name} depends on non-existent {fake_dep}",
                missing=fake_dep,
            ))

        return issues

    def _record_version_conflict(self, artifacts: ArtifactIndex) -> List[DependencyIssue]:
        n = len(artifacts)
        if n < 5:
            self.logger.warning(f"Skipping version-conflict issue: needs 5 artifacts, have {n}")
            return []

        target = artifacts[2]
        user1 = artifacts[int(n * 0.6)]
        user2 = artifacts[int(n * 0.8)]

        return [DependencyIssue(
            type=IssueType.VERSION_CONFLICT,
            artifacts=[target.id, user1.id, user2.id],
            description=f"Version conflict: {user1.name} needs {target.name} v1.0, {user2.name} needs v2.0",
        )]

    def _inject_transitive(self, artifacts: ArtifactIndex) -> List[DependencyIssue]:
        n = len(artifacts)
        if n < 3:
            self.logger.warning(f"Skipping transitive issue: needs 3 artifacts, have {n}")
            return []

        a = artifacts[0]
        b = artifacts[n // 2]
        c = artifacts[n - 1]

        a.add_dependency(b.id)
        b.add_dependency(c.id)

        return [DependencyIssue(
            type=IssueType.TRANSITIVE,
            artifacts=[a.id, b.id, c.id],
            description=(
                f"Transitive conflict: {a.name} → {b.name} → {c.name}, "
                f"but {a.name} incompatible with {c.name}"
            ),
        )]
