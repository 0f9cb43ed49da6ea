from datetime import datetime
from typing import Dict, List

from core.config import CodebaseConfig
from core.content import VULNERABILITY_MARKER, VULNERABILITY_PATTERNS
from core.entities import Artifact, ArtifactType, DependencyIssue, Enterprise, Module
from core.interface import ISbomExporter


def vulnerability_id(module_index: int) -> str:
    """Deterministic CVE-style id from the module's position in the flat list"""
    return f"CVE-2024-{str(10000 + module_index)[-5:]}"


class CycloneDXExporter(ISbomExporter):
    """Adapter: CycloneDX 1.5 JSON document for a generated codebase"""

    SPEC_VERSION = "1.5"
    COMPONENT_VERSION = "1.0.0"

    def export(
        self,
        config: CodebaseConfig,
        enterprise: Enterprise,
        artifacts: List[Artifact],
        modules: List[Module],
        issues: List[DependencyIssue],
        timestamp: datetime,
        serial_number: str
    ) -> Dict:
        stamp = timestamp.isoformat()

        return {
            "bomFormat": "CycloneDX",
            "specVersion": self.SPEC_VERSION,
            "serialNumber": f"urn:uuid:{serial_number}",
            "version": 1,
            "metadata": {
                "timestamp": stamp,
                "component": {
                    "type": "application",
                    "bom-ref": config.name,
                    "name": config.name,
                    "version": self.COMPONENT_VERSION,
                    "description": (
                        f"Multi-tier system with {len(enterprise.systems)} systems, "
                        f"{len(artifacts)} artifacts, {len(modules)} modules"
                    )
                }
            },
            "components": [self._component(a) for a in artifacts],
            # Unfiltered: dangling references stay in the document as test signal
            "dependencies": [
                {"ref": a.id, "dependsOn": list(a.dependencies)} for a in artifacts
            ],
            "vulnerabilities": self._vulnerabilities(modules) if config.include_vulnerabilities else [],
            "annotations": [
                {
                    "timestamp": stamp,
                    "text": issue.description,
                    "subjects": [issue.subject] if issue.subject else []
                } for issue in issues
            ]
        }

    def _component(self, artifact: Artifact) -> Dict:
        properties = [
            {"name": "artifact-type", "value": artifact.type.value},
            {"name": "tier", "value": artifact.tier.value},
            {"name": "modules-count", "value": str(len(artifact.modules))},
            {"name": "total-lines", "value": str(artifact.total_lines)},
        ]
        if artifact.parent_id:
            properties.append({"name": "parent-id", "value": artifact.parent_id})

        return {
            "type": "application" if artifact.type is ArtifactType.EXECUTABLE else "library",
            "bom-ref": artifact.id,
            "name": artifact.name,
            "version": self.COMPONENT_VERSION,
            "description": f"{artifact.tier.value} artifact at {artifact.path}",
            "properties": properties
        }

    def _vulnerabilities(self, modules: List[Module]) -> List[Dict]:
        vulns = []
        pattern_names = list(VULNERABILITY_PATTERNS)

        for index, module in enumerate(modules):
            if VULNERABILITY_MARKER not in module.source_content:
                continue

            kind = module.vulnerability or pattern_names[index % len(pattern_names)]
            vulns.append({
                "id": vulnerability_id(index),
                "source": {"name": "NVD"},
                "ratings": [{"severity": "high", "method": "CVSSv3"}],
                "description": f"{kind.replace('_', ' ')} in {module.name}",
                "affects": [{"ref": module.id}]
            })

        return vulns
