import re
from typing import Dict, List

from core.entities import TIER_ORDER, Artifact, ArtifactType, System, Tier
from core.interface import IGraphExporter

TIER_COLORS: Dict[Tier, str] = {
    Tier.SYSTEM: "#E3F2FD",
    Tier.SUBSYSTEM: "#BBDEFB",
    Tier.COMPONENT: "#90CAF9",
}

TYPE_COLORS: Dict[ArtifactType, str] = {
    ArtifactType.EXECUTABLE: "#C8E6C9",
    ArtifactType.STATIC_LIB: "#FFECB3",
    ArtifactType.SHARED_LIB: "#D1C4E9",
}

CROSS_TIER_EDGE = ' [style=bold, color="#E91E63"]'
CROSS_SYSTEM_EDGE = ' [style=dashed, color="#FF9800"]'


def sanitize_node_id(node_id: str) -> str:
    return re.sub(r'[^a-zA-Z0-9_]', '_', node_id)


def escape_label(text: str) -> str:
    return text.replace('\\', '\\\\').replace('"', '\\"')


class DotGraphExporter(IGraphExporter):
    """Adapter: Graphviz digraph with one cluster per tier"""

    file_name = "dependencies.dot"

    def export(self, project_name: str, systems: List[System], artifacts: List[Artifact]) -> str:
        lines = [
            'digraph DependencyHierarchy {',
            f'  label="{escape_label(project_name)}";',
            '  rankdir=TB;',
            '  node [shape=box, style=filled, fontname="Arial"];',
            '  edge [color="#666666"];',
            '',
        ]

        by_id = {a.id: a for a in artifacts}

        for tier in TIER_ORDER:
            tier_artifacts = [a for a in artifacts if a.tier is tier]
            if not tier_artifacts:
                continue

            lines.append(f'  subgraph cluster_{tier.value} {{')
            lines.append(f'    label="{tier.value.capitalize()} Tier";')
            lines.append('    style=filled;')
            lines.append(f'    color="{TIER_COLORS[tier]}";')
            lines.append('    fontname="Arial Bold";')
            lines.append('')

            for artifact in tier_artifacts:
                node_color = TYPE_COLORS.get(artifact.type, "#FFFFFF")
                lines.append(
                    f'    "{sanitize_node_id(artifact.id)}" '
                    f'[label="{escape_label(artifact.name)}", fillcolor="{node_color}"];'
                )

            lines.append('  }')
            lines.append('')

        lines.append('  // Dependencies')
        for artifact in artifacts:
            source_id = sanitize_node_id(artifact.id)

            for dep_id in artifact.dependencies:
                target = by_id.get(dep_id)
                if target is None:
                    continue

                if artifact.tier is not target.tier:
                    style = CROSS_TIER_EDGE
                elif artifact.system_id != target.system_id:
                    style = CROSS_SYSTEM_EDGE
                else:
                    style = ''
                lines.append(f'  "{source_id}" -> "{sanitize_node_id(dep_id)}"{style};')

        lines.append('}')
        return '\n'.join(lines)
