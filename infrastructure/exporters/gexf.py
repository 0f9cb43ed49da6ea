import xml.etree.ElementTree as ET
from datetime import date
from typing import Dict, List, Optional, Tuple

from core.entities import Artifact, System, Tier
from core.interface import IGraphExporter

GEXF_NS = "http://gexf.net/1.3"
VIZ_NS = "http://gexf.net/1.3/viz"
XSI_NS = "http://www.w3.org/2001/XMLSchema-instance"

TIER_RGB: Dict[Tier, Tuple[int, int, int]] = {
    Tier.SYSTEM: (65, 105, 225),
    Tier.SUBSYSTEM: (50, 205, 50),
    Tier.COMPONENT: (255, 165, 0),
}

NODE_ATTRIBUTES = [
    ("tier", "Tier", "string"),
    ("tier_level", "Tier Level", "integer"),
    ("type", "Artifact Type", "string"),
    ("system", "System", "string"),
    ("system_id", "System ID", "string"),
    ("path", "Path", "string"),
    ("modules_count", "Modules Count", "integer"),
    ("lines_of_code", "Lines of Code", "integer"),
]

EDGE_ATTRIBUTES = [
    ("cross_dependency", "Cross Dependency", "boolean"),
    ("source_tier", "Source Tier", "string"),
    ("target_tier", "Target Tier", "string"),
]


def _g(tag: str) -> str:
    return f"{{{GEXF_NS}}}{tag}"


def _viz(tag: str) -> str:
    return f"{{{VIZ_NS}}}{tag}"


class GexfGraphExporter(IGraphExporter):
    """Adapter: GEXF 1.3 document with tier levels and viz hints"""

    file_name = "dependencies.gexf"

    def __init__(self, modified: Optional[date] = None):
        self.modified = modified

    def export(self, project_name: str, systems: List[System], artifacts: List[Artifact]) -> str:
        ET.register_namespace("", GEXF_NS)
        ET.register_namespace("viz", VIZ_NS)
        ET.register_namespace("xsi", XSI_NS)

        root = ET.Element(_g("gexf"), {
            "version": "1.3",
            f"{{{XSI_NS}}}schemaLocation": "http://gexf.net/1.3 http://gexf.net/1.3/gexf.xsd",
        })

        meta = ET.SubElement(root, _g("meta"), {
            "lastmodifieddate": (self.modified or date.today()).isoformat()
        })
        ET.SubElement(meta, _g("creator")).text = "C/C++ Codebase Generator"
        ET.SubElement(meta, _g("description")).text = f"Dependency graph for {project_name}"
        ET.SubElement(meta, _g("keywords")).text = ", ".join(
            ["dependencies", "hierarchy"] + [s.name for s in systems]
        )

        graph = ET.SubElement(root, _g("graph"), {"mode": "static", "defaultedgetype": "directed"})
        self._declare_attributes(graph, "node", NODE_ATTRIBUTES)
        self._declare_attributes(graph, "edge", EDGE_ATTRIBUTES)

        system_names = {s.id: s.name for s in systems}
        system_positions = {s.id: i for i, s in enumerate(systems)}
        by_id = {a.id: a for a in artifacts}

        nodes = ET.SubElement(graph, _g("nodes"))
        for artifact in artifacts:
            self._node(nodes, artifact, system_names, system_positions)

        edges = ET.SubElement(graph, _g("edges"))
        edge_id = 0
        for artifact in artifacts:
            for dep_id in artifact.dependencies:
                target = by_id.get(dep_id)
                if target is None:
                    continue
                self._edge(edges, f"e{edge_id}", artifact, target)
                edge_id += 1

        ET.indent(root)
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode")

    def _declare_attributes(self, graph: ET.Element, cls: str, attributes) -> None:
        elem = ET.SubElement(graph, _g("attributes"), {"class": cls})
        for attr_id, title, attr_type in attributes:
            ET.SubElement(elem, _g("attribute"), {"id": attr_id, "title": title, "type": attr_type})

    def _node(self, nodes: ET.Element, artifact: Artifact,
              system_names: Dict[str, str], system_positions: Dict[str, int]) -> None:
        node = ET.SubElement(nodes, _g("node"), {"id": artifact.id, "label": artifact.name})
        level = artifact.tier.level
        values = {
            "tier": artifact.tier.value,
            "tier_level": str(level),
            "type": artifact.type.value,
            "system": system_names.get(artifact.system_id, "unknown"),
            "system_id": artifact.system_id,
            "path": artifact.path,
            "modules_count": str(len(artifact.modules)),
            "lines_of_code": str(artifact.total_lines),
        }
        attvalues = ET.SubElement(node, _g("attvalues"))
        for key, value in values.items():
            ET.SubElement(attvalues, _g("attvalue"), {"for": key, "value": value})

        r, g, b = TIER_RGB[artifact.tier]
        ET.SubElement(node, _viz("size"), {"value": str(10 + len(artifact.modules) * 2)})
        ET.SubElement(node, _viz("position"), {
            "x": str(self._x_position(artifact, system_positions)),
            "y": str(level * 150),
            "z": "0",
        })
        ET.SubElement(node, _viz("color"), {"r": str(r), "g": str(g), "b": str(b)})

    def _edge(self, edges: ET.Element, edge_id: str, source: Artifact, target: Artifact) -> None:
        cross = source.system_id != target.system_id
        edge = ET.SubElement(edges, _g("edge"), {
            "id": edge_id,
            "source": source.id,
            "target": target.id,
            "weight": "1",
        })
        attvalues = ET.SubElement(edge, _g("attvalues"))
        ET.SubElement(attvalues, _g("attvalue"), {"for": "cross_dependency", "value": "true" if cross else "false"})
        ET.SubElement(attvalues, _g("attvalue"), {"for": "source_tier", "value": source.tier.value})
        ET.SubElement(attvalues, _g("attvalue"), {"for": "target_tier", "value": target.tier.value})
        ET.SubElement(edge, _viz("color"), {
            "r": "255" if cross else "100", "g": "100", "b": "100", "a": "0.7"
        })

    @staticmethod
    def _x_position(artifact: Artifact, system_positions: Dict[str, int]) -> int:
        base_x = system_positions.get(artifact.system_id, 0) * 400
        # Stable jitter so siblings don't overlap
        spread = sum(ord(ch) for ch in artifact.id)
        return base_x + (spread % 300) - 150
