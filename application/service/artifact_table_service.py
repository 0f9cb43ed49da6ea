from typing import Dict, List, Optional

import pandas as pd

from core.entities import Artifact
from core.interface import IGraphAnalyzer

SORT_FIELDS = ['name', 'tier', 'type', 'modules', 'lines', 'dependencies']


class ArtifactTableService:
    """Use Case: Filterable, sortable artifact listing"""

    def __init__(self, graph_analyzer: IGraphAnalyzer):
        self.graph_analyzer = graph_analyzer

    def to_frame(self, artifacts: List[Artifact]) -> pd.DataFrame:
        in_degree = self.graph_analyzer.calculate_in_degree(artifacts)
        return pd.DataFrame([{
            'id': a.id,
            'name': a.name,
            'path': a.path,
            'tier': a.tier.value,
            'type': a.type.value,
            'modules': len(a.modules),
            'lines': a.total_lines,
            'dependencies': len(a.dependencies),
            'dependents': in_degree.get(a.id, 0),
        } for a in artifacts], columns=[
            'id', 'name', 'path', 'tier', 'type', 'modules', 'lines', 'dependencies', 'dependents'
        ])

    def query(
        self,
        artifacts: List[Artifact],
        search: str = "",
        tier: Optional[str] = None,
        artifact_type: Optional[str] = None,
        sort_by: str = "name",
        descending: bool = False
    ) -> List[Dict]:
        if sort_by not in SORT_FIELDS:
            raise ValueError(f"Cannot sort by '{sort_by}', expected one of {SORT_FIELDS}")

        frame = self.to_frame(artifacts)

        if search:
            needle = search.lower()
            mask = (frame['name'].str.lower().str.contains(needle, regex=False)
                    | frame['path'].str.lower().str.contains(needle, regex=False))
            frame = frame[mask]
        if tier and tier != 'all':
            frame = frame[frame['tier'] == tier]
        if artifact_type and artifact_type != 'all':
            frame = frame[frame['type'] == artifact_type]

        frame = frame.sort_values(by=[sort_by, 'id'], ascending=[not descending, True], kind='mergesort')
        return [
            {k: (int(v) if k in ('modules', 'lines', 'dependencies', 'dependents') else v) for k, v in row.items()}
            for row in frame.to_dict(orient='records')
        ]
