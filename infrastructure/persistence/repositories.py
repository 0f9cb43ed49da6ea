import json
import uuid
from dataclasses import asdict
from sqlalchemy.orm import Session
from sqlalchemy import select, desc
from typing import Optional, List, Dict
from datetime import datetime, timezone

from core.config import CodebaseConfig
from core.entities import GeneratedCodebase
from core.interface import IRepository
from infrastructure.persistence.models import GenerationRunModel, IssueModel


class SQLAlchemyRepository(IRepository):
    """Adapter: SQLAlchemy-based persistence (SQLAlchemy 2.x compatible)"""

    def __init__(self, session: Session):
        self.session = session

    def save_run(self, codebase: GeneratedCodebase, config: CodebaseConfig) -> str:
        """Save a generation run and its issues"""
        run_id = f"run_{uuid.uuid4().hex[:12]}"
        generated_at = _parse_timestamp(codebase.sbom.get('metadata', {}).get('timestamp'))

        run = GenerationRunModel(
            id=run_id,
            name=codebase.name,
            seed=codebase.seed,
            config=json.dumps(config.to_dict()),
            sbom=json.dumps(codebase.sbom),
            stats=json.dumps(asdict(codebase.stats)),
            total_artifacts=codebase.stats.total_artifacts,
            total_modules=codebase.stats.total_modules,
            total_lines=codebase.stats.total_lines,
            has_cycles=codebase.stats.has_cycles,
            generated_at=generated_at,
            created_at=datetime.now()
        )

        for issue in codebase.issues:
            run.issues.append(IssueModel(
                type=issue.type.value,
                artifacts=json.dumps(issue.artifacts),
                description=issue.description,
                missing=issue.missing
            ))

        self.session.add(run)
        self.session.commit()

        return run_id

    def get_run(self, run_id: str) -> Optional[Dict]:
        """Retrieve run metadata, configuration and issues"""
        stmt = select(GenerationRunModel).where(GenerationRunModel.id == run_id)
        run = self.session.execute(stmt).scalar_one_or_none()

        if not run:
            return None

        return {
            'id': run.id,
            'name': run.name,
            'seed': run.seed,
            'config': json.loads(run.config),
            'stats': json.loads(run.stats),
            'issues': [{
                'type': i.type,
                'artifacts': json.loads(i.artifacts),
                'description': i.description,
                'missing': i.missing
            } for i in run.issues],
            # SQLite drops tzinfo; timestamps are stored as UTC
            'generated_at': run.generated_at.replace(tzinfo=timezone.utc).isoformat() if run.generated_at else None,
            'created_at': run.created_at.isoformat()
        }

    def get_sbom(self, run_id: str) -> Optional[Dict]:
        stmt = select(GenerationRunModel.sbom).where(GenerationRunModel.id == run_id)
        sbom = self.session.execute(stmt).scalar_one_or_none()
        return json.loads(sbom) if sbom else None

    def list_runs(self, limit: int = 10) -> List[Dict]:
        """List recent runs"""
        stmt = select(GenerationRunModel).order_by(desc(GenerationRunModel.created_at)).limit(limit)
        runs = self.session.execute(stmt).scalars().all()

        return [{
            'id': r.id,
            'name': r.name,
            'seed': r.seed,
            'total_artifacts': r.total_artifacts,
            'total_modules': r.total_modules,
            'total_lines': r.total_lines,
            'has_cycles': r.has_cycles,
            'created_at': r.created_at.isoformat()
        } for r in runs]


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
