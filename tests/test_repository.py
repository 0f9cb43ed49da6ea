"""
Run persistence tests against a temporary SQLite database.
"""

import pytest

from core.entities import IssueType
from infrastructure.persistence.database import create_database_engine, create_session
from infrastructure.persistence.repositories import SQLAlchemyRepository


@pytest.fixture
def repository(tmp_path):
    engine = create_database_engine(f"sqlite:///{tmp_path / 'runs.db'}")
    session = create_session(engine)
    yield SQLAlchemyRepository(session)
    session.close()
    engine.dispose()


class TestSQLAlchemyRepository:
    """Tests for saving and reading generation runs."""

    def test_save_and_get(self, repository, service, medium_config, timestamp):
        config = medium_config.with_overrides(dependency_issues=(IssueType.CIRCULAR, IssueType.MISSING))
        codebase = service.generate(config, seed=31, timestamp=timestamp)

        run_id = repository.save_run(codebase, config)
        run = repository.get_run(run_id)

        assert run_id.startswith("run_")
        assert run['name'] == "medium"
        assert run['seed'] == 31
        assert run['config'] == config.to_dict()
        assert run['stats']['total_artifacts'] == 16
        assert [i['type'] for i in run['issues']] == ["circular", "missing"]
        assert run['issues'][1]['missing'] == codebase.issues[1].missing
        assert run['generated_at'] == timestamp.isoformat()

    def test_get_sbom(self, repository, service, minimal_config, timestamp):
        codebase = service.generate(minimal_config, seed=3, timestamp=timestamp)
        run_id = repository.save_run(codebase, minimal_config)

        assert repository.get_sbom(run_id) == codebase.sbom

    def test_unknown_run(self, repository):
        assert repository.get_run("run_missing") is None
        assert repository.get_sbom("run_missing") is None

    def test_list_runs(self, repository, service, minimal_config, timestamp):
        for seed in range(3):
            codebase = service.generate(minimal_config, seed=seed, timestamp=timestamp)
            repository.save_run(codebase, minimal_config)

        runs = repository.list_runs()
        assert len(runs) == 3
        assert {r['seed'] for r in runs} == {0, 1, 2}
        assert len(repository.list_runs(limit=2)) == 2
