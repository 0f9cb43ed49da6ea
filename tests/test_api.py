"""
Web API tests using FastAPI's TestClient.
"""

import io
import json
import zipfile

import pytest
from fastapi.testclient import TestClient

from core.config import DEFAULT_CONFIG
from main import create_app

SMALL_CONFIG = {
    "name": "api_run",
    "tiers": {
        "enterprise": {"systems": 1},
        "subsystem": {"count": 2},
        "component": {"count": 2, "modulesPerArtifact": {"min": 1, "max": 3}},
    },
    "linesPerFile": {"min": 20, "max": 40},
    "dependencyIssues": ["circular"],
}


@pytest.fixture
def client(tmp_path):
    app = create_app(db_url=f"sqlite:///{tmp_path / 'api.db'}")
    return TestClient(app)


@pytest.fixture
def run_id(client):
    response = client.post("/api/generate", json={"config": SMALL_CONFIG, "seed": 5})
    assert response.status_code == 200
    return response.json()['run_id']


class TestGenerateEndpoints:
    """Tests for generation, upload and download."""

    def test_default_config(self, client):
        response = client.get("/api/config/default")

        assert response.status_code == 200
        assert response.json() == DEFAULT_CONFIG.to_dict()

    def test_generate_summary(self, client):
        response = client.post("/api/generate", json={"config": SMALL_CONFIG, "seed": 5})
        body = response.json()

        assert response.status_code == 200
        assert body['name'] == "api_run"
        assert body['seed'] == 5
        assert body['stats']['total_artifacts'] == 6
        assert "sbom.json" in body['files']
        assert "DEPENDENCY_ISSUES.md" in body['files']

    def test_generate_with_graphs(self, client):
        response = client.post("/api/generate", json={"config": SMALL_CONFIG, "seed": 5, "includeGraphs": True})
        assert "dependencies.gexf" in response.json()['files']

    def test_unknown_enum_rejected(self, client):
        response = client.post("/api/generate", json={"config": {"buildSystem": "ninja"}})

        assert response.status_code == 422
        assert "buildSystem" in response.json()['detail']

    def test_validation_problems_rejected(self, client):
        config = dict(SMALL_CONFIG, languageDistribution=[{"language": "c", "percentage": 40}])
        response = client.post("/api/generate", json={"config": config})

        assert response.status_code == 422
        assert any("sum to 100" in p for p in response.json()['detail'])

    @pytest.mark.parametrize("seed", [-5, "abc", 1.5, True, 2**40])
    def test_bad_seed_rejected(self, client, seed):
        generate = client.post("/api/generate", json={"config": SMALL_CONFIG, "seed": seed})
        download = client.post("/api/download", json={"config": SMALL_CONFIG, "seed": seed})
        export = client.post("/api/export/dot", json={"config": SMALL_CONFIG, "seed": seed})

        assert generate.status_code == 422
        assert download.status_code == 422
        assert export.status_code == 422
        assert "seed" in generate.json()['detail']

    def test_negative_upload_seed_rejected(self, client):
        files = {"file": ("config.json", json.dumps(SMALL_CONFIG), "application/json")}
        response = client.post("/api/upload", files=files, params={"seed": -5})
        assert response.status_code == 422

    def test_upload_config_file(self, client):
        files = {"file": ("config.json", json.dumps(SMALL_CONFIG), "application/json")}
        response = client.post("/api/upload", files=files, params={"seed": 9})

        assert response.status_code == 200
        assert response.json()['seed'] == 9

    def test_upload_invalid_json(self, client):
        files = {"file": ("config.json", "{not json", "application/json")}
        response = client.post("/api/upload", files=files)
        assert response.status_code == 422

    def test_download_zip(self, client):
        response = client.post("/api/download", json={"config": SMALL_CONFIG, "seed": 5})

        assert response.status_code == 200
        assert response.headers['content-type'] == "application/zip"
        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            assert "api_run/sbom.json" in archive.namelist()
            assert "api_run/Makefile" in archive.namelist()

    def test_export_formats(self, client):
        dot = client.post("/api/export/dot", json={"config": SMALL_CONFIG, "seed": 5})
        gexf = client.post("/api/export/gexf", json={"config": SMALL_CONFIG, "seed": 5})

        assert dot.status_code == 200
        assert dot.text.startswith("digraph")
        assert gexf.status_code == 200
        assert "<gexf" in gexf.text

    def test_unknown_export_format(self, client):
        response = client.post("/api/export/svg", json={"config": SMALL_CONFIG})
        assert response.status_code == 404


class TestRunEndpoints:
    """Tests for stored runs."""

    def test_list_and_get(self, client, run_id):
        runs = client.get("/api/runs").json()
        assert [r['id'] for r in runs] == [run_id]

        run = client.get(f"/api/runs/{run_id}").json()
        assert run['config']['name'] == "api_run"
        assert run['issues'][0]['type'] == "circular"

    def test_missing_run(self, client):
        assert client.get("/api/runs/run_nope").status_code == 404
        assert client.get("/api/runs/run_nope/sbom").status_code == 404
        assert client.get("/api/runs/run_nope/artifacts").status_code == 404
        assert client.get("/api/runs/run_nope/download").status_code == 404

    def test_stored_sbom(self, client, run_id):
        sbom = client.get(f"/api/runs/{run_id}/sbom").json()
        assert sbom['bomFormat'] == "CycloneDX"
        assert len(sbom['components']) == 6

    def test_artifact_table(self, client, run_id):
        response = client.get(f"/api/runs/{run_id}/artifacts",
                              params={"tier": "component", "sort": "lines", "order": "desc"})
        rows = response.json()

        assert response.status_code == 200
        assert len(rows) == 4
        assert [r['lines'] for r in rows] == sorted((r['lines'] for r in rows), reverse=True)

    def test_artifact_table_bad_sort(self, client, run_id):
        response = client.get(f"/api/runs/{run_id}/artifacts", params={"sort": "colour"})
        assert response.status_code == 422

    def test_stored_run_rebuilds_identically(self, client, run_id):
        sbom = client.get(f"/api/runs/{run_id}/sbom").json()
        response = client.get(f"/api/runs/{run_id}/download")

        with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
            rebuilt = json.loads(archive.read("api_run/sbom.json"))
        assert rebuilt == sbom
