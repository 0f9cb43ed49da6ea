from contextlib import contextmanager
from dataclasses import asdict
from datetime import datetime
from typing import Dict, Optional

from fastapi import Body, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse, Response
import json
import logging

from application.dtos import GenerationResultDTO, IssueDTO, StatsDTO
from application.service.artifact_table_service import ArtifactTableService
from application.service.generation_service import GenerationService
from core.config import DEFAULT_CONFIG, CodebaseConfig, validate_config
from core.entities import BuildSystem, GeneratedCodebase
from core.exceptions import CodegenException, InvalidConfigException, RunNotFoundException
from infrastructure.exporters.archive import package_codebase
from infrastructure.exporters.build_files import CMakeBuildGenerator, MakeBuildGenerator
from infrastructure.exporters.dot import DotGraphExporter
from infrastructure.exporters.gexf import GexfGraphExporter
from infrastructure.exporters.sbom import CycloneDXExporter
from infrastructure.graph.networkx_adapter import NetworkXGraphAnalyzer
from infrastructure.persistence.database import DEFAULT_DB_URL, create_database_engine, create_session, get_database_url
from infrastructure.persistence.repositories import SQLAlchemyRepository

logger = logging.getLogger(__name__)

GRAPH_FORMATS = {"dot": "dependencies.dot", "gexf": "dependencies.gexf"}
GRAPH_MEDIA_TYPES = {"dot": "text/vnd.graphviz", "gexf": "application/xml"}
# Seeds are stored in an Integer column
MAX_SEED = 2**31 - 1


def create_generation_service() -> GenerationService:
    """Wire the core pipeline to its adapters"""
    return GenerationService(
        graph_analyzer=NetworkXGraphAnalyzer(),
        sbom_exporter=CycloneDXExporter(),
        build_generators={
            BuildSystem.MAKE: MakeBuildGenerator(),
            BuildSystem.CMAKE: CMakeBuildGenerator(),
        },
        graph_exporters=[DotGraphExporter(), GexfGraphExporter()],
    )


def parse_config(data: Optional[Dict]) -> CodebaseConfig:
    """Parse and validate a configuration document, raising 422 on problems"""
    try:
        config = CodebaseConfig.from_dict(data if data is not None else {})
    except InvalidConfigException as e:
        raise HTTPException(status_code=422, detail=str(e))

    problems = validate_config(config)
    if problems:
        raise HTTPException(status_code=422, detail=problems)
    return config


def parse_seed(value) -> Optional[int]:
    """Accept a missing seed or a non-negative integer that fits the runs table, raising 422 otherwise"""
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_SEED:
        raise HTTPException(status_code=422, detail=f"seed must be an integer in [0, {MAX_SEED}] (got {value!r})")
    return value


def to_result_dto(codebase: GeneratedCodebase, run_id: Optional[str]) -> GenerationResultDTO:
    return GenerationResultDTO(
        run_id=run_id,
        name=codebase.name,
        seed=codebase.seed,
        stats=StatsDTO(**asdict(codebase.stats)),
        issues=[IssueDTO(**i.to_dict()) for i in codebase.issues],
        files=[f.path for f in codebase.build_files]
    )


def create_app(db_url: str = DEFAULT_DB_URL) -> FastAPI:
    """Factory function with dependency injection"""

    # Initialize database
    engine = create_database_engine(db_url)

    @contextmanager
    def get_repository():
        """Context manager for repository with session"""
        session = create_session(engine)
        try:
            yield SQLAlchemyRepository(session)
        finally:
            session.close()

    # Wire up adapters (OUTER HEXAGON)
    generation_service = create_generation_service()
    artifact_table = ArtifactTableService(NetworkXGraphAnalyzer())

    app = FastAPI(title="Multi-Tier Codebase Generator")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def regenerate(run_id: str) -> GeneratedCodebase:
        """Rebuild a stored run from its configuration, seed and timestamp"""
        with get_repository() as repository:
            run = repository.get_run(run_id)
        if not run:
            raise RunNotFoundException(run_id)

        timestamp = datetime.fromisoformat(run['generated_at']) if run['generated_at'] else None
        return generation_service.generate(
            CodebaseConfig.from_dict(run['config']), seed=run['seed'], timestamp=timestamp
        )

    def generate_and_store(config: CodebaseConfig, seed: Optional[int], include_graphs: bool) -> GenerationResultDTO:
        try:
            codebase = generation_service.generate(config, seed=seed, include_graphs=include_graphs)
            with get_repository() as repository:
                run_id = repository.save_run(codebase, config)
        except CodegenException as e:
            logger.error(f"Generation failed: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return to_result_dto(codebase, run_id)

    @app.get("/api/config/default")
    async def default_config():
        """Default configuration document"""
        return DEFAULT_CONFIG.to_dict()

    @app.post("/api/generate")
    async def generate(payload: Dict = Body(...)):
        """Generate a codebase from a JSON configuration and store the run"""
        config = parse_config(payload.get('config'))
        return generate_and_store(config, parse_seed(payload.get('seed')), bool(payload.get('includeGraphs', False)))

    @app.post("/api/upload")
    async def upload_config(file: UploadFile = File(...), seed: Optional[int] = Query(None)):
        """Generate from an uploaded configuration file"""
        contents = await file.read()
        try:
            data = json.loads(contents)
        except json.JSONDecodeError as e:
            raise HTTPException(status_code=422, detail=f"Failed to parse config file: {e}")

        config = parse_config(data)
        return generate_and_store(config, parse_seed(seed), include_graphs=False)

    @app.post("/api/download")
    async def download(payload: Dict = Body(...)):
        """Generate a codebase and return it as a zip archive"""
        config = parse_config(payload.get('config'))
        try:
            codebase = generation_service.generate(
                config, seed=parse_seed(payload.get('seed')), include_graphs=bool(payload.get('includeGraphs', False))
            )
        except CodegenException as e:
            raise HTTPException(status_code=500, detail=str(e))

        return Response(
            content=package_codebase(codebase),
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{config.name}.zip"'}
        )

    @app.post("/api/export/{fmt}")
    async def export_graph(fmt: str, payload: Dict = Body(...)):
        """Render the dependency graph of a fresh generation as DOT or GEXF"""
        if fmt not in GRAPH_FORMATS:
            raise HTTPException(status_code=404, detail=f"Unknown graph format '{fmt}'")

        config = parse_config(payload.get('config'))
        try:
            codebase = generation_service.generate(config, seed=parse_seed(payload.get('seed')))
        except CodegenException as e:
            raise HTTPException(status_code=500, detail=str(e))

        content = generation_service.export_graph(codebase, GRAPH_FORMATS[fmt])
        return PlainTextResponse(content, media_type=GRAPH_MEDIA_TYPES[fmt])

    @app.get("/api/runs")
    async def list_runs(limit: int = 10):
        """List stored generation runs"""
        with get_repository() as repository:
            return repository.list_runs(limit=limit)

    @app.get("/api/runs/{run_id}")
    async def get_run(run_id: str):
        """Stored run metadata"""
        with get_repository() as repository:
            run = repository.get_run(run_id)

        if not run:
            raise HTTPException(status_code=404, detail="Run not found")
        return run

    @app.get("/api/runs/{run_id}/sbom")
    async def get_sbom(run_id: str):
        """Stored CycloneDX document of a run"""
        with get_repository() as repository:
            sbom = repository.get_sbom(run_id)

        if not sbom:
            raise HTTPException(status_code=404, detail="Run not found")
        return sbom

    @app.get("/api/runs/{run_id}/artifacts")
    async def list_artifacts(
        run_id: str,
        search: str = "",
        tier: str = "all",
        type: str = "all",
        sort: str = "name",
        order: str = "asc"
    ):
        """Filterable, sortable artifact table of a stored run"""
        try:
            codebase = regenerate(run_id)
            return artifact_table.query(
                codebase.artifacts,
                search=search,
                tier=tier,
                artifact_type=type,
                sort_by=sort,
                descending=(order == "desc")
            )
        except RunNotFoundException as e:
            raise HTTPException(status_code=404, detail=str(e))
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))

    @app.get("/api/runs/{run_id}/download")
    async def download_run(run_id: str):
        """Zip archive of a stored run, rebuilt from its seed"""
        try:
            codebase = regenerate(run_id)
        except RunNotFoundException as e:
            raise HTTPException(status_code=404, detail=str(e))

        return Response(
            content=package_codebase(codebase),
            media_type="application/zip",
            headers={"Content-Disposition": f'attachment; filename="{codebase.name}.zip"'}
        )

    return app


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    db_url = get_database_url()
    app = create_app(db_url)
    logger.info(f"Starting codebase generator on http://localhost:8000 (database: {db_url})")
    uvicorn.run(app, host="0.0.0.0", port=8000)
