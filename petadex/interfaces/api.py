"""FastAPI service exposing the PETadex enzyme and plate catalog."""

from __future__ import annotations

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, List, Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from petadex.core.database import Database
from petadex.core.errors import NotFoundError, ValidationError
from petadex.core.query import EnzymeFilter, PageRequest
from petadex.core.schemas import dump_rows
from petadex.core.settings import Settings, get_settings
from petadex.services import PlateAggregator, SequenceCatalog, TaxonomyService, compute_stats
from petadex.utils.logger import configure_logging, get_logger, log_context

logger = get_logger(__name__)


def create_app(
    database: Optional[Database] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API around an explicit storage handle.

    When ``database`` is omitted one is opened from settings at start-up and
    closed at shutdown. A handle passed in stays owned by the caller.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = database is None
        db = database or Database.from_settings(settings)
        db.open()
        app.state.database = db
        app.state.taxonomy = TaxonomyService(db)
        app.state.plates = PlateAggregator(db)
        app.state.sequences = SequenceCatalog(
            db, pdb_base_url=settings.storage.pdb_base_url
        )
        logger.info("api.startup", database=str(db.path), owned=owned)
        try:
            yield
        finally:
            if owned:
                db.close()
            logger.info("api.shutdown")

    app = FastAPI(title=settings.api.title, version=settings.api.version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def _bind_request_context(request: Request, call_next):
        with log_context(path=request.url.path, method=request.method):
            return await call_next(request)

    _register_error_handlers(app)
    _register_routes(app)
    return app


def get_taxonomy(request: Request) -> TaxonomyService:
    return request.app.state.taxonomy


def get_plates(request: Request) -> PlateAggregator:
    return request.app.state.plates


def get_sequences(request: Request) -> SequenceCatalog:
    return request.app.state.sequences


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        logger.info("api.validation_error", error=str(exc))
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(request: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"error": exc.message})

    @app.exception_handler(sqlite3.Error)
    async def _storage_error(request: Request, exc: sqlite3.Error) -> JSONResponse:
        logger.error("api.storage_error", error=str(exc))
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def _register_routes(app: FastAPI) -> None:
    @app.get("/health")
    def health(request: Request) -> JSONResponse:
        try:
            request.app.state.database.fetch_scalar("SELECT 1")
        except sqlite3.Error as exc:
            logger.error("api.health.failed", error=str(exc))
            return JSONResponse(status_code=500, content={"status": "error"})
        return JSONResponse(content={"status": "ok"})

    # enzymes: literal paths are registered before /{enzyme_id}

    @app.get("/api/enzymes")
    def list_enzymes(
        limit: Optional[str] = Query(None, description="Page size (default 50, max 1000)"),
        offset: Optional[str] = Query(None, description="Pagination offset"),
        family: Optional[str] = Query(None, description="Filter by family id"),
        component: Optional[str] = Query(None, description="Filter by component id"),
        has_component: Optional[str] = Query(None, description="true/false"),
        taxonomy: TaxonomyService = Depends(get_taxonomy),
    ) -> Dict[str, Any]:
        enzyme_filter = EnzymeFilter.from_params(
            {"family": family, "component": component, "has_component": has_component}
        )
        page = PageRequest.from_params(limit=limit, offset=offset)
        result = taxonomy.list_enzymes(enzyme_filter, page)
        return {
            "data": dump_rows(result.rows),
            "pagination": result.pagination.model_dump(by_alias=True),
        }

    @app.get("/api/enzymes/stats/overview")
    def overview_stats(taxonomy: TaxonomyService = Depends(get_taxonomy)) -> Dict[str, Any]:
        return taxonomy.get_overview_stats().model_dump()

    @app.get("/api/enzymes/stats/centroids")
    def centroid_violations(
        taxonomy: TaxonomyService = Depends(get_taxonomy),
    ) -> Dict[str, Any]:
        violations = taxonomy.centroid_violations()
        return {"violations": dump_rows(violations), "count": len(violations)}

    @app.get("/api/enzymes/accession/{accession}")
    def enzyme_by_accession(
        accession: str, taxonomy: TaxonomyService = Depends(get_taxonomy)
    ) -> Dict[str, Any]:
        return taxonomy.get_enzyme_by_accession(accession).model_dump()

    @app.get("/api/enzymes/family/{family_id}")
    def family_members(
        family_id: str, taxonomy: TaxonomyService = Depends(get_taxonomy)
    ) -> List[Dict[str, Any]]:
        return dump_rows(taxonomy.get_family_members(family_id))

    @app.get("/api/enzymes/component/{component_id}")
    def component_members(
        component_id: str, taxonomy: TaxonomyService = Depends(get_taxonomy)
    ) -> List[Dict[str, Any]]:
        return dump_rows(taxonomy.get_component_members(component_id))

    @app.get("/api/enzymes/{enzyme_id}")
    def get_enzyme(
        enzyme_id: str, taxonomy: TaxonomyService = Depends(get_taxonomy)
    ) -> Dict[str, Any]:
        return taxonomy.get_enzyme(enzyme_id).model_dump()

    @app.get("/api/enzymes/{enzyme_id}/variants")
    def get_variants(
        enzyme_id: str, taxonomy: TaxonomyService = Depends(get_taxonomy)
    ) -> List[Dict[str, Any]]:
        return dump_rows(taxonomy.get_variants(enzyme_id))

    @app.get("/api/plate-data/gene/{gene}/average")
    def plate_average(
        gene: str, plates: PlateAggregator = Depends(get_plates)
    ) -> List[Dict[str, Any]]:
        return dump_rows(plates.average_by_gene(gene))

    @app.get("/api/plate-data/gene/{gene}")
    def plate_records(
        gene: str, plates: PlateAggregator = Depends(get_plates)
    ) -> List[Dict[str, Any]]:
        return dump_rows(plates.list_by_gene(gene))

    @app.get("/api/plate-data/activity/gene/{gene}")
    def plate_activity(
        gene: str, plates: PlateAggregator = Depends(get_plates)
    ) -> List[Dict[str, Any]]:
        return dump_rows(plates.activity_by_gene(gene))

    @app.get("/api/plate-data/experiment/{exp_id}")
    def experiment_activity(
        exp_id: str, plates: PlateAggregator = Depends(get_plates)
    ) -> List[Dict[str, Any]]:
        return dump_rows(plates.activity_by_experiment(exp_id))

    @app.get("/api/fastaa")
    def list_sequences(
        sequences: SequenceCatalog = Depends(get_sequences),
    ) -> List[Dict[str, Any]]:
        return dump_rows(sequences.list_sequences())

    @app.get("/api/fastaa/{accession}")
    def get_sequence(
        accession: str, sequences: SequenceCatalog = Depends(get_sequences)
    ) -> Dict[str, Any]:
        return sequences.get_sequence(accession).model_dump()

    @app.get("/api/aa-seq-features/{accession}")
    def sequence_features(
        accession: str, sequences: SequenceCatalog = Depends(get_sequences)
    ) -> Dict[str, Any]:
        features = sequences.get_features(accession)
        payload = features.model_dump()
        payload["summary"] = compute_stats(features).display()
        return payload

    @app.get("/api/pdb/accession/{accession}")
    def structure_by_accession(
        accession: str, sequences: SequenceCatalog = Depends(get_sequences)
    ) -> Dict[str, Any]:
        return sequences.get_structure_by_accession(accession).model_dump()

    @app.get("/api/pdb/{pdb_id}")
    def structure(
        pdb_id: str, sequences: SequenceCatalog = Depends(get_sequences)
    ) -> Dict[str, Any]:
        return sequences.get_structure(pdb_id).model_dump()


def build_default_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.app.log_level, settings.app.environment)
    return create_app(settings=settings)


__all__ = ["create_app", "build_default_app"]
