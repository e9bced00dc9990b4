"""
FastAPI application for the Statement Exporter.

Provides REST endpoints for:
- Inspecting settings and the control workbook's configuration tables
- Previewing the export without writing files
- Running the export and distribution stages
"""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..core.config_loader import ConfigLoader
from ..core.errors import DateMissingError, PipelineError, WorkbookNotFoundError
from ..core.notifications import CollectingNotificationSink
from ..core.pipeline_engine import PipelineEngine
from ..io.tabular_store import WorkbookStore


class RunRequest(BaseModel):
    """Request model for running stages."""

    workbook: str | None = None
    source_folder: str | None = None


def create_app(config_dir: str | Path | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(
        title="Statement Exporter",
        description="Per-client statement export and file distribution",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    config_loader = ConfigLoader(config_dir)
    app.state.config_loader = config_loader

    def open_store(workbook: str | None) -> WorkbookStore:
        try:
            store = WorkbookStore(config_loader.resolve_workbook(workbook))
            store.table_names()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        except WorkbookNotFoundError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return store

    def run_stages(request: RunRequest, stages: tuple[str, ...]) -> dict:
        sink = CollectingNotificationSink()
        engine = PipelineEngine(config_loader, open_store(request.workbook), sink=sink)
        try:
            result = engine.run(stages, source_folder=request.source_folder)
        except DateMissingError as e:
            raise HTTPException(status_code=422, detail=e.message)
        except PipelineError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return result.to_dict()

    # ==========================================================================
    # HEALTH CHECK
    # ==========================================================================

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": "1.0.0"}

    # ==========================================================================
    # CONFIG ENDPOINTS
    # ==========================================================================

    @app.get("/api/config/settings")
    async def get_settings() -> dict:
        """Get application settings."""
        return config_loader.settings.model_dump()

    @app.get("/api/config/export")
    async def get_export_config(workbook: str | None = None) -> dict:
        """List export entries from the control workbook."""
        store = open_store(workbook)
        try:
            entries = config_loader.load_export_config(store)
        except PipelineError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return {"entries": [entry.model_dump() for entry in entries]}

    @app.get("/api/config/distribution")
    async def get_distribution_config(workbook: str | None = None) -> dict:
        """List distribution entries from the control workbook."""
        store = open_store(workbook)
        try:
            entries = config_loader.load_distribution_config(store)
            source_folder = config_loader.load_source_folder(store)
        except PipelineError as e:
            raise HTTPException(status_code=404, detail=e.message)
        return {
            "source_folder": source_folder,
            "entries": [entry.model_dump() for entry in entries],
        }

    # ==========================================================================
    # RUN ENDPOINTS
    # ==========================================================================

    @app.post("/api/preview/export")
    async def preview_export(request: RunRequest) -> dict:
        """Filter every export entry and return the CSV text without writing."""
        engine = PipelineEngine(config_loader, open_store(request.workbook))
        try:
            previews = engine.preview_export()
        except DateMissingError as e:
            raise HTTPException(status_code=422, detail=e.message)
        except PipelineError as e:
            raise HTTPException(status_code=400, detail=e.message)
        return {"entries": previews}

    @app.post("/api/run/export")
    async def run_export(request: RunRequest) -> dict:
        """Run the export stage."""
        return run_stages(request, ("export",))

    @app.post("/api/run/distribute")
    async def run_distribute(request: RunRequest) -> dict:
        """Run the distribution stage."""
        return run_stages(request, ("distribute",))

    @app.post("/api/run")
    async def run_all(request: RunRequest) -> dict:
        """Run export, then distribution, with one run date."""
        return run_stages(request, ("export", "distribute"))

    return app


# Default app instance
app = create_app()
