"""FastAPI app factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from workflow_engine import __version__
from workflow_engine.engine.config import EngineSettings
from workflow_engine.engine.loader import register_directory
from workflow_engine.engine.registry import WorkflowRegistry
from workflow_engine.server.config import ServerSettings
from workflow_engine.server.routes import router

logger = logging.getLogger(__name__)


def create_app(
    settings: ServerSettings | None = None,
    *,
    engine_settings: EngineSettings | None = None,
    registry: WorkflowRegistry | None = None,
) -> FastAPI:
    settings = settings or ServerSettings()
    engine_settings = engine_settings or EngineSettings()
    registry = registry or WorkflowRegistry()

    app = FastAPI(
        title="Workflow Engine",
        version=__version__,
        description="Define finite-state workflows and drive instances through their actions.",
    )

    # Expose settings and the registry for request handlers.
    app.state.settings = settings
    app.state.registry = registry

    origins = settings.parsed_cors_origins()
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.include_router(router)

    if engine_settings.definitions_path is not None:
        if engine_settings.definitions_path.is_dir():
            register_directory(registry, engine_settings.definitions_path)
        else:
            logger.warning(
                "Definitions path is not a directory",
                extra={"path": str(engine_settings.definitions_path)},
            )

    return app
