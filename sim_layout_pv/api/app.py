from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import simulation_router


def create_app() -> FastAPI:
    """
    Build the layout analysis API.

    CORS is open because the scene editor is served from its own origin.
    ``sim-layout-pv serve`` runs the result under uvicorn.
    """
    app = FastAPI(
        title="Solar Layout Analysis API",
        version="0.1.0",
        description="Validate, simulate and cost solar layouts drawn in the scene editor.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(simulation_router)
    return app


app = create_app()
