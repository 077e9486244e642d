from __future__ import annotations

from fastapi import FastAPI

from csv_parser_service.api import parse as parse_routes
from csv_parser_service.config import SERVICE_NAME, AppConfig, load_settings


def create_app(cfg: AppConfig | None = None) -> FastAPI:
    """
    Build the HTTP app for the selected mode.

    /health is always mounted. The /parse routes only exist in development
    mode; in production the same extractor is fed from SQS instead.
    """
    cfg = cfg or load_settings()
    app = FastAPI(title="CSV Parser Service")
    app.state.config = cfg

    @app.get("/health")
    async def health():
        return {"status": "healthy", "service": SERVICE_NAME, "mode": cfg.mode.value}

    if cfg.is_development:
        app.include_router(parse_routes.router)

    return app


# `uvicorn csv_parser_service.api.app:app` serves whatever mode the env selects
app = create_app()
