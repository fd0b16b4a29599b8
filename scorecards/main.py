# performance_scorecards/scorecards/main.py

from __future__ import annotations

import logging

from fastapi import FastAPI

from scorecards.config import setup_json_logging, settings
from scorecards.api.routes.scorecards import router as scorecards_router


def create_app() -> FastAPI:
    setup_json_logging(log_level=getattr(logging, str(settings.LOG_LEVEL).upper(), logging.INFO))

    app = FastAPI(
        title="PERFORMANCE SCORECARDS - Scorecard API",
        version="0.1.0",
    )

    app.include_router(scorecards_router)

    @app.get("/health")
    def health():
        return {"ok": True}

    return app


app = create_app()
