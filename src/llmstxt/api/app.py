"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from llmstxt.api.routes import router
from llmstxt.config import AppConfig
from llmstxt.services.monitoring import SnapshotService
from llmstxt.services.scheduler import AutoUpdateScheduler


def create_app(service: SnapshotService | None = None, config: AppConfig | None = None) -> FastAPI:
    config = config or AppConfig.load_or_default()
    service = service or SnapshotService.from_config(config)
    scheduler = AutoUpdateScheduler(service, interval_seconds=config.interval_seconds)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.start_scheduler:
            scheduler.start()
        try:
            yield
        finally:
            if scheduler.running:
                scheduler.stop()
            service.crawler.shutdown()

    app = FastAPI(title="llms.txt Monitor", lifespan=lifespan)
    app.state.service = service
    app.state.scheduler = scheduler
    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


app = create_app()
