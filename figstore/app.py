"""
FastAPI application entry point for the figure service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from figstore.config import get_settings
from figstore.dependencies import reset_figure_store
from figstore.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    reset_figure_store()


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="figstore", version="0.1.0", lifespan=lifespan)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()


def main() -> None:
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
