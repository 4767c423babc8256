"""FastAPI application serving derived universe views."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dreamverse.api.universe import router as universe_router
from dreamverse.config import settings
from dreamverse.universe import get_classifier

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Load the category table once at startup."""
    logger.info("Starting Dreamverse API...")
    app.state.classifier = get_classifier(settings.category_table_path)
    logger.info(f"Category table ready ({len(app.state.classifier.table)} categories)")

    yield

    logger.info("Shutting down Dreamverse API...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Dreamverse",
        description="Semantically clustered universe view of diary elements",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(universe_router)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "dreamverse.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
