import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from app.api.routes import router
from app.core.config import settings
from app.core.errors import (
    AppError,
    StartupError,
    app_error_handler,
    validation_error_handler,
)
from app.core.logging_config import configure_logging, log_requests
from app.services.llm import ChatGateway
from app.services.verse_store import VerseStore

logger = logging.getLogger(__name__)


def create_app(
    verse_store: Optional[VerseStore] = None,
    chat_gateway: Optional[ChatGateway] = None,
    data_path: Optional[str] = None,
) -> FastAPI:
    """
    Build the API application.

    The corpus is loaded from ``data_path`` (default ``RIGVEDA_DATA_PATH``)
    during startup unless a ready ``verse_store`` is passed in.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.corpus_error = None
        app.state.verse_store = verse_store
        if verse_store is None:
            path = data_path or settings.RIGVEDA_DATA_PATH
            try:
                app.state.verse_store = VerseStore.load(path)
            except StartupError as e:
                # Keep serving: hymn routes answer 503 until the file is fixed
                logger.critical("Failed to load verse corpus: %s", e)
                app.state.corpus_error = str(e)

        app.state.chat_gateway = chat_gateway or ChatGateway()
        if not app.state.chat_gateway.configured:
            logger.critical(
                "GEMINI_API_KEY is not set. The chatbot will not function "
                "until this is resolved."
            )
        yield

    app = FastAPI(
        title="Rigveda API",
        description="Rigveda verse lookup, deity graph and Vedic scholar chatbot",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
    )
    app.middleware("http")(log_requests)
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(router, prefix="/api")

    @app.get("/", response_class=PlainTextResponse)
    async def root():
        return "Rigveda API is live and running!"

    return app


configure_logging(settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    logger.info("Starting Rigveda API on port %d", settings.PORT)
    uvicorn.run("app.main:app", host=settings.HOST, port=settings.PORT)
