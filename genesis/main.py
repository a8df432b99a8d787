"""Application entrypoint for the GENESIS lending API."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from genesis.api import build_router
from genesis.api.errors import register_exception_handlers
from genesis.core import (
    AppSettings,
    DocumentStore,
    create_document_store,
    get_logger,
    load_settings,
    setup_logging,
)


setup_logging()
logger = get_logger(__name__)


def create_app(settings: Optional[AppSettings] = None, store: Optional[DocumentStore] = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    A store passed in stays owned by the caller; otherwise one is built from
    `settings` and closed on shutdown.
    """
    settings = settings or load_settings()
    setup_logging(debug=settings.debug)
    owns_store = store is None
    store = store if store is not None else create_document_store(settings)

    app = FastAPI(title=settings.app_name, debug=settings.debug)
    app.state.settings = settings
    app.state.store = store

    if settings.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.include_router(build_router(settings, store))

    @app.on_event("shutdown")
    def _close_store() -> None:
        """Release the document store on application shutdown."""
        if not owns_store:
            return
        try:
            app.state.store.close()
        except Exception:
            logger.exception("Failed to close document store during shutdown.")

    logger.info("Application initialized: %s", settings.app_name)
    return app


app = create_app()


def run() -> None:
    """Start the ASGI server for local development."""
    settings = load_settings()
    try:
        uvicorn.run("genesis.main:app", host=settings.host, port=settings.port, reload=settings.debug)
    except Exception:
        logger.exception("Failed to start uvicorn server.")
        raise


if __name__ == "__main__":
    run()
