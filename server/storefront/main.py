from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from storefront.api.routes import search
from storefront.core.config import get_settings
from storefront.core.exceptions import register_exception_handlers
from storefront.core.logging import configure_logging
from storefront.core.middleware import RequestContextMiddleware


def create_app() -> FastAPI:
    """
    Application factory for the storefront search API.
    The product search engine lives in storefront.services; this layer only
    exposes it over HTTP for the storefront pages.
    """

    configure_logging()
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        description="Catalog search and query suggestions for the storefront.",
        version=settings.api_version,
    )

    cors_origins = settings.resolved_cors_origins
    if cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    register_exception_handlers(app)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(search.router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    return app


app = create_app()
