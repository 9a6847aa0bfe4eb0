"""FastAPI application entry point for the sitter gateway."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitter_gateway import __version__
from sitter_gateway.api.dependencies import get_db_client, get_identity_verifier
from sitter_gateway.api.errors import register_error_handlers
from sitter_gateway.api.middleware import RequestTimeoutMiddleware
from sitter_gateway.api.routes import ACCESS_POLICY, router
from sitter_gateway.auth.middleware import RequestAuthMiddleware
from sitter_gateway.auth.policy import AccessPolicy
from sitter_gateway.config import get_settings

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting Sitter Gateway v{__version__}")
    logger.info(
        f"Signup variants: full={settings.full_signup_enabled}, "
        f"profile={settings.profile_signup_enabled}"
    )

    yield

    logger.info("Shutting down Sitter Gateway")


def create_app(policy: AccessPolicy = ACCESS_POLICY) -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    logging.getLogger("sitter_gateway").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Sitter Gateway",
        description="API gateway for the host/sitter scheduling app",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    register_error_handlers(app)

    app.add_middleware(
        RequestAuthMiddleware,
        policy=policy,
        verifier_provider=get_identity_verifier,
        store_provider=get_db_client,
    )
    app.add_middleware(
        RequestTimeoutMiddleware,
        timeout_seconds=settings.request_timeout_seconds,
    )

    # Added last so it wraps the rest and answers preflight requests first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    app.include_router(router)

    return app


# Create app instance for uvicorn
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "sitter_gateway.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
