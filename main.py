"""
Taoli Tools Signer
==================

Key-scoped signing gateway. Each configured key owns an HMAC secret and a
seed; signed requests can derive an address or sign a raw transaction for
EVM or SVM.

⚠️  SECURITY CRITICAL - DO NOT MODIFY WITHOUT REVIEW
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dishka import AsyncContainer
from dishka.integrations.fastapi import setup_dishka
from contextlib import asynccontextmanager
import uvicorn

from core.container import container as default_container
from core.environment.config import Settings
from core.errors import ConfigError
from core.logger import logger
from api.router import router
from middleware.errors import ErrorMapperMiddleware
from middleware.security import SecurityMiddleware
from signing.entities import Keychain


VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    container: AsyncContainer = app.state.dishka_container
    settings = await container.get(Settings, component="environment")

    logger.info("🔐 Starting Taoli Tools Signer...")
    logger.info(f"Environment: {settings.environment}")

    try:
        keychain = await container.get(Keychain, component="signing")
        logger.info(f"✅ Taoli Tools Signer started with {len(keychain)} key(s)")
    except ConfigError as e:
        # Requests will keep answering 500 until the keychain is fixed
        logger.error(f"🚨 Keychain is invalid: {e.message}")

    yield

    # Shutdown
    logger.info("🔒 Shutting down Taoli Tools Signer...")
    await container.close()


def create_app(container: AsyncContainer, settings: Settings | None = None) -> FastAPI:
    """
    Build the application around a DI container

    Args:
        container: dishka container (composition root)
        settings: Settings used for app-level options (docs, CORS)
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Taoli Tools Signer",
        description="Key-scoped signing gateway for EVM and SVM transactions",
        version=VERSION,
        docs_url="/docs" if settings.environment == "development" else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.environment == "development" else None,
        lifespan=lifespan
    )

    # Setup DI container
    setup_dishka(container, app)

    # Order matters: the last added middleware runs first
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(ErrorMapperMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins_list(),
        allow_methods=["GET", "POST"],
        allow_headers=["X-SIG", "Content-Type"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "taoli-tools-signer",
            "version": VERSION
        }

    app.include_router(router)

    return app


app = create_app(default_container)


if __name__ == "__main__":
    settings = Settings()
    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development"
    )
