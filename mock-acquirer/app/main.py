"""
Mock Acquirer Application

A simulated iDEAL/iDIN acquirer for local development and tests. Verifies
merchant signatures, signs its responses and lets a developer complete
transactions through a minimal issuer page.
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from .core.config import AcquirerSettings, get_settings
from .database import TransactionDatabase
from .routes import acquirer_router, issuer_router
from .security.signing import AcquirerSecurity

# Load environment variables
load_dotenv(os.path.join(os.path.dirname(__file__), "..", "..", "config", ".env"))

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock Acquirer starting up...")
    logger.info(f"Acquirer ID: {app.state.settings.acquirer_id}")
    yield
    logger.info("Mock Acquirer shutting down...")


def create_app(
    settings: Optional[AcquirerSettings] = None,
    security: Optional[AcquirerSecurity] = None,
) -> FastAPI:
    """
    Create the mock acquirer.

    Args:
        settings: Settings to use instead of the environment
        security: Key material to use instead of the configured PEM files
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Simulated iDEAL/iDIN acquirer",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.security = security or AcquirerSecurity.from_settings(settings)
    app.state.transactions = TransactionDatabase(settings.acquirer_id)

    app.include_router(acquirer_router)
    app.include_router(issuer_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "mock-acquirer"}

    return app


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
