"""
FastAPI Application Entry Point

Integrates:
  - Backend client manager (multi-backend health and requests)
  - Calculation dispatcher
  - Middleware for logging & error handling

Run: uvicorn main:app --reload --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from api import router as workspace_router
from config import Config
from infra import InfraBootstrap, bootstrap_infrastructure

# Setup logging
logging.basicConfig(
    level=Config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def create_app(bootstrap: Optional[InfraBootstrap] = None) -> FastAPI:
    """
    Create the workspace API.

    Args:
        bootstrap: Already-initialized infrastructure. Built from the
                   environment at startup when omitted.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        # Startup
        Config.validate()
        infra = bootstrap or bootstrap_infrastructure()
        app.state.bootstrap = infra

        logger.info("=" * 60)
        logger.info(f"{infra.config.name} v{infra.config.version} starting up...")
        logger.info(f"Environment: {infra.config.environment}")
        logger.info(f"Enabled backends: {', '.join(infra.client_manager.get_enabled_backend_keys()) or 'none'}")
        logger.info(f"Calculation modules: {', '.join(infra.calculations.get_available_modules())}")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("Workspace shutting down...")
        await infra.shutdown()

    app = FastAPI(
        title="UI Workspace API",
        description="Multi-backend workspace: backend health and client-side calculations",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Restrict this in production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.debug(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal server error"},
            )

    app.include_router(workspace_router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "UI Workspace API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health": "GET /health",
                "backends": "GET /backends",
                "modules": "GET /modules",
                "calculations": "GET /calculations",
                "calculate": "POST /calculate",
                "calculate_batch": "POST /calculate/batch",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=Config.WORKSPACE_PORT,
        reload=Config.ENVIRONMENT == "development",
    )
