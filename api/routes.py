"""
Workspace HTTP routes.

Serves:
- /health: Aggregate health over every enabled backend
- /backends: Enabled backends with last-known health (no network I/O)
- /modules: Enabled UI modules
- /calculations: Supported calculations per module
- /calculate, /calculate/batch: Calculation dispatch

Calculation routes always answer 200; success=false in the body is the
normal failure path.
"""

from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from calculations import CalculationInput
from clients import HealthCheckResponse
from infra import InfraBootstrap, get_enabled_modules

router = APIRouter()


class CalculationRequest(BaseModel):
    type: str
    module: str
    data: Any = None
    options: Optional[Dict[str, Any]] = None

    def to_input(self) -> CalculationInput:
        return CalculationInput(
            type=self.type, module=self.module, data=self.data, options=self.options
        )


class BatchCalculationRequest(BaseModel):
    inputs: List[CalculationRequest] = Field(default_factory=list)


def get_bootstrap(request: Request) -> InfraBootstrap:
    return request.app.state.bootstrap


@router.get("/health")
async def workspace_health(bootstrap: InfraBootstrap = Depends(get_bootstrap)):
    """Check every enabled backend; 503 if any of them is unreachable."""
    results = await bootstrap.client_manager.health_check_all()

    backends: Dict[str, Dict[str, Any]] = {}
    for backend_key, outcome in results.items():
        if isinstance(outcome, HealthCheckResponse):
            backends[backend_key] = {
                "healthy": True,
                "status": outcome.status,
                "timestamp": outcome.timestamp,
                "version": outcome.version,
            }
        else:
            backends[backend_key] = {
                "healthy": False,
                "status": "unreachable",
                "error": outcome.to_dict(),
            }

    all_healthy = all(entry["healthy"] for entry in backends.values())
    config = bootstrap.config

    return JSONResponse(
        content={
            "status": "healthy" if all_healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "workspace": {
                "name": config.name,
                "version": config.version,
                "environment": config.environment,
            },
            "backends": backends,
        },
        status_code=200 if all_healthy else 503,
    )


@router.get("/backends")
async def list_backends(bootstrap: InfraBootstrap = Depends(get_bootstrap)):
    manager = bootstrap.client_manager
    return {
        key: {
            "name": backend.name,
            "url": backend.url,
            "version": backend.version,
            "features": sorted(backend.features),
            "healthy": manager.is_backend_healthy(key),
        }
        for key, backend in bootstrap.config.backends.items()
        if backend.enabled
    }


@router.get("/modules")
async def list_modules(bootstrap: InfraBootstrap = Depends(get_bootstrap)):
    return [
        {
            "id": module.id,
            "name": module.name,
            "description": module.description,
            "backend": module.backend,
            "routes": list(module.routes),
            "icon": module.icon,
            "color": module.color,
        }
        for module in get_enabled_modules(bootstrap.config)
    ]


@router.get("/calculations")
async def list_calculations(bootstrap: InfraBootstrap = Depends(get_bootstrap)):
    return bootstrap.calculations.get_all_calculations()


@router.post("/calculate")
async def calculate(body: CalculationRequest, bootstrap: InfraBootstrap = Depends(get_bootstrap)):
    result = await bootstrap.calculations.calculate(body.to_input())
    return asdict(result)


@router.post("/calculate/batch")
async def calculate_batch(
    body: BatchCalculationRequest, bootstrap: InfraBootstrap = Depends(get_bootstrap)
):
    results = await bootstrap.calculations.batch_calculate(
        [item.to_input() for item in body.inputs]
    )
    return [asdict(result) for result in results]
