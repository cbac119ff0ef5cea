"""
Workspace configuration system.

Environment-based backend registry and module table with sensible defaults.
Loaded once at process start and treated as immutable by the core.
"""

import os
from typing import Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from clients.types import (
    BackendConfig,
    DEFAULT_HEALTH_ENDPOINT,
    DEFAULT_RETRY_COUNT,
    DEFAULT_TIMEOUT_MS,
)


@dataclass(frozen=True)
class WorkspaceModule:
    """A UI-facing feature area bound to exactly one backend."""

    id: str
    name: str
    description: str
    enabled: bool
    backend: str
    routes: Tuple[str, ...]
    icon: str
    color: str


@dataclass(frozen=True)
class WorkspaceFeatures:
    """Workspace-wide feature flags."""

    cross_module_analytics: bool = False
    shared_calculations: bool = False
    modules_communication: bool = False
    dev_tools: bool = False
    performance_monitoring: bool = False


# Static defaults per backend key (ordering is the registry order)
_BACKEND_DEFAULTS: Dict[str, Dict] = {
    "weather": {
        "name": "Weather-Forecasting",
        "url": "http://localhost:8000",
        "features": ("forecasting", "alerts", "historical", "realtime"),
        "module": {
            "name": "Weather Forecasting",
            "description": "Advanced weather forecasting and climate analysis",
            "routes": ("/weather", "/weather/dashboard", "/weather/alerts"),
            "icon": "cloud-sun",
            "color": "blue",
        },
    },
    "finance": {
        "name": "Financial-Analysis",
        "url": "http://localhost:8001",
        "features": ("portfolio", "analysis", "predictions", "realtime"),
        "module": {
            "name": "Financial Analysis",
            "description": "Financial data analysis and portfolio management",
            "routes": ("/finance", "/finance/portfolio", "/finance/analysis"),
            "icon": "trending-up",
            "color": "green",
        },
    },
    "ml": {
        "name": "ML-Processing",
        "url": "http://localhost:8002",
        "features": ("training", "inference", "models", "datasets"),
        "module": {
            "name": "Machine Learning",
            "description": "ML model training and inference platform",
            "routes": ("/ml", "/ml/models", "/ml/training"),
            "icon": "brain",
            "color": "purple",
        },
    },
    "analytics": {
        "name": "Data-Analytics",
        "url": "http://localhost:8003",
        "features": ("reporting", "visualization", "insights", "export"),
        "module": {
            "name": "Data Analytics",
            "description": "Advanced data analytics and reporting",
            "routes": ("/analytics", "/analytics/reports", "/analytics/insights"),
            "icon": "bar-chart",
            "color": "orange",
        },
    },
}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class WorkspaceConfig:
    """Workspace configuration from environment."""

    name: str
    version: str
    environment: str
    default_module: str
    multi_backend_enabled: bool
    backends: Dict[str, BackendConfig]
    modules: Dict[str, WorkspaceModule]
    features: WorkspaceFeatures = field(default_factory=WorkspaceFeatures)

    @classmethod
    def from_env(cls) -> "WorkspaceConfig":
        """
        Load configuration from environment variables.

        Every backend is disabled unless ENABLE_<KEY>_MODULE=true.
        API_TIMEOUT (ms) and API_RETRY_COUNT apply to all backends.
        """
        timeout = int(os.getenv("API_TIMEOUT", str(DEFAULT_TIMEOUT_MS)))
        retry_count = int(os.getenv("API_RETRY_COUNT", str(DEFAULT_RETRY_COUNT)))

        backends: Dict[str, BackendConfig] = {}
        modules: Dict[str, WorkspaceModule] = {}

        for key, defaults in _BACKEND_DEFAULTS.items():
            prefix = key.upper()
            enabled = _env_flag(f"ENABLE_{prefix}_MODULE")

            backends[key] = BackendConfig(
                name=os.getenv(f"{prefix}_API_NAME", defaults["name"]),
                url=os.getenv(f"{prefix}_API_URL", defaults["url"]),
                version=os.getenv(f"{prefix}_API_VERSION", "v1"),
                enabled=enabled,
                timeout=timeout,
                retry_count=retry_count,
                health_endpoint=DEFAULT_HEALTH_ENDPOINT,
                features=frozenset(defaults["features"]),
            )

            module = defaults["module"]
            modules[key] = WorkspaceModule(
                id=key,
                name=module["name"],
                description=module["description"],
                enabled=enabled,
                backend=key,
                routes=module["routes"],
                icon=module["icon"],
                color=module["color"],
            )

        return cls(
            name=os.getenv("WORKSPACE_NAME", "UI-Workspace"),
            version=os.getenv("WORKSPACE_VERSION", "1.0.0"),
            environment=os.getenv("APP_ENV", "development"),
            default_module=os.getenv("DEFAULT_WORKSPACE", "weather"),
            multi_backend_enabled=_env_flag("ENABLE_MULTI_BACKEND"),
            backends=backends,
            modules=modules,
            features=WorkspaceFeatures(
                cross_module_analytics=_env_flag("ENABLE_CROSS_MODULE_ANALYTICS"),
                shared_calculations=_env_flag("ENABLE_SHARED_CALCULATIONS"),
                modules_communication=_env_flag("ENABLE_MODULE_COMMUNICATION"),
                dev_tools=_env_flag("ENABLE_DEVTOOLS"),
                performance_monitoring=_env_flag("ENABLE_PERFORMANCE_MONITORING"),
            ),
        )


def get_enabled_modules(config: WorkspaceConfig) -> List[WorkspaceModule]:
    """Modules with enabled=True, in registry order."""
    return [module for module in config.modules.values() if module.enabled]


def get_enabled_backends(config: WorkspaceConfig) -> List[BackendConfig]:
    """Backends with enabled=True, in registry order."""
    return [backend for backend in config.backends.values() if backend.enabled]


def get_backend_for_module(config: WorkspaceConfig, module_id: str) -> Optional[BackendConfig]:
    """Resolve the backend a module is bound to, or None."""
    module = config.modules.get(module_id)
    if module is None:
        return None
    return config.backends.get(module.backend)


def validate_workspace_config(config: WorkspaceConfig) -> Tuple[bool, List[str]]:
    """
    Check the configuration for problems a UI cannot recover from.

    Returns:
        (valid, errors)
    """
    errors: List[str] = []

    if not get_enabled_modules(config):
        errors.append("At least one module must be enabled")

    default_module = config.modules.get(config.default_module)
    if default_module is None or not default_module.enabled:
        errors.append(f"Default module '{config.default_module}' is not enabled")

    for key, backend in config.backends.items():
        if backend.enabled and not backend.url:
            errors.append(f"Backend '{key}' is enabled but has no URL configured")

    return len(errors) == 0, errors


def get_config() -> WorkspaceConfig:
    """Get workspace configuration from the current environment."""
    return WorkspaceConfig.from_env()
