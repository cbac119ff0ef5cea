"""
Infrastructure module exports.

Configuration and bootstrap for the backend registry and calculation engines.
"""

from .config import (
    BackendConfig,
    WorkspaceConfig,
    WorkspaceFeatures,
    WorkspaceModule,
    get_backend_for_module,
    get_config,
    get_enabled_backends,
    get_enabled_modules,
    validate_workspace_config,
)
from .bootstrap import InfraBootstrap, bootstrap_infrastructure, create_token_store

__all__ = [
    "BackendConfig",
    "WorkspaceConfig",
    "WorkspaceFeatures",
    "WorkspaceModule",
    "get_backend_for_module",
    "get_config",
    "get_enabled_backends",
    "get_enabled_modules",
    "validate_workspace_config",
    "InfraBootstrap",
    "bootstrap_infrastructure",
    "create_token_store",
]
