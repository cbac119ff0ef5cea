"""
Infrastructure initialization and bootstrap.

Builds the token store, backend client manager and calculation dispatcher
from configuration. Instances are constructed explicitly and handed to
their consumers; there is no process-global instance.
"""

import logging
from typing import Optional

import httpx

from config import Config
from clients import BackendClientManager, InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from calculations import WeatherCalculations, WorkspaceCalculationsManager

from .config import WorkspaceConfig, get_config, validate_workspace_config

logger = logging.getLogger(__name__)


def create_token_store(backend: Optional[str] = None, path: Optional[str] = None) -> KeyValueStore:
    """Create the token store selected by TOKEN_STORE_BACKEND."""
    backend = (backend or Config.TOKEN_STORE_BACKEND).lower()
    if backend == "sqlite":
        return SQLiteKeyValueStore(db_path=path or Config.TOKEN_STORE_PATH)
    return InMemoryKeyValueStore()


class InfraBootstrap:
    """
    Bootstrap infrastructure based on configuration.

    One instance per process, created by the entry point (main.py or a
    script) and passed to whatever needs it.
    """

    def __init__(
        self,
        config: Optional[WorkspaceConfig] = None,
        token_store: Optional[KeyValueStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize bootstrap with configuration."""
        self.config = config or get_config()
        self.token_store = token_store or create_token_store()
        self.client_manager = BackendClientManager(
            self.config.backends,
            token_store=self.token_store,
            transport=transport,
        )
        self.calculations = WorkspaceCalculationsManager()

    def initialize(self) -> "InfraBootstrap":
        """Create backend clients and register calculation engines."""
        valid, errors = validate_workspace_config(self.config)
        for error in errors:
            logger.warning(f"Workspace configuration: {error}")
        if valid:
            logger.debug("Workspace configuration valid")

        self.client_manager.initialize()
        self.calculations.register_module("weather", WeatherCalculations())
        return self

    async def shutdown(self) -> None:
        await self.client_manager.close()

    def get_client_manager(self) -> BackendClientManager:
        return self.client_manager

    def get_calculations(self) -> WorkspaceCalculationsManager:
        return self.calculations


def bootstrap_infrastructure(config: Optional[WorkspaceConfig] = None) -> InfraBootstrap:
    """
    Create and initialize all workspace infrastructure.

    Args:
        config: Optional custom configuration (defaults to environment)

    Returns:
        Initialized InfraBootstrap
    """
    return InfraBootstrap(config).initialize()
