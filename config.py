"""
Configuration management for the UI Workspace core.

Loads environment variables from .env file and provides typed access to configuration.
Backend and module definitions live in infra/config.py.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
env_path = Path(__file__).parent / ".env"
load_dotenv(env_path)


class Config:
    """Configuration class for the workspace process."""

    # Workspace API
    WORKSPACE_PORT = int(os.getenv("WORKSPACE_PORT", "3000"))

    # Environment
    ENVIRONMENT = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Token storage ("memory" or "sqlite")
    TOKEN_STORE_BACKEND = os.getenv("TOKEN_STORE_BACKEND", "memory").lower()
    TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", "./tokens.db")

    @classmethod
    def validate(cls) -> bool:
        """Validate that configuration values are usable."""
        problems = []
        if cls.TOKEN_STORE_BACKEND not in ("memory", "sqlite"):
            problems.append(f"TOKEN_STORE_BACKEND={cls.TOKEN_STORE_BACKEND!r}")
        if cls.LOG_LEVEL not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            problems.append(f"LOG_LEVEL={cls.LOG_LEVEL!r}")

        if problems:
            print(f"⚠️  Invalid configuration: {', '.join(problems)}")
            print(f"   Please fix them in .env file")
            return False

        return True


if __name__ == "__main__":
    # Test configuration loading
    print("Configuration loaded:")
    print(f"  Workspace Port: {Config.WORKSPACE_PORT}")
    print(f"  Environment: {Config.ENVIRONMENT}")
    print(f"  Log Level: {Config.LOG_LEVEL}")
    print(f"  Token Store: {Config.TOKEN_STORE_BACKEND}")
    print(f"\n  Validation: {'✓ PASSED' if Config.validate() else '✗ FAILED'}")
