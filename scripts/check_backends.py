#!/usr/bin/env python3
"""
Backend health check script for the UI Workspace.

Checks every configured backend concurrently and reports each one as
disabled, healthy or unhealthy, with response time.

Usage:
    python scripts/check_backends.py
    python scripts/check_backends.py --json

Exit code is 1 when any enabled backend is unhealthy.
"""

import asyncio
import json
import sys
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import List, Optional

# Add project root to sys.path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from clients import ApiError, BackendClientManager  # noqa: E402
from infra import InfraBootstrap  # noqa: E402


@dataclass
class BackendCheckResult:
    """Single backend check result."""

    backend: str
    name: str
    url: str
    status: str  # "disabled", "healthy", "unhealthy"
    message: str
    response_time_ms: float = 0.0
    version: Optional[str] = None

    def __str__(self) -> str:
        marker = {"healthy": "✓", "unhealthy": "✗"}.get(self.status, "-")
        line = f"{marker} {self.backend:<10} {self.status.upper():<10} {self.name} ({self.url})"
        if self.status != "disabled":
            line += f" [{self.response_time_ms:.0f} ms]"
        return f"{line}\n  {self.message}"


async def check_backend(manager: BackendClientManager, backend_key: str) -> BackendCheckResult:
    config = manager.get_backend_config(backend_key)

    if config is None or not config.enabled:
        return BackendCheckResult(
            backend=backend_key,
            name=config.name if config else backend_key,
            url=config.url if config else "",
            status="disabled",
            message="Module disabled in configuration",
        )

    started = time.perf_counter()
    try:
        health = await manager.health_check(backend_key)
    except ApiError as e:
        return BackendCheckResult(
            backend=backend_key,
            name=config.name,
            url=config.url,
            status="unhealthy",
            message=f"{e.code or e.status}: {e.message}",
            response_time_ms=(time.perf_counter() - started) * 1000,
        )

    return BackendCheckResult(
        backend=backend_key,
        name=config.name,
        url=config.url,
        status="healthy",
        message=f"Backend reports '{health.status}'",
        response_time_ms=(time.perf_counter() - started) * 1000,
        version=health.version,
    )


async def run_checks(bootstrap: InfraBootstrap) -> List[BackendCheckResult]:
    """Check all configured backends (enabled ones concurrently)."""
    manager = bootstrap.client_manager
    try:
        return list(await asyncio.gather(
            *(check_backend(manager, key) for key in bootstrap.config.backends)
        ))
    finally:
        await bootstrap.shutdown()


def print_report(results: List[BackendCheckResult]) -> None:
    print(f"\n{'='*70}")
    print("UI Workspace Backend Health Check")
    print(f"{'='*70}\n")

    for result in results:
        print(result)

    enabled = [r for r in results if r.status != "disabled"]
    healthy = [r for r in enabled if r.status == "healthy"]

    print(f"\n{'='*70}")
    if not enabled:
        print("- NO BACKENDS ENABLED")
    elif len(healthy) == len(enabled):
        print(f"✓ ALL BACKENDS HEALTHY ({len(healthy)}/{len(enabled)})")
    else:
        print(f"✗ SOME BACKENDS UNHEALTHY ({len(healthy)}/{len(enabled)})")
    print(f"{'='*70}\n")


def main(argv: Optional[List[str]] = None, bootstrap: Optional[InfraBootstrap] = None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Check health of all configured workspace backends"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print machine-readable JSON instead of a report"
    )

    args = parser.parse_args(argv)

    infra = bootstrap or InfraBootstrap().initialize()
    results = asyncio.run(run_checks(infra))

    if args.json:
        print(json.dumps([asdict(r) for r in results], indent=2))
    else:
        print_report(results)

    return 1 if any(r.status == "unhealthy" for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
