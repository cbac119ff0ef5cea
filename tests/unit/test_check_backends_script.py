"""
scripts/check_backends.py tests.

Verifies:
✔ Disabled backends reported but never contacted
✔ Healthy / unhealthy classification per backend
✔ Exit code 1 only when an enabled backend is unhealthy
✔ --json output is machine-readable
"""

import json

import httpx

from clients import InMemoryKeyValueStore
from conftest import healthy, make_backends, route_by_host
from infra import InfraBootstrap, WorkspaceConfig
from scripts.check_backends import main


def make_bootstrap(routes) -> InfraBootstrap:
    config = WorkspaceConfig.from_env()
    config.backends = make_backends()
    return InfraBootstrap(
        config,
        token_store=InMemoryKeyValueStore(),
        transport=route_by_host(routes),
    ).initialize()


class TestCheckBackendsScript:

    def test_all_healthy_exit_zero(self, capsys):
        code = main([], bootstrap=make_bootstrap({"weather": healthy, "finance": healthy}))

        output = capsys.readouterr().out
        assert code == 0
        assert "ALL BACKENDS HEALTHY (2/2)" in output
        assert "DISABLED" in output

    def test_unhealthy_exit_one(self, capsys):
        bootstrap = make_bootstrap({
            "weather": healthy,
            "finance": lambda r: httpx.Response(500),
        })

        code = main(["--json"], bootstrap=bootstrap)

        results = {r["backend"]: r for r in json.loads(capsys.readouterr().out)}
        assert code == 1
        assert results["weather"]["status"] == "healthy"
        assert results["weather"]["version"] == "1.2.3"
        assert results["finance"]["status"] == "unhealthy"
        assert "HTTP_ERROR" in results["finance"]["message"]
        assert results["ml"]["status"] == "disabled"
