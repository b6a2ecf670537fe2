"""Shared fixtures: a fake kubectl/helm runner and fresh settings."""

import pytest

from clustercost import cluster, helm, state, utils
from clustercost.config import get_settings
from clustercost.utils import CommandResult, format_command


class FakeRunner:
    """Stands in for run_command and records every call.

    Responses are matched on the leading tokens of ``[binary, *args]``; the
    first match wins. A response is either stdout text or an exception.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.responses: list[tuple[list[str], object]] = []

    def on(self, *prefix: str, result: object = "") -> "FakeRunner":
        self.responses.append((list(prefix), result))
        return self

    def __call__(self, binary, args=None, timeout=None):
        call = [binary, *(args or [])]
        self.calls.append(call)
        for prefix, result in self.responses:
            if call[: len(prefix)] == prefix:
                if isinstance(result, Exception):
                    raise result
                return CommandResult(command=format_command(binary, args or []), code=0, stdout=result, stderr="")
        return CommandResult(command=format_command(binary, args or []), code=0, stdout="", stderr="")

    def ran(self, *prefix: str) -> bool:
        return any(call[: len(prefix)] == list(prefix) for call in self.calls)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    for name in ("NAMESPACE", "LOCAL_PORT", "STRICT_NAMES", "SPLASH", "LOG_LEVEL", "HELM_REPO_URL"):
        monkeypatch.delenv(f"CLUSTERCOST_{name}", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fake_run(monkeypatch) -> FakeRunner:
    runner = FakeRunner()
    for module in (helm, state, cluster, utils):
        monkeypatch.setattr(module, "run_command", runner)
    return runner
