"""Shared fixtures: a scripted command runner and isolated configuration."""

from __future__ import annotations

import os

import pytest

from devcluster.config import ClusterConfig
from devcluster.errors import CommandFailedError
from devcluster.runner import CommandResult

DEFAULT_TOOLS = {"k3d", "kubectl", "helm", "docker", "ss"}


class FakeRunner:
    """CommandRunner that records calls and answers from scripted responses."""

    def __init__(self, tools=None, listening=()):
        self.tools = set(DEFAULT_TOOLS if tools is None else tools)
        self.listening = set(listening)
        self.calls: list[list[str]] = []
        self.which_calls: list[str] = []
        self.env: dict[str, str] = {}
        self.env_at_call: list[dict[str, str]] = []
        self._responses: list[tuple[tuple[str, ...], str]] = []
        self._failures: list[tuple[tuple[str, ...], int, str]] = []

    def respond(self, prefix, stdout):
        self._responses.append((tuple(prefix), stdout))

    def fail(self, prefix, exit_code=1, stderr=""):
        self._failures.append((tuple(prefix), exit_code, stderr))

    def which(self, name):
        self.which_calls.append(name)
        return name in self.tools

    def set_env(self, key, value):
        self.env[key] = value

    def run(self, args, *, capture=False, check=True):
        argv = tuple(str(a) for a in args)
        self.calls.append(list(argv))
        self.env_at_call.append(dict(self.env))
        for prefix, code, stderr in self._failures:
            if argv[:len(prefix)] == prefix:
                result = CommandResult(argv, code, "", stderr)
                if check:
                    raise CommandFailedError(argv, code, stderr)
                return result
        return CommandResult(argv, 0, self._stdout(argv))

    def _stdout(self, argv):
        if argv[0] == "ss":
            return "".join(f"LISTEN 0 4096 0.0.0.0:{port} 0.0.0.0:*\n" for port in sorted(self.listening))
        if argv[0] == "netstat":
            header = "Active Internet connections (only servers)\n" \
                     "Proto Recv-Q Send-Q Local Address Foreign Address State\n"
            return header + "".join(
                f"tcp 0 0 0.0.0.0:{port} 0.0.0.0:* LISTEN\n" for port in sorted(self.listening)
            )
        for prefix, stdout in self._responses:
            if argv[:len(prefix)] == prefix:
                return stdout
        return ""

    def commands(self, *prefix):
        """Calls starting with ``prefix``."""
        return [call for call in self.calls if tuple(call[:len(prefix)]) == prefix]

    def called(self, *prefix):
        return bool(self.commands(*prefix))


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("DEVCLUSTER_"):
            monkeypatch.delenv(key)


@pytest.fixture
def runner():
    fake = FakeRunner()
    fake.respond(["k3d", "kubeconfig", "get"], "apiVersion: v1\nkind: Config\n")
    return fake


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides):
        values = {
            "kubeconfig_dir": tmp_path / "kube",
            "agent_volume": str(tmp_path / "volume"),
            "non_interactive": "1",
        }
        values.update(overrides)
        return ClusterConfig(**values)
    return _make
