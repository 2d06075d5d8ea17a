import pytest

from devcluster.constants import RESOLV_CONF_FILE
from devcluster.errors import (
    BootstrapError,
    CommandFailedError,
    DockerUnavailableError,
    MissingToolsError,
    UserDeclinedError,
)
from devcluster.orchestrator import Step, confirm, run_bootstrap, run_steps
from devcluster.config import AllocatedPorts

from conftest import FakeRunner


class Prompt:
    def __init__(self, answer):
        self.answer = answer
        self.asked = 0

    def __call__(self, message):
        self.asked += 1
        return self.answer


def _bootstrap(runner, cfg, tmp_path, prompt=None):
    return run_bootstrap(
        cfg, runner,
        prompt=prompt or Prompt("n"),
        work_dir=tmp_path,
        docker_check=lambda: None,
    )


class TestRunSteps:
    def test_all_steps_succeed(self):
        seen = []
        report = run_steps([Step("a", lambda: seen.append("a")), Step("b", lambda: seen.append("b"))])
        assert report.ok
        assert report.completed == ["a", "b"]
        assert seen == ["a", "b"]

    def test_halts_on_first_failure(self):
        seen = []

        def boom():
            raise BootstrapError("boom")

        report = run_steps([
            Step("a", lambda: seen.append("a")),
            Step("b", boom),
            Step("c", lambda: seen.append("c")),
        ])

        assert not report.ok
        assert report.failed.name == "b"
        assert str(report.failed.error) == "boom"
        assert seen == ["a"]
        assert [o.name for o in report.outcomes] == ["a", "b"]

    def test_unexpected_errors_propagate(self):
        def bug():
            raise KeyError("x")

        with pytest.raises(KeyError):
            run_steps([Step("a", bug)])


class TestConfirm:
    PORTS = AllocatedPorts(api=6550, http=8080, https=8443)

    @pytest.mark.parametrize("answer", ["y", "Y", " y\n"])
    def test_accepts_y(self, make_config, answer):
        confirm(make_config(non_interactive="0"), self.PORTS, Prompt(answer))

    @pytest.mark.parametrize("answer", ["n", "", "yes", "x"])
    def test_anything_else_declines(self, make_config, answer):
        with pytest.raises(UserDeclinedError):
            confirm(make_config(non_interactive="0"), self.PORTS, Prompt(answer))

    def test_non_interactive_never_prompts(self, make_config):
        prompt = Prompt("n")
        confirm(make_config(non_interactive="1"), self.PORTS, prompt)
        assert prompt.asked == 0


class TestBootstrap:
    def test_full_run(self, runner, make_config, tmp_path):
        cfg = make_config(dns_forwarders="1.1.1.1")

        report = _bootstrap(runner, cfg, tmp_path)

        assert report.ok
        assert report.completed == ["preflight", "ports", "confirm", "dns", "cluster", "kubeconfig", "charts"]
        create = runner.commands("k3d", "cluster", "create")[0]
        assert "--resolv-conf=/etc/k3d-resolv.conf@all" in create
        assert cfg.kubeconfig_path.exists()
        assert runner.called("helm", "install", "rancher")

    def test_non_interactive_ignores_decline(self, runner, make_config, tmp_path):
        prompt = Prompt("n")
        report = _bootstrap(runner, make_config(non_interactive="1"), tmp_path, prompt)
        assert report.ok
        assert prompt.asked == 0
        assert runner.called("k3d", "cluster", "create")

    def test_decline_aborts_before_side_effects(self, runner, make_config, tmp_path):
        cfg = make_config(non_interactive="0", dns_forwarders="1.1.1.1")

        report = _bootstrap(runner, cfg, tmp_path, Prompt("n"))

        assert report.failed.name == "confirm"
        assert isinstance(report.failed.error, UserDeclinedError)
        assert not (tmp_path / RESOLV_CONF_FILE).exists()
        assert not runner.called("k3d")
        assert not runner.called("helm")

    def test_missing_tools_stop_preflight(self, make_config, tmp_path):
        runner = FakeRunner(tools={"k3d", "ss"})

        report = _bootstrap(runner, make_config(), tmp_path)

        assert report.failed.name == "preflight"
        error = report.failed.error
        assert isinstance(error, MissingToolsError)
        assert error.missing == ("kubectl", "helm", "docker")
        for tool in ("k3d", "kubectl", "helm", "docker"):
            assert tool in str(error)
        assert runner.calls == []

    def test_docker_daemon_failure_stops_preflight(self, runner, make_config, tmp_path):
        def no_daemon():
            raise DockerUnavailableError("connection refused")

        report = run_bootstrap(make_config(), runner, work_dir=tmp_path, docker_check=no_daemon)

        assert report.failed.name == "preflight"
        assert isinstance(report.failed.error, DockerUnavailableError)
        assert runner.calls == []

    def test_scenario_without_registry_and_rancher(self, runner, make_config, tmp_path):
        cfg = make_config(servers=3, agents=6, setup_registry="2", setup_rancher="3")

        report = _bootstrap(runner, cfg, tmp_path)

        assert report.ok
        create = runner.commands("k3d", "cluster", "create")[0]
        assert "--registry-create" not in create
        assert create[create.index("--servers") + 1] == "3"
        assert create[create.index("--agents") + 1] == "6"
        assert runner.called("helm", "install", "cert-manager")
        assert not runner.called("helm", "install", "rancher")

    def test_provisioning_failure_halts_everything_after(self, runner, make_config, tmp_path):
        runner.fail(["k3d", "cluster", "create"], exit_code=1)

        report = _bootstrap(runner, make_config(), tmp_path)

        assert not report.ok
        assert report.failed.name == "cluster"
        assert isinstance(report.failed.error, CommandFailedError)
        assert not runner.called("k3d", "kubeconfig")
        assert not runner.called("helm")
        assert not runner.called("kubectl")

    def test_ports_are_allocated_around_listeners(self, make_config, tmp_path):
        runner = FakeRunner(listening={6550, 8080})
        runner.respond(["k3d", "kubeconfig", "get"], "apiVersion: v1\n")

        _bootstrap(runner, make_config(), tmp_path)

        create = runner.commands("k3d", "cluster", "create")[0]
        assert create[create.index("--api-port") + 1] == "6551"
        assert "8081:80@loadbalancer" in create
        assert "8443:443@loadbalancer" in create
