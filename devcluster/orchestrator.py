# /*
# Copyright 2026 The Grove Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# */

"""Orchestration functions that compose domain modules into the bootstrap workflow."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from rich.panel import Panel

from devcluster import console, logger
from devcluster.cluster import create_cluster, write_kubeconfig, write_resolv_conf
from devcluster.components import install_charts
from devcluster.config import AllocatedPorts, ClusterConfig, display_config
from devcluster.constants import REQUIRED_TOOLS, dep_value
from devcluster.errors import BootstrapError, UserDeclinedError
from devcluster.ports import PortAllocator
from devcluster.runner import CommandRunner
from devcluster.utils import check_docker_daemon, require_commands

Prompt = Callable[[str], str]


# ============================================================================
# Step driver
# ============================================================================

@dataclass(frozen=True)
class Step:
    """A named unit of the bootstrap sequence."""

    name: str
    action: Callable[[], None]


@dataclass(frozen=True)
class StepOutcome:
    """Result of running one step.

    Attributes:
        name: Step name.
        error: The failure, or None if the step succeeded.
    """

    name: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BootstrapReport:
    """Outcomes of the steps that ran, in order."""

    outcomes: list[StepOutcome] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(outcome.ok for outcome in self.outcomes)

    @property
    def failed(self) -> StepOutcome | None:
        return next((outcome for outcome in self.outcomes if not outcome.ok), None)

    @property
    def completed(self) -> list[str]:
        return [outcome.name for outcome in self.outcomes if outcome.ok]


def run_steps(steps: Sequence[Step]) -> BootstrapReport:
    """Run steps in order and stop at the first one that fails.

    Partial state left by earlier steps is not rolled back.

    Args:
        steps: Steps to run.

    Returns:
        Report with one outcome per step that ran.
    """
    report = BootstrapReport()
    for step in steps:
        logger.debug("Running step %s", step.name)
        try:
            step.action()
        except (BootstrapError, OSError) as err:
            logger.error("Step '%s' failed: %s", step.name, err)
            report.outcomes.append(StepOutcome(step.name, err))
            break
        report.outcomes.append(StepOutcome(step.name))
    return report


# ============================================================================
# Confirmation gate
# ============================================================================

def confirm(cfg: ClusterConfig, ports: AllocatedPorts, prompt: Prompt) -> None:
    """Show the resolved configuration and ask the operator to go ahead.

    Args:
        cfg: Resolved cluster configuration.
        ports: Allocated host ports.
        prompt: Reads one answer from the operator.

    Raises:
        UserDeclinedError: If the answer is anything but ``y`` or ``Y``.
    """
    display_config(cfg, ports)
    if cfg.skip_confirmation:
        logger.info("Non-interactive mode, skipping confirmation")
        return
    answer = prompt("Create the cluster with this configuration? [y/N] ")
    if answer.strip() not in ("y", "Y"):
        raise UserDeclinedError()


# ============================================================================
# Public API
# ============================================================================

@dataclass
class _BootstrapState:
    ports: AllocatedPorts | None = None
    dns_args: list[str] = field(default_factory=list)
    kubeconfig: Path | None = None


def run_bootstrap(
    cfg: ClusterConfig,
    runner: CommandRunner,
    *,
    prompt: Prompt | None = None,
    work_dir: Path | None = None,
    docker_check: Callable[[], None] = check_docker_daemon,
) -> BootstrapReport:
    """Run the full bootstrap: preflight, ports, confirm, DNS, cluster, kubeconfig, charts.

    Args:
        cfg: Resolved cluster configuration; never re-read from the environment.
        runner: Command runner for every external tool.
        prompt: Confirmation input function, defaults to the console.
        work_dir: Directory for the DNS resolv.conf, defaults to the cwd.
        docker_check: Docker daemon reachability check.

    Returns:
        Report of the steps that ran; ``report.ok`` is False on any failure.
    """
    prompt = prompt or console.input
    work_dir = work_dir or Path.cwd()
    allocator = PortAllocator(runner)
    state = _BootstrapState()

    def _preflight() -> None:
        require_commands(runner, REQUIRED_TOOLS)
        docker_check()

    def _allocate_ports() -> None:
        state.ports = allocator.allocate(cfg)

    def _confirm() -> None:
        confirm(cfg, state.ports, prompt)

    def _dns() -> None:
        state.dns_args = write_resolv_conf(cfg, work_dir)

    def _create() -> None:
        create_cluster(runner, cfg, state.ports, state.dns_args)

    def _kubeconfig() -> None:
        state.kubeconfig = write_kubeconfig(runner, cfg)

    report = run_steps([
        Step("preflight", _preflight),
        Step("ports", _allocate_ports),
        Step("confirm", _confirm),
        Step("dns", _dns),
        Step("cluster", _create),
        Step("kubeconfig", _kubeconfig),
        Step("charts", lambda: install_charts(runner, cfg)),
    ])

    if report.ok:
        console.print(Panel.fit("Cluster ready", style="bold green"))
        console.print(f"  export KUBECONFIG={state.kubeconfig}")
        console.print(f"  ingress  : http://localhost:{state.ports.http}  https://localhost:{state.ports.https}")
        if cfg.rancher_enabled:
            console.print(f"  rancher  : https://{dep_value('rancher', 'hostname')}:{state.ports.https}")
    return report
