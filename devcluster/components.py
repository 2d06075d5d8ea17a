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

"""Helm repositories, cert-manager, and Rancher installation."""

from __future__ import annotations

from rich.panel import Panel

from devcluster import console
from devcluster.config import ClusterConfig
from devcluster.constants import (
    CERT_MANAGER_CRDS_URL,
    DEPLOY_CERT_MANAGER,
    DEPLOY_RANCHER,
    HELM_RELEASE_CERT_MANAGER,
    HELM_RELEASE_RANCHER,
    HELM_REPO_JETSTACK,
    HELM_REPO_JETSTACK_URL,
    HELM_REPO_RANCHER,
    HELM_REPO_RANCHER_URL,
    NS_CATTLE_SYSTEM,
    NS_CERT_MANAGER,
    dep_value,
)
from devcluster.errors import CommandFailedError
from devcluster.runner import CommandRunner


def add_helm_repos(runner: CommandRunner) -> None:
    """Register the jetstack and Rancher chart repositories and refresh them."""
    console.print(Panel.fit("Registering Helm repositories", style="bold blue"))
    runner.run(["helm", "repo", "add", HELM_REPO_JETSTACK, HELM_REPO_JETSTACK_URL, "--force-update"])
    runner.run(["helm", "repo", "add", HELM_REPO_RANCHER, HELM_REPO_RANCHER_URL, "--force-update"])
    runner.run(["helm", "repo", "update"])


def create_namespace(runner: CommandRunner, namespace: str) -> None:
    """Create a namespace, accepting one that already exists.

    Raises:
        CommandFailedError: If kubectl fails for any other reason.
    """
    result = runner.run(["kubectl", "create", "namespace", namespace], capture=True, check=False)
    if not result.ok and "AlreadyExists" not in result.stderr:
        raise CommandFailedError(result.args, result.exit_code, result.stderr)


def wait_for_rollout(runner: CommandRunner, namespace: str, deployment: str) -> None:
    """Block until ``kubectl rollout status`` reports the deployment as rolled out.

    Args:
        runner: Command runner.
        namespace: Namespace of the deployment.
        deployment: Deployment reference, e.g. ``deployment/cert-manager``.

    Raises:
        CommandFailedError: If the rollout fails or kubectl cannot reach it.
    """
    console.print(f"[yellow]ℹ️  Waiting for {deployment} rollout in {namespace}...[/yellow]")
    runner.run(["kubectl", "-n", namespace, "rollout", "status", deployment])


def install_cert_manager(runner: CommandRunner) -> None:
    """Apply the cert-manager CRDs, install the chart, and wait for the rollout."""
    version = dep_value("cert_manager", "version")
    console.print(Panel.fit("Installing cert-manager", style="bold blue"))
    console.print(f"[yellow]Version: {version}[/yellow]")
    runner.run(["kubectl", "apply", "-f", CERT_MANAGER_CRDS_URL.format(version=version)])
    runner.run([
        "helm", "install", HELM_RELEASE_CERT_MANAGER,
        dep_value("cert_manager", "chart"),
        "--namespace", NS_CERT_MANAGER,
        "--version", version,
    ])
    wait_for_rollout(runner, NS_CERT_MANAGER, DEPLOY_CERT_MANAGER)
    console.print("[green]✅ cert-manager installed[/green]")


def install_rancher(runner: CommandRunner) -> None:
    """Install Rancher on its local hostname and wait for the rollout."""
    hostname = dep_value("rancher", "hostname")
    console.print(Panel.fit(f"Installing Rancher (https://{hostname})", style="bold blue"))
    runner.run([
        "helm", "install", HELM_RELEASE_RANCHER,
        dep_value("rancher", "chart"),
        "--namespace", NS_CATTLE_SYSTEM,
        "--set", f"hostname={hostname}",
        "--set", f"bootstrapPassword={dep_value('rancher', 'bootstrap_password')}",
        "--set", f"replicas={dep_value('rancher', 'replicas', default=1)}",
    ])
    wait_for_rollout(runner, NS_CATTLE_SYSTEM, DEPLOY_RANCHER)
    console.print("[green]✅ Rancher installed[/green]")


def install_charts(runner: CommandRunner, cfg: ClusterConfig) -> None:
    """Run the chart installation sequence, stopping at the first failure.

    Args:
        runner: Command runner with ``KUBECONFIG`` already exported.
        cfg: Cluster configuration with the Rancher toggle.
    """
    add_helm_repos(runner)
    create_namespace(runner, NS_CERT_MANAGER)
    create_namespace(runner, NS_CATTLE_SYSTEM)
    install_cert_manager(runner)
    if cfg.rancher_enabled:
        install_rancher(runner)
    else:
        console.print("[yellow]   Skipping Rancher installation[/yellow]")
