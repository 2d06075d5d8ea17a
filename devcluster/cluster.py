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

"""k3d cluster lifecycle, DNS forwarders, and kubeconfig handling."""

from __future__ import annotations

import json
import os
from pathlib import Path

from rich.panel import Panel

from devcluster import console, logger
from devcluster.config import AllocatedPorts, ClusterConfig
from devcluster.constants import (
    AGENT_VOLUME_NODE_PATH,
    INGRESS_MANIFEST,
    K3S_MANIFESTS_DIR,
    RESOLV_CONF_FILE,
    RESOLV_CONF_NODE_PATH,
)
from devcluster.errors import ClusterExistsError
from devcluster.runner import CommandRunner


# ============================================================================
# DNS forwarders
# ============================================================================

def write_resolv_conf(cfg: ClusterConfig, work_dir: Path) -> list[str]:
    """Write the forwarder resolv.conf and return the k3d arguments that use it.

    Args:
        cfg: Cluster configuration with the forwarder list.
        work_dir: Directory the resolv.conf file is written to.

    Returns:
        ``--volume`` and ``--k3s-arg`` arguments, or an empty list when no
        forwarders are configured (nothing is written in that case).
    """
    forwarders = cfg.forwarders
    if not forwarders:
        return []

    resolv_conf = (work_dir / RESOLV_CONF_FILE).resolve()
    resolv_conf.write_text("".join(f"nameserver {addr}\n" for addr in forwarders))
    console.print(f"[green]✅ Wrote {len(forwarders)} DNS forwarder(s) to {resolv_conf}[/green]")
    return [
        "--volume", f"{resolv_conf}:{RESOLV_CONF_NODE_PATH}@all",
        "--k3s-arg", f"--resolv-conf={RESOLV_CONF_NODE_PATH}@all",
    ]


# ============================================================================
# Cluster operations
# ============================================================================

def build_create_args(cfg: ClusterConfig, ports: AllocatedPorts, dns_args: list[str]) -> list[str]:
    """Assemble the full ``k3d cluster create`` command line.

    Args:
        cfg: Cluster configuration.
        ports: Allocated host ports.
        dns_args: Extra arguments from :func:`write_resolv_conf`.

    Returns:
        Argument vector starting with ``k3d``.
    """
    args = [
        "k3d", "cluster", "create", cfg.cluster_name,
        "--api-port", str(ports.api),
        "--image", cfg.image_ref,
        "--servers", str(cfg.servers),
        "--agents", str(cfg.agents),
        "--port", f"{ports.http}:80@loadbalancer",
        "--port", f"{ports.https}:443@loadbalancer",
        "--k3s-arg", "--disable=traefik@server:*",
        "--volume", f"{INGRESS_MANIFEST}:{K3S_MANIFESTS_DIR}/{INGRESS_MANIFEST.name}@server:*",
        "--volume", f"{cfg.agent_volume}:{AGENT_VOLUME_NODE_PATH}@agent:*",
    ]
    if cfg.registry_enabled:
        args += ["--registry-create", f"{cfg.cluster_name}-registry"]
    args += dns_args
    args.append("--wait")
    return args


def cluster_exists(runner: CommandRunner, name: str) -> bool:
    """Return True if ``k3d cluster list`` reports a cluster called ``name``."""
    result = runner.run(["k3d", "cluster", "list", "-o", "json"], capture=True)
    clusters = json.loads(result.stdout or "[]")
    return any(cluster.get("name") == name for cluster in clusters)


def create_cluster(runner: CommandRunner, cfg: ClusterConfig, ports: AllocatedPorts, dns_args: list[str]) -> None:
    """Create the k3d cluster and block until it reports ready.

    Args:
        runner: Command runner.
        cfg: Cluster configuration.
        ports: Allocated host ports.
        dns_args: Extra arguments from :func:`write_resolv_conf`.

    Raises:
        ClusterExistsError: If a cluster with the same name already exists.
        CommandFailedError: If k3d exits with a non-zero status.
    """
    console.print(Panel.fit("Creating k3d cluster", style="bold blue"))
    if cluster_exists(runner, cfg.cluster_name):
        raise ClusterExistsError(cfg.cluster_name)

    runner.run(build_create_args(cfg, ports, dns_args))
    console.print("[green]✅ Cluster created successfully[/green]")


def delete_cluster(runner: CommandRunner, cfg: ClusterConfig) -> None:
    """Delete the k3d cluster and the kubeconfig written for it.

    Args:
        runner: Command runner.
        cfg: Cluster configuration with the cluster name.
    """
    console.print(f"[yellow]ℹ️  Deleting k3d cluster '{cfg.cluster_name}'...[/yellow]")
    if not cluster_exists(runner, cfg.cluster_name):
        console.print(f"[yellow]⚠️  Cluster '{cfg.cluster_name}' not found or already deleted[/yellow]")
        return

    runner.run(["k3d", "cluster", "delete", cfg.cluster_name])
    console.print(f"[green]✅ Cluster '{cfg.cluster_name}' deleted[/green]")
    if cfg.kubeconfig_path.exists():
        cfg.kubeconfig_path.unlink()
        logger.info("Removed %s", cfg.kubeconfig_path)


# ============================================================================
# Kubeconfig
# ============================================================================

def write_kubeconfig(runner: CommandRunner, cfg: ClusterConfig) -> Path:
    """Fetch the cluster kubeconfig, store it owner-only, and export it.

    Args:
        runner: Command runner; ``KUBECONFIG`` is set on it for later commands.
        cfg: Cluster configuration with the cluster name and kubeconfig dir.

    Returns:
        Path of the written kubeconfig.
    """
    console.print(Panel.fit("Configuring kubeconfig", style="bold blue"))
    result = runner.run(["k3d", "kubeconfig", "get", cfg.cluster_name], capture=True)

    kubeconfig_path = cfg.kubeconfig_path
    kubeconfig_path.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(kubeconfig_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "w") as f:
        f.write(result.stdout)
    # O_CREAT mode does not apply to a file left by an earlier run
    kubeconfig_path.chmod(0o600)
    runner.set_env("KUBECONFIG", str(kubeconfig_path))
    console.print(f"[green]  ✓ Wrote {kubeconfig_path}[/green]")

    runner.run(["kubectl", "get", "nodes"])
    console.print("[green]✅ Cluster API is reachable[/green]")
    return kubeconfig_path
