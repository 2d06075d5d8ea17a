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

"""Configuration classes and config display."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.panel import Panel

from devcluster import console
from devcluster.constants import (
    AFFIRMATIVE_VALUES,
    DEFAULT_AGENT_VOLUME,
    DEFAULT_AGENTS,
    DEFAULT_API_PORT,
    DEFAULT_CLUSTER_NAME,
    DEFAULT_HTTP_PORT,
    DEFAULT_HTTPS_PORT,
    DEFAULT_K3S_IMAGE,
    DEFAULT_K3S_VERSION,
    DEFAULT_KUBECONFIG_DIR,
    DEFAULT_SERVERS,
    DNS_FORWARDERS_UNSET,
    TOGGLE_ENABLED,
)


# ============================================================================
# Configuration classes
# ============================================================================

class ClusterConfig(BaseSettings):
    """Dev cluster configuration, auto-loaded from DEVCLUSTER_* env vars.

    The record is frozen; use ``model_copy(update=...)`` to derive a variant.

    Attributes:
        cluster_name: Name of the k3d cluster.
        image: K3s Docker image repository.
        image_version: K3s image tag.
        servers: Number of server (control-plane) nodes.
        agents: Number of agent (worker) nodes.
        agent_volume: Host directory bind-mounted into every agent node.
        dns_forwarders: Comma-separated nameserver addresses, or ``undefined``.
        setup_registry: ``1`` to create a local image registry with the cluster.
        setup_rancher: ``1`` to install Rancher after cert-manager.
        kubeconfig_dir: Directory the cluster kubeconfig is written to.
        api_port: Base port for the Kubernetes API server.
        http_port: Base host port mapped to the load balancer's port 80.
        https_port: Base host port mapped to the load balancer's port 443.
        non_interactive: Affirmative value skips the confirmation prompt.
    """

    model_config = SettingsConfigDict(env_prefix="DEVCLUSTER_", extra="ignore", frozen=True)

    cluster_name: str = Field(default=DEFAULT_CLUSTER_NAME, pattern=r"^[a-z0-9][a-z0-9-]*$")
    image: str = DEFAULT_K3S_IMAGE
    image_version: str = DEFAULT_K3S_VERSION
    servers: int = Field(default=DEFAULT_SERVERS, ge=1, le=9)
    agents: int = Field(default=DEFAULT_AGENTS, ge=0, le=100)
    agent_volume: str = DEFAULT_AGENT_VOLUME
    dns_forwarders: str = DNS_FORWARDERS_UNSET
    setup_registry: str = TOGGLE_ENABLED
    setup_rancher: str = TOGGLE_ENABLED
    kubeconfig_dir: Path = DEFAULT_KUBECONFIG_DIR
    api_port: int = Field(default=DEFAULT_API_PORT, ge=1, le=65535)
    http_port: int = Field(default=DEFAULT_HTTP_PORT, ge=1, le=65535)
    https_port: int = Field(default=DEFAULT_HTTPS_PORT, ge=1, le=65535)
    non_interactive: str = "0"

    @property
    def image_ref(self) -> str:
        return f"{self.image}:{self.image_version}"

    @property
    def registry_enabled(self) -> bool:
        return self.setup_registry == TOGGLE_ENABLED

    @property
    def rancher_enabled(self) -> bool:
        return self.setup_rancher == TOGGLE_ENABLED

    @property
    def skip_confirmation(self) -> bool:
        return self.non_interactive.strip().lower() in AFFIRMATIVE_VALUES

    @property
    def forwarders(self) -> list[str]:
        """Configured DNS forwarder addresses, empty when unset."""
        raw = self.dns_forwarders.strip()
        if not raw or raw == DNS_FORWARDERS_UNSET:
            return []
        return [addr.strip() for addr in raw.split(",") if addr.strip()]

    @property
    def kubeconfig_path(self) -> Path:
        return self.kubeconfig_dir.expanduser() / self.cluster_name


@dataclass(frozen=True)
class AllocatedPorts:
    """Host ports chosen for the cluster endpoints.

    Attributes:
        api: Kubernetes API server port.
        http: Host port mapped to the load balancer's port 80.
        https: Host port mapped to the load balancer's port 443.
    """

    api: int
    http: int
    https: int


# ============================================================================
# Display
# ============================================================================

def display_config(cfg: ClusterConfig, ports: AllocatedPorts) -> None:
    """Print the resolved configuration and allocated ports.

    Args:
        cfg: Resolved cluster configuration.
        ports: Ports chosen by the allocator.
    """
    console.print(Panel.fit("Configuration", style="bold blue"))

    console.print("[yellow]k3d cluster:[/yellow]")
    console.print(f"  cluster_name    : {cfg.cluster_name}")
    console.print(f"  image           : {cfg.image_ref}")
    console.print(f"  servers         : {cfg.servers}")
    console.print(f"  agents          : {cfg.agents}")
    console.print(f"  agent_volume    : {cfg.agent_volume}")
    console.print(f"  registry        : {'yes' if cfg.registry_enabled else 'no'}")
    console.print(f"  dns_forwarders  : {', '.join(cfg.forwarders) or '(k3s default)'}")
    console.print(f"  kubeconfig      : {cfg.kubeconfig_path}")

    console.print("[yellow]Ports:[/yellow]")
    console.print(f"  api             : {ports.api}")
    console.print(f"  http            : {ports.http} -> 80")
    console.print(f"  https           : {ports.https} -> 443")

    console.print("[yellow]Components:[/yellow]")
    console.print("  ingress-nginx   : yes")
    console.print("  cert-manager    : yes")
    console.print(f"  rancher         : {'yes' if cfg.rancher_enabled else 'no'}")
