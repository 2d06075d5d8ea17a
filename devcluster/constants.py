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

"""Constants, dependency loading, and dep_value helper."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

# -- Resolved paths --
PACKAGE_DIR = Path(__file__).resolve().parent
MANIFESTS_DIR = PACKAGE_DIR / "manifests"


def load_dependencies() -> dict:
    """Load pinned chart and image versions from dependencies.yaml.

    Returns:
        Parsed YAML content as a nested dictionary.
    """
    deps_file = PACKAGE_DIR / "dependencies.yaml"
    with open(deps_file) as f:
        return yaml.safe_load(f)


DEPENDENCIES = load_dependencies()


def dep_value(*keys: str, default: Any = None) -> Any:
    """Safely traverse the DEPENDENCIES dict by key path.

    Args:
        *keys: Sequence of dictionary keys to traverse.
        default: Value to return if any key is missing.

    Returns:
        The value at the nested key path, or *default* if not found.
    """
    node = DEPENDENCIES
    for key in keys:
        if not isinstance(node, dict):
            return default
        node = node.get(key)
        if node is None:
            return default
    return node


REQUIRED_TOOLS = ("k3d", "kubectl", "helm", "docker")
PORT_INSPECTION_TOOLS = ("ss", "netstat")
MAX_PORT = 65535

# -- Toggle values --
TOGGLE_ENABLED = "1"
AFFIRMATIVE_VALUES = frozenset({"1", "y", "yes", "true"})
DNS_FORWARDERS_UNSET = "undefined"

# -- DNS --
RESOLV_CONF_FILE = "k3d-resolv.conf"
RESOLV_CONF_NODE_PATH = "/etc/k3d-resolv.conf"

# -- Node paths --
INGRESS_MANIFEST = MANIFESTS_DIR / "ingress-nginx.yaml"
K3S_MANIFESTS_DIR = "/var/lib/rancher/k3s/server/manifests"
AGENT_VOLUME_NODE_PATH = "/var/lib/rancher/k3s/storage"

# -- Namespaces --
NS_CERT_MANAGER = "cert-manager"
NS_CATTLE_SYSTEM = "cattle-system"

# -- Helm repos --
HELM_REPO_JETSTACK = "jetstack"
HELM_REPO_JETSTACK_URL = "https://charts.jetstack.io"
HELM_REPO_RANCHER = "rancher-stable"
HELM_REPO_RANCHER_URL = "https://releases.rancher.com/server-charts/stable"

# -- Helm releases --
HELM_RELEASE_CERT_MANAGER = "cert-manager"
HELM_RELEASE_RANCHER = "rancher"

# -- Deployments waited on after install --
DEPLOY_CERT_MANAGER = "deployment/cert-manager"
DEPLOY_RANCHER = "deployment/rancher"

CERT_MANAGER_CRDS_URL = (
    "https://github.com/cert-manager/cert-manager/releases/download/{version}/cert-manager.crds.yaml"
)

# -- Cluster defaults --
DEFAULT_CLUSTER_NAME = "dev"
DEFAULT_K3S_IMAGE = dep_value("k3s", "image", default="rancher/k3s")
DEFAULT_K3S_VERSION = dep_value("k3s", "version", default="latest")
DEFAULT_SERVERS = 1
DEFAULT_AGENTS = 2
DEFAULT_AGENT_VOLUME = "/tmp/k3d-agent-volume"
DEFAULT_KUBECONFIG_DIR = Path.home() / ".kube"
DEFAULT_API_PORT = 6550
DEFAULT_HTTP_PORT = 8080
DEFAULT_HTTPS_PORT = 8443
