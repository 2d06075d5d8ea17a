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

"""
cli.py - CLI for local k3d development clusters.

Commands:
    create     Create the cluster and install ingress-nginx, cert-manager, Rancher
    delete     Delete the cluster and its kubeconfig

Environment Variables:
    All settings can be overridden via DEVCLUSTER_* environment variables:
    - DEVCLUSTER_CLUSTER_NAME (default: dev)
    - DEVCLUSTER_SERVERS / DEVCLUSTER_AGENTS (default: 1 / 2)
    - DEVCLUSTER_API_PORT / DEVCLUSTER_HTTP_PORT / DEVCLUSTER_HTTPS_PORT
    - DEVCLUSTER_DNS_FORWARDERS (comma-separated, default: undefined)
    - DEVCLUSTER_SETUP_REGISTRY / DEVCLUSTER_SETUP_RANCHER (1 to enable)
    - DEVCLUSTER_NON_INTERACTIVE (1 to skip the prompt)
    - And more (see ClusterConfig for the full list)

Examples:
    # Interactive setup with defaults
    dev-cluster create

    # Unattended, bigger cluster, no Rancher
    DEVCLUSTER_AGENTS=6 DEVCLUSTER_SETUP_RANCHER=0 dev-cluster create --yes

    # Tear down
    dev-cluster delete
"""

from __future__ import annotations

import logging
import sys

import typer

from devcluster import console
from devcluster.commands import create_cmd, delete_cmd

app = typer.Typer(
    help="Bootstrap a local k3d development cluster.",
    no_args_is_help=True,
)


@app.callback()
def _main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every external command"),
) -> None:
    """Initialize logging for all subcommands."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S",
    )


app.command("create")(create_cmd.create)
app.command("delete")(delete_cmd.delete)


def main() -> None:
    try:
        app()
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
