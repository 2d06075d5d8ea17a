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

"""Create command: bootstrap a dev cluster with its components."""

from __future__ import annotations

import typer
from pydantic import ValidationError

from devcluster import console
from devcluster.config import ClusterConfig
from devcluster.orchestrator import run_bootstrap
from devcluster.runner import ShellRunner


def load_config(**overrides) -> ClusterConfig:
    """Build the config from DEVCLUSTER_* env vars and non-None CLI overrides.

    Overrides are passed as init kwargs so they take precedence over the
    environment and go through the same field validation.

    Raises:
        typer.Exit: If the environment or an override holds an invalid value.
    """
    update = {key: value for key, value in overrides.items() if value is not None}
    try:
        return ClusterConfig(**update)
    except ValidationError as err:
        console.print(f"[red]❌ Invalid configuration:\n{err}[/red]")
        raise typer.Exit(code=1) from err


def create(
    yes: bool = typer.Option(
        False, "--yes", "-y", help="Skip the confirmation prompt (same as DEVCLUSTER_NON_INTERACTIVE=1)"),
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", help="k3d cluster name (overrides DEVCLUSTER_CLUSTER_NAME)"),
) -> None:
    """Create the k3d cluster and install ingress-nginx, cert-manager and Rancher.

    All settings come from DEVCLUSTER_* environment variables.
    """
    cfg = load_config(cluster_name=cluster_name, non_interactive="1" if yes else None)
    report = run_bootstrap(cfg, ShellRunner())
    if not report.ok:
        failed = report.failed
        console.print(f"[red]❌ {failed.name}: {failed.error}[/red]")
        raise typer.Exit(code=1)
