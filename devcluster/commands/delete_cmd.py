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

"""Delete command: remove the dev cluster."""

from __future__ import annotations

import typer

from devcluster.cluster import delete_cluster
from devcluster.commands.create_cmd import load_config
from devcluster.runner import ShellRunner
from devcluster.utils import require_commands


def delete(
    cluster_name: str | None = typer.Option(
        None, "--cluster-name", help="k3d cluster name (overrides DEVCLUSTER_CLUSTER_NAME)"),
) -> None:
    """Delete the k3d cluster and its kubeconfig file."""
    cfg = load_config(cluster_name=cluster_name)
    runner = ShellRunner()
    require_commands(runner, ["k3d"])
    delete_cluster(runner, cfg)
