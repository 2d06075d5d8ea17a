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

"""Pre-flight checks for required tools and the Docker daemon."""

from __future__ import annotations

from collections.abc import Sequence

import docker
from rich.panel import Panel

from devcluster import console
from devcluster.errors import DockerUnavailableError, MissingToolsError
from devcluster.runner import CommandRunner


def require_commands(runner: CommandRunner, commands: Sequence[str]) -> None:
    """Check that every command exists on the system PATH.

    Args:
        runner: Command runner used to resolve executables.
        commands: Names of the CLI commands to check.

    Raises:
        MissingToolsError: If any command is not found; names all required tools.
    """
    console.print(Panel.fit("Checking prerequisites", style="bold blue"))
    missing = [cmd for cmd in commands if not runner.which(cmd)]
    if missing:
        raise MissingToolsError(commands, missing)
    console.print("[green]✅ All required tools are available[/green]")


def check_docker_daemon() -> None:
    """Verify the Docker daemon answers, since k3d runs every node as a container.

    Raises:
        DockerUnavailableError: If the daemon cannot be reached.
    """
    try:
        client = docker.from_env()
    except docker.errors.DockerException as err:
        raise DockerUnavailableError(str(err)) from err
    try:
        client.ping()
    except docker.errors.DockerException as err:
        raise DockerUnavailableError(str(err)) from err
    finally:
        client.close()
    console.print("[green]✅ Docker daemon is reachable[/green]")
