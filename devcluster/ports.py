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

"""Free host port allocation from the listening-socket table."""

from __future__ import annotations

import re
from collections.abc import Iterable

from devcluster import console, logger
from devcluster.config import AllocatedPorts, ClusterConfig
from devcluster.constants import MAX_PORT, PORT_INSPECTION_TOOLS
from devcluster.errors import PortInspectionError
from devcluster.runner import CommandRunner

_PORT_SUFFIX = re.compile(r"[:.](\d+)$")

_LISTEN_ARGS = {
    "ss": ["ss", "-H", "-l", "-t", "-n"],
    "netstat": ["netstat", "-l", "-t", "-n"],
}


def parse_listening_ports(output: str) -> set[int]:
    """Extract local TCP port numbers from ``ss -Hltn`` or ``netstat -ltn`` output.

    Both tools put the local address in the fourth column; netstat rows are
    recognised by their ``tcp``/``tcp6`` protocol column, header lines are skipped.

    Args:
        output: Raw command output.

    Returns:
        Set of port numbers in a listening state.
    """
    ports: set[int] = set()
    for line in output.splitlines():
        parts = line.split()
        if len(parts) < 4:
            continue
        if parts[0] not in ("LISTEN", "tcp", "tcp6", "tcp4", "tcp46"):
            continue
        match = _PORT_SUFFIX.search(parts[3])
        if match:
            ports.add(int(match.group(1)))
    return ports


class PortAllocator:
    """Finds free TCP ports by inspecting the host's listening sockets.

    The inspection utility is resolved once, on first use. No port is
    reserved: another process may bind a returned port before k3d does.
    """

    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner
        self._tool: str | None = None

    def _inspection_tool(self) -> str:
        if self._tool is None:
            for tool in PORT_INSPECTION_TOOLS:
                if self._runner.which(tool):
                    self._tool = tool
                    break
            else:
                raise PortInspectionError(
                    f"Cannot inspect listening ports: none of {', '.join(PORT_INSPECTION_TOOLS)} is installed"
                )
        return self._tool

    def listening_ports(self) -> set[int]:
        tool = self._inspection_tool()
        result = self._runner.run(_LISTEN_ARGS[tool], capture=True)
        return parse_listening_ports(result.stdout)

    def find_free_port(self, base: int, exclude: Iterable[int] = ()) -> int:
        """Return the smallest port >= ``base`` that nothing listens on.

        Args:
            base: First candidate port.
            exclude: Ports to treat as taken, e.g. ones already handed out.

        Returns:
            A free port number.

        Raises:
            PortInspectionError: If no inspection tool exists or the range is exhausted.
        """
        taken = self.listening_ports() | set(exclude)
        port = base
        while port in taken:
            logger.debug("Port %d is in use, trying %d", port, port + 1)
            port += 1
        if port > MAX_PORT:
            raise PortInspectionError(f"No free port found at or above {base}")
        return port

    def allocate(self, cfg: ClusterConfig) -> AllocatedPorts:
        """Allocate the API, HTTP and HTTPS ports in that order, mutually distinct.

        Args:
            cfg: Cluster configuration holding the base ports.

        Returns:
            The allocated ports.
        """
        api = self.find_free_port(cfg.api_port)
        http = self.find_free_port(cfg.http_port, exclude={api})
        https = self.find_free_port(cfg.https_port, exclude={api, http})
        ports = AllocatedPorts(api=api, http=http, https=https)
        console.print(
            f"[green]✅ Ports: api={ports.api} http={ports.http} https={ports.https}[/green]"
        )
        return ports
