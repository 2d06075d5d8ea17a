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

"""Error types raised by bootstrap steps."""

from __future__ import annotations

import shlex
from collections.abc import Sequence


class BootstrapError(RuntimeError):
    """Base class for every fatal bootstrap failure."""


class MissingToolsError(BootstrapError):
    """One or more required executables are not on PATH."""

    def __init__(self, required: Sequence[str], missing: Sequence[str]) -> None:
        self.required = tuple(required)
        self.missing = tuple(missing)
        super().__init__(
            f"Missing required tools: {', '.join(self.missing)}. "
            f"This tool requires: {', '.join(self.required)}. Please install them first."
        )


class DockerUnavailableError(BootstrapError):
    """The docker binary is present but its daemon does not answer."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(
            f"Docker daemon is not reachable: {reason}. Start Docker and try again."
        )


class UserDeclinedError(BootstrapError):
    """The operator did not confirm the resolved configuration."""

    def __init__(self) -> None:
        super().__init__("Aborted by user")


class PortInspectionError(BootstrapError):
    """Listening sockets cannot be inspected, or no free port is left."""


class ClusterExistsError(BootstrapError):
    """A k3d cluster with the requested name already exists."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            f"k3d cluster '{name}' already exists. Delete it first with 'dev-cluster delete'."
        )


class CommandFailedError(BootstrapError):
    """An external command exited with a non-zero status."""

    def __init__(self, args: Sequence[str], exit_code: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Command '{shlex.join(self.args_list)}' failed with exit code {exit_code}"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
