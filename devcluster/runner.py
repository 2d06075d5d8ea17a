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

"""Command execution abstraction over external CLIs."""

from __future__ import annotations

import os
import shlex
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import sh

from devcluster import logger
from devcluster.errors import CommandFailedError


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command.

    Attributes:
        args: Full argument vector, program first.
        exit_code: Process exit status.
        stdout: Captured standard output (empty unless captured).
        stderr: Captured standard error (empty unless captured or failed).
    """

    args: tuple[str, ...]
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Runs external commands on behalf of the bootstrap steps."""

    def run(self, args: Sequence[str], *, capture: bool = False, check: bool = True) -> CommandResult:
        """Run ``args`` and wait for it to finish.

        Raises:
            CommandFailedError: If ``check`` is set and the exit status is non-zero.
        """
        ...

    def which(self, name: str) -> bool:
        """Return True if ``name`` resolves on PATH."""
        ...

    def set_env(self, key: str, value: str) -> None:
        """Export ``key`` to every command run afterwards."""
        ...


class ShellRunner:
    """CommandRunner backed by ``sh``.

    Output of non-captured commands streams straight to the terminal.
    """

    def __init__(self) -> None:
        self.env: dict[str, str] = {}

    def set_env(self, key: str, value: str) -> None:
        self.env[key] = value

    def which(self, name: str) -> bool:
        try:
            found = sh.which(name)
        except (sh.ErrorReturnCode, sh.CommandNotFound):
            return False
        return bool(found)

    def run(self, args: Sequence[str], *, capture: bool = False, check: bool = True) -> CommandResult:
        argv = tuple(str(a) for a in args)
        logger.debug("+ %s", shlex.join(argv))
        env = {**os.environ, **self.env}
        try:
            cmd = sh.Command(argv[0])
            if capture:
                proc = cmd(*argv[1:], _env=env, _tty_out=False, _return_cmd=True)
                return CommandResult(
                    argv, 0,
                    proc.stdout.decode(errors="replace"),
                    proc.stderr.decode(errors="replace"),
                )
            cmd(*argv[1:], _env=env, _out=sys.stdout, _err=sys.stderr)
            return CommandResult(argv, 0)
        except sh.ErrorReturnCode as err:
            result = CommandResult(
                argv, err.exit_code,
                (err.stdout or b"").decode(errors="replace"),
                (err.stderr or b"").decode(errors="replace"),
            )
        except sh.CommandNotFound:
            result = CommandResult(argv, 127, "", f"{argv[0]}: command not found")
        if check:
            raise CommandFailedError(argv, result.exit_code, result.stderr)
        return result
