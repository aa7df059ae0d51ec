"""
Execution of external ansible tooling.
"""

import logging
import os
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import Mapping

from ansible_make.exceptions import CommandFailedError, ExecutableNotFoundError

logger = logging.getLogger(__name__)


@dataclass
class Command:
    """
    An external command line plus the environment additions it needs.

    Attributes:
        argv: Program and arguments
        env: Variables added on top of the caller's environment
    """

    argv: list[str]
    env: dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        prefix = " ".join(f"{k}={shlex.quote(v)}" for k, v in sorted(self.env.items()))
        command = shlex.join(self.argv)
        return f"{prefix} {command}" if prefix else command


class CommandRunner:
    """
    Runs Commands through subprocess, or only logs them in dry-run mode.

    Example:
        >>> runner = CommandRunner(dry_run=True)
        >>> runner.run(Command(["ansible", "--version"])).returncode
        0
    """

    def __init__(self, dry_run: bool = False, environ: Mapping[str, str] | None = None):
        self.dry_run = dry_run
        self.environ = dict(os.environ if environ is None else environ)
        self.history: list[Command] = []

    def run(
        self,
        command: Command,
        capture: bool = False,
        input: str | bytes | None = None,
        check: bool = True,
    ) -> subprocess.CompletedProcess:
        """
        Execute a command.

        Args:
            command: Command to run
            capture: Capture stdout/stderr instead of inheriting them
            input: Data written to the command's stdin (inherited when None)
            check: Raise CommandFailedError on a non-zero exit status

        Returns:
            The CompletedProcess (a synthetic success in dry-run mode)

        Raises:
            ExecutableNotFoundError: If the program is not installed
            CommandFailedError: If the command fails and ``check`` is set
        """
        self.history.append(command)
        if self.dry_run:
            logger.info(f"[dry-run] {command}")
            return subprocess.CompletedProcess(command.argv, 0, stdout="", stderr="")

        logger.info(f"Running: {command}")
        text_mode = not isinstance(input, bytes)
        try:
            result = subprocess.run(
                command.argv,
                env={**self.environ, **command.env},
                capture_output=capture,
                input=input,
                text=text_mode,
                check=False,
            )
        except FileNotFoundError as e:
            raise ExecutableNotFoundError(command.argv[0]) from e

        if check and result.returncode != 0:
            stderr = result.stderr if capture and text_mode else None
            raise CommandFailedError(command.argv, result.returncode, stderr)
        return result
