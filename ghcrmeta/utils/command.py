"""External command execution."""

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional


logger = logging.getLogger(__name__)


class CommandError(Exception):
    """The command could not be started or did not finish in time."""


@dataclass
class CommandResult:
    """Captured output of one command."""
    stdout: bytes
    stderr: bytes
    exit_code: int

    @property
    def ok(self) -> bool:
        return self.exit_code == 0 and bool(self.stdout.strip())


class CommandRunner:
    """Runs an argv and captures its output."""

    def __init__(self, timeout: Optional[float] = None, elevate_prefix: Optional[List[str]] = None):
        self.timeout = timeout
        self.elevate_prefix = elevate_prefix if elevate_prefix is not None else ['sudo', '-n']

    def run(self, argv: List[str], elevated: bool = False) -> CommandResult:
        """Execute argv; elevated runs it through the privilege prefix."""
        if not argv:
            raise ValueError("argv must not be empty")

        command = list(self.elevate_prefix) + list(argv) if elevated else list(argv)
        # argv may carry credentials, so only the program name is logged
        logger.debug(f"Running {argv[0]} (elevated={elevated})")

        try:
            completed = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                timeout=self.timeout,
                check=False
            )
        except subprocess.TimeoutExpired as e:
            raise CommandError(f"{argv[0]} timed out after {self.timeout}s") from e
        except OSError as e:
            raise CommandError(f"Failed to run {argv[0]}: {e}") from e

        return CommandResult(
            stdout=completed.stdout or b'',
            stderr=completed.stderr or b'',
            exit_code=completed.returncode
        )
