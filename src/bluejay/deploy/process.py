"""Synchronous external-process invocation.

``CommandRunner`` wraps one CLI binary (``docker``, ``git``) found on PATH
and runs it with ``subprocess.run``. Each call returns a ``CommandOutcome``
instead of raising on a non-zero exit: the sequencer records the outcome
and carries on, and the caller decides what a failure means.

Two I/O modes:
    - inherited (default): the child writes straight to the terminal, as
      ``docker compose up`` progress output should;
    - captured: stdout/stderr are returned as text, for commands whose output
      is parsed (``docker inspect``).
"""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass

from bluejay.core.errors import ToolNotFoundError
from bluejay.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one external-process invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str | None = None
    stderr: str | None = None

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def command(self) -> str:
        return " ".join(self.args)


class CommandRunner:
    """Runs a single CLI tool.

    Parameters
    ----------
    tool
        Binary name looked up on PATH.

    Raises
    ------
    ToolNotFoundError
        If ``tool`` is not on PATH.
    """

    def __init__(self, tool: str) -> None:
        self.tool = tool
        self._binary = self._find_binary(tool)

    @staticmethod
    def _find_binary(tool: str) -> str:
        binary = shutil.which(tool)
        if binary is None:
            raise ToolNotFoundError(tool)
        return binary

    @staticmethod
    def is_available(tool: str) -> bool:
        return shutil.which(tool) is not None

    def run(
        self,
        args: list[str],
        *,
        capture: bool = False,
        timeout: float | None = None,
    ) -> CommandOutcome:
        """Run ``<tool> <args>`` and wait for it to exit."""
        cmd = [self._binary, *args]
        display = (self.tool, *args)
        logger.debug("process.exec", cmd=" ".join(display), capture=capture)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=capture,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolNotFoundError(self.tool) from exc

        outcome = CommandOutcome(
            args=display,
            returncode=proc.returncode,
            stdout=proc.stdout if capture else None,
            stderr=proc.stderr if capture else None,
        )
        if not outcome.ok:
            logger.warning(
                "process.failed",
                cmd=outcome.command,
                returncode=outcome.returncode,
                stderr=(outcome.stderr or "").strip() or None,
            )
        return outcome
