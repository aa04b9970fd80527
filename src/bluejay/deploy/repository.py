"""Working copy of the infrastructure-definition repository."""

from __future__ import annotations

from pathlib import Path

from bluejay.core.logging import get_logger
from bluejay.deploy.process import CommandOutcome, CommandRunner

logger = get_logger(__name__)


class GitCli:
    """``git`` invocations the sequencer needs (only ``clone``)."""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self.runner = runner or CommandRunner("git")

    def clone(self, url: str, directory: str | Path) -> CommandOutcome:
        outcome = self.runner.run(["clone", url, str(directory)])
        if outcome.ok:
            logger.info("repository.cloned", url=url, directory=str(directory))
        return outcome
