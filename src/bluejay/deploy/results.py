"""Result models for lifecycle operations.

Every sequencer operation returns an ``OperationResult`` listing each
external command it ran and how it exited. The sequencer never stops on a
non-zero exit; the result is where a caller finds out, via
``overall_status`` or ``failed_steps``.

Key Concepts:
    OverallStatus: PASSED (every step exited 0), PARTIAL (at least one did
        not), RUNNING (not yet marked complete).
    StepOutcome: One named command with its exit code.
    OperationResult: Steps + timestamps + free-form ``details`` (agreement
        name, discovered network, ...). ``mark_complete()`` finalises it.
"""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from bluejay.deploy.process import CommandOutcome


class OverallStatus(str, Enum):
    """Overall status of an operation."""

    PASSED = "PASSED"
    PARTIAL = "PARTIAL"
    RUNNING = "RUNNING"


class StepOutcome(BaseModel):
    """One external command run by the sequencer."""

    name: str
    command: str
    returncode: int
    ok: bool
    stderr: str | None = None

    @classmethod
    def from_outcome(cls, name: str, outcome: CommandOutcome) -> StepOutcome:
        return cls(
            name=name,
            command=outcome.command,
            returncode=outcome.returncode,
            ok=outcome.ok,
            stderr=(outcome.stderr or "").strip() or None,
        )


class OperationResult(BaseModel):
    """Result of deploy / configure / load-data / down."""

    operation: str
    run_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])
    started_at: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    completed_at: str | None = None
    duration_seconds: float = 0.0
    steps: list[StepOutcome] = Field(default_factory=list)
    details: dict[str, Any] = Field(default_factory=dict)
    overall_status: OverallStatus = OverallStatus.RUNNING
    summary: str = ""

    def record(self, name: str, outcome: CommandOutcome) -> CommandOutcome:
        """Append ``outcome`` as step ``name`` and hand it back."""
        self.steps.append(StepOutcome.from_outcome(name, outcome))
        return outcome

    @property
    def failed_steps(self) -> list[StepOutcome]:
        return [s for s in self.steps if not s.ok]

    def mark_complete(self) -> None:
        now = datetime.now(UTC)
        self.completed_at = now.isoformat()
        started = datetime.fromisoformat(self.started_at)
        self.duration_seconds = round((now - started).total_seconds(), 3)

        failed = self.failed_steps
        self.overall_status = OverallStatus.PARTIAL if failed else OverallStatus.PASSED
        if failed:
            names = ", ".join(s.name for s in failed)
            self.summary = f"{self.operation}: {len(failed)}/{len(self.steps)} steps failed ({names})"
        else:
            self.summary = f"{self.operation}: {len(self.steps)} steps ok"
