"""Infrastructure lifecycle for the Bluejay monitoring stack.

Brings the Governify Bluejay infrastructure up with ``docker compose``,
points Prometheus at an agreement's exporter, restores the Mongo and
Influx dumps through the restore-task endpoint, and tears everything down.

Key Concepts:
    InfrastructureConfig: pydantic model with every path, URL and container
        name the operations use. Built once, passed explicitly.
    InfrastructureSequencer: ``deploy``, ``configure``, ``load_data``,
        ``down``. Each returns an ``OperationResult``.
    OperationResult: Every external command run and its exit code.
    DockerCli / GitCli: subprocess wrappers for the ``docker`` and ``git``
        CLIs.
    RetryingHttpClient: httpx client with exponential-backoff retry.

Architecture::

    ┌──────────────────────────────────────────────────────────────┐
    │                 InfrastructureSequencer                       │
    │        deploy │ configure │ load_data │ down                  │
    ├───────────┬───────────┬────────────────┬─────────────────────┤
    │   files   │  GitCli   │   DockerCli    │ RetryingHttpClient  │
    ├───────────┴───────────┴────────────────┤   (httpx + retry)   │
    │      CommandRunner (subprocess)        │                     │
    └────────────────────────────────────────┴─────────────────────┘

Related Modules:
    - :mod:`bluejay.deploy.config` — Configuration models
    - :mod:`bluejay.deploy.results` — Result models
    - :mod:`bluejay.deploy.workflow` — The sequencer
    - :mod:`bluejay.cli.infra` — CLI commands (``bluejay infra``)
"""

from __future__ import annotations

from bluejay.deploy.config import InfrastructureConfig
from bluejay.deploy.results import OperationResult, OverallStatus, StepOutcome
from bluejay.deploy.workflow import InfrastructureSequencer

__all__ = [
    "InfrastructureConfig",
    "InfrastructureSequencer",
    "OperationResult",
    "OverallStatus",
    "StepOutcome",
]
