"""Configuration models for the infrastructure lifecycle sequencer.

Provides the pydantic v2 ``InfrastructureConfig`` consumed by
``InfrastructureSequencer``. The config is built once at process start and
passed explicitly, so nothing in the sequencer reads process-wide state.

Key Concepts:
    InfrastructureConfig: Root model — repository, working directory,
        agreement paths, dump paths, docker names, HTTP retry policy.
    AgreementPaths: Where agreements are copied and where the Prometheus
        target file lives.
    DumpConfig / DatabaseDump: Backup root, per-database dump copy and the
        restore endpoints.
    DockerConfig / StateContainer: Container names and the auxiliary state
        container image/port.
    HttpSettings: Retry/timeout policy for the restore endpoints.

Architecture Decisions:
    - Override precedence: kwargs > BLUEJAY_INFRA_* env vars > JSON file >
      field defaults.
    - Explicit env-var map in ``load()`` rather than ``pydantic-settings``;
      nested fields are addressed with dotted keys.
    - Path defaults are relative to the current working directory, the same
      place ``git clone`` drops the infrastructure repository.

Example:
    >>> from bluejay.deploy.config import InfrastructureConfig
    >>> config = InfrastructureConfig()
    >>> config.env_path.name
    '.env'
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from bluejay.core.errors import InvalidConfigError, MissingConfigError

DEFAULT_DIRECTORY = Path("bluejay-infrastructure")
DEFAULT_RESTORE_SCRIPT_URL = "http://127.0.0.1:5200/api/v1/public/database/dbRestore.js"
DEFAULT_RESTORE_TASK_URL = "http://127.0.0.1:5200/api/v1/tasks/test"

CONFIG_PATH_ENV = "BLUEJAY_INFRA_CONFIG"


class AgreementPaths(BaseModel):
    """Agreement storage and monitoring-target file locations."""

    storage_dir: Path = Field(
        default=DEFAULT_DIRECTORY / "assets" / "agreements",
        description="Directory the agreement file is copied into",
    )
    targets_file: Path = Field(
        default=DEFAULT_DIRECTORY / "assets" / "prometheus" / "targets.json",
        description="Prometheus file_sd target file (fully overwritten)",
    )


class DatabaseDump(BaseModel):
    """Dump copy and restore settings for one database kind."""

    directory: str = Field(description="Subdirectory created under the backup root")
    source: Path = Field(description="Dump file shipped with the caller")
    destination: Path = Field(description="Where the dump is copied before restore")
    file: str = Field(description="Backup path sent to the restore task")


def _mongo_dump() -> DatabaseDump:
    backup = DEFAULT_DIRECTORY / "assets" / "backups"
    return DatabaseDump(
        directory="mongo",
        source=Path("dumps") / "mongo-registry.gz",
        destination=backup / "mongo" / "mongo-registry.gz",
        file="mongo/mongo-registry.gz",
    )


def _influx_dump() -> DatabaseDump:
    backup = DEFAULT_DIRECTORY / "assets" / "backups"
    return DatabaseDump(
        directory="influx",
        source=Path("dumps") / "influx-reporter.tar.gz",
        destination=backup / "influx" / "influx-reporter.tar.gz",
        file="influx/influx-reporter.tar.gz",
    )


class DumpConfig(BaseModel):
    """Backup tree layout and restore endpoints."""

    backup: Path = Field(
        default=DEFAULT_DIRECTORY / "assets" / "backups",
        description="Backup root directory",
    )
    mongo: DatabaseDump = Field(default_factory=_mongo_dump)
    influx: DatabaseDump = Field(default_factory=_influx_dump)
    restore_script_url: str = Field(
        default=DEFAULT_RESTORE_SCRIPT_URL,
        description="Endpoint serving the restore script text",
    )
    restore_task_url: str = Field(
        default=DEFAULT_RESTORE_TASK_URL,
        description="Endpoint accepting restore requests (JSON POST)",
    )


class StateContainer(BaseModel):
    """Auxiliary state container started outside the compose stack."""

    container: str = "governify-state"
    image: str = "governify/state:latest"
    port: str = Field(default="5800:80", description="docker run -p publish spec")


class DockerConfig(BaseModel):
    """Container names the sequencer addresses directly."""

    mongo_container: str = "falcon-mongo-registry"
    state: StateContainer = Field(default_factory=StateContainer)


class HttpSettings(BaseModel):
    """Retry and timeout policy for restore endpoint calls."""

    max_retries: int = Field(default=5, ge=0)
    base_delay: float = Field(default=1.0, ge=0)
    max_delay: float = Field(default=30.0, ge=0)
    timeout_seconds: float = Field(default=30.0, gt=0)


class InfrastructureConfig(BaseModel):
    """Configuration for every lifecycle operation.

    Example::

        config = InfrastructureConfig.load(
            "infra.json",
            directory=Path("/srv/bluejay-infrastructure"),
        )
    """

    repository_url: str = Field(
        default="https://github.com/governify/bluejay-infrastructure.git",
        description="Infrastructure repository cloned by deploy",
    )
    directory: Path = Field(
        default=DEFAULT_DIRECTORY,
        description="Working copy of the infrastructure repository",
    )
    compose_file: str = Field(
        default="docker-bluejay/docker-compose.yaml",
        description="Compose file, relative to directory",
    )
    agreement: AgreementPaths = Field(default_factory=AgreementPaths)
    dump: DumpConfig = Field(default_factory=DumpConfig)
    docker: DockerConfig = Field(default_factory=DockerConfig)
    http: HttpSettings = Field(default_factory=HttpSettings)

    @property
    def env_path(self) -> Path:
        """The ``.env`` file deploy copies into the working copy."""
        return self.directory / ".env"

    def compose_path(self, compose_file: str | None = None) -> Path:
        """Resolve a compose file relative to the working copy."""
        return self.directory / (compose_file or self.compose_file)

    @classmethod
    def load(cls, path: str | Path | None = None, **overrides: Any) -> InfrastructureConfig:
        """Create config from a JSON file, BLUEJAY_INFRA_* env vars and overrides.

        ``path`` falls back to ``$BLUEJAY_INFRA_CONFIG``; with neither set only
        defaults, env vars and overrides apply.
        """
        values: dict[str, Any] = {}

        config_path = path or os.environ.get(CONFIG_PATH_ENV)
        if config_path:
            values = _read_config_file(Path(config_path))

        env_map = {
            "repository_url": "BLUEJAY_INFRA_REPOSITORY_URL",
            "directory": "BLUEJAY_INFRA_DIRECTORY",
            "compose_file": "BLUEJAY_INFRA_COMPOSE_FILE",
            "agreement.storage_dir": "BLUEJAY_INFRA_AGREEMENT_DIR",
            "agreement.targets_file": "BLUEJAY_INFRA_TARGETS_FILE",
            "dump.backup": "BLUEJAY_INFRA_BACKUP_DIR",
            "dump.restore_script_url": "BLUEJAY_INFRA_RESTORE_SCRIPT_URL",
            "dump.restore_task_url": "BLUEJAY_INFRA_RESTORE_TASK_URL",
            "docker.mongo_container": "BLUEJAY_INFRA_MONGO_CONTAINER",
            "docker.state.container": "BLUEJAY_INFRA_STATE_CONTAINER",
            "docker.state.image": "BLUEJAY_INFRA_STATE_IMAGE",
            "docker.state.port": "BLUEJAY_INFRA_STATE_PORT",
            "http.max_retries": "BLUEJAY_INFRA_HTTP_MAX_RETRIES",
            "http.timeout_seconds": "BLUEJAY_INFRA_HTTP_TIMEOUT",
        }
        for dotted, env_var in env_map.items():
            env_val = os.environ.get(env_var)
            if env_val is not None:
                _set_dotted(values, dotted, env_val)

        for key, value in overrides.items():
            if value is not None:
                _set_dotted(values, key.replace("__", "."), value)

        try:
            return cls.model_validate(values)
        except PydanticValidationError as exc:
            first = exc.errors()[0]
            key = ".".join(str(part) for part in first["loc"])
            raise InvalidConfigError(
                key, first.get("input"), f"Invalid configuration for {key}: {first['msg']}"
            ) from exc


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.is_file():
        raise MissingConfigError(str(path), f"Configuration file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise InvalidConfigError(str(path), None, f"Configuration file is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise InvalidConfigError(str(path), data, "Configuration file must hold a JSON object")
    return data


def _set_dotted(values: dict[str, Any], dotted: str, value: Any) -> None:
    """Set ``values["a"]["b"] = value`` for ``dotted == "a.b"``."""
    *parents, leaf = dotted.split(".")
    target = values
    for part in parents:
        nested = target.get(part)
        if not isinstance(nested, dict):
            nested = {} if nested is None else _as_dict(nested)
            target[part] = nested
        target = nested
    target[leaf] = value


def _as_dict(value: Any) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return dict(value)
