"""Agreement parsing and the documents derived from it.

An agreement is a JSON document whose ``id`` (``acme_v2``) names the
monitored service. The part before the first underscore becomes the
agreement name; Prometheus scrapes ``exporter.<name>.governify.io``.

This module also holds the restore request bodies sent during load-data,
since both are small JSON documents with fixed wire field names.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from bluejay.core.errors import MissingFieldError, ParseError
from bluejay.deploy import files

EXPORTER_DOMAIN = "governify.io"
METRICS_PATH = "/metrics"


def agreement_name(agreement_id: str) -> str:
    """Return the segment of ``agreement_id`` before the first underscore.

    An id without underscores is returned whole.

    >>> agreement_name("acme_v2")
    'acme'
    >>> agreement_name("solo")
    'solo'
    """
    return agreement_id.split("_", 1)[0]


def exporter_hostname(name: str) -> str:
    return f"exporter.{name}.{EXPORTER_DOMAIN}"


def parse_agreement(raw: str, source: str | Path | None = None) -> dict[str, Any]:
    """Parse agreement JSON, requiring a string ``id``.

    Raises:
        ParseError: malformed JSON, not an object, or ``id`` not a string
        MissingFieldError: no ``id`` field (a ``KeyError``)
    """
    location = str(source) if source is not None else "<agreement>"
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Agreement {location} is not valid JSON: {exc}", cause=exc).with_context(
            path=location
        ) from exc

    if not isinstance(data, dict):
        raise ParseError(f"Agreement {location} must be a JSON object").with_context(path=location)
    if "id" not in data:
        raise MissingFieldError("id", f"Agreement {location} has no 'id' field")
    if not isinstance(data["id"], str):
        raise ParseError(f"Agreement {location} 'id' must be a string").with_context(path=location)
    return data


def load_agreement(path: str | Path) -> dict[str, Any]:
    try:
        raw = files.read_text(path)
    except UnicodeDecodeError as exc:
        raise ParseError(f"Agreement {path} is not valid UTF-8: {exc}", cause=exc).with_context(
            path=str(path)
        ) from exc
    return parse_agreement(raw, source=path)


# ---------------------------------------------------------------------------
# Monitoring targets
# ---------------------------------------------------------------------------


class TargetLabels(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    metrics_path: str = Field(default=METRICS_PATH, alias="__metrics_path__")
    monitoring: str


class MonitoringTarget(BaseModel):
    """One Prometheus ``file_sd`` entry."""

    targets: list[str]
    labels: TargetLabels

    @classmethod
    def for_agreement(cls, name: str) -> MonitoringTarget:
        return cls(targets=[exporter_hostname(name)], labels=TargetLabels(monitoring=name))


def render_targets(targets: list[MonitoringTarget]) -> str:
    """Serialize targets as a 2-space indented JSON array."""
    return json.dumps([t.model_dump(by_alias=True) for t in targets], indent=2, ensure_ascii=False)


# ---------------------------------------------------------------------------
# Restore requests
# ---------------------------------------------------------------------------


class DatabaseKind(str, Enum):
    """Database kinds restored by load-data, with their fixed service coordinates."""

    MONGO = "Mongo"
    INFLUX = "Influx"

    @property
    def db_name(self) -> str:
        return _DB_COORDINATES[self][0]

    @property
    def db_url(self) -> str:
        return _DB_COORDINATES[self][1]


_DB_COORDINATES = {
    DatabaseKind.MONGO: ("mongo-registry", "mongodb://falcon-mongo-registry"),
    DatabaseKind.INFLUX: ("influx-reporter", "http://falcon-influx-reporter:8086"),
}


class ScriptConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    db_name: str = Field(alias="dbName")
    db_url: str = Field(alias="dbUrl")
    db_type: DatabaseKind = Field(alias="dbType")
    backup: str


class RestoreRequest(BaseModel):
    """Body POSTed to the restore-task endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    script_text: str = Field(alias="scriptText")
    script_config: ScriptConfig = Field(alias="scriptConfig")

    @classmethod
    def build(cls, kind: DatabaseKind, script_text: str, backup: str) -> RestoreRequest:
        return cls(
            script_text=script_text,
            script_config=ScriptConfig(
                db_name=kind.db_name,
                db_url=kind.db_url,
                db_type=kind,
                backup=backup,
            ),
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")
