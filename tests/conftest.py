"""
Shared pytest fixtures for bluejay-infra tests.

This module provides:
- ``infra_config``: an InfrastructureConfig whose paths all live under tmp_path
- ``FakeRunner``: a CommandRunner stand-in that records argv and replays
  scripted outcomes, so no docker or git binary is needed
- ``FakeHttp``: a RetryingHttpClient stand-in that records requests
- ``events``: one ordered log shared by the fakes and the filesystem spy,
  for asserting cross-collaborator ordering
"""

import sys
from pathlib import Path
from typing import Any

import pytest
import structlog

# Ensure bluejay package is importable
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bluejay.deploy.config import (  # noqa: E402
    AgreementPaths,
    DatabaseDump,
    DockerConfig,
    DumpConfig,
    HttpSettings,
    InfrastructureConfig,
    StateContainer,
)
from bluejay.deploy.container import DockerCli  # noqa: E402
from bluejay.deploy.process import CommandOutcome  # noqa: E402
from bluejay.deploy.repository import GitCli  # noqa: E402


class FakeRunner:
    """Records every invocation; returns outcomes scripted by subcommand."""

    def __init__(self, tool: str, events: list[tuple[str, Any]] | None = None) -> None:
        self.tool = tool
        self.calls: list[list[str]] = []
        self.events = events if events is not None else []
        self._scripted: dict[str, CommandOutcome] = {}

    def script(self, key: str, returncode: int = 0, stdout: str | None = None, stderr: str | None = None) -> None:
        """Script the outcome for calls whose argv contains ``key``."""
        self._scripted[key] = CommandOutcome(
            args=(self.tool, key), returncode=returncode, stdout=stdout, stderr=stderr
        )

    def run(self, args: list[str], *, capture: bool = False, timeout: float | None = None) -> CommandOutcome:
        self.calls.append(list(args))
        self.events.append((self.tool, list(args)))
        for key, scripted in self._scripted.items():
            if key in args:
                return CommandOutcome(
                    args=(self.tool, *args),
                    returncode=scripted.returncode,
                    stdout=scripted.stdout if capture else None,
                    stderr=scripted.stderr if capture else None,
                )
        return CommandOutcome(args=(self.tool, *args), returncode=0, stdout="" if capture else None)


class FakeHttp:
    """Records GET/POST calls made by load_data."""

    def __init__(self, events: list[tuple[str, Any]], script_text: str = "db.restore();") -> None:
        self.events = events
        self.script_text = script_text
        self.gets: list[str] = []
        self.posts: list[tuple[str, dict[str, Any]]] = []
        self.closed = False
        self.fail_post: Exception | None = None

    def __enter__(self) -> "FakeHttp":
        return self

    def __exit__(self, *args: Any) -> None:
        self.closed = True

    def get_text(self, url: str) -> str:
        self.gets.append(url)
        self.events.append(("http-get", url))
        return self.script_text

    def post_json(self, url: str, payload: Any) -> str:
        self.events.append(("http-post", url))
        if self.fail_post is not None:
            raise self.fail_post
        self.posts.append((url, payload))
        return '{"status":"ok"}'


@pytest.fixture
def events() -> list[tuple[str, Any]]:
    return []


@pytest.fixture
def docker_runner(events) -> FakeRunner:
    return FakeRunner("docker", events)


@pytest.fixture
def git_runner(events) -> FakeRunner:
    return FakeRunner("git", events)


@pytest.fixture
def fake_http(events) -> FakeHttp:
    return FakeHttp(events)


@pytest.fixture
def infra_config(tmp_path: Path) -> InfrastructureConfig:
    """Config with every path under tmp_path and dump sources already on disk."""
    sources = tmp_path / "dumps"
    sources.mkdir()
    (sources / "mongo.gz").write_bytes(b"mongo-dump")
    (sources / "influx.tar.gz").write_bytes(b"influx-dump")

    directory = tmp_path / "bluejay-infrastructure"
    backup = tmp_path / "backups"
    return InfrastructureConfig(
        repository_url="https://example.invalid/bluejay-infrastructure.git",
        directory=directory,
        compose_file="docker-bluejay/docker-compose.yaml",
        agreement=AgreementPaths(
            storage_dir=tmp_path / "agreements",
            targets_file=tmp_path / "prometheus" / "targets.json",
        ),
        dump=DumpConfig(
            backup=backup,
            mongo=DatabaseDump(
                directory="mongo",
                source=sources / "mongo.gz",
                destination=backup / "mongo" / "mongo.gz",
                file="mongo/mongo.gz",
            ),
            influx=DatabaseDump(
                directory="influx",
                source=sources / "influx.tar.gz",
                destination=backup / "influx" / "influx.tar.gz",
                file="influx/influx.tar.gz",
            ),
            restore_script_url="http://restore.local/dbRestore.js",
            restore_task_url="http://restore.local/tasks",
        ),
        docker=DockerConfig(
            mongo_container="falcon-mongo-registry",
            state=StateContainer(container="governify-state", image="governify/state:test", port="5800:80"),
        ),
        http=HttpSettings(max_retries=2, base_delay=0.0, max_delay=0.0, timeout_seconds=5.0),
    )


@pytest.fixture
def sequencer(infra_config, docker_runner, git_runner, fake_http):
    from bluejay.deploy.workflow import InfrastructureSequencer

    return InfrastructureSequencer(
        infra_config,
        docker=DockerCli(docker_runner),
        git=GitCli(git_runner),
        http_factory=lambda: fake_http,
    )


@pytest.fixture
def write_agreement(tmp_path: Path):
    """Write an agreement JSON file outside the storage dir and return its path."""

    def _write(name: str, content: str) -> Path:
        source_dir = tmp_path / "incoming"
        source_dir.mkdir(exist_ok=True)
        path = source_dir / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Drop logging config between tests so no logger writes to a closed stream."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()
