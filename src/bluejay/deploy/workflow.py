"""Infrastructure lifecycle sequencer.

Four operations, each a fixed, strictly sequential series of calls into
the collaborators (files, git, docker, HTTP):

    deploy     clone (if missing) → copy .env → compose up -d --wait
    configure  copy agreement → parse id → overwrite Prometheus target file
    load_data  mkdir backup tree → GET restore script → copy + POST Mongo
               → copy + POST Influx → inspect Mongo network → run state container
    down       compose down --rmi all -v → stop state → rm state

Failure policy:
    - Non-zero process exits are recorded in the ``OperationResult`` and the
      sequence continues (a failed compose down still stops and removes the
      state container).
    - Everything else (missing tool, bad agreement, HTTP failure after
      retries, filesystem error) raises and aborts the operation.

Concurrency: none. Two sequencers pointed at the same directory or
container names will race; nothing here guards against it.

Example::

    config = InfrastructureConfig.load()
    sequencer = InfrastructureSequencer(config)
    sequencer.deploy(config.repository_url, Path("bluejay.env"))
    sequencer.configure(Path("agreements/acme_v2.json"))
    sequencer.load_data()
    sequencer.down()
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

from bluejay.core.logging import LogContext, get_logger
from bluejay.deploy import files
from bluejay.deploy.agreement import (
    DatabaseKind,
    MonitoringTarget,
    RestoreRequest,
    agreement_name,
    load_agreement,
    render_targets,
)
from bluejay.deploy.config import DatabaseDump, InfrastructureConfig
from bluejay.deploy.container import DockerCli, parse_network_name
from bluejay.deploy.http import RetryingHttpClient
from bluejay.deploy.repository import GitCli
from bluejay.deploy.results import OperationResult

logger = get_logger(__name__)


class InfrastructureSequencer:
    """Runs the lifecycle operations against one ``InfrastructureConfig``.

    Collaborators are created on first use, so ``configure`` works on a host
    without docker or git. Tests inject fakes through the constructor.

    Parameters
    ----------
    config
        Resolved infrastructure configuration.
    docker, git
        CLI wrappers; default to the real binaries on PATH.
    http_factory
        Builds the HTTP client used by ``load_data``.
    """

    def __init__(
        self,
        config: InfrastructureConfig,
        *,
        docker: DockerCli | None = None,
        git: GitCli | None = None,
        http_factory: Callable[[], RetryingHttpClient] | None = None,
    ) -> None:
        self.config = config
        self._docker = docker
        self._git = git
        self._http_factory = http_factory or (lambda: RetryingHttpClient(config.http))

    @property
    def docker(self) -> DockerCli:
        if self._docker is None:
            self._docker = DockerCli()
        return self._docker

    @property
    def git(self) -> GitCli:
        if self._git is None:
            self._git = GitCli()
        return self._git

    # ------------------------------------------------------------------
    # deploy
    # ------------------------------------------------------------------

    def deploy(
        self,
        url: str,
        env_file: str | Path,
        compose_file: str | None = None,
    ) -> OperationResult:
        """Clone the infrastructure repository if needed and start the stack.

        An existing directory is used as is: no pull, no re-clone.
        """
        result = OperationResult(operation="deploy")
        directory = self.config.directory
        compose_path = self.config.compose_path(compose_file)

        with LogContext(operation="deploy", run_id=result.run_id):
            if files.directory_exists(directory):
                logger.info("repository.present", directory=str(directory))
                result.details["cloned"] = False
            else:
                result.record("git-clone", self.git.clone(url, directory))
                result.details["cloned"] = True

            files.copy(env_file, self.config.env_path)
            result.record("compose-up", self.docker.compose_up(compose_path, self.config.env_path))
            result.details["compose_file"] = str(compose_path)

            result.mark_complete()
            logger.info("infrastructure.up", status=result.overall_status.value)
        return result

    # ------------------------------------------------------------------
    # configure
    # ------------------------------------------------------------------

    def configure(self, agreement: str | Path) -> OperationResult:
        """Point the Prometheus target file at the given agreement's exporter.

        The target file is replaced, never merged: after this call it holds
        exactly one target.
        """
        result = OperationResult(operation="configure")
        paths = self.config.agreement

        with LogContext(operation="configure", run_id=result.run_id):
            stored = files.copy_into(agreement, paths.storage_dir)
            data = load_agreement(stored)
            name = agreement_name(data["id"])

            content = render_targets([MonitoringTarget.for_agreement(name)])
            files.write_text(paths.targets_file, content)

            result.details.update(
                agreement_id=data["id"],
                agreement_name=name,
                targets_file=str(paths.targets_file),
            )
            result.mark_complete()
            logger.info("infrastructure.configured", agreement=name)
        return result

    # ------------------------------------------------------------------
    # load_data
    # ------------------------------------------------------------------

    def load_data(self) -> OperationResult:
        """Restore the Mongo and Influx dumps, then start the state container."""
        result = OperationResult(operation="load_data")
        dump = self.config.dump
        docker_config = self.config.docker

        with LogContext(operation="load_data", run_id=result.run_id):
            logger.info("load_data.start")
            files.make_dirs(dump.backup)
            files.make_dirs(dump.backup / dump.mongo.directory)
            files.make_dirs(dump.backup / dump.influx.directory)

            with self._http_factory() as http:
                script_text = http.get_text(dump.restore_script_url)
                logger.info("restore_script.fetched", url=dump.restore_script_url, size=len(script_text))

                for kind, entry in ((DatabaseKind.MONGO, dump.mongo), (DatabaseKind.INFLUX, dump.influx)):
                    self._restore(http, kind, entry, script_text)
                    result.details.setdefault("restored", []).append(kind.value)

            inspect = result.record(
                "inspect-network", self.docker.inspect_networks(docker_config.mongo_container)
            )
            network = parse_network_name(inspect.stdout)
            if not network:
                logger.warning("network.not_found", container=docker_config.mongo_container)
            result.details["network"] = network

            state = docker_config.state
            result.record(
                "run-state",
                self.docker.run_container(
                    state.container,
                    state.image,
                    network=network,
                    port=state.port,
                    env={"MONGO_URL": f"mongodb://{docker_config.mongo_container}"},
                ),
            )

            result.mark_complete()
            logger.info("load_data.finish", status=result.overall_status.value)
        return result

    def _restore(
        self,
        http: RetryingHttpClient,
        kind: DatabaseKind,
        entry: DatabaseDump,
        script_text: str,
    ) -> None:
        files.copy(entry.source, entry.destination)
        request = RestoreRequest.build(kind, script_text, entry.file)
        http.post_json(self.config.dump.restore_task_url, request.to_payload())
        logger.info("restore.submitted", db_type=kind.value, backup=entry.file)

    # ------------------------------------------------------------------
    # down
    # ------------------------------------------------------------------

    def down(self, compose_file: str | None = None) -> OperationResult:
        """Tear the stack down and remove the state container.

        Stop and remove run whatever the compose teardown returned.
        """
        result = OperationResult(operation="down")
        container = self.config.docker.state.container
        compose_path = self.config.compose_path(compose_file)

        with LogContext(operation="down", run_id=result.run_id):
            result.record("compose-down", self.docker.compose_down(compose_path, self.config.env_path))
            result.record("stop-state", self.docker.stop(container))
            result.record("rm-state", self.docker.remove(container))

            result.mark_complete()
            logger.info("infrastructure.down", status=result.overall_status.value)
        return result
