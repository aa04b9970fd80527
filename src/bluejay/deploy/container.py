"""Docker and docker compose invocations for the lifecycle sequencer.

Uses the ``docker`` CLI via subprocess, not ``docker-py``: the stack is
already driven by ``docker compose`` and the same binary covers the few
plain container commands (inspect, run, stop, rm).

Key Concepts:
    DockerCli: One method per command line the sequencer issues. Every
        method returns the ``CommandOutcome``; none raises on a non-zero exit.
    NETWORK_TEMPLATE: Go template listing the networks a container is
        attached to, space separated.
    parse_network_name(): Turns ``docker inspect`` output into the first
        network name ("" when the output is empty).

Related Modules:
    - :mod:`bluejay.deploy.process` — the subprocess wrapper used here
    - :mod:`bluejay.deploy.workflow` — the sequencer calling these commands
"""

from __future__ import annotations

from pathlib import Path

from bluejay.core.logging import get_logger
from bluejay.deploy.process import CommandOutcome, CommandRunner

logger = get_logger(__name__)

NETWORK_TEMPLATE = "{{range $k, $v := .NetworkSettings.Networks}}{{$k}} {{end}}"


def parse_network_name(output: str | None) -> str:
    """Return the first network name from ``docker inspect`` output.

    Quote characters are stripped first, since shells and older callers wrap
    the template in single quotes.

    >>> parse_network_name("'bluejay_default '\\n")
    'bluejay_default'
    >>> parse_network_name("")
    ''
    """
    cleaned = (output or "").replace("'", "").replace('"', "").strip()
    tokens = cleaned.split()
    return tokens[0] if tokens else ""


class DockerCli:
    """Typed front for the ``docker`` commands the sequencer issues.

    Example::

        docker = DockerCli()
        docker.compose_up(Path("infra/docker-compose.yaml"), Path("infra/.env"))
    """

    def __init__(self, runner: CommandRunner | None = None) -> None:
        self.runner = runner or CommandRunner("docker")

    # ------------------------------------------------------------------
    # Compose stack
    # ------------------------------------------------------------------

    def compose_up(self, compose_file: Path, env_file: Path) -> CommandOutcome:
        """Start the stack detached and wait for services to be healthy."""
        outcome = self.runner.run([
            "compose", "-f", str(compose_file),
            "--env-file", str(env_file),
            "up", "-d", "--wait",
        ])
        logger.info("compose.up", file=str(compose_file), returncode=outcome.returncode)
        return outcome

    def compose_down(self, compose_file: Path, env_file: Path) -> CommandOutcome:
        """Stop the stack, removing its images and volumes."""
        outcome = self.runner.run([
            "compose", "-f", str(compose_file),
            "--env-file", str(env_file),
            "down", "--rmi", "all", "-v",
        ])
        logger.info("compose.down", file=str(compose_file), returncode=outcome.returncode)
        return outcome

    # ------------------------------------------------------------------
    # Plain containers
    # ------------------------------------------------------------------

    def inspect_networks(self, container: str) -> CommandOutcome:
        return self.runner.run(
            ["inspect", f"--format={NETWORK_TEMPLATE}", container],
            capture=True,
        )

    def run_container(
        self,
        name: str,
        image: str,
        *,
        network: str,
        port: str,
        env: dict[str, str] | None = None,
    ) -> CommandOutcome:
        """``docker run -d`` a named container on ``network``."""
        cmd = ["run", "--name", name, "-d"]
        for key, value in (env or {}).items():
            cmd.extend(["-e", f"{key}={value}"])
        cmd.extend(["--network", network, "-p", port, image])
        outcome = self.runner.run(cmd)
        logger.info(
            "container.started",
            container=name,
            image=image,
            network=network,
            returncode=outcome.returncode,
        )
        return outcome

    def stop(self, container: str) -> CommandOutcome:
        return self.runner.run(["stop", container], capture=True)

    def remove(self, container: str) -> CommandOutcome:
        outcome = self.runner.run(["rm", container], capture=True)
        if outcome.ok:
            logger.info("container.removed", container=container)
        return outcome
