"""
CLI layer for bluejay-infra.

A Typer application whose sub-commands delegate to
``bluejay.deploy.InfrastructureSequencer``; this package only parses
arguments and renders results.

Entry point::

    bluejay --help
"""

from bluejay.cli.app import app

__all__ = ["app"]
