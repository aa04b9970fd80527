"""
Bluejay infrastructure helper.

- bluejay.core: errors and structured logging
- bluejay.execution: retry strategies
- bluejay.deploy: lifecycle sequencer (deploy, configure, load-data, down)
- bluejay.cli: ``bluejay`` command line
"""

__version__ = "0.1.0"
