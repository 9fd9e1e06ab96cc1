"""
CLI layer for taskchain.

Handles only terminal transport: argument parsing, event printing and
result formatting. Execution lives in ``taskchain.execution``.

Entry point::

    taskchain --help
"""

from taskchain.cli.app import app

__all__ = ["app"]
