"""
Logging helpers for tsbuild-action.

On a GitHub Actions runner, records are rendered as workflow commands so warnings
and errors are annotated on the run; locally a plain format is used.
"""

from __future__ import annotations

import logging
import sys

from tsbuild.actions import format_command


class WorkflowCommandFormatter(logging.Formatter):
    _COMMANDS = {
        logging.DEBUG: "debug",
        logging.WARNING: "warning",
        logging.ERROR: "error",
        logging.CRITICAL: "error",
    }

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        command = self._COMMANDS.get(record.levelno)
        if command is None:
            return message
        return format_command(command, message)


def configure_logging(verbosity: int = 0, *, github_actions: bool = False, runner_debug: bool = False) -> None:
    """
    Configure the root logger.

    verbosity == 0 -> INFO
    verbosity >= 1 -> DEBUG (also when the runner has step debugging enabled)
    """
    level = logging.DEBUG if verbosity >= 1 or runner_debug else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    if github_actions:
        handler.setFormatter(WorkflowCommandFormatter("%(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    logging.basicConfig(level=level, handlers=[handler], force=True)
