"""
actions.py

Responsibility: talk to the GitHub Actions runner through workflow commands and
the step output file.

Outside of Actions (no `GITHUB_ACTIONS=true`) the same calls degrade to plain
stderr lines so the CLI stays usable locally.
"""

from __future__ import annotations

import os
import sys
import uuid
from collections.abc import Mapping
from typing import TextIO


def running_in_actions(env: Mapping[str, str] | None = None) -> bool:
    env = os.environ if env is None else env
    return env.get("GITHUB_ACTIONS") == "true"


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def format_command(command: str, message: str = "") -> str:
    return f"::{command}::{escape_data(message)}"


def add_mask(secret: str, stream: TextIO | None = None) -> None:
    if secret:
        print(format_command("add-mask", secret), file=stream or sys.stdout)


def set_failed(message: str, *, env: Mapping[str, str] | None = None, stream: TextIO | None = None) -> int:
    """
    Report a fatal failure and return the exit code the process should end with.
    """
    if running_in_actions(env):
        print(format_command("error", message), file=stream or sys.stdout)
    else:
        print(f"tsbuild-action: error: {message}", file=stream or sys.stderr)
    return 1


def set_output(name: str, value: str, *, env: Mapping[str, str] | None = None) -> bool:
    """
    Append a step output to `$GITHUB_OUTPUT`. Returns False when there is no output file.
    """
    env = os.environ if env is None else env
    path = env.get("GITHUB_OUTPUT")
    if not path:
        return False
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
    return True
