"""
process.py

Responsibility: run external tools (npm, tsc, git) as subprocesses.

Every invocation uses an argument list (never a shell), captures stdout and stderr
together, and logs the command line with secrets redacted.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterable, Sequence
from pathlib import Path
from urllib.parse import quote

from tsbuild.errors import ActionError

LOG = logging.getLogger(__name__)

REDACTED = "***"


class CommandError(ActionError):
    def __init__(self, message: str, *, returncode: int | None = None, output: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output


def secret_forms(secret: str) -> list[str]:
    """A secret as given and as percent-encoded inside a URL, longest first."""
    if not secret:
        return []
    return sorted({secret, quote(secret, safe="")}, key=len, reverse=True)


def redact(text: str, secrets: Iterable[str]) -> str:
    for secret in secrets:
        for form in secret_forms(secret):
            text = text.replace(form, REDACTED)
    return text


def run(
    cmd: Sequence[str],
    *,
    cwd: Path | None = None,
    env: dict[str, str] | None = None,
    check: bool = True,
    secrets: Iterable[str] = (),
) -> subprocess.CompletedProcess[str]:
    """
    Run `cmd` and return the completed process.

    With `check=True` a non-zero exit raises `CommandError` carrying the (redacted)
    output; with `check=False` the caller inspects `returncode` itself.
    """
    secrets = tuple(secrets)
    display = redact(" ".join(cmd), secrets)
    LOG.debug("Running: %s", display)
    try:
        completed = subprocess.run(
            list(cmd),
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            check=False,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
        )
    except OSError as e:
        raise CommandError(f"Failed to execute {cmd[0]}: {e}") from e

    output = redact(completed.stdout or "", secrets)
    if output.strip():
        LOG.debug("%s output:\n%s", cmd[0], output.rstrip())

    if check and completed.returncode != 0:
        raise CommandError(
            f"Command failed ({completed.returncode}): {display}\n\n{output}",
            returncode=completed.returncode,
            output=output,
        )
    return completed
