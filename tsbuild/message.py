"""
message.py

Responsibility: render the commit message for the published branch.

The message is a Jinja2 template rendered with strict undefined handling, so a typo
in a variable name fails the run instead of producing an empty message.

Available variables:
- `sha`, `short_sha`: the triggering commit
- `branch`: the target branch
- `head_commit_message`: message of the commit that triggered the workflow
- `event`: the full event payload
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from tsbuild.errors import ActionError

DEFAULT_COMMIT_TEMPLATE = "TS Build: {{ sha }} {{ head_commit_message }}"


class MessageError(ActionError):
    pass


def load_event(path: str | Path | None) -> dict[str, Any]:
    """Return the triggering event payload, or an empty mapping when there is none."""
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except ValueError as e:
        raise MessageError(f"Event payload is not valid JSON: {p}") from e
    return data if isinstance(data, dict) else {}


def head_commit_message(event: dict[str, Any]) -> str:
    # workflow_run events nest the commit one level deeper than push events.
    for parent in (event.get("workflow_run") or {}, event):
        head = parent.get("head_commit") or {}
        message = head.get("message")
        if message:
            return str(message)
    return ""


def render_commit_message(
    template: str,
    *,
    sha: str,
    branch: str,
    event: dict[str, Any] | None = None,
) -> str:
    event = event or {}
    env = Environment(autoescape=False, undefined=StrictUndefined, keep_trailing_newline=False)
    context = {
        "sha": sha,
        "short_sha": sha[:7],
        "branch": branch,
        "head_commit_message": head_commit_message(event),
        "event": event,
    }
    try:
        out = env.from_string(template).render(**context)
    except TemplateError as e:
        raise MessageError(f"Failed rendering commit message template: {e}") from e

    out = out.strip()
    if not out:
        raise MessageError("Commit message template rendered to an empty message.")
    return out
