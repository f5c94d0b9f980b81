"""
inputs.py

Responsibility: resolve the action's configuration from the execution environment
into a deterministic, typed model.

Sources, lowest precedence first:
- defaults declared in the action metadata file (`action.yml`)
- GitHub Actions input variables (`INPUT_<NAME>`) and runner variables (`GITHUB_*`)
- explicit CLI overrides

The rest of the pipeline treats the resolved `Inputs` as the single source of truth.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from tsbuild.errors import ActionError
from tsbuild.message import DEFAULT_COMMIT_TEMPLATE
from tsbuild.process import run

ACTION_FILENAMES = ("action.yml", "action.yaml")

TOKEN_REQUIRED_MESSAGE = (
    "A GitHub secret token is a required input for pushing code "
    "(hint: use ${{ secrets.GITHUB_TOKEN }} )"
)

BUILTIN_DEFAULTS: dict[str, str] = {
    "pushToBranch": "false",
    "branch": "gh-pages",
    "githubToken": "",
    "commitMessage": DEFAULT_COMMIT_TEMPLATE,
    "outDirOnly": "false",
    "sourcePattern": "*.ts",
    "tsconfig": "tsconfig.json",
}

_TRUE = frozenset({"true", "True", "TRUE", "yes", "1"})
_FALSE = frozenset({"false", "False", "FALSE", "no", "0"})


class InputError(ActionError, ValueError):
    pass


@dataclass(frozen=True)
class Inputs:
    """Everything one run needs to know about its environment."""

    workspace: Path
    push_to_branch: bool = False
    branch: str = "gh-pages"
    github_token: str = ""
    repository: str = ""
    sha: str = ""
    actor: str = ""
    server_url: str = "https://github.com"
    api_url: str = "https://api.github.com"
    event_path: Path | None = None
    commit_message: str = DEFAULT_COMMIT_TEMPLATE
    out_dir_only: bool = False
    source_pattern: str = "*.ts"
    tsconfig: str = "tsconfig.json"

    @property
    def owner(self) -> str:
        return self.repository.split("/", 1)[0]

    @property
    def repo(self) -> str:
        return self.repository.split("/", 1)[1]

    @property
    def branch_dir(self) -> Path:
        """Sibling directory that holds the publish clone."""
        return self.workspace.parent / f"branch-{self.branch}"


def input_env_name(name: str) -> str:
    return "INPUT_" + name.replace(" ", "_").upper()


def parse_bool(value: str, *, name: str) -> bool:
    """
    Normalize a textual flag into a bool.

    Inputs always arrive as text, so comparing them to a bool never works; unknown
    spellings are rejected instead of being read as false.
    """
    text = value.strip()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise InputError(f"Input `{name}` must be a boolean (true/false), got {value!r}.")


def load_action_defaults(path: str | Path) -> dict[str, str]:
    """
    Return `inputs.<name>.default` values from an action metadata file.

    `path` may point at the file itself or at the directory containing it. A missing
    file yields no defaults.
    """
    p = Path(path)
    if p.is_dir():
        candidates = [p / name for name in ACTION_FILENAMES]
        p = next((c for c in candidates if c.exists()), candidates[0])
    if not p.exists():
        return {}

    try:
        data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise InputError(f"Action metadata is not valid YAML: {p}") from e
    if not isinstance(data, dict):
        raise InputError(f"Action metadata must be a mapping at the top level: {p}")

    inputs_raw = data.get("inputs") or {}
    if not isinstance(inputs_raw, dict):
        raise InputError("`inputs` must be a mapping when provided.")

    out: dict[str, str] = {}
    for name, spec in inputs_raw.items():
        if isinstance(spec, dict) and spec.get("default") is not None:
            default = spec["default"]
            # YAML may hand back real booleans; inputs are text on the runner too.
            if isinstance(default, bool):
                default = "true" if default else "false"
            out[str(name)] = str(default)
    return out


def validate_branch(name: str) -> str:
    """
    Reject names git would not accept as a branch. The name also names the sibling
    clone directory, so anything git lets through must still stay a plain path.
    """
    completed = run(["git", "check-ref-format", "--branch", name], check=False)
    if completed.returncode != 0:
        raise InputError(f"Input `branch` is not a valid branch name: {name!r}")
    if Path(name).is_absolute() or ".." in Path(name).parts:
        raise InputError(f"Input `branch` is not a valid branch name: {name!r}")
    return name


def _get_input(env: Mapping[str, str], name: str, defaults: Mapping[str, str]) -> str:
    raw = env.get(input_env_name(name))
    if raw is None or not raw.strip():
        raw = defaults.get(name, BUILTIN_DEFAULTS.get(name, ""))
    return raw.strip()


def resolve_inputs(
    env: Mapping[str, str] | None = None,
    *,
    defaults: Mapping[str, str] | None = None,
    overrides: Mapping[str, Any] | None = None,
) -> Inputs:
    """
    Build `Inputs` from environment variables, action defaults and CLI overrides.

    The token check runs first so a misconfigured publish fails before anything else
    is looked at.
    """
    env = os.environ if env is None else env
    defaults = defaults or {}
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    def value(name: str) -> str:
        if name in overrides:
            v = overrides[name]
            if isinstance(v, bool):
                return "true" if v else "false"
            return str(v).strip()
        return _get_input(env, name, defaults)

    push = parse_bool(value("pushToBranch"), name="pushToBranch")
    token = value("githubToken")
    if push and not token:
        raise InputError(TOKEN_REQUIRED_MESSAGE)

    workspace_raw = str(overrides.get("workspace") or env.get("GITHUB_WORKSPACE") or "").strip()
    if not workspace_raw:
        raise InputError("Workspace is not set (set GITHUB_WORKSPACE or use --workspace).")

    branch = value("branch")
    repository = str(env.get("GITHUB_REPOSITORY") or "").strip()
    if push:
        if not branch:
            raise InputError("Input `branch` is required when pushToBranch is enabled.")
        owner, _, repo = repository.partition("/")
        if not owner or not repo or "/" in repo:
            raise InputError(f"GITHUB_REPOSITORY must look like 'owner/repo', got {repository!r}.")
        validate_branch(branch)

    event_path = str(env.get("GITHUB_EVENT_PATH") or "").strip()

    return Inputs(
        workspace=Path(workspace_raw).resolve(),
        push_to_branch=push,
        branch=branch,
        github_token=token,
        repository=repository,
        sha=str(env.get("GITHUB_SHA") or "").strip(),
        actor=str(env.get("GITHUB_ACTOR") or "").strip() or "x-access-token",
        server_url=str(env.get("GITHUB_SERVER_URL") or "https://github.com").rstrip("/"),
        api_url=str(env.get("GITHUB_API_URL") or "https://api.github.com").rstrip("/"),
        event_path=Path(event_path) if event_path else None,
        commit_message=value("commitMessage") or DEFAULT_COMMIT_TEMPLATE,
        out_dir_only=parse_bool(value("outDirOnly"), name="outDirOnly"),
        source_pattern=value("sourcePattern"),
        tsconfig=value("tsconfig") or "tsconfig.json",
    )
