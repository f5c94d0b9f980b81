"""
project.py

Responsibility: detect the TypeScript project in the workspace and resolve where the
compiler writes its output.

tsconfig files are JSON with comments and trailing commas, so they are normalized
before being handed to the JSON parser.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from tsbuild.errors import ActionError

LOG = logging.getLogger(__name__)

TSCONFIG_NAME = "tsconfig.json"

_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


class ProjectError(ActionError):
    pass


class MissingConfigError(ProjectError):
    pass


@dataclass(frozen=True)
class TsProject:
    root: Path
    config_path: Path
    out_dir: Path
    compiler_options: dict[str, Any] = field(default_factory=dict)


def strip_json_comments(text: str) -> str:
    """
    Remove `//` and `/* */` comments outside of string literals, then drop trailing
    commas before a closing brace or bracket.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            if end == -1:
                raise ProjectError("Unterminated block comment in tsconfig.")
            i = end + 2
        else:
            out.append(ch)
            i += 1

    # Also matches inside strings; tsconfig values never contain ",}" or ",]".
    return _TRAILING_COMMA.sub(r"\1", "".join(out))


def load_tsconfig(path: Path) -> dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ProjectError(f"Could not read {path}: {e}") from e
    try:
        data = json.loads(strip_json_comments(text))
    except ValueError as e:
        raise ProjectError(f"{path.name} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ProjectError(f"{path.name} must contain an object at the top level.")
    return data


def _extends_target(base_dir: Path, ref: Any) -> Path | None:
    """
    Return the file a relative `extends` entry points at, or None when it cannot be
    followed (package references, or files that do not exist yet).
    """
    if not isinstance(ref, str) or not ref.startswith("."):
        LOG.debug("Ignoring non-relative tsconfig extends: %s", ref)
        return None
    candidate = (base_dir / ref).resolve()
    if candidate.suffix != ".json" and not candidate.exists():
        candidate = candidate.with_name(candidate.name + ".json")
    if not candidate.is_file():
        # Typically under node_modules, which only exists after the dependency install.
        LOG.debug("Extended tsconfig not found, not following: %s", ref)
        return None
    return candidate


def _resolve_options(config_path: Path, seen: set[Path]) -> tuple[Path | None, dict[str, Any]]:
    """
    Merge `compilerOptions` along the relative `extends` chain of `config_path` and
    return the effective `outDir` (resolved against the file declaring it).

    Bases are applied in order, later entries overriding earlier ones, and the file's
    own options override all of them.
    """
    seen.add(config_path)
    data = load_tsconfig(config_path)

    parents = data.get("extends") or []
    if isinstance(parents, str):
        parents = [parents]
    if not isinstance(parents, list):
        raise ProjectError(f"`extends` must be a string or an array in {config_path.name}.")

    merged: dict[str, Any] = {}
    out_dir: Path | None = None
    for ref in parents:
        target = _extends_target(config_path.parent, ref)
        if target is None or target in seen:
            continue
        base_out_dir, base_options = _resolve_options(target, seen)
        merged.update(base_options)
        if base_out_dir is not None:
            out_dir = base_out_dir

    options = data.get("compilerOptions") or {}
    if not isinstance(options, dict):
        raise ProjectError(f"`compilerOptions` must be an object in {config_path.name}.")
    merged.update(options)
    if options.get("outDir"):
        out_dir = (config_path.parent / str(options["outDir"])).resolve()
    return out_dir, merged


def detect_project(workspace: str | Path, config_name: str = TSCONFIG_NAME) -> TsProject:
    """
    Locate the compiler configuration in `workspace` and resolve the output directory.

    Without an `outDir` the compiler writes next to the sources, so the workspace root
    is the output location.
    """
    root = Path(workspace).resolve()
    config_path = root / config_name
    if not config_path.is_file():
        raise MissingConfigError(
            f"No {config_name} found in {root}; this action only builds TypeScript projects "
            f"(add a {config_name} or set the `tsconfig` input)."
        )

    out_dir, options = _resolve_options(config_path.resolve(), set())
    project = TsProject(
        root=root,
        config_path=config_path,
        out_dir=out_dir or root,
        compiler_options=options,
    )
    LOG.debug("Detected TypeScript project at %s (outDir: %s)", root, project.out_dir)
    return project
