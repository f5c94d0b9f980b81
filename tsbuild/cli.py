"""
cli.py

Responsibility: CLI entrypoint for tsbuild-action.

High-level flow (single command `run`):
1) Resolve inputs from action defaults, environment and flags -> `Inputs`
2) Detect the TypeScript project and build it
3) (Optional) Publish the output to the target branch

This module orchestrates and reports; it is the only place that turns a failure
into an exit code:
- Input resolution: `inputs.py`
- Stages: `pipeline.py`
- Runner integration: `actions.py`
"""

from __future__ import annotations

import argparse
import logging
import os
from collections.abc import Mapping

from tsbuild import __version__, actions
from tsbuild.errors import ActionError
from tsbuild.inputs import load_action_defaults, resolve_inputs
from tsbuild.logging_utils import configure_logging
from tsbuild.pipeline import RunResult, run
from tsbuild.process import secret_forms

LOG = logging.getLogger(__name__)


def _write_outputs(result: RunResult, env: Mapping[str, str]) -> None:
    published = result.published
    actions.set_output("published", "true" if published else "false", env=env)
    if published is not None:
        actions.set_output("branch", published.branch, env=env)
        actions.set_output("committed", "true" if published.committed else "false", env=env)
        actions.set_output("commit", published.commit_sha or "", env=env)


def run_cmd(args: argparse.Namespace, env: Mapping[str, str] | None = None) -> int:
    env = os.environ if env is None else env

    action_path = args.action_path or env.get("GITHUB_ACTION_PATH")
    defaults = load_action_defaults(action_path) if action_path else {}

    inputs = resolve_inputs(
        env,
        defaults=defaults,
        overrides={
            "workspace": args.workspace,
            "pushToBranch": args.push,
            "branch": args.branch,
            "githubToken": args.github_token,
            "outDirOnly": True if args.out_dir_only else None,
        },
    )
    if actions.running_in_actions(env):
        for form in secret_forms(inputs.github_token):
            actions.add_mask(form)

    result = run(inputs)
    _write_outputs(result, env)
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="tsbuild-action",
        description="Compile a TypeScript project and optionally publish the output to a branch",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("run", help="Build the project in the workspace and optionally push the output")
    r.add_argument("--workspace", default=None, help="Project directory (default: $GITHUB_WORKSPACE)")
    r.add_argument("--branch", default=None, help="Target branch (overrides input `branch`)")
    r.add_argument("--push", dest="push", action="store_true", default=None, help="Publish to the target branch")
    r.add_argument("--no-push", dest="push", action="store_false", default=None, help="Build only")
    r.add_argument("--github-token", default=None, help="GitHub token (overrides input `githubToken`)")
    r.add_argument(
        "--out-dir-only",
        action="store_true",
        help="Publish only the compiler outDir instead of the whole workspace",
    )
    r.add_argument(
        "--action-path",
        default=None,
        help="Directory or file with action metadata defaults (default: $GITHUB_ACTION_PATH)",
    )
    r.add_argument("-v", "--verbose", action="count", default=0, help="Increase verbosity")
    r.set_defaults(func=run_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        args.verbose,
        github_actions=actions.running_in_actions(),
        runner_debug=os.environ.get("RUNNER_DEBUG") == "1",
    )

    try:
        return int(args.func(args))
    except KeyboardInterrupt:
        return 130
    except ActionError as e:
        return actions.set_failed(str(e))
    except Exception as e:  # noqa: BLE001 - single top-level reporter
        LOG.debug("Unexpected failure", exc_info=True)
        return actions.set_failed(f"Something went wrong: {e}")


if __name__ == "__main__":
    raise SystemExit(main())
