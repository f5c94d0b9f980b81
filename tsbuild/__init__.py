"""
tsbuild package

This package implements tsbuild-action: compile a TypeScript project in CI and
optionally publish the compiled output to a branch without its sources.

Key responsibilities are split across modules:
- `inputs.py`: resolve action inputs and runner variables into `Inputs`
- `project.py`: detect tsconfig.json and resolve the output directory
- `toolchain.py`: install tsc and dependencies, compile
- `github_client.py`: isolated GitHub REST API interactions (branch listing)
- `git.py`: clone / checkout / commit / force-push on the publish clone
- `mirror.py`: replace the clone's tree with the build output
- `message.py`: commit message rendering
- `publisher.py`, `pipeline.py`: stage sequencing
- `cli.py`: CLI entrypoint and failure reporting
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
