"""
toolchain.py

Responsibility: install the TypeScript compiler and project dependencies, then compile.

Only the dependency install is best-effort; every other failure stops the run.
"""

from __future__ import annotations

import logging

from tsbuild.errors import ActionError
from tsbuild.process import CommandError, run
from tsbuild.project import TsProject

LOG = logging.getLogger(__name__)

NPM = "npm"
TSC = "tsc"


class BuildError(ActionError):
    pass


def install_compiler() -> None:
    LOG.info("Installing tsc")
    try:
        run([NPM, "i", "-g", "typescript"])
    except CommandError as e:
        raise BuildError(f"Could not install the TypeScript compiler.\n\n{e.output}") from e


def install_dependencies(project: TsProject) -> bool:
    """
    Run `npm i` in the project root. Returns False if it failed; the build may still
    succeed without it (e.g. a project with no package.json).
    """
    LOG.info("Installing dependencies")
    try:
        completed = run([NPM, "i"], cwd=project.root, check=False)
    except CommandError as e:
        LOG.debug("Dependency install could not start: %s", e)
        return False
    if completed.returncode != 0:
        LOG.debug("Dependency install exited with %s; continuing", completed.returncode)
        return False
    return True


def compile_project(project: TsProject) -> None:
    LOG.info("Building project")
    completed = run(
        [TSC, "--project", str(project.config_path)],
        cwd=project.root,
        check=False,
    )
    if completed.returncode != 0:
        if completed.stdout:
            LOG.error("%s", completed.stdout.rstrip())
        raise BuildError("Something went wrong while building.")


def build(project: TsProject) -> None:
    install_compiler()
    install_dependencies(project)
    compile_project(project)
