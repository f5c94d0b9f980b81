"""
pipeline.py

Responsibility: sequence the stages of one run. Any stage failure propagates and
nothing after it runs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tsbuild import toolchain
from tsbuild.github_client import GitHubClient
from tsbuild.inputs import Inputs
from tsbuild.project import TsProject, detect_project
from tsbuild.publisher import PublishResult, publish

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunResult:
    project: TsProject
    published: PublishResult | None = None


def run(
    inputs: Inputs,
    *,
    client: GitHubClient | None = None,
    remote_url: str | None = None,
) -> RunResult:
    project = detect_project(inputs.workspace, inputs.tsconfig)
    toolchain.build(project)
    # `extends` targets under node_modules only exist after the dependency install.
    project = detect_project(inputs.workspace, inputs.tsconfig)

    if not inputs.push_to_branch:
        LOG.info("Build finished; pushToBranch is disabled, nothing to publish")
        return RunResult(project=project)

    return RunResult(project=project, published=publish(inputs, project, client=client, remote_url=remote_url))
