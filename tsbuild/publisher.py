"""
publisher.py

Responsibility: publish the build output to the target branch.

Flow:
1) Ask the GitHub API whether the branch exists (case-insensitive)
2) Clone the repository next to the workspace
3) Check out the branch, or create it as an orphan
4) Replace the clone's tree with the build output
5) Stage everything, prune TypeScript sources
6) Commit (an unchanged tree is only a warning)
7) Force-push, overwriting the remote branch
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from tsbuild.git import GitRepo, tokenized_https_remote
from tsbuild.github_client import GitHubClient
from tsbuild.inputs import Inputs
from tsbuild.message import load_event, render_commit_message
from tsbuild.mirror import mirror_tree
from tsbuild.project import TsProject

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class PublishResult:
    branch: str
    created: bool
    committed: bool
    commit_sha: str | None
    pruned: list[str] = field(default_factory=list)


def publish_source(inputs: Inputs, project: TsProject) -> Path:
    """Directory whose contents end up on the branch."""
    if inputs.out_dir_only:
        return project.out_dir
    return project.root


def publish(
    inputs: Inputs,
    project: TsProject,
    *,
    client: GitHubClient | None = None,
    remote_url: str | None = None,
) -> PublishResult:
    """
    Run the publish stage. `client` and `remote_url` default to the GitHub API and an
    authenticated HTTPS remote built from `inputs`.
    """
    client = client or GitHubClient(inputs.github_token, api_base=inputs.api_url)
    if remote_url is None:
        remote_url = tokenized_https_remote(inputs.server_url, inputs.repository, inputs.actor, inputs.github_token)

    existing = client.find_branch(inputs.owner, inputs.repo, inputs.branch)
    branch = existing or inputs.branch
    message = render_commit_message(
        inputs.commit_message,
        sha=inputs.sha,
        branch=branch,
        event=load_event(inputs.event_path),
    )

    LOG.info("Cloning branch")
    repo = GitRepo.clone(remote_url, inputs.branch_dir, secrets=[inputs.github_token])

    LOG.info("Configuring Git user")
    repo.configure_identity()

    if existing:
        repo.checkout(branch)
    else:
        LOG.info("Branch %s does not exist yet; creating it without history", branch)
        repo.checkout_orphan(branch)

    source = publish_source(inputs, project)
    LOG.info("Directory: %s", source)
    LOG.info("%s", repo.path)
    mirror_tree(source, repo.path)

    LOG.info("Adding and committing files")
    repo.add_all()

    LOG.info("Removing typescript files")
    pruned = repo.remove_sources(inputs.source_pattern) if inputs.source_pattern else []

    committed = repo.commit(message)
    if not committed:
        LOG.warning("Couldn't commit new changes because there aren't any")

    LOG.info("Pushing new changes")
    repo.push_force(branch)

    return PublishResult(
        branch=branch,
        created=existing is None,
        committed=committed,
        commit_sha=repo.head(),
        pruned=pruned,
    )
