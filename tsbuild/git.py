"""
git.py

Responsibility: the git operations needed to publish a branch.

A `GitRepo` is bound to one working copy; identity is configured on that copy
only, so nothing here touches the user's global git configuration.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path
from urllib.parse import quote, urlsplit

from tsbuild.errors import ActionError
from tsbuild.process import CommandError, run

LOG = logging.getLogger(__name__)

BOT_NAME = "actions-user"
BOT_EMAIL = "action@github.com"


class GitError(ActionError):
    pass


def tokenized_https_remote(server_url: str, repository: str, actor: str, token: str) -> str:
    """
    Build https://<actor>:<token>@<host>/<owner>/<repo>.git for an authenticated clone.

    The token ends up in the clone's `.git/config`; the clone is disposable.
    """
    parts = urlsplit(server_url)
    host = parts.netloc or parts.path
    return f"https://{quote(actor, safe='')}:{quote(token, safe='')}@{host}/{repository}.git"


class GitRepo:
    def __init__(self, path: str | Path, *, secrets: Iterable[str] = ()) -> None:
        self.path = Path(path)
        self._secrets = tuple(s for s in secrets if s)

    def _git(self, *args: str, check: bool = True):
        return run(["git", *args], cwd=self.path, check=check, secrets=self._secrets)

    @classmethod
    def clone(cls, url: str, dest: str | Path, *, secrets: Iterable[str] = ()) -> GitRepo:
        """
        Clone `url` into `dest`, replacing whatever a previous run left there.
        """
        dest = Path(dest)
        secrets = tuple(secrets)
        if dest.exists():
            LOG.debug("Removing stale clone at %s", dest)
            shutil.rmtree(dest)
        try:
            run(["git", "clone", url, str(dest)], secrets=secrets)
        except CommandError as e:
            LOG.error("%s", e)
            raise GitError("Something went wrong while cloning the repository.") from e
        return cls(dest, secrets=secrets)

    def configure_identity(self, name: str = BOT_NAME, email: str = BOT_EMAIL) -> None:
        self._git("config", "--local", "user.name", name)
        self._git("config", "--local", "user.email", email)

    def checkout(self, branch: str) -> None:
        try:
            self._git("checkout", branch)
        except CommandError as e:
            raise GitError(f"Could not check out branch {branch}.\n\n{e.output}") from e

    def checkout_orphan(self, branch: str) -> None:
        try:
            self._git("checkout", "--orphan", branch)
        except CommandError as e:
            raise GitError(f"Could not create orphan branch {branch}.\n\n{e.output}") from e

    def add_all(self) -> None:
        self._git("add", "-A")

    def remove_sources(self, pattern: str) -> list[str]:
        """
        Remove every tracked path matching the pathspec `pattern` from the index and the
        working tree. Returns the removed paths.
        """
        before = set(self.tracked_files())
        self._git("rm", "-r", "-f", "--quiet", "--ignore-unmatch", "--", pattern)
        return sorted(before - set(self.tracked_files()))

    def has_staged_changes(self) -> bool:
        completed = self._git("diff", "--cached", "--quiet", check=False)
        if completed.returncode not in (0, 1):
            raise GitError(f"git diff failed ({completed.returncode}).\n\n{completed.stdout}")
        return completed.returncode == 1

    def commit(self, message: str) -> bool:
        """
        Commit the index. Returns False instead of failing when there is nothing to
        commit.
        """
        if not self.has_staged_changes():
            return False
        try:
            self._git("commit", "-m", message)
        except CommandError as e:
            raise GitError(f"git commit failed ({e.returncode}).\n\n{e.output}") from e
        return True

    def push_force(self, branch: str, remote: str = "origin") -> None:
        try:
            self._git("push", "--force", remote, f"HEAD:refs/heads/{branch}")
        except CommandError as e:
            raise GitError(f"Something went wrong while pushing to {branch}.\n\n{e.output}") from e

    def head(self) -> str | None:
        completed = self._git("rev-parse", "--verify", "--quiet", "HEAD", check=False)
        if completed.returncode != 0:
            return None
        return completed.stdout.strip() or None

    def tracked_files(self) -> list[str]:
        # -z keeps paths unquoted regardless of core.quotePath.
        return [path for path in self._git("ls-files", "-z").stdout.split("\0") if path]
