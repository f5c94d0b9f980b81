"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

This module must be the only place that:
- Constructs GitHub REST endpoints
- Sends HTTP requests to the GitHub API
- Interprets GitHub API responses / error payloads

The action needs exactly one endpoint: listing the branches of a repository.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import requests

from tsbuild.errors import ActionError

LOG = logging.getLogger(__name__)

PER_PAGE = 100


class GitHubError(ActionError):
    pass


@dataclass(frozen=True)
class BranchInfo:
    name: str
    sha: str = ""
    protected: bool = False


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com") -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "tsbuild-action",
        }

    def _get(self, url: str, *, params: dict[str, Any] | None = None) -> requests.Response:
        try:
            r = requests.request("GET", url, headers=self._headers(), params=params, timeout=30)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed: GET {url}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            message = payload.get("message", payload) if isinstance(payload, dict) else payload
            raise GitHubError(f"GitHub API error {r.status_code} GET {url}: {message}")
        return r

    def list_branches(self, owner: str, repo: str) -> list[BranchInfo]:
        """
        Return every branch of owner/repo, following `Link: rel="next"` pagination.
        """
        url: str | None = f"{self._api_base}/repos/{owner}/{repo}/branches"
        params: dict[str, Any] | None = {"per_page": PER_PAGE}
        branches: list[BranchInfo] = []
        while url:
            r = self._get(url, params=params)
            for item in r.json() or []:
                branches.append(
                    BranchInfo(
                        name=str(item["name"]),
                        sha=str((item.get("commit") or {}).get("sha") or ""),
                        protected=bool(item.get("protected", False)),
                    )
                )
            url = (r.links.get("next") or {}).get("url")
            # The next link already carries the query string.
            params = None
        return branches

    def find_branch(self, owner: str, repo: str, name: str) -> str | None:
        """
        Return the remote spelling of the branch matching `name` case-insensitively,
        or None when the branch does not exist yet.
        """
        wanted = name.lower()
        for branch in self.list_branches(owner, repo):
            if branch.name.lower() == wanted:
                LOG.debug("Found branch %s at %s", branch.name, branch.sha or "<unknown>")
                if branch.protected:
                    LOG.warning("Branch %s is protected; the force push may be rejected.", branch.name)
                return branch.name
        return None
