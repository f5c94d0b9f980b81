from __future__ import annotations

from pathlib import Path

import pytest

from tsbuild.inputs import Inputs

from .fakes import FakeRun
from .gitutil import git


@pytest.fixture
def fake_run(monkeypatch) -> FakeRun:
    fake = FakeRun()
    monkeypatch.setattr("tsbuild.process.subprocess.run", fake)
    return fake


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    ws = tmp_path / "ws"
    (ws / "lib").mkdir(parents=True)
    (ws / "tsconfig.json").write_text('{\n  // compiled in place\n  "compilerOptions": {"target": "es2019",}\n}\n')
    (ws / "package.json").write_text('{"name": "demo", "version": "1.0.0"}\n')
    (ws / "index.ts").write_text("export const answer: number = 42;\n")
    (ws / "index.js").write_text("export const answer = 42;\n")
    (ws / "lib" / "util.js").write_text("module.exports = {};\n")
    return ws


@pytest.fixture
def remote(tmp_path: Path) -> Path:
    """A bare repository with one commit on `main`."""
    bare = tmp_path / "remote.git"
    git(["init", "--bare", str(bare)], cwd=tmp_path)
    git(["symbolic-ref", "HEAD", "refs/heads/main"], cwd=bare)

    seed = tmp_path / "seed"
    seed.mkdir()
    git(["init"], cwd=seed)
    git(["checkout", "-b", "main"], cwd=seed)
    (seed / "README.md").write_text("# demo\n")
    git(["add", "-A"], cwd=seed)
    git(["commit", "-m", "initial"], cwd=seed)
    git(["remote", "add", "origin", str(bare)], cwd=seed)
    git(["push", "origin", "main"], cwd=seed)
    return bare


@pytest.fixture
def make_inputs(workspace: Path):
    def _make(**overrides) -> Inputs:
        values = dict(
            workspace=workspace,
            push_to_branch=True,
            branch="gh-pages",
            github_token="s3cret-token",
            repository="octo/demo",
            sha="0123456789abcdef0123456789abcdef01234567",
            actor="octocat",
        )
        values.update(overrides)
        return Inputs(**values)

    return _make
