import logging
from pathlib import Path

import pytest

from tsbuild import cli
from tsbuild.inputs import TOKEN_REQUIRED_MESSAGE

RUNNER_VARS = (
    "GITHUB_ACTIONS",
    "GITHUB_ACTION_PATH",
    "GITHUB_OUTPUT",
    "GITHUB_EVENT_PATH",
    "RUNNER_DEBUG",
    "INPUT_PUSHTOBRANCH",
    "INPUT_BRANCH",
    "INPUT_GITHUBTOKEN",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in RUNNER_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GITHUB_REPOSITORY", "octo/demo")
    monkeypatch.setenv("GITHUB_SHA", "abc123")


@pytest.fixture(autouse=True)
def restore_logging():
    # cli.main reconfigures the root logger; keep that from leaking into other tests.
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_push_without_token_exits_before_any_work(fake_run, workspace: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("INPUT_PUSHTOBRANCH", "true")

    code = cli.main(["run", "--workspace", str(workspace)])

    assert code == 1
    assert fake_run.calls == []
    assert TOKEN_REQUIRED_MESSAGE in capsys.readouterr().err


def test_build_only_exits_zero_and_writes_outputs(fake_run, workspace: Path, tmp_path: Path, monkeypatch) -> None:
    output_file = tmp_path / "github_output"
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
    monkeypatch.setenv("INPUT_PUSHTOBRANCH", "false")

    code = cli.main(["run", "--workspace", str(workspace)])

    assert code == 0
    assert len(fake_run.commands("tsc")) == 1
    assert fake_run.commands("git") == []
    lines = output_file.read_text().splitlines()
    assert lines[0].startswith("published<<ghadelimiter_")
    assert lines[1] == "false"


def test_build_failure_is_reported_under_actions(fake_run, workspace: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    fake_run.returncodes[("tsc",)] = 1

    code = cli.main(["run", "--workspace", str(workspace), "--no-push"])

    assert code == 1
    assert "::error::Something went wrong while building." in capsys.readouterr().out


def test_missing_tsconfig_has_clear_message(fake_run, tmp_path: Path, capsys) -> None:
    code = cli.main(["run", "--workspace", str(tmp_path)])
    assert code == 1
    assert "No tsconfig.json found" in capsys.readouterr().err


def test_unexpected_errors_are_reported_generically(workspace: Path, monkeypatch, capsys) -> None:
    def boom(inputs):
        raise KeyError("boom")

    monkeypatch.setattr(cli, "run", boom)

    code = cli.main(["run", "--workspace", str(workspace)])

    assert code == 1
    assert "Something went wrong: 'boom'" in capsys.readouterr().err


def test_token_is_masked_under_actions(fake_run, workspace: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    monkeypatch.setenv("INPUT_GITHUBTOKEN", "s3cret")

    code = cli.main(["run", "--workspace", str(workspace), "--no-push"])

    assert code == 0
    assert "::add-mask::s3cret" in capsys.readouterr().out


def test_action_defaults_are_loaded_from_action_path(fake_run, workspace: Path, tmp_path: Path, monkeypatch, capsys) -> None:
    action_dir = tmp_path / "action"
    action_dir.mkdir()
    (action_dir / "action.yml").write_text("inputs:\n  pushToBranch:\n    default: 'true'\n")
    monkeypatch.setenv("GITHUB_ACTION_PATH", str(action_dir))

    code = cli.main(["run", "--workspace", str(workspace)])

    # Push is on by default here and there is no token.
    assert code == 1
    assert TOKEN_REQUIRED_MESSAGE in capsys.readouterr().err


def test_token_is_masked_in_its_url_encoded_form_too(fake_run, workspace: Path, monkeypatch, capsys) -> None:
    monkeypatch.setenv("GITHUB_ACTIONS", "true")
    monkeypatch.setenv("INPUT_GITHUBTOKEN", "s3/cret")

    code = cli.main(["run", "--workspace", str(workspace), "--no-push"])

    out = capsys.readouterr().out.splitlines()
    assert code == 0
    assert "::add-mask::s3/cret" in out
    # `%` is escaped in workflow command data, so s3%2Fcret arrives as s3%252Fcret.
    assert "::add-mask::s3%252Fcret" in out
