import io
import json
import subprocess

import pytest

import commitbot.cli as cli_module
from commitbot.cli import CLI
from commitbot.config import Provider, load_config
from commitbot.core import RunOutcome, RunState
from commitbot.git import GitRepo
from commitbot.secrets import API_KEY_SECRET, MemorySecretStore


def _cli(stdin_text="", secrets=None, password="sk-typed"):
    out, err = io.StringIO(), io.StringIO()
    cli = CLI(
        secret_store=secrets if secrets is not None else MemorySecretStore(),
        stdin=io.StringIO(stdin_text),
        stdout=out,
        stderr=err,
        password_prompt=lambda _prompt: password,
    )
    return cli, out, err


def _stub_workflow(monkeypatch, outcome):
    seen = {}

    class _Workflow:
        def __init__(self, secret_store, repo_path=None, config=None, **_kw):
            seen["repo_path"] = repo_path
            seen["config_loader"] = _kw.get("config_loader")

        def run(self):
            return outcome

    monkeypatch.setattr(cli_module, "CommitBotWorkflow", _Workflow)
    return seen


DONE = RunOutcome(state=RunState.DONE, candidates=["feat: one", "fix: two\n\nbody"])


def test_generate_pick_writes_to_stdout(monkeypatch):
    seen = _stub_workflow(monkeypatch, DONE)
    cli, out, _err = _cli()

    code = cli.run(["generate", "--pick", "2", "--repo", "/tmp/r"])

    assert code == 0
    assert out.getvalue() == "fix: two\n\nbody\n"
    assert seen["repo_path"] == "/tmp/r"


def test_generate_interactive_choice(monkeypatch):
    _stub_workflow(monkeypatch, DONE)
    cli, out, err = _cli(stdin_text="1\n")

    code = cli.run(["generate"])

    assert code == 0
    assert out.getvalue() == "feat: one\n"
    assert "1. feat: one" in err.getvalue()
    assert "AI Suggestions" in err.getvalue()


def test_generate_blank_choice_writes_nothing(monkeypatch):
    _stub_workflow(monkeypatch, DONE)
    cli, out, _err = _cli(stdin_text="\n")

    assert cli.run(["generate"]) == 2
    assert out.getvalue() == ""


def test_generate_output_file(monkeypatch, tmp_path):
    _stub_workflow(monkeypatch, DONE)
    cli, out, _err = _cli()
    target = tmp_path / "COMMIT_EDITMSG"

    assert cli.run(["generate", "--pick", "1", "--output", str(target)]) == 0
    assert target.read_text() == "feat: one\n"
    assert out.getvalue() == ""


def test_generate_warning_outcome(monkeypatch):
    _stub_workflow(
        monkeypatch,
        RunOutcome(
            state=RunState.FAILED,
            message="No staged changes found.",
            severity="warning",
        ),
    )
    cli, out, err = _cli()

    assert cli.run(["generate"]) == 0
    assert "CommitBot: No staged changes found." in err.getvalue()
    assert "Error" not in err.getvalue()
    assert out.getvalue() == ""


def test_generate_error_outcome(monkeypatch):
    _stub_workflow(
        monkeypatch,
        RunOutcome(
            state=RunState.FAILED,
            message="API request failed with status 500: oops",
            severity="error",
        ),
    )
    cli, _out, err = _cli()

    assert cli.run(["generate"]) == 1
    assert "CommitBot Error: API request failed with status 500: oops" in err.getvalue()


def test_generate_passes_overrides_into_config(monkeypatch):
    seen = _stub_workflow(monkeypatch, DONE)
    cli, _out, _err = _cli()

    cli.run(["generate", "--pick", "1", "--provider", "openai", "--suggestion-count", "5"])

    config = seen["config_loader"]()
    assert config.provider is Provider.OPENAI
    assert config.suggestion_count == 5


def _fake_repo(monkeypatch, tmp_path, diff):
    # git unavailable: the repo root is found by walking up to .git
    def fake_run(*args, **kwargs):
        raise FileNotFoundError()

    monkeypatch.setattr(subprocess, "run", fake_run)
    (tmp_path / ".git").mkdir()
    monkeypatch.setattr(GitRepo, "get_staged_diff", lambda self: diff)
    monkeypatch.setattr(GitRepo, "get_recent_subjects", lambda self, count=10: [])


def test_generate_invalid_override_reports_error(monkeypatch, tmp_path):
    _fake_repo(monkeypatch, tmp_path, "+x")
    cli, _out, err = _cli(secrets=MemorySecretStore({API_KEY_SECRET: "k"}))

    assert cli.run(["generate", "--repo", str(tmp_path), "--provider", "nope"]) == 1
    assert "Unknown provider" in err.getvalue()


def test_corrupt_config_does_not_hide_missing_staged_changes(
    monkeypatch, tmp_path, isolated_config
):
    _fake_repo(monkeypatch, tmp_path, "")
    isolated_config.mkdir(parents=True)
    (isolated_config / "config.json").write_text("{not json")
    cli, _out, err = _cli()

    assert cli.run(["generate", "--repo", str(tmp_path)]) == 0
    assert "CommitBot: No staged changes found." in err.getvalue()
    assert "Error" not in err.getvalue()


def test_generate_unwritable_output_reports_error(monkeypatch, tmp_path):
    _stub_workflow(monkeypatch, DONE)
    cli, out, err = _cli()
    target = tmp_path / "missing-dir" / "COMMIT_EDITMSG"

    assert cli.run(["generate", "--pick", "1", "--output", str(target)]) == 1
    assert "CommitBot Error: Could not write" in err.getvalue()
    assert out.getvalue() == ""


def test_bare_command_defaults_to_generate(monkeypatch):
    _stub_workflow(monkeypatch, DONE)
    cli, out, _err = _cli(stdin_text="2\n")

    assert cli.run([]) == 0
    assert out.getvalue().startswith("fix: two")


def test_configure_non_interactive(isolated_config):
    secrets = MemorySecretStore()
    cli, _out, err = _cli(secrets=secrets)

    code = cli.run(
        [
            "configure",
            "--provider",
            "OpenAI",
            "--endpoint",
            "https://proxy.local/v1/chat/completions",
            "--api-key",
            "sk-flag",
            "--suggestion-count",
            "4",
        ]
    )

    assert code == 0
    assert secrets.get(API_KEY_SECRET) == "sk-flag"
    cfg = load_config()
    assert cfg.provider is Provider.OPENAI
    assert cfg.endpoint == "https://proxy.local/v1/chat/completions"
    assert cfg.suggestion_count == 4
    assert "OpenAI API Key saved successfully" in err.getvalue()


def test_configure_interactive_keeps_default_endpoint(isolated_config):
    secrets = MemorySecretStore()
    # provider #2 (OpenAI), blank endpoint keeps the shown default
    cli, _out, _err = _cli(stdin_text="2\n\n", secrets=secrets, password="sk-typed")

    assert cli.run(["configure"]) == 0

    saved = json.loads((isolated_config / "config.json").read_text())
    assert saved["provider"] == "openai"
    assert saved["endpoint"] == ""
    assert secrets.get(API_KEY_SECRET) == "sk-typed"


def test_configure_cancelled_at_provider_prompt(isolated_config):
    cli, _out, _err = _cli(stdin_text="\n")

    assert cli.run(["configure"]) == 2
    assert not (isolated_config / "config.json").exists()


def test_keyboard_interrupt_exits_130(monkeypatch):
    class _Workflow:
        def __init__(self, *args, **kwargs):
            pass

        def run(self):
            raise KeyboardInterrupt

    monkeypatch.setattr(cli_module, "CommitBotWorkflow", _Workflow)
    cli, out, err = _cli()

    assert cli.run(["generate"]) == 130
    assert out.getvalue() == ""
    assert "cancelled" in err.getvalue()


def test_version_flag(capsys):
    cli, _out, _err = _cli()
    with pytest.raises(SystemExit) as ei:
        cli.run(["--version"])
    assert ei.value.code == 0
    assert "commitbot" in capsys.readouterr().out


def test_configure_does_not_persist_env_overrides(isolated_config, monkeypatch):
    # Given temporary env overrides
    monkeypatch.setenv("COMMITBOT_ENDPOINT", "https://temp.proxy/x")
    monkeypatch.setenv("COMMITBOT_REQUEST_TIMEOUT", "7")
    cli, _out, _err = _cli(secrets=MemorySecretStore())

    # When configuring non-interactively
    assert cli.run(["configure", "--provider", "openai", "--api-key", "k"]) == 0

    # Then only the chosen settings and file defaults are saved
    saved = json.loads((isolated_config / "config.json").read_text())
    assert saved["provider"] == "openai"
    assert saved["endpoint"] == ""
    assert saved["request_timeout"] == 60.0


def test_configure_keeps_stored_endpoint_over_env(isolated_config, monkeypatch):
    isolated_config.mkdir(parents=True)
    (isolated_config / "config.json").write_text(
        json.dumps({"provider": "openai", "endpoint": "https://stored.local/v1"})
    )
    monkeypatch.setenv("COMMITBOT_ENDPOINT", "https://temp.proxy/x")
    # provider #2 (OpenAI), blank endpoint keeps the stored value
    cli, _out, err = _cli(stdin_text="2\n\n", secrets=MemorySecretStore())

    assert cli.run(["configure", "--api-key", "k"]) == 0

    saved = json.loads((isolated_config / "config.json").read_text())
    assert saved["endpoint"] == "https://stored.local/v1"
    assert "[https://stored.local/v1]" in err.getvalue()


def test_configure_save_failure_reports_error(isolated_config, monkeypatch):
    def fail_save(config):
        raise PermissionError("read-only file system")

    monkeypatch.setattr(cli_module, "save_config", fail_save)
    secrets = MemorySecretStore()
    cli, _out, err = _cli(secrets=secrets)

    assert cli.run(["configure", "--provider", "gemini", "--api-key", "k"]) == 1
    assert "CommitBot Error: read-only file system" in err.getvalue()
    assert "saved successfully" not in err.getvalue()
    assert secrets.get(API_KEY_SECRET) is None
