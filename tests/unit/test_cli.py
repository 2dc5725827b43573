"""Unit tests for the tasks CLI (scripts/tasks.py)."""

import pytest
from typer.testing import CliRunner

from scripts import tasks as tasks_cli
from vitae.pipeline import Task, TaskResult
from vitae.utils import config as config_module
from vitae.utils import logger as logger_module

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_project(project_root, tmp_path, monkeypatch):
    monkeypatch.setattr(config_module, "PROJECT_ROOT", project_root)
    monkeypatch.setattr(config_module, "VITAE_NOTIFY", False)
    monkeypatch.setattr(logger_module, "LOGS_PATH", tmp_path / "logs")
    return project_root


@pytest.fixture
def fake_tasks(monkeypatch):
    """Replace the task table; returns the contexts each fake task received."""
    seen = []

    def install(**actions):
        table = dict(tasks_cli.TASKS)
        for name, action in actions.items():
            def run(ctx, action=action):
                seen.append(ctx)
                return action(ctx)

            table[name] = Task(name, run)
        monkeypatch.setattr(tasks_cli, "TASKS", table)
        return seen

    return install


@pytest.mark.unit
def test_clean_minify_command(isolated_project, tmp_path):
    dist = isolated_project / "public" / "dist"
    (dist / "global.min.css").write_text("x", encoding="utf-8")
    (dist / "global.css").write_text("x", encoding="utf-8")

    result = runner.invoke(tasks_cli.app, ["clean-minify"])

    assert result.exit_code == 0, result.output
    assert "✓ cleanMinify finished" in result.output
    assert [p.name for p in dist.iterdir()] == ["global.css"]
    assert list((tmp_path / "logs").glob("cleanMinify_*/assets.log"))


@pytest.mark.unit
def test_failure_exits_with_one(fake_tasks):
    def broken(ctx):
        raise RuntimeError("Renderer failed")

    fake_tasks(**{"one-file": broken})

    result = runner.invoke(tasks_cli.app, ["one-file"])

    assert result.exit_code == 1
    assert "✗ one-file failed with 1 errors" in result.output
    assert "Renderer failed" in result.output


@pytest.mark.unit
def test_default_command_is_build(fake_tasks):
    seen = fake_tasks(build=lambda ctx: None)

    result = runner.invoke(tasks_cli.app, [])

    assert result.exit_code == 0, result.output
    assert len(seen) == 1


@pytest.mark.unit
def test_interrupt_exits_cleanly(fake_tasks):
    def interrupted(ctx):
        raise KeyboardInterrupt

    seen = fake_tasks(watch=interrupted)

    result = runner.invoke(tasks_cli.app, ["watch"])

    assert result.exit_code == 0
    assert "Interrupted" in result.output
    assert seen[0].stop_event.is_set()


@pytest.mark.unit
def test_global_options(fake_tasks, isolated_project, tmp_path):
    custom = tmp_path / "custom.yaml"
    custom.write_text("server:\n  port: 9090\n", encoding="utf-8")
    seen = fake_tasks(connect=lambda ctx: TaskResult(name="connect", success=True))

    result = runner.invoke(tasks_cli.app, ["--config", str(custom), "--verbose", "--no-notify", "connect"])

    assert result.exit_code == 0, result.output
    ctx = seen[0]
    assert ctx.verbose is True
    assert ctx.config.server_port == 9090
    assert ctx.config.notifications_enabled is False


@pytest.mark.unit
@pytest.mark.parametrize(
    "command,task_name",
    [
        ("sass", "sass"),
        ("typescript", "typescript"),
        ("service-worker", "serviceWorker"),
        ("vendor-dependencies", "vendor_dependencies"),
        ("minify", "minify"),
        ("composer-install", "composerInstall"),
        ("composer-update", "composerUpdate"),
        ("init", "init"),
    ],
)
def test_commands_map_to_tasks(fake_tasks, command, task_name):
    seen = fake_tasks(**{task_name: lambda ctx: None})

    result = runner.invoke(tasks_cli.app, [command])

    assert result.exit_code == 0, result.output
    assert len(seen) == 1
