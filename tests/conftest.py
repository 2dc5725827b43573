"""Shared fixtures: a throwaway project tree with its BuildConfig."""

from pathlib import Path

import pytest
from loguru import logger

from vitae.pipeline import TaskContext
from vitae.utils.config import load_build_config
from vitae.utils.notifications import ErrorReporter


@pytest.fixture
def project_root(tmp_path) -> Path:
    root = tmp_path / "site"
    (root / "public" / "dist").mkdir(parents=True)
    (root / "front" / "sass").mkdir(parents=True)
    (root / "front" / "ts").mkdir(parents=True)
    (root / "fonts").mkdir()
    return root


@pytest.fixture
def config(project_root):
    return load_build_config(project_root=project_root, notifications=False)


@pytest.fixture
def reporter():
    return ErrorReporter(notifications_enabled=False)


@pytest.fixture
def task_ctx(config, reporter):
    ctx = TaskContext(config=config, reporter=reporter)
    yield ctx
    ctx.shutdown()


@pytest.fixture(autouse=True)
def reset_logger():
    """CLI tests point loguru at captured streams; leave a silent sink behind."""
    yield
    logger.remove()
    logger.add(lambda message: None, level="DEBUG")
