from __future__ import annotations

import logging
import os
from pathlib import Path

import pytest

from photo_map.core.env import configure_logging, load_dotenv_if_present


@pytest.fixture
def restore_levels():
    root = logging.getLogger()
    pil = logging.getLogger("PIL")
    saved = (root.level, pil.level)
    yield
    root.setLevel(saved[0])
    pil.setLevel(saved[1])


def test_configure_logging_reads_level(monkeypatch, restore_levels) -> None:
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert configure_logging() == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("PIL").level == logging.WARNING


def test_configure_logging_ignores_unknown_level(monkeypatch, restore_levels) -> None:
    monkeypatch.setenv("LOG_LEVEL", "chatty")

    assert configure_logging() == logging.INFO


def test_dotenv_does_not_override_env(tmp_path: Path, monkeypatch) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("THUMB_MAX_SIZE=111\nCLUSTER_STRATEGY=nearest\n")
    monkeypatch.setenv("THUMB_MAX_SIZE", "222")
    monkeypatch.delenv("CLUSTER_STRATEGY", raising=False)

    try:
        assert load_dotenv_if_present(env_file) is True
        assert os.environ["THUMB_MAX_SIZE"] == "222"
        assert os.environ["CLUSTER_STRATEGY"] == "nearest"
    finally:
        os.environ.pop("CLUSTER_STRATEGY", None)


def test_missing_dotenv(tmp_path: Path) -> None:
    assert load_dotenv_if_present(tmp_path / ".env") is False
