from __future__ import annotations

import logging
import pathlib

import pytest

from tests.helpers import RecordingRunner, make_executable


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("jploot_tests")


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def fake_jdk(tmp_path: pathlib.Path) -> pathlib.Path:
    root = tmp_path / "jdk"
    make_executable(root / "bin" / "java")
    make_executable(root / "bin" / "jlink")
    (root / "jmods").mkdir(parents=True)
    return root
