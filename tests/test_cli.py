from __future__ import annotations

import pathlib
import shutil

import pytest

from jploot.cli import env_flag, main
from jploot.errors import ConfigurationError
from tests.helpers import make_executable, mode_of

pytestmark = pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")

FAKE_JLINK = """#!/bin/sh
while [ $# -gt 0 ]; do
    if [ "$1" = "--output" ]; then
        out="$2"
    fi
    shift
done
mkdir -p "$out/bin" "$out/lib"
printf '#!/bin/sh\\n' > "$out/bin/java"
chmod 755 "$out/bin/java"
: > "$out/lib/libjava.so"
"""

FAKE_MAKESELF = """#!/bin/sh
printf '%s\\n' "$@" > "$2"
"""


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("JPLOOT_SKIP", "JPLOOT_ATTACH", "JPLOOT_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def tools(tmp_path: pathlib.Path, fake_jdk: pathlib.Path) -> dict[str, pathlib.Path]:
    make_executable(fake_jdk / "bin" / "jlink", FAKE_JLINK)
    return {
        "jdk": fake_jdk,
        "strip": make_executable(tmp_path / "tools" / "strip"),
        "makeself": make_executable(tmp_path / "tools" / "makeself", FAKE_MAKESELF),
        "failing": make_executable(tmp_path / "tools" / "failing", "#!/bin/sh\nexit 4\n"),
    }


def _argv(tmp_path: pathlib.Path, tools: dict[str, pathlib.Path], *extra: str) -> list[str]:
    jar = tmp_path / "repo" / "lib-1.0.jar"
    jar.parent.mkdir(parents=True, exist_ok=True)
    jar.write_bytes(b"PK")
    return [
        "build",
        str(jar),
        "--output-dir",
        str(tmp_path / "out"),
        "--main-class",
        "com.example.Main",
        "--script-name",
        "run.sh",
        "--artifact-id",
        "app",
        "--artifact-version",
        "1.0",
        "--java-home",
        str(tools["jdk"]),
        "--strip",
        str(tools["strip"]),
        "--makeself",
        str(tools["makeself"]),
        *extra,
    ]


def test_build(tmp_path: pathlib.Path, tools, capsys: pytest.CaptureFixture[str]):
    assert main(_argv(tmp_path, tools, "--module", "java.base", "--jlink-option=--no-man-pages")) == 0

    archive = tmp_path / "out" / "app-1.0.run"
    root = tmp_path / "out" / "archive-root"
    assert archive.read_text(encoding="utf-8").splitlines() == [
        str(root),
        str(archive),
        "app-1.0.run",
        "bin/run.sh",
    ]
    assert (root / "jploot" / "lib-1.0.jar").is_file()
    assert mode_of(root / "bin" / "run.sh") == 0o755
    assert capsys.readouterr().out.strip() == str(archive)


def test_no_attach_prints_nothing(tmp_path: pathlib.Path, tools, capsys: pytest.CaptureFixture[str]):
    assert main(_argv(tmp_path, tools, "--no-attach")) == 0
    assert capsys.readouterr().out == ""


def test_attach_environment_override(tmp_path: pathlib.Path, tools, capsys: pytest.CaptureFixture[str],
                                     monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JPLOOT_ATTACH", "false")
    assert main(_argv(tmp_path, tools)) == 0
    assert capsys.readouterr().out == ""


def test_skip_from_environment(tmp_path: pathlib.Path, tools, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JPLOOT_SKIP", "1")
    assert main(_argv(tmp_path, tools)) == 0
    assert (tmp_path / "out").exists() is False


def test_skip_needs_no_other_configuration(tmp_path: pathlib.Path, capsys: pytest.CaptureFixture[str]):
    argv = [
        "build", "--main-class", "Main", "--script-name", "run.sh", "--output-dir", str(tmp_path / "out"), "--skip",
    ]
    assert main(argv) == 0
    assert (tmp_path / "out").exists() is False
    assert capsys.readouterr().out == ""


def test_skip_from_environment_ignores_attach_value(tmp_path: pathlib.Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("JPLOOT_SKIP", "1")
    monkeypatch.setenv("JPLOOT_ATTACH", "maybe")
    argv = ["build", "--main-class", "Main", "--script-name", "run.sh", "--output-dir", str(tmp_path / "out")]
    assert main(argv) == 0


def test_verbose_archive_path_is_last_stdout_line(tmp_path: pathlib.Path, tools,
                                                  capfd: pytest.CaptureFixture[str]):
    noisy = make_executable(
        tmp_path / "tools" / "noisy-makeself",
        "#!/bin/sh\necho \"Header is 123 lines long\"\n" + FAKE_MAKESELF.split("\n", 1)[1],
    )
    assert main(_argv(tmp_path, tools, "-v", "--makeself", str(noisy))) == 0
    lines = capfd.readouterr().out.splitlines()
    assert "Header is 123 lines long" in lines
    assert lines[-1] == str(tmp_path / "out" / "app-1.0.run")


def test_tool_failure_exit_code(tmp_path: pathlib.Path, tools):
    assert main(_argv(tmp_path, tools, "--makeself", str(tools["failing"]))) == 1
    assert (tmp_path / "out" / "app-1.0.run").exists() is False


def test_missing_jdk_exit_code(tmp_path: pathlib.Path, tools):
    assert main(_argv(tmp_path, tools, "--java-home", str(tmp_path / "nope"))) == 1


def test_missing_final_name_is_configuration_error(tmp_path: pathlib.Path):
    argv = ["build", "--main-class", "Main", "--script-name", "run.sh", "--output-dir", str(tmp_path)]
    assert main(argv) == 2


def test_required_arguments():
    with pytest.raises(SystemExit):
        main(["build", "--script-name", "run.sh"])


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("TRUE", True), ("yes", True), ("on", True), ("0", False), ("off", False), ("", False)],
)
def test_env_flag(raw: str, expected: bool):
    assert env_flag("JPLOOT_X", not expected, {"JPLOOT_X": raw}) is expected


def test_env_flag_default():
    assert env_flag("JPLOOT_X", True, {}) is True


def test_env_flag_invalid():
    with pytest.raises(ConfigurationError):
        env_flag("JPLOOT_X", False, {"JPLOOT_X": "maybe"})
