from __future__ import annotations

import os
import pathlib
import stat

from jploot.errors import ToolFailure
from jploot.process import command_as_string


def make_executable(path: pathlib.Path, content: str = "#!/bin/sh\nexit 0\n") -> pathlib.Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, 0o755)
    return path


class RecordingRunner:
    """Records commands instead of running them.

    When ``build_java`` is set, a ``jlink`` call creates ``<output>/bin/java``
    the way a real image build would. ``fail_on`` makes every command whose
    executable ends with that name fail with status 1.
    """

    def __init__(self, *, build_java: bool = True, fail_on: str | None = None) -> None:
        self.commands: list[list[str]] = []
        self.build_java = build_java
        self.fail_on = fail_on

    def run(self, command: list[str]) -> None:
        self.commands.append(list(command))
        if self.fail_on is not None and command[0].endswith(self.fail_on):
            raise ToolFailure(
                f"Command {command_as_string(command)} failed with status 1",
                command=command,
                exit_code=1,
            )
        if self.build_java and command[0].endswith("jlink"):
            output = pathlib.Path(command[command.index("--output") + 1])
            make_executable(output / "bin" / "java")
            (output / "lib").mkdir(parents=True, exist_ok=True)

    @property
    def executables(self) -> list[str]:
        return [pathlib.Path(c[0]).name for c in self.commands]


def mode_of(path: pathlib.Path) -> int:
    return stat.S_IMODE(path.stat().st_mode)
