"""Self-extracting archive creation with ``makeself``."""

import logging
import pathlib

from jploot.log import verbose_log
from jploot.process import CommandRunner


def assemble_archive(
    *,
    root_dir: pathlib.Path,
    archive_path: pathlib.Path,
    label: str,
    launcher_relpath: pathlib.PurePath,
    runner: CommandRunner,
    logger: logging.Logger,
    verbose: bool = False,
    makeself_executable: str = "makeself",
) -> None:
    """Pack ``root_dir`` into a self-extracting archive.

    :param root_dir: Fully assembled archive root.
    :param archive_path: Output ``.run`` file.
    :param label: Archive description shown by ``makeself``.
    :param launcher_relpath: Startup script, relative to ``root_dir``.
    :param runner: Command runner.
    :param logger: Logger for progress output.
    :param verbose: Log progress at info instead of debug.
    :param makeself_executable: ``makeself`` binary to invoke.
    :raises ToolFailure: If ``makeself`` fails.
    """

    runner.run(
        [
            makeself_executable,
            str(root_dir.absolute()),
            str(archive_path.absolute()),
            label,
            str(launcher_relpath),
        ]
    )
    verbose_log(logger, verbose, f"Archive created: {archive_path.absolute()}")
