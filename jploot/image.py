"""Runtime image creation (``jlink``) and hardening (``strip``)."""

import logging
import os
import pathlib

from jploot.errors import ConfigurationError, ValidationFailure
from jploot.log import verbose_log
from jploot.process import CommandRunner
from jploot.toolchain import INTERPRETER_NAME, FoundToolchain, is_executable_file


SHARED_OBJECT_SUFFIX: str = ".so"


def build_runtime_image(
    *,
    toolchain: FoundToolchain,
    modules: tuple[str, ...] | list[str],
    jlink_options: tuple[str, ...] | list[str],
    image_dir: pathlib.Path,
    runner: CommandRunner,
    logger: logging.Logger,
    verbose: bool = False,
) -> None:
    """Build a minimized runtime image with ``jlink``.

    An existing ``image_dir`` is reused as-is. Only existence is checked, so an
    image built with other modules or options is not rebuilt.

    :param toolchain: JDK providing ``jlink`` and ``jmods``.
    :param modules: Modules passed to ``--add-modules``; must not be empty.
    :param jlink_options: Extra ``jlink`` arguments, passed verbatim and in order.
    :param image_dir: Output directory for the image.
    :param runner: Command runner.
    :param logger: Logger for progress output.
    :param verbose: Log progress at info instead of debug.
    :raises ConfigurationError: If ``modules`` is empty.
    :raises ToolFailure: If ``jlink`` fails.
    :raises ValidationFailure: If ``jlink`` succeeded but produced no ``bin/java``.
    """

    if image_dir.exists() is True:
        logger.warning(f"jploot: JRE already present: {image_dir}; skipped creation")
        return

    if len(modules) == 0:
        message: str = "At least one module is required to build the runtime image"
        logger.error(f"jploot: {message}")
        raise ConfigurationError(message)

    command: list[str] = [str(toolchain.jlink.absolute()), "-v"]
    command.extend(jlink_options)
    command.extend(["--module-path", str(toolchain.jmods.absolute())])
    command.extend(["--add-modules", ",".join(modules)])
    command.extend(["--output", str(image_dir.absolute())])
    runner.run(command)

    target_java: pathlib.Path = image_dir / "bin" / INTERPRETER_NAME
    if is_executable_file(target_java) is False:
        message = f"Unexpected missing executable file {target_java} after a successful jlink building"
        logger.error(f"jploot: {message}")
        raise ValidationFailure(message)

    verbose_log(logger, verbose, f"JRE generated: {image_dir}")


def find_shared_objects(image_dir: pathlib.Path) -> list[pathlib.Path]:
    """List the shared objects below ``image_dir/lib``.

    :param image_dir: Runtime image root.
    :returns: Absolute paths of regular ``*.so`` files, sorted.
    """

    lib_dir: pathlib.Path = image_dir / "lib"
    found: list[pathlib.Path] = []
    for root_str, _dirs, files in os.walk(lib_dir):
        root_path: pathlib.Path = pathlib.Path(root_str)
        for name in files:
            if name.endswith(SHARED_OBJECT_SUFFIX) is False:
                continue
            path: pathlib.Path = root_path / name
            if path.is_file() is True:
                found.append(path.absolute())
    return sorted(found)


def strip_runtime_image(
    *,
    image_dir: pathlib.Path,
    runner: CommandRunner,
    logger: logging.Logger,
    verbose: bool = False,
    strip_executable: str = "strip",
) -> None:
    """Strip unneeded symbols from every shared object in the image.

    A single ``strip`` call receives all files; it still runs when there are none.

    :param image_dir: Runtime image root.
    :param runner: Command runner.
    :param logger: Logger for progress output.
    :param verbose: Log progress at info instead of debug.
    :param strip_executable: ``strip`` binary to invoke.
    :raises ToolFailure: If ``strip`` fails.
    """

    if (image_dir / "lib").is_dir() is False:
        logger.warning(f"jploot: no lib directory in {image_dir}; nothing to strip")

    command: list[str] = [strip_executable, "-p", "--strip-unneeded"]
    command.extend(str(p) for p in find_shared_objects(image_dir))
    runner.run(command)

    verbose_log(logger, verbose, "JRE stripped down")
