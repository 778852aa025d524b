"""Application jars and the generated launcher script.

The archive root holds the runtime image in ``jvm/``, the application jars in
``jploot/`` and the launcher in ``bin/``. The launcher builds its classpath from
``$JPLOOT_HOME``, which it resolves from its own location at runtime.
"""

from dataclasses import dataclass
import logging
import os
import pathlib
import re
import shutil
import textwrap

from jploot.errors import IOFailure
from jploot.log import verbose_log
from jploot.process import escape


APPLICATION_DIR_NAME: str = "jploot"
LAUNCHER_MODE: int = 0o755
CLASSPATH_EXTENSIONS: frozenset[str] = frozenset({".jar"})

_PLACEHOLDER_RE: re.Pattern[str] = re.compile(r"\[\[(CLASSPATH|MAINCLASS|ARGS)\]\]")
_SHELL_SAFE_RE: re.Pattern[str] = re.compile(r"[A-Za-z0-9_@%+=:,./-]+")


@dataclass(frozen=True, slots=True)
class Artifact:
    """A resolved dependency handed over by the host build.

    :ivar path: Backing file.
    :ivar added_to_classpath: Whether the artifact belongs on the classpath.
    :ivar coordinates: Human-readable identity used in log output.
    """

    path: pathlib.Path
    added_to_classpath: bool
    coordinates: str

    @classmethod
    def from_path(cls, path: str | os.PathLike[str]) -> "Artifact":
        """Describe a file given on the command line.

        Jars go on the classpath; anything else (poms, sources) is ignored.

        :param path: Artifact file.
        :returns: Artifact for ``path``.
        """

        p: pathlib.Path = pathlib.Path(path)
        return cls(
            path=p,
            added_to_classpath=p.suffix in CLASSPATH_EXTENSIONS,
            coordinates=p.name,
        )


@dataclass(frozen=True, slots=True)
class DependencyEntry:
    """A jar copied into the application directory.

    :ivar file_name: Name inside the application directory.
    :ivar source_path: Where it was copied from.
    """

    file_name: str
    source_path: pathlib.Path


def collect_dependencies(
    *,
    artifacts: list[Artifact] | tuple[Artifact, ...],
    target_dir: pathlib.Path,
    logger: logging.Logger,
    verbose: bool = False,
) -> list[DependencyEntry]:
    """Copy classpath artifacts into ``target_dir``.

    Input order is kept; it becomes the classpath order. Files with the same name
    overwrite each other and each still gets its own entry.

    :param artifacts: Resolved artifacts in resolution order.
    :param target_dir: Application directory to copy into.
    :param logger: Logger for progress output.
    :param verbose: Log progress at info instead of debug.
    :returns: Copied entries, in input order.
    :raises IOFailure: If a directory cannot be created or a file cannot be copied.
    """

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"jploot: cannot create {target_dir}: {e}")
        raise IOFailure(f"Cannot create directory {target_dir}") from e

    verbose_log(logger, verbose, "Installed application artifacts:")
    entries: list[DependencyEntry] = []
    for artifact in artifacts:
        if artifact.added_to_classpath is False:
            verbose_log(logger, verbose, f"Ignored artifact: {artifact.coordinates}")
            continue

        source: pathlib.Path = artifact.path
        target: pathlib.Path = target_dir / source.name
        logger.debug(f"jploot: copy {source.absolute()} to {target}")
        try:
            shutil.copy2(source, target)
        except OSError as e:
            logger.error(f"jploot: cannot copy {source} to {target}: {e}")
            raise IOFailure(f"Cannot copy {source} to {target}") from e
        entries.append(DependencyEntry(file_name=source.name, source_path=source))
        verbose_log(logger, verbose, f"{source.name} ({artifact.coordinates})")
    return entries


def _shell_word(name: str) -> str:
    """Quote ``name`` for the launcher unless it is made of shell-safe characters.

    Safe names stay bare on purpose; the shell reads both forms as the same word.

    :param name: File name.
    :returns: ``name`` itself, or its single-quoted form.
    """

    if _SHELL_SAFE_RE.fullmatch(name) is not None:
        return name
    return escape(name)


def render_classpath(
    entries: list[DependencyEntry] | tuple[DependencyEntry, ...],
    *,
    app_dir_name: str = APPLICATION_DIR_NAME,
) -> str:
    """Build the launcher's ``-cp`` value.

    :param entries: Collected jars, in classpath order.
    :param app_dir_name: Application directory name under ``$JPLOOT_HOME``.
    :returns: ``"$JPLOOT_HOME"/<app_dir_name>/<jar>`` items joined with ``:``.
    """

    return ":".join(
        f'"$JPLOOT_HOME"/{app_dir_name}/{_shell_word(entry.file_name)}' for entry in entries
    )


def render_launcher(*, template: str, classpath: str, main_class: str, args: str | None) -> str:
    """Fill the launcher template.

    All placeholders are replaced in one pass over the template; replacement
    values are inserted verbatim and never scanned for placeholders themselves.

    :param template: Template text with ``[[CLASSPATH]]``, ``[[MAINCLASS]]``, ``[[ARGS]]``.
    :param classpath: Value for ``[[CLASSPATH]]``.
    :param main_class: Value for ``[[MAINCLASS]]``.
    :param args: Value for ``[[ARGS]]``; ``None`` means empty.
    :returns: Rendered script.
    """

    values: dict[str, str] = {
        "CLASSPATH": classpath,
        "MAINCLASS": main_class,
        "ARGS": args if args is not None else "",
    }
    return _PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], template)


def write_launcher(
    *,
    root: pathlib.Path,
    script_name: str,
    script: str,
    logger: logging.Logger,
    verbose: bool = False,
) -> pathlib.Path:
    """Install the launcher as ``root/bin/<script_name>`` with mode ``rwxr-xr-x``.

    :param root: Archive root directory.
    :param script_name: Launcher file name.
    :param script: Rendered launcher text.
    :param logger: Logger for progress output.
    :param verbose: Log progress at info instead of debug.
    :returns: Path of the written launcher.
    :raises IOFailure: If the file cannot be written or its mode cannot be set.
    """

    bin_dir: pathlib.Path = root / "bin"
    launcher: pathlib.Path = bin_dir / script_name
    try:
        bin_dir.mkdir(parents=True, exist_ok=True)
        with open(launcher, "w", encoding="utf-8", newline="\n") as f:
            f.write(script)
        os.chmod(launcher, LAUNCHER_MODE)
    except OSError as e:
        logger.error(f"jploot: cannot install launcher {launcher}: {e}")
        raise IOFailure(f"Cannot install launcher {launcher}") from e

    verbose_log(logger, verbose, f"JRE launcher script added: {launcher.absolute()}")
    return launcher


def load_launcher_template(
    path: pathlib.Path | None = None,
    *,
    logger: logging.Logger | None = None,
) -> str:
    """Return the launcher template text.

    :param path: Optional custom template file; the built-in one is used otherwise.
    :param logger: Optional logger for read failures.
    :returns: Template text.
    :raises IOFailure: If the custom template cannot be read.
    """

    if path is None:
        return LAUNCHER_TEMPLATE
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        if logger is not None:
            logger.error(f"jploot: cannot read launcher template {path}: {e}")
        raise IOFailure(f"Cannot read launcher template {path}") from e


LAUNCHER_TEMPLATE: str = textwrap.dedent(
    r'''
    #!/bin/sh
    # This file was generated by jploot.
    #
    # JPLOOT_HOME is the unpacked archive: jvm/ holds the runtime image,
    # jploot/ the application jars and bin/ this launcher.

    set -e

    JPLOOT_HOME="$(cd "$(dirname "$0")/.." && pwd)"
    export JPLOOT_HOME

    exec "$JPLOOT_HOME"/jvm/bin/java -cp [[CLASSPATH]] [[MAINCLASS]] [[ARGS]] "$@"
    '''
).lstrip()
