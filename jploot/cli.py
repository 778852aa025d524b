"""Command line interface for jploot."""

import argparse
import logging
import os
import pathlib
import sys
from typing import Mapping

from jploot.config import DEFAULT_MODULES, PackagingConfig
from jploot.errors import ConfigurationError, JplootError
from jploot.launcher import Artifact
from jploot.log import configure_logging
from jploot.pipeline import Pipeline


_TRUE_VALUES: frozenset[str] = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES: frozenset[str] = frozenset({"0", "false", "no", "off", ""})


def env_flag(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Read a boolean override from the environment.

    :param name: Variable name, e.g. ``JPLOOT_SKIP``.
    :param default: Value when the variable is unset.
    :param environ: Environment mapping (defaults to ``os.environ``).
    :returns: Parsed flag.
    :raises ConfigurationError: If the value is not a recognized boolean.
    """

    if environ is None:
        environ = os.environ
    raw: str | None = environ.get(name)
    if raw is None:
        return default
    value: str = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"Invalid boolean for {name}: {raw!r}")


def _print_archive_path(archive_path: pathlib.Path) -> None:
    """Publish the archive by printing its path for the calling build to pick up.

    In verbose mode the tools share stdout; the path is always the last line.

    :param archive_path: Built archive.
    """

    print(archive_path.absolute(), flush=True)


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the jploot CLI.

    :returns: Parser with the ``build`` subcommand.
    """

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="jploot",
        description=(
            "Package a Java application, its jars and a minimal jlink runtime "
            "into one self-extracting .run archive."
        ),
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_build = subparsers.add_parser(
        "build",
        help="Build a self-extracting .run archive.",
    )
    p_build.add_argument(
        "artifacts",
        type=pathlib.Path,
        nargs="*",
        help="Resolved dependency files in classpath order. Only .jar files are added to the classpath.",
    )
    p_build.add_argument(
        "-o",
        "--output-dir",
        type=pathlib.Path,
        default=pathlib.Path("target") / "jploot",
        help="Output directory (default: target/jploot).",
    )
    p_build.add_argument(
        "--main-class",
        type=str,
        required=True,
        help="Fully qualified main class run by the launcher.",
    )
    p_build.add_argument(
        "--script-name",
        type=str,
        required=True,
        help="Launcher script name, installed under bin/.",
    )
    p_build.add_argument(
        "-m",
        "--module",
        dest="modules",
        action="append",
        default=None,
        help=f"Module to link into the runtime image. Repeatable (default: {','.join(DEFAULT_MODULES)}).",
    )
    p_build.add_argument(
        "--jlink-option",
        dest="jlink_options",
        action="append",
        default=[],
        help="Extra jlink argument passed verbatim. Repeatable; use --jlink-option=--compress=2 form.",
    )
    p_build.add_argument(
        "--args",
        type=str,
        default=None,
        help="Arguments appended to the java command line in the launcher.",
    )
    p_build.add_argument(
        "--final-name",
        type=str,
        default=None,
        help="Archive file name (default: <artifact-id>-<artifact-version>.run).",
    )
    p_build.add_argument(
        "--artifact-id",
        type=str,
        default=None,
        help="Project name used for the default archive name.",
    )
    p_build.add_argument(
        "--artifact-version",
        type=str,
        default=None,
        help="Project version used for the default archive name.",
    )
    p_build.add_argument(
        "--java-home",
        type=pathlib.Path,
        default=None,
        help="JDK used to build the runtime image (default: $JAVA_HOME).",
    )
    p_build.add_argument(
        "--launcher-template",
        type=pathlib.Path,
        default=None,
        help="Custom launcher template with [[CLASSPATH]], [[MAINCLASS]] and [[ARGS]] placeholders.",
    )
    p_build.add_argument(
        "--strip",
        dest="strip_executable",
        type=str,
        default="strip",
        help="strip executable (default: strip).",
    )
    p_build.add_argument(
        "--makeself",
        dest="makeself_executable",
        type=str,
        default="makeself",
        help="makeself executable (default: makeself).",
    )
    p_build.add_argument(
        "--skip",
        action="store_true",
        default=None,
        help="Do nothing (also JPLOOT_SKIP).",
    )
    p_build.add_argument(
        "--attach",
        action=argparse.BooleanOptionalAction,
        default=None,
        help=(
            "Print the archive path as the last stdout line for the calling build to register "
            "(also JPLOOT_ATTACH; default: on)."
        ),
    )
    p_build.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Forward tool output and enable debug logging (also JPLOOT_VERBOSE).",
    )
    p_build.add_argument(
        "-q",
        "--quiet",
        action="count",
        default=0,
        help="Reduce logging. Pass multiple times to suppress more output.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the jploot CLI.

    :param argv: Optional argv list (excluding program name).
    :returns: Exit code.
    """

    parser: argparse.ArgumentParser = _build_parser()
    ns = parser.parse_args(argv)
    if ns.command == "build":
        try:
            verbose: bool = ns.verbose >= 1 or env_flag("JPLOOT_VERBOSE", False)
        except ConfigurationError as e:
            print(f"jploot: {e}", file=sys.stderr)
            return 2
        logger: logging.Logger = configure_logging(verbose=1 if verbose is True else 0, quiet=ns.quiet)

        try:
            skip: bool = ns.skip if ns.skip is not None else env_flag("JPLOOT_SKIP", False)
        except ConfigurationError as e:
            logger.error(f"jploot: {e}")
            return 2
        if skip is True:
            logger.info("jploot: Skipping")
            return 0

        try:
            attach: bool = ns.attach if ns.attach is not None else env_flag("JPLOOT_ATTACH", True)

            modules: tuple[str, ...] = (
                tuple(ns.modules) if ns.modules is not None else DEFAULT_MODULES
            )
            config: PackagingConfig = PackagingConfig.create(
                output_directory=ns.output_dir,
                main_class=ns.main_class,
                script_name=ns.script_name,
                final_name=ns.final_name,
                artifact_id=ns.artifact_id,
                version=ns.artifact_version,
                artifacts=tuple(Artifact.from_path(p) for p in ns.artifacts),
                modules=modules,
                jlink_options=tuple(ns.jlink_options),
                args=ns.args,
                verbose=verbose,
                attach=attach,
                java_home=ns.java_home,
                launcher_template=ns.launcher_template,
                strip_executable=ns.strip_executable,
                makeself_executable=ns.makeself_executable,
            )
        except ConfigurationError as e:
            logger.error(f"jploot: {e}")
            return 2

        try:
            Pipeline(config, logger=logger, publisher=_print_archive_path).run()
        except JplootError:
            return 1
        return 0

    raise AssertionError(f"Unhandled command: {ns.command}")
