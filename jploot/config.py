"""Packaging configuration and the output directory layout."""

from dataclasses import dataclass
import pathlib

from jploot.errors import ConfigurationError
from jploot.launcher import APPLICATION_DIR_NAME, Artifact


DEFAULT_MODULES: tuple[str, ...] = ("java.base",)
ARCHIVE_SUFFIX: str = ".run"


@dataclass(frozen=True, slots=True)
class OutputLayout:
    """Paths of one packaging run, all derived from the output directory.

    :ivar output_directory: Directory receiving the archive root and the archive.
    """

    output_directory: pathlib.Path

    @property
    def archive_root(self) -> pathlib.Path:
        return self.output_directory / "archive-root"

    @property
    def image_dir(self) -> pathlib.Path:
        return self.archive_root / "jvm"

    @property
    def application_dir(self) -> pathlib.Path:
        return self.archive_root / APPLICATION_DIR_NAME

    @property
    def bin_dir(self) -> pathlib.Path:
        return self.archive_root / "bin"

    def launcher(self, script_name: str) -> pathlib.Path:
        return self.bin_dir / script_name

    def archive(self, final_name: str) -> pathlib.Path:
        return self.output_directory / final_name


@dataclass(frozen=True, slots=True)
class PackagingConfig:
    """Everything one packaging run needs.

    :ivar output_directory: Working and output directory.
    :ivar main_class: Fully qualified class the launcher runs.
    :ivar script_name: Launcher file name under ``bin/``.
    :ivar final_name: Archive file name under ``output_directory``.
    :ivar artifacts: Resolved dependencies, in resolution order.
    :ivar modules: Modules linked into the runtime image.
    :ivar jlink_options: Extra ``jlink`` arguments, verbatim.
    :ivar args: Arguments appended to the java invocation in the launcher.
    :ivar verbose: Forward tool output and log progress at info.
    :ivar skip: Do nothing.
    :ivar attach: Hand the archive to the publisher when done.
    :ivar java_home: JDK root; ``$JAVA_HOME`` when unset.
    :ivar launcher_template: Custom launcher template file.
    :ivar strip_executable: ``strip`` binary.
    :ivar makeself_executable: ``makeself`` binary.
    """

    output_directory: pathlib.Path
    main_class: str
    script_name: str
    final_name: str
    artifacts: tuple[Artifact, ...] = ()
    modules: tuple[str, ...] = DEFAULT_MODULES
    jlink_options: tuple[str, ...] = ()
    args: str | None = None
    verbose: bool = False
    skip: bool = False
    attach: bool = True
    java_home: pathlib.Path | None = None
    launcher_template: pathlib.Path | None = None
    strip_executable: str = "strip"
    makeself_executable: str = "makeself"

    @property
    def layout(self) -> OutputLayout:
        return OutputLayout(output_directory=self.output_directory)

    @classmethod
    def create(
        cls,
        *,
        output_directory: pathlib.Path,
        main_class: str | None,
        script_name: str | None,
        final_name: str | None = None,
        artifact_id: str | None = None,
        version: str | None = None,
        **kwargs: object,
    ) -> "PackagingConfig":
        """Validate required values and fill in the default archive name.

        The default archive name is ``<artifact_id>-<version>.run``.

        :param output_directory: Working and output directory.
        :param main_class: Launcher main class (required).
        :param script_name: Launcher file name (required).
        :param final_name: Archive file name; derived when ``None``.
        :param artifact_id: Project name used for the default archive name.
        :param version: Project version used for the default archive name.
        :param kwargs: Remaining :class:`PackagingConfig` fields.
        :returns: Validated config.
        :raises ConfigurationError: If a required value is missing or invalid.
        """

        if main_class is None or main_class.strip() == "":
            raise ConfigurationError("mainClass is required")
        if script_name is None or script_name.strip() == "":
            raise ConfigurationError("scriptName is required")
        if "/" in script_name or script_name in {".", ".."}:
            raise ConfigurationError(f"scriptName must be a plain file name: {script_name!r}")

        if final_name is None:
            if artifact_id is None or version is None:
                raise ConfigurationError(
                    "finalName is required unless both artifact id and version are given"
                )
            final_name = f"{artifact_id}-{version}{ARCHIVE_SUFFIX}"
        if final_name.strip() == "" or "/" in final_name:
            raise ConfigurationError(f"finalName must be a plain file name: {final_name!r}")

        return cls(
            output_directory=output_directory,
            main_class=main_class,
            script_name=script_name,
            final_name=final_name,
            **kwargs,  # type: ignore[arg-type]
        )
