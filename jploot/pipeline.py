"""Packaging pipeline.

Stages run strictly in order, each blocking on its external tool:

1. locate the JDK
2. ``jlink`` the runtime image into ``archive-root/jvm``
3. ``strip`` its shared objects
4. copy jars into ``archive-root/jploot`` and write ``archive-root/bin/<script>``
5. ``makeself`` the archive root into ``<output>/<finalName>``
6. optionally publish the archive

The first failure aborts the run.
"""

import logging
import pathlib
import time
from typing import Callable

from jploot.archive import assemble_archive
from jploot.config import OutputLayout, PackagingConfig
from jploot.errors import ConfigurationError, IOFailure
from jploot.image import build_runtime_image, strip_runtime_image
from jploot.launcher import (
    APPLICATION_DIR_NAME,
    DependencyEntry,
    collect_dependencies,
    load_launcher_template,
    render_classpath,
    render_launcher,
    write_launcher,
)
from jploot.log import LOGGER_NAME
from jploot.process import CommandRunner, ProcessRunner
from jploot.toolchain import MissingToolchain, locate_toolchain


Publisher = Callable[[pathlib.Path], None]


class Pipeline:
    """One packaging run over an immutable :class:`PackagingConfig`.

    :ivar config: Run configuration.
    :ivar runner: Runs the external tools.
    :ivar logger: Progress and failure logger.
    :ivar publisher: Receives the archive path when ``config.attach`` is set.
    """

    def __init__(
        self,
        config: PackagingConfig,
        *,
        runner: CommandRunner | None = None,
        logger: logging.Logger | None = None,
        publisher: Publisher | None = None,
    ) -> None:
        if logger is None:
            logger = logging.getLogger(LOGGER_NAME)
        if runner is None:
            runner = ProcessRunner(verbose=config.verbose, logger=logger)
        self.config: PackagingConfig = config
        self.runner: CommandRunner = runner
        self.logger: logging.Logger = logger
        self.publisher: Publisher | None = publisher

    def run(self) -> pathlib.Path | None:
        """Execute every stage.

        :returns: The archive path, or ``None`` when skipped.
        :raises JplootError: On the first failing stage.
        """

        config: PackagingConfig = self.config
        logger: logging.Logger = self.logger
        if config.skip is True:
            logger.info("jploot: Skipping")
            return None

        t0: float = time.perf_counter()
        layout: OutputLayout = config.layout
        try:
            layout.output_directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"jploot: cannot create {layout.output_directory}: {e}")
            raise IOFailure(f"Cannot create output directory {layout.output_directory}") from e

        toolchain = locate_toolchain(java_home=config.java_home)
        if isinstance(toolchain, MissingToolchain):
            message: str = f"Expected JDK {toolchain.attempted_root} is missing"
            logger.error(f"jploot: {message}")
            raise ConfigurationError(message)
        logger.info(f"jploot: JDK={toolchain.java_home}")

        build_runtime_image(
            toolchain=toolchain,
            modules=config.modules,
            jlink_options=config.jlink_options,
            image_dir=layout.image_dir,
            runner=self.runner,
            logger=logger,
            verbose=config.verbose,
        )
        strip_runtime_image(
            image_dir=layout.image_dir,
            runner=self.runner,
            logger=logger,
            verbose=config.verbose,
            strip_executable=config.strip_executable,
        )
        self._install_application(layout)

        archive_path: pathlib.Path = layout.archive(config.final_name)
        assemble_archive(
            root_dir=layout.archive_root,
            archive_path=archive_path,
            label=config.final_name,
            launcher_relpath=pathlib.PurePath("bin", config.script_name),
            runner=self.runner,
            logger=logger,
            verbose=config.verbose,
            makeself_executable=config.makeself_executable,
        )

        if config.attach is True and self.publisher is not None:
            self.publisher(archive_path)

        t1: float = time.perf_counter()
        logger.info(f"jploot: wrote {archive_path} in {t1 - t0:.2f}s")
        return archive_path

    def _install_application(self, layout: OutputLayout) -> pathlib.Path:
        """Copy the jars and write the launcher.

        :param layout: Output layout of this run.
        :returns: Launcher path.
        """

        config: PackagingConfig = self.config
        entries: list[DependencyEntry] = collect_dependencies(
            artifacts=config.artifacts,
            target_dir=layout.application_dir,
            logger=self.logger,
            verbose=config.verbose,
        )
        template: str = load_launcher_template(config.launcher_template, logger=self.logger)
        script: str = render_launcher(
            template=template,
            classpath=render_classpath(entries, app_dir_name=APPLICATION_DIR_NAME),
            main_class=config.main_class,
            args=config.args,
        )
        return write_launcher(
            root=layout.archive_root,
            script_name=config.script_name,
            script=script,
            logger=self.logger,
            verbose=config.verbose,
        )
