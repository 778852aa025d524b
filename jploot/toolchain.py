"""JDK discovery.

A toolchain is either a :class:`FoundToolchain` (a JDK root with a usable
``java`` and ``jlink``) or a :class:`MissingToolchain` that remembers which root
was tried. Missing toolchains are an ordinary result; the pipeline turns them
into a :class:`~jploot.errors.ConfigurationError`.
"""

from dataclasses import dataclass
import os
import pathlib
from typing import Mapping

from jploot.errors import ConfigurationError


JAVA_HOME_ENV: str = "JAVA_HOME"
INTERPRETER_NAME: str = "java"
LINKER_NAME: str = "jlink"
MODULE_LIBRARY_DIR: str = "jmods"


@dataclass(frozen=True, slots=True)
class FoundToolchain:
    """A validated JDK.

    :ivar root: JDK installation directory.
    """

    root: pathlib.Path

    @property
    def found(self) -> bool:
        return True

    @property
    def java_home(self) -> pathlib.Path:
        return self.root

    @property
    def java(self) -> pathlib.Path:
        return self.root / "bin" / INTERPRETER_NAME

    @property
    def jlink(self) -> pathlib.Path:
        return self.root / "bin" / LINKER_NAME

    @property
    def jmods(self) -> pathlib.Path:
        return self.root / MODULE_LIBRARY_DIR


@dataclass(frozen=True, slots=True)
class MissingToolchain:
    """No usable JDK; every path accessor raises.

    :ivar attempted_root: The candidate root that failed validation, if any.
    """

    attempted_root: pathlib.Path | None

    @property
    def found(self) -> bool:
        return False

    def _missing(self) -> ConfigurationError:
        return ConfigurationError(f"JDK not found {self.attempted_root}")

    @property
    def java_home(self) -> pathlib.Path:
        raise self._missing()

    @property
    def java(self) -> pathlib.Path:
        raise self._missing()

    @property
    def jlink(self) -> pathlib.Path:
        raise self._missing()

    @property
    def jmods(self) -> pathlib.Path:
        raise self._missing()


ToolchainDescriptor = FoundToolchain | MissingToolchain


def is_executable_file(path: pathlib.Path) -> bool:
    """Check that ``path`` is a regular file the current user may execute.

    :param path: Candidate path.
    :returns: ``True`` if it is an executable regular file.
    """

    if path.is_file() is False:
        return False
    return os.access(path, os.X_OK)


def locate_toolchain(
    *,
    java_home: str | os.PathLike[str] | None = None,
    environ: Mapping[str, str] | None = None,
) -> ToolchainDescriptor:
    """Find and validate the JDK to build the runtime image with.

    The candidate is ``java_home`` when given, else ``$JAVA_HOME``.

    :param java_home: Optional explicit JDK root.
    :param environ: Environment to read ``JAVA_HOME`` from (defaults to ``os.environ``).
    :returns: A found toolchain, or a missing one recording the candidate root.
    """

    if environ is None:
        environ = os.environ

    candidate: str | os.PathLike[str] | None = java_home
    if candidate is None:
        candidate = environ.get(JAVA_HOME_ENV)
    if candidate is None or str(candidate) == "":
        return MissingToolchain(attempted_root=None)

    root: pathlib.Path = pathlib.Path(candidate)
    found: FoundToolchain = FoundToolchain(root=root)
    if (
        root.is_dir() is True
        and is_executable_file(found.java) is True
        and is_executable_file(found.jlink) is True
    ):
        return found
    return MissingToolchain(attempted_root=root)
