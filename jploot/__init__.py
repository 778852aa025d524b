"""jploot.

Packages a Java application, its dependency jars and a minimized ``jlink``
runtime image into a single self-extracting ``.run`` archive.
"""

__all__: list[str] = ["__version__"]

__version__: str = "0.1.0"
