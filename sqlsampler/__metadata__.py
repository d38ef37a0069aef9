"""Metadata for the project."""

from importlib.metadata import PackageNotFoundError, metadata, version

__all__ = ("__project__", "__version__")

try:
    __version__ = version("sqlsampler")
    __project__ = metadata("sqlsampler")["Name"]
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.1"
    __project__ = "SQLSampler"
finally:
    del version, PackageNotFoundError, metadata
