from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("gcevm")
except PackageNotFoundError:
    __version__ = "unknown"
