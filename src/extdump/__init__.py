"""extdump: inventory the extension methods declared in C# solutions."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("extdump")
except PackageNotFoundError:
    __version__ = "dev"
