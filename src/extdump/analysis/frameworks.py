"""Build-target labels recognised in compiled-output paths."""

from __future__ import annotations

KNOWN_TARGET_FRAMEWORKS = frozenset({
    # .NET Framework
    "net45", "net451", "net452", "net46", "net461", "net462",
    "net47", "net471", "net472", "net48", "net481",
    # .NET Standard / .NET Core
    "netstandard1.0", "netstandard1.3", "netstandard1.6",
    "netstandard2.0", "netstandard2.1",
    "netcoreapp2.1", "netcoreapp3.1",
    # .NET 5+
    "net5.0", "net6.0", "net7.0",
    "net6.0-windows", "net7.0-windows",
    "net8.0",
    "net8.0-android", "net8.0-browser", "net8.0-ios", "net8.0-maccatalyst",
    "net8.0-unix", "net8.0-windows",
    "net9.0",
    "net9.0-android", "net9.0-browser", "net9.0-freebsd", "net9.0-haiku",
    "net9.0-illumos", "net9.0-ios", "net9.0-linux", "net9.0-maccatalyst",
    "net9.0-osx", "net9.0-solaris", "net9.0-tvos", "net9.0-unix",
    "net9.0-wasi", "net9.0-windows",
    "net10.0",
    "net10.0-android", "net10.0-browser", "net10.0-ios", "net10.0-linux",
    "net10.0-maccatalyst", "net10.0-osx", "net10.0-unix", "net10.0-windows",
})


def is_known_target_framework(label: str) -> bool:
    """Exact, case-sensitive membership test."""
    return label in KNOWN_TARGET_FRAMEWORKS
