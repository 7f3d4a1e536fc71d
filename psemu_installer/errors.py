from __future__ import annotations


class InstallerError(Exception):
    """Base class for installer failures."""


class UnsupportedPlatformError(InstallerError):
    """The host is not a macOS machine on arm64 or x86_64. Fatal."""


class CommandError(InstallerError):
    """An external command exited non-zero (or timed out) with check=True."""

    def __init__(self, argv: list[str], returncode: int, stderr: str = "") -> None:
        self.argv = argv
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"Command failed ({returncode}): {' '.join(argv)}\n{stderr}".rstrip())


class DownloadError(InstallerError):
    """A download failed on every attempt."""

    def __init__(self, message: str, record: object | None = None) -> None:
        self.record = record
        super().__init__(message)
