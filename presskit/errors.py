"""Error types for Presskit.

Every error raised by the configuration core derives from PresskitError so
the command layer can turn it into a user-facing message in one place.
"""

from __future__ import annotations

from pathlib import Path


class PresskitError(Exception):
    """Base class for all Presskit errors."""


class ConfigNotFound(PresskitError):
    """Configuration file is missing or unreadable.

    Attributes:
        path: Path that was requested.
    """

    def __init__(self, path: Path, reason: str = "file not found"):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read configuration {path}: {reason}")


class ConfigMalformed(PresskitError):
    """Configuration document is not a usable mapping of scalars.

    Attributes:
        path: Path of the offending document.
        message: Human-readable description of the problem.
    """

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class UnknownKey(PresskitError, KeyError):
    """A key was read that the loaded configuration does not contain."""

    def __init__(self, key: str, source: Path | None = None):
        self.key = key
        self.source = source
        where = f" in {source}" if source else ""
        super().__init__(f"Unknown configuration key '{key}'{where}")

    def __str__(self) -> str:
        return str(self.args[0])


class UnsupportedDialect(PresskitError):
    """The target file's suffix maps to no known configuration dialect.

    Attributes:
        path: Target file.
        suffix: The suffix that was not recognised.
    """

    def __init__(self, path: Path):
        self.path = path
        self.suffix = path.suffix
        super().__init__(
            f"Don't know how to edit {path.name}: "
            f"unsupported file type '{self.suffix or '(none)'}'"
        )


class ReadFailure(PresskitError):
    """Target file of a patch could not be read."""

    def __init__(self, path: Path, original_error: Exception | None = None):
        self.path = path
        self.original_error = original_error
        super().__init__(f"Cannot read {path}: {original_error}")


class WriteFailure(PresskitError):
    """Patched text could not be written back to the target file."""

    def __init__(self, path: Path, original_error: Exception | None = None):
        self.path = path
        self.original_error = original_error
        super().__init__(f"Cannot write {path}: {original_error}")


class CommandFailed(PresskitError):
    """An external program was missing or exited with a non-zero status.

    Attributes:
        command: The argument vector that was run.
        returncode: Exit status, or None when the program was not found.
    """

    def __init__(self, command: list[str], returncode: int | None, detail: str = ""):
        self.command = command
        self.returncode = returncode
        self.detail = detail
        if returncode is None:
            message = f"Executable not found: {command[0]}"
        else:
            message = f"Command failed ({returncode}): {' '.join(command)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)


class InvalidValue(PresskitError):
    """A new value cannot be written in the target file's dialect.

    Such a value could not be found again by the next edit, so it is
    rejected before the file is touched.
    """

    def __init__(self, key: str, value: str, dialect_name: str):
        self.key = key
        self.value = value
        self.dialect_name = dialect_name
        super().__init__(
            f"Cannot set '{key}' to {value!r}: not a valid {dialect_name} value"
        )
