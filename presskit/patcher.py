"""In-place, format-preserving edits to configuration files.

A PatchRequest names one file and an ordered list of (key, value) edits.
ConfigPatcher folds the file's text through the edits in order, replacing
only the value token of each key it can find, then writes the text back.

Keys that do not appear in the file in the dialect's expected shape are
skipped without error. The skipped keys are reported in PatchResult so
callers can tell a real edit from a no-op. New values the dialect could not
find again on a later edit are rejected with InvalidValue before anything is
written.

The write is a plain overwrite of the target file; there is no temporary
file or lock. An interrupted write can leave the file truncated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Union

from .dialects import Dialect, DialectResolver, default_resolver, render_value
from .errors import InvalidValue, ReadFailure, WriteFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Edit:
    """A single (key, new value) instruction."""

    key: str
    value: Any

    @property
    def text(self) -> str:
        """The value as it will appear in the file."""
        return render_value(self.value)


EditsLike = Union[Mapping[str, Any], Iterable[Union[Edit, tuple[str, Any]]], tuple[str, Any]]


def _coerce_edits(edits: EditsLike) -> tuple[Edit, ...]:
    """Normalize the accepted call shapes into a tuple of Edits.

    Accepts a mapping (applied in iteration order), an iterable of Edit or
    (key, value) pairs, or a single (key, value) pair.
    """
    if isinstance(edits, Mapping):
        return tuple(Edit(key, value) for key, value in edits.items())
    if isinstance(edits, Edit):
        return (edits,)
    if (
        isinstance(edits, tuple)
        and len(edits) == 2
        and isinstance(edits[0], str)
    ):
        return (Edit(edits[0], edits[1]),)

    result = []
    for item in edits:
        if isinstance(item, Edit):
            result.append(item)
        else:
            key, value = item
            result.append(Edit(key, value))
    return tuple(result)


@dataclass(frozen=True)
class PatchRequest:
    """An ordered batch of edits targeting one file.

    Attributes:
        path: File to edit.
        edits: Edits in application order; a later edit of the same key wins.
    """

    path: Path
    edits: tuple[Edit, ...] = ()

    @classmethod
    def of(cls, path: Path | str, edits: EditsLike) -> PatchRequest:
        """Build a request from any accepted edit shape.

        Examples:
            >>> PatchRequest.of("config.rb", ("css_dir", "public/css"))
            >>> PatchRequest.of("_config.yml", {"destination": "public", "root": "/"})
        """
        return cls(Path(path), _coerce_edits(edits))


@dataclass
class PatchResult:
    """Outcome of applying a PatchRequest.

    Attributes:
        path: File that was edited.
        dialect: Dialect used to match keys.
        modified: Keys whose value token was found, in first-seen order.
        skipped: Keys that could not be located and were left alone.
        changed: Whether the written text differs from what was read.
    """

    path: Path
    dialect: Dialect
    modified: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    changed: bool = False

    @property
    def complete(self) -> bool:
        """True if every edit found its key."""
        return not self.skipped


class ConfigPatcher:
    """Applies PatchRequests to files on disk.

    Attributes:
        resolver: Chooses the dialect and matcher for each target file.
    """

    def __init__(self, resolver: DialectResolver | None = None):
        self.resolver = resolver or default_resolver

    def apply(self, path: Path | str, edits: EditsLike) -> PatchResult:
        """Apply ``edits`` to the file at ``path``.

        Args:
            path: Target configuration file.
            edits: A mapping, a sequence of Edit/(key, value), or one pair.

        Returns:
            PatchResult describing which keys were modified or skipped.

        Raises:
            UnsupportedDialect: If the file type is not recognised. The file
                is not read or written.
            ReadFailure: If the file cannot be read. Nothing is written.
            InvalidValue: If a new value could not be found again by the
                dialect's matcher, such as an empty DATA value or a SCRIPT
                value holding a quote. Nothing is written.
            WriteFailure: If writing the edited text fails.
        """
        return self.submit(PatchRequest.of(path, edits))

    def submit(self, request: PatchRequest) -> PatchResult:
        """Apply a prepared PatchRequest. See ``apply``."""
        path = request.path
        dialect = self.resolver.resolve(path)

        try:
            with open(path, encoding="utf-8", newline="") as f:
                original = f.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ReadFailure(path, exc) from exc

        text, result = self.patch_text(original, request.edits, dialect)
        result.path = path

        try:
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(text)
        except OSError as exc:
            raise WriteFailure(path, exc) from exc

        logger.debug(
            "Patched %s: modified=%s skipped=%s",
            path,
            result.modified,
            result.skipped,
        )
        return result

    def patch_text(
        self, text: str, edits: Iterable[Edit], dialect: Dialect
    ) -> tuple[str, PatchResult]:
        """Fold ``text`` through ``edits`` without touching the filesystem.

        Returns:
            Tuple of (edited text, PatchResult with an empty path).

        Raises:
            InvalidValue: If any new value cannot be expressed in ``dialect``.
                Checked for every edit before the first one is applied.
        """
        matcher = self.resolver.matcher(dialect)
        edits = tuple(edits)
        for edit in edits:
            if not matcher.accepts(edit.text):
                raise InvalidValue(edit.key, edit.text, dialect.value)

        result = PatchResult(path=Path(), dialect=dialect)
        current = text

        for edit in edits:
            span = matcher.find(current, edit.key)
            if span is None:
                logger.debug("Key %r not found, leaving text unchanged", edit.key)
                if edit.key not in result.skipped and edit.key not in result.modified:
                    result.skipped.append(edit.key)
                continue
            logger.debug("Setting %r: %r -> %r", edit.key, span.value, edit.text)
            current = span.replace(current, edit.text)
            if edit.key in result.skipped:
                result.skipped.remove(edit.key)
            if edit.key not in result.modified:
                result.modified.append(edit.key)

        result.changed = current != text
        return current, result


default_patcher = ConfigPatcher()


def patch_file(path: Path | str, edits: EditsLike) -> PatchResult:
    """Apply edits with the default patcher."""
    return default_patcher.apply(path, edits)
