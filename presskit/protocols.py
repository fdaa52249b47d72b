"""Protocol definitions for Presskit.

Small interfaces at the seams between the configuration core and the
command layer, so either side can be swapped out in tests.
"""

from __future__ import annotations

from abc import abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .dialects import ValueSpan


@runtime_checkable
class ValueMatcher(Protocol):
    """Locates the value token of a key in configuration text.

    Each dialect has one implementation. Matchers never modify text; they
    only report where the value of ``key`` sits so the caller can splice in
    a replacement without touching anything else.
    """

    @abstractmethod
    def find(self, text: str, key: str) -> ValueSpan | None:
        """Find the first occurrence of ``key`` in ``text``.

        Args:
            text: Full file contents.
            key: Configuration key, matched literally.

        Returns:
            Span of the value token, or None if the key does not occur in
            the shape this dialect recognises.
        """
        ...

    @abstractmethod
    def accepts(self, value: str) -> bool:
        """Return True if ``value`` can be written and found again by ``find``."""
        ...


@runtime_checkable
class CommandRunner(Protocol):
    """Runs an external program on behalf of a command."""

    @abstractmethod
    def __call__(self, args: list[str], cwd: Path | None = None) -> str:
        """Run ``args`` in ``cwd`` and return captured stdout.

        Raises:
            CommandFailed: If the program is missing or exits non-zero.
        """
        ...
