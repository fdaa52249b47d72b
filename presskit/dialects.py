"""Configuration file dialects.

Presskit edits two kinds of configuration file in place:

- SCRIPT files (``config.rb``): assignments such as ``css_dir = "public/css"``.
- DATA files (``_config.yml``, ``presskit.yml``): lines such as
  ``  destination: public  # output``.

The dialect is chosen from the file suffix alone. Each dialect has a matcher
that finds the value token for a key, so edits can replace just that token
and leave spacing, quotes, indentation and comments alone.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import UnsupportedDialect
from .protocols import ValueMatcher


class Dialect(enum.Enum):
    SCRIPT = "script"
    DATA = "data"


@dataclass(frozen=True)
class ValueSpan:
    """Location of a value token inside a text.

    Attributes:
        start: Offset of the first character of the value.
        end: Offset just past the last character of the value.
        value: The current value text.
    """

    start: int
    end: int
    value: str

    def replace(self, text: str, new_value: str) -> str:
        """Return ``text`` with this span replaced by ``new_value``."""
        return text[: self.start] + new_value + text[self.end :]


class AssignmentMatcher:
    """Matches ``key = "value"`` assignments in SCRIPT files.

    The key must start its line (indentation allowed). Spacing around ``=``
    is free. The value is wrapped in single or double quotes and may be empty,
    but cannot contain quotes, backslashes or whitespace.
    """

    _TEMPLATE = (
        r"^[ \t]*{key}[ \t]*=[ \t]*"
        r"(?P<quote>[\"'])(?P<value>[^\"'\\\s]*)(?P=quote)"
    )
    _VALUE = re.compile(r"[^\"'\\\s]*")

    def pattern(self, key: str) -> re.Pattern[str]:
        return re.compile(self._TEMPLATE.format(key=re.escape(key)), re.MULTILINE)

    def find(self, text: str, key: str) -> ValueSpan | None:
        match = self.pattern(key).search(text)
        if match is None:
            return None
        return ValueSpan(match.start("value"), match.end("value"), match["value"])

    def accepts(self, value: str) -> bool:
        return self._VALUE.fullmatch(value) is not None


class KeyValueLineMatcher:
    """Matches ``key: value`` lines in DATA files.

    Any indentation is accepted, so keys nested one level down (as in the
    ``presskit:`` section) are found too. At least one space or tab must
    follow the colon. The value runs up to an end-of-line comment (`` #``) or
    trailing whitespace; it cannot start with ``#``. Lines with no value are
    not matched.

    Quotes are part of the value token: editing ``date_format: "ordinal"``
    to ``long`` writes ``date_format: long``. Pass the quotes in the new
    value to keep them.
    """

    _VALUE_PATTERN = r"[^ \t\r\n#](?:[^\r\n]*?[^ \t\r\n])?"
    _TEMPLATE = (
        r"^[ \t]*{key}:[ \t]+"
        r"(?P<value>" + _VALUE_PATTERN + r")"
        r"(?:[ \t]+#[^\r\n]*)?[ \t]*(?=\r?$)"
    )
    _VALUE = re.compile(_VALUE_PATTERN)
    _COMMENT = re.compile(r"[ \t]#")

    def pattern(self, key: str) -> re.Pattern[str]:
        return re.compile(self._TEMPLATE.format(key=re.escape(key)), re.MULTILINE)

    def find(self, text: str, key: str) -> ValueSpan | None:
        match = self.pattern(key).search(text)
        if match is None:
            return None
        return ValueSpan(match.start("value"), match.end("value"), match["value"])

    def accepts(self, value: str) -> bool:
        # " #" inside the value would be read back as the start of a comment
        return (
            self._VALUE.fullmatch(value) is not None
            and self._COMMENT.search(value) is None
        )


class DialectResolver:
    """Maps file suffixes to dialects and their matchers.

    New suffixes can be registered without touching the patcher.
    """

    def __init__(self):
        self._suffixes: dict[str, Dialect] = {}
        self._matchers: dict[Dialect, ValueMatcher] = {
            Dialect.SCRIPT: AssignmentMatcher(),
            Dialect.DATA: KeyValueLineMatcher(),
        }
        self.register(".rb", Dialect.SCRIPT)
        self.register(".yml", Dialect.DATA)
        self.register(".yaml", Dialect.DATA)

    def register(self, suffix: str, dialect: Dialect) -> None:
        """Associate a file suffix (including the dot) with a dialect."""
        self._suffixes[suffix.lower()] = dialect

    def resolve(self, path: Path) -> Dialect:
        """Return the dialect for ``path`` based on its suffix.

        Raises:
            UnsupportedDialect: If the suffix is not registered.
        """
        dialect = self._suffixes.get(Path(path).suffix.lower())
        if dialect is None:
            raise UnsupportedDialect(Path(path))
        return dialect

    def matcher(self, dialect: Dialect) -> ValueMatcher:
        return self._matchers[dialect]


default_resolver = DialectResolver()


def resolve_dialect(path: Path) -> Dialect:
    """Resolve a dialect with the default resolver."""
    return default_resolver.resolve(path)


def render_value(value: Any) -> str:
    """Render a new configuration value as the text written into a file.

    Examples:
        >>> render_value(True)
        'true'
        >>> render_value(22)
        '22'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
