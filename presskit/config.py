"""Configuration loading for Presskit.

The project's settings live in the ``presskit:`` section of ``presskit.yml``.
They are read once per process into an immutable ConfigDocument and handed to
commands through a ConfigView. There is no in-memory write path: commands
change settings by patching the file (see patcher.py), and the new values are
seen by the next invocation.

Key classes:
- ConfigDocument: Read-only ordered mapping of key to scalar value.
- ConfigStore: Loads and caches documents by path.
- ConfigView: Named, typed read access used by the commands.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

import yaml

from .errors import ConfigMalformed, ConfigNotFound, UnknownKey

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "presskit.yml"
CONFIG_SECTION = "presskit"

_SCALAR_TYPES = (str, bool, int, float, type(None))


def _load_checked(text: str, source: Path, section: str) -> Any:
    """Load YAML text, rejecting repeated keys inside ``section``.

    Only the section's own keys (and the section key itself) are checked.
    Elsewhere in the file PyYAML's usual last-one-wins rule applies, since
    those parts belong to other tools.
    """
    loader = yaml.SafeLoader(text)
    try:
        node = loader.get_single_node()
        if isinstance(node, yaml.MappingNode):
            _reject_duplicates(node, source, only=section)
            for key_node, value_node in node.value:
                if _scalar_key(key_node) == section and isinstance(
                    value_node, yaml.MappingNode
                ):
                    _reject_duplicates(value_node, source)
        return loader.construct_document(node) if node is not None else None
    finally:
        loader.dispose()


def _scalar_key(node: yaml.Node) -> str | None:
    return node.value if isinstance(node, yaml.ScalarNode) else None


def _reject_duplicates(
    node: yaml.MappingNode, source: Path, only: str | None = None
) -> None:
    seen = set()
    for key_node, _ in node.value:
        key = _scalar_key(key_node)
        if key is None or (only is not None and key != only):
            continue
        if key in seen:
            line = key_node.start_mark.line + 1
            raise ConfigMalformed(source, f"duplicate key '{key}' on line {line}")
        seen.add(key)


class ConfigDocument(Mapping):
    """Immutable, ordered mapping of configuration keys to scalar values.

    Attributes:
        source: File the document was loaded from.
    """

    def __init__(self, values: Mapping[str, Any], source: Path | None = None):
        self._values = MappingProxyType(dict(values))
        self.source = source

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"ConfigDocument({dict(self._values)!r}, source={self.source!r})"


def parse_document(
    text: str, source: Path, section: str = CONFIG_SECTION
) -> ConfigDocument:
    """Parse YAML text and extract its namespaced section.

    Args:
        text: Raw YAML text.
        source: Path the text came from, used in error messages.
        section: Name of the top-level mapping to read.

    Returns:
        ConfigDocument with the section's entries, in file order.

    Raises:
        ConfigMalformed: If the text is not YAML, the section is missing,
            keys repeat inside the section, or a value is not a scalar.
    """
    try:
        loaded = _load_checked(text, source, section)
    except yaml.YAMLError as exc:
        raise ConfigMalformed(source, f"invalid YAML: {exc}") from exc

    if not isinstance(loaded, dict):
        raise ConfigMalformed(source, "expected a mapping at the top level")
    values = loaded.get(section)
    if not isinstance(values, dict):
        raise ConfigMalformed(source, f"missing '{section}:' section")

    for key, value in values.items():
        if not isinstance(key, str):
            raise ConfigMalformed(source, f"key {key!r} is not a string")
        if not isinstance(value, _SCALAR_TYPES):
            raise ConfigMalformed(
                source, f"value for '{key}' must be a string, number or boolean"
            )
    return ConfigDocument(values, source=source)


class ConfigStore:
    """Loads configuration documents, reading each file at most once.

    Example:
        >>> store = ConfigStore()
        >>> doc = store.load(Path("presskit.yml"))
        >>> store.load(Path("presskit.yml")) is doc
        True
    """

    def __init__(self, section: str = CONFIG_SECTION):
        self.section = section
        self._cache: dict[Path, ConfigDocument] = {}

    def load(self, path: Path) -> ConfigDocument:
        """Load the document at ``path``, returning the cached copy if any.

        Raises:
            ConfigNotFound: If the file is absent or cannot be read.
            ConfigMalformed: If the file cannot be parsed into a document.
        """
        key = Path(path).resolve()
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        try:
            text = key.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ConfigNotFound(Path(path)) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigNotFound(Path(path), str(exc)) from exc

        document = parse_document(text, Path(path), self.section)
        logger.debug("Loaded %d settings from %s", len(document), path)
        self._cache[key] = document
        return document

    def clear(self) -> None:
        """Forget all cached documents."""
        self._cache.clear()


default_store = ConfigStore()


def load_config(path: Path) -> ConfigDocument:
    """Load a document through the process-wide store."""
    return default_store.load(path)


@dataclass(frozen=True)
class ConfigView:
    """Read-only access to a loaded ConfigDocument.

    Commands receive one of these instead of the raw document. Well-known
    keys have typed properties so their names are not repeated as strings
    throughout the command layer.
    """

    document: ConfigDocument

    def get(self, key: str) -> Any:
        """Return the value for ``key``.

        Raises:
            UnknownKey: If the key was not present in the loaded document.
        """
        try:
            return self.document[key]
        except KeyError:
            raise UnknownKey(key, self.document.source) from None

    def __contains__(self, key: str) -> bool:
        return key in self.document

    def _str(self, key: str) -> str:
        value = self.get(key)
        return "" if value is None else str(value)

    def _int(self, key: str) -> int:
        value = self.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().isdecimal():
            return int(value)
        raise self._malformed(key, "an integer", value)

    def _bool(self, key: str) -> bool:
        value = self.get(key)
        if isinstance(value, bool):
            return value
        raise self._malformed(key, "true or false", value)

    def _malformed(self, key: str, expected: str, value: Any) -> ConfigMalformed:
        source = self.document.source or Path(CONFIG_FILENAME)
        return ConfigMalformed(source, f"'{key}' must be {expected}, got {value!r}")

    @property
    def theme(self) -> str:
        return self._str("theme")

    @property
    def ssh_user(self) -> str:
        return self._str("ssh_user")

    @property
    def ssh_port(self) -> int:
        return self._int("ssh_port")

    @property
    def document_root(self) -> str:
        return self._str("document_root")

    @property
    def rsync_delete(self) -> bool:
        return self._bool("rsync_delete")

    @property
    def rsync_args(self) -> str:
        return self._str("rsync_args")

    @property
    def deploy_default(self) -> str:
        return self._str("deploy_default")

    @property
    def deploy_branch(self) -> str:
        return self._str("deploy_branch")

    @property
    def public_dir(self) -> str:
        return self._str("public_dir")

    @property
    def source_dir(self) -> str:
        return self._str("source_dir")

    @property
    def blog_index_dir(self) -> str:
        return self._str("blog_index_dir")

    @property
    def deploy_dir(self) -> str:
        return self._str("deploy_dir")

    @property
    def posts_dir(self) -> str:
        return self._str("posts_dir")

    @property
    def themes_dir(self) -> str:
        return self._str("themes_dir")

    @property
    def new_post_ext(self) -> str:
        return self._str("new_post_ext")

    @property
    def new_page_ext(self) -> str:
        return self._str("new_page_ext")

    @property
    def server_port(self) -> int:
        return self._int("server_port")

    @property
    def generator(self) -> str:
        return self._str("generator")
