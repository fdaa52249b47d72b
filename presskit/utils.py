"""Utility functions for Presskit.

Key functions:
    slugify: Convert a title to a URL slug.
    titleize: Convert a filename to a human-readable title.
    normalize_root_dir: Clean up a user-supplied publishing sub-directory.
    post_filename: Build the dated filename for a new post.
    ensure_clean_dir: Ensure a directory exists and is empty.
"""

from __future__ import annotations

import re
import shutil
from datetime import datetime
from pathlib import Path


def slugify(name: str) -> str:
    """Convert a title or filename stem to a slug.

    Args:
        name: Title or filename stem.

    Returns:
        URL-friendly slug.

    Examples:
        >>> slugify("Hello, World!")
        'hello-world'
    """
    cleaned = re.sub(r"[^a-zA-Z0-9]+", "-", name)
    cleaned = cleaned.strip("-").lower()
    return cleaned or "untitled"


def titleize(filename: str) -> str:
    """Convert a filename to a human-readable title.

    Removes date prefixes (YYYY-MM-DD), replaces hyphens and underscores
    with spaces, and capitalizes each word.

    Examples:
        >>> titleize("2024-01-15-hello-world.md")
        'Hello World'

        >>> titleize("about/index.markdown")
        'Index'
    """
    base = Path(filename).stem
    if "-" in base:
        parts = base.split("-")
        if len(parts) >= 4 and all(p.isdigit() for p in parts[:3]):
            base = "-".join(parts[3:])
    words = re.split(r"[\s\-_]+", base)
    return " ".join(word.capitalize() for word in words if word) or "Untitled"


def normalize_root_dir(directory: str) -> str:
    """Normalize a publishing sub-directory.

    Leading and trailing slashes are stripped and a single leading slash is
    added back. The site root ("/" or "") becomes the empty string.

    Examples:
        >>> normalize_root_dir("/")
        ''
        >>> normalize_root_dir("//blog/v2/")
        '/blog/v2'
    """
    stripped = directory.strip().strip("/")
    return f"/{stripped}" if stripped else ""


def post_filename(title: str, ext: str, when: datetime | None = None) -> str:
    """Build the filename for a new post.

    Examples:
        >>> post_filename("Hello World", "markdown", datetime(2024, 1, 15))
        '2024-01-15-hello-world.markdown'
    """
    when = when or datetime.now()
    return f"{when.strftime('%Y-%m-%d')}-{slugify(title)}.{ext.lstrip('.')}"


def ensure_clean_dir(path: Path) -> None:
    """Ensure a directory exists and is empty.

    If the directory exists, removes all contents. Creates the
    directory if it doesn't exist.

    Args:
        path: Directory path to clean or create.
    """
    if path.exists():
        shutil.rmtree(str(path), ignore_errors=True)
        if path.exists():
            # Fallback for stubborn directories
            for item in path.rglob("*"):
                if item.is_file():
                    item.unlink()
            for item in sorted(
                [p for p in path.rglob("*") if p.is_dir()], reverse=True
            ):
                item.rmdir()
            path.rmdir()
    path.mkdir(parents=True, exist_ok=True)
