"""Project, post and page scaffolding for Presskit.

New files are rendered from the Jinja2 templates bundled in ``skeleton/``.

Key functions:
- scaffold_project: Write the starter configuration files for a new site.
- post_path / page_path: Work out where new content goes.
- render_post / render_page: Produce front matter for new content.
- install_theme: Copy a theme's source and stylesheets into the project.
"""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .config import CONFIG_FILENAME, ConfigView
from .errors import PresskitError
from .utils import post_filename, titleize

logger = logging.getLogger(__name__)

_SKELETON_DIR = Path(__file__).parent / "skeleton"

# Output filename -> skeleton template
_PROJECT_FILES = {
    CONFIG_FILENAME: "presskit.yml.jinja",
    "_config.yml": "_config.yml.jinja",
    "config.rb": "config.rb.jinja",
}


class ThemeNotFound(PresskitError):
    """The requested theme directory does not exist."""

    def __init__(self, theme: str, path: Path):
        self.theme = theme
        self.path = path
        super().__init__(f"Theme '{theme}' not found at {path}")


def _yaml_quote(value: str) -> str:
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(_SKELETON_DIR)),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["yaml_quote"] = _yaml_quote
    return env


def scaffold_project(root: Path, theme: str = "classic") -> list[Path]:
    """Create the configuration files and directories for a new project.

    Args:
        root: Directory to create the project in.
        theme: Theme name recorded in presskit.yml.

    Returns:
        Paths of the files written.
    """
    env = _environment()
    context = {
        "name": root.name,
        "title": titleize(root.name),
        "theme": theme,
        "source_dir": "source",
    }
    written = []
    root.mkdir(parents=True, exist_ok=True)
    for filename, template in _PROJECT_FILES.items():
        target = root / filename
        target.write_text(env.get_template(template).render(**context), encoding="utf-8")
        written.append(target)
    (root / "source" / "_posts").mkdir(parents=True, exist_ok=True)
    (root / "sass").mkdir(exist_ok=True)
    return written


def post_path(root: Path, config: ConfigView, title: str, when: datetime) -> Path:
    """Return the path for a new post titled ``title``."""
    filename = post_filename(title, config.new_post_ext, when)
    return root / config.source_dir / config.posts_dir / filename


def page_path(root: Path, config: ConfigView, name: str) -> Path:
    """Return the path for a new page.

    A name with an extension (``about/me.html``) is used as the file path.
    Anything else is treated as a directory holding an index file
    (``about`` becomes ``about/index.markdown``).
    """
    relative = Path(name.strip("/"))
    if relative.suffix:
        return root / config.source_dir / relative
    return root / config.source_dir / relative / f"index.{config.new_page_ext}"


def render_post(title: str, when: datetime) -> str:
    return _environment().get_template("post.jinja").render(title=title, date=when)


def render_page(title: str, when: datetime) -> str:
    return _environment().get_template("page.jinja").render(title=title, date=when)


def install_theme(root: Path, config: ConfigView, theme: str) -> list[Path]:
    """Copy a theme's ``source`` and ``sass`` directories into the project.

    Existing files with the same names are overwritten.

    Returns:
        Destination directories that were populated.

    Raises:
        ThemeNotFound: If ``<themes_dir>/<theme>`` does not exist.
    """
    theme_dir = root / config.themes_dir / theme
    if not theme_dir.is_dir():
        raise ThemeNotFound(theme, theme_dir)

    targets = {
        theme_dir / "source": root / config.source_dir,
        theme_dir / "sass": root / "sass",
    }
    installed = []
    for source, dest in targets.items():
        if not source.is_dir():
            continue
        logger.debug("Copying %s to %s", source, dest)
        shutil.copytree(source, dest, dirs_exist_ok=True)
        installed.append(dest)
    (root / config.source_dir / config.posts_dir).mkdir(parents=True, exist_ok=True)
    return installed
