"""Publishing helpers for Presskit.

Deployment itself is delegated to rsync or git. This module builds their
command lines, and works out which configuration edits are needed to
publish under a sub-directory or to GitHub Pages.

Key functions:
- rsync_args: Command line for an rsync deploy.
- deploy_rsync / deploy_push: Run a deploy.
- root_dir_edits: Edits that move the site under a sub-directory.
- parse_pages_repo: Derive the GitHub Pages URL and branch for a repo.
"""

from __future__ import annotations

import logging
import re
import shlex
import shutil
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import CONFIG_FILENAME, ConfigView
from .errors import PresskitError
from .protocols import CommandRunner
from .shell import run_command

logger = logging.getLogger(__name__)


class InvalidRepository(PresskitError):
    """A repository URL could not be understood."""

    def __init__(self, url: str):
        self.url = url
        super().__init__(
            f"Cannot read a GitHub user from '{url}'. Use the SSH "
            "(git@github.com:user/repo.git) or HTTPS form."
        )


@dataclass(frozen=True)
class PagesTarget:
    """Where a GitHub Pages repository publishes.

    Attributes:
        user: GitHub account name.
        project: Repository name for project pages, empty for user pages.
        branch: Branch GitHub serves the site from.
        url: Public URL of the site.
    """

    user: str
    project: str
    branch: str
    url: str

    @property
    def is_user_page(self) -> bool:
        return not self.project


_SSH_USER_RE = re.compile(r"^git@[^:]+:([^/]+)/")
_HTTPS_USER_RE = re.compile(r"github\.com/([^/]+)/")
_USER_PAGE_RE = re.compile(r"/[\w-]+\.github\.(?:io|com)(?:\.git)?/?$")
_PROJECT_RE = re.compile(r"([^/]+?)(?:\.git)?/?$", re.IGNORECASE)


def parse_pages_repo(repo_url: str) -> PagesTarget:
    """Work out the publishing target for a GitHub Pages repository.

    Examples:
        >>> parse_pages_repo("git@github.com:alice/alice.github.io.git").branch
        'master'
        >>> parse_pages_repo("https://github.com/alice/notes").url
        'https://alice.github.io/notes'

    Raises:
        InvalidRepository: If no user name can be found in the URL.
    """
    repo_url = repo_url.strip()
    match = _SSH_USER_RE.match(repo_url) or _HTTPS_USER_RE.search(repo_url)
    if match is None:
        raise InvalidRepository(repo_url)
    user = match.group(1)

    if _USER_PAGE_RE.search(repo_url):
        return PagesTarget(user, "", "master", f"https://{user}.github.io")

    project = _PROJECT_RE.search(repo_url).group(1)
    return PagesTarget(user, project, "gh-pages", f"https://{user}.github.io/{project}")


def root_dir_edits(root_dir: str) -> dict[str, dict[str, Any]]:
    """Edits that publish the site under ``root_dir``.

    Args:
        root_dir: Normalized sub-directory ("" for the site root, otherwise
            "/name" with no trailing slash).

    Returns:
        Mapping of project-relative file name to the edits for that file.
    """
    return {
        CONFIG_FILENAME: {"public_dir": f"public{root_dir}"},
        "config.rb": {
            "http_path": f"{root_dir}/",
            "http_images_path": f"{root_dir}/images",
            "http_fonts_path": f"{root_dir}/fonts",
            "css_dir": f"public{root_dir}/stylesheets",
        },
        "_config.yml": {
            "destination": f"public{root_dir}",
            "subscribe_rss": f"{root_dir}/atom.xml",
            "root": f"/{root_dir.lstrip('/')}",
        },
    }


def pages_edits(target: PagesTarget) -> dict[str, dict[str, Any]]:
    """Edits that switch deployment to a GitHub Pages branch."""
    return {
        CONFIG_FILENAME: {"deploy_default": "push", "deploy_branch": target.branch},
        "_config.yml": {"url": target.url},
    }


def rsync_args(root: Path, config: ConfigView) -> list[str]:
    """Build the rsync command line for the configured server."""
    args = ["rsync", "-avze", f"ssh -p {config.ssh_port}"]
    if config.rsync_delete:
        args.append("--delete")
    args.extend(shlex.split(config.rsync_args))
    args.append(f"{root / config.public_dir}/")
    args.append(f"{config.ssh_user}:{config.document_root}")
    return args


def deploy_rsync(
    root: Path, config: ConfigView, runner: CommandRunner = run_command
) -> None:
    """Upload the generated site with rsync."""
    runner(rsync_args(root, config), cwd=root)


def sync_deploy_dir(public_dir: Path, deploy_dir: Path) -> None:
    """Replace the contents of ``deploy_dir`` with ``public_dir``.

    Entries starting with a dot (notably ``.git``) are kept.
    """
    if not public_dir.is_dir():
        raise PresskitError(f"Nothing to deploy: {public_dir} does not exist")
    deploy_dir.mkdir(parents=True, exist_ok=True)
    for item in deploy_dir.iterdir():
        if item.name.startswith("."):
            continue
        if item.is_dir():
            shutil.rmtree(item)
        else:
            item.unlink()
    shutil.copytree(public_dir, deploy_dir, dirs_exist_ok=True)


def deploy_push(
    root: Path,
    config: ConfigView,
    runner: CommandRunner = run_command,
    now: datetime | None = None,
) -> None:
    """Commit the generated site into the deploy repo and push it."""
    deploy_dir = root / config.deploy_dir
    sync_deploy_dir(root / config.public_dir, deploy_dir)
    stamp = (now or datetime.now(timezone.utc)).strftime("%Y-%m-%d %H:%M:%S UTC")
    runner(["git", "add", "-A"], cwd=deploy_dir)
    runner(["git", "commit", "--allow-empty", "-m", f"Site updated at {stamp}"], cwd=deploy_dir)
    runner(["git", "push", "origin", config.deploy_branch], cwd=deploy_dir)


def init_deploy_repo(
    deploy_dir: Path,
    repo_url: str,
    branch: str,
    runner: CommandRunner = run_command,
) -> None:
    """Create ``deploy_dir`` as a git repo tracking ``repo_url``."""
    deploy_dir.mkdir(parents=True, exist_ok=True)
    runner(["git", "init"], cwd=deploy_dir)
    runner(["git", "checkout", "-b", branch], cwd=deploy_dir)
    runner(["git", "remote", "add", "origin", repo_url], cwd=deploy_dir)
    logger.debug("Initialized %s for %s (%s)", deploy_dir, repo_url, branch)
