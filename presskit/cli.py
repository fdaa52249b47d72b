"""Command-line interface for Presskit.

This module defines the CLI commands using Click framework. Commands read
settings through the ConfigView held by the Workspace in the click context,
and change settings only by patching files on disk.

Commands:
- new: Scaffold a new project.
- install: Copy a theme into the project.
- new-post / new-page: Create content with front matter.
- generate / preview: Run the site generator.
- deploy: Publish with rsync or git.
- set-root: Publish under a sub-directory.
- setup-deploy: Configure deployment to GitHub Pages.
- config get / config set: Read or edit individual settings.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Any

import click
import questionary

from . import __version__
from .config import CONFIG_FILENAME, ConfigStore, ConfigView, default_store
from .errors import PresskitError, UnsupportedDialect
from .patcher import PatchResult, default_patcher
from .shell import run_command
from .utils import ensure_clean_dir, normalize_root_dir, titleize

logger = logging.getLogger(__name__)


class Workspace:
    """Project root plus its configuration, shared by every command.

    The configuration is loaded on first use and then reused for the rest
    of the process.
    """

    def __init__(self, root: Path, store: ConfigStore | None = None):
        self.root = root
        self._store = store or default_store
        self._config: ConfigView | None = None

    @property
    def config_path(self) -> Path:
        return self.root / CONFIG_FILENAME

    @property
    def config(self) -> ConfigView:
        if self._config is None:
            self._config = ConfigView(self._store.load(self.config_path))
        return self._config


class _PresskitGroup(click.Group):
    """Click group that reports Presskit errors as clean CLI failures."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except PresskitError as exc:
            raise click.ClickException(str(exc)) from exc


pass_workspace = click.make_pass_decorator(Workspace)


@click.group(cls=_PresskitGroup)
@click.version_option(version=__version__, prog_name="presskit")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root (defaults to the current directory)",
)
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, root: Path | None, verbose: bool):
    """Presskit static site task runner."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = Workspace((root or Path.cwd()).resolve())


@cli.command()
@click.argument("name")
@click.option("--theme", default="classic", show_default=True, help="Theme to record")
def new(name: str, theme: str):
    """Scaffold a new Presskit project."""
    from .scaffold import scaffold_project

    target = Path(name).resolve()
    if target.exists() and any(target.iterdir()):
        raise click.ClickException(
            f"Refusing to initialize into non-empty directory: {target}"
        )
    scaffold_project(target, theme=theme)
    _try_git_init(target)
    click.echo(f"New Presskit site created at {target}")


@cli.command()
@click.argument("theme", required=False)
@pass_workspace
def install(workspace: Workspace, theme: str | None):
    """Install a theme's source and stylesheets."""
    from .scaffold import install_theme

    config = workspace.config
    theme = theme or config.theme
    source_dir = workspace.root / config.source_dir
    if source_dir.is_dir() and any(source_dir.iterdir()):
        overwrite = questionary.confirm(
            "A theme is already installed, proceeding will overwrite existing files. Continue?",
            default=False,
            style=_questionary_style(),
        ).ask()
        if not overwrite:
            raise click.Abort()
    click.echo(f"## Copying {theme} theme into {config.source_dir}/ and sass/")
    install_theme(workspace.root, config, theme)


@cli.command("new-post")
@click.argument("title", required=False)
@pass_workspace
def new_post(workspace: Workspace, title: str | None):
    """Create a new post in the posts directory."""
    from .scaffold import post_path, render_post

    if title is None:
        title = questionary.text(
            "Post title:",
            validate=lambda x: len(x.strip()) > 0 or "Title cannot be empty",
            style=_questionary_style(),
        ).ask()
        if title is None:
            raise click.Abort()
    title = title.strip()

    now = datetime.now().astimezone()
    target = post_path(workspace.root, workspace.config, title, now)
    _confirm_overwrite(target, workspace.root)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(render_post(title, now), encoding="utf-8")
    click.echo(f"Creating new post: {target.relative_to(workspace.root)}")


@cli.command("new-page")
@click.argument("name")
@pass_workspace
def new_page(workspace: Workspace, name: str):
    """Create a new page, e.g. about or about/team.html."""
    from .scaffold import page_path, render_page

    target = page_path(workspace.root, workspace.config, name)
    _confirm_overwrite(target, workspace.root)
    target.parent.mkdir(parents=True, exist_ok=True)
    title = titleize(Path(name.strip("/")).name)
    target.write_text(render_page(title, datetime.now().astimezone()), encoding="utf-8")
    click.echo(f"Creating new page: {target.relative_to(workspace.root)}")


@cli.command()
@pass_workspace
def generate(workspace: Workspace):
    """Generate the site with the configured generator."""
    generator = workspace.config.generator
    click.echo(f"## Generating Site with {generator}")
    output = run_command([generator, "build"], cwd=workspace.root)
    if output.strip():
        click.echo(output.rstrip())


@cli.command()
@pass_workspace
def preview(workspace: Workspace):
    """Serve the site locally."""
    config = workspace.config
    click.echo(f"Starting to watch source and serving on port {config.server_port}")
    run_command(
        [config.generator, "serve", "--port", str(config.server_port)],
        cwd=workspace.root,
        capture=False,
    )


@cli.command()
@pass_workspace
def deploy(workspace: Workspace):
    """Deploy the generated site (rsync or push)."""
    from .deploy import deploy_push, deploy_rsync

    config = workspace.config
    method = config.deploy_default
    if method == "rsync":
        click.echo(f"## Deploying website via Rsync to {config.ssh_user}")
        deploy_rsync(workspace.root, config, runner=run_command)
    elif method == "push":
        click.echo(f"## Deploying branch {config.deploy_branch} to GitHub Pages")
        deploy_push(workspace.root, config, runner=run_command)
    else:
        raise click.ClickException(
            f"Unknown deploy method '{method}' (expected 'rsync' or 'push')"
        )
    click.echo("## Deploy complete")


@cli.command("set-root")
@click.argument("directory")
@pass_workspace
def set_root(workspace: Workspace, directory: str):
    """Publish the site under DIRECTORY ('/' for the domain root)."""
    from .deploy import root_dir_edits

    root_dir = normalize_root_dir(directory)
    for filename, edits in root_dir_edits(root_dir).items():
        if _patch(workspace, filename, edits) is None:
            return
    ensure_clean_dir(workspace.root / "public")
    (workspace.root / f"public{root_dir}").mkdir(parents=True, exist_ok=True)
    click.echo(f"## Site's root directory is now '{root_dir or '/'}'")


@cli.command("setup-deploy")
@click.argument("repo")
@click.pass_context
def setup_deploy(ctx: click.Context, repo: str):
    """Set up deployment to a GitHub Pages repository."""
    from .deploy import init_deploy_repo, pages_edits, parse_pages_repo

    workspace = ctx.find_object(Workspace)
    target = parse_pages_repo(repo)
    for filename, edits in pages_edits(target).items():
        if _patch(workspace, filename, edits) is None:
            return
    deploy_dir = workspace.root / workspace.config.deploy_dir
    init_deploy_repo(deploy_dir, repo, target.branch, runner=run_command)
    if not target.is_user_page:
        ctx.invoke(set_root, directory=target.project)
    click.echo(f"## Deployment configured for {target.url} ({target.branch})")


@cli.group()
def config():
    """Read or edit configuration values."""


@config.command("get")
@click.argument("key")
@pass_workspace
def config_get(workspace: Workspace, key: str):
    """Print the value of KEY from presskit.yml."""
    value = workspace.config.get(key)
    click.echo("" if value is None else str(value))


@config.command("set")
@click.argument("file", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("assignments", nargs=-1, required=True)
@pass_workspace
def config_set(workspace: Workspace, file: Path, assignments: tuple[str, ...]):
    """Edit FILE in place with KEY=VALUE assignments, applied in order."""
    edits = []
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        if not sep or not key:
            raise click.BadParameter(
                f"expected KEY=VALUE, got '{assignment}'", param_hint="ASSIGNMENTS"
            )
        edits.append((key, value))

    result = _patch(workspace, file, edits)
    if result is None:
        return
    for key in result.modified:
        click.echo(f"updated {key}")
    for key in result.skipped:
        click.echo(f"skipped {key} (not found)")


def _patch(workspace: Workspace, filename: Path | str, edits) -> PatchResult | None:
    """Patch a project file, reporting unsupported file types to the user.

    Returns:
        The PatchResult, or None if the file type is not supported.
    """
    path = Path(filename)
    if not path.is_absolute():
        path = workspace.root / path
    try:
        result = default_patcher.apply(path, edits)
    except UnsupportedDialect as exc:
        click.echo(click.style(str(exc), fg="red"), err=True)
        return None
    if result.skipped:
        logger.info("%s: no match for %s", path.name, ", ".join(result.skipped))
    return result


def _confirm_overwrite(target: Path, root: Path) -> None:
    if not target.exists():
        return
    overwrite = questionary.confirm(
        f"{target.relative_to(root)} already exists. Overwrite?",
        default=False,
        style=_questionary_style(),
    ).ask()
    if not overwrite:
        raise click.Abort()


def _questionary_style():
    """Return consistent questionary style."""
    return questionary.Style(
        [
            ("qmark", "fg:cyan bold"),
            ("question", "bold"),
            ("answer", "fg:cyan"),
            ("pointer", "fg:cyan bold"),
            ("highlighted", "fg:cyan bold"),
            ("selected", "fg:cyan"),
        ]
    )


def _try_git_init(root: Path) -> None:
    """Initialize a git repository if git is available."""
    if os.environ.get("PRESSKIT_SKIP_GIT_INIT") == "1":
        return
    git_bin = shutil.which("git")
    if not git_bin:
        return
    try:
        subprocess.run(
            [git_bin, "init"],
            cwd=root,
            check=True,
            capture_output=True,
        )
    except (OSError, subprocess.CalledProcessError):
        # Non-fatal: user can run git init manually
        logger.debug("git init failed in %s", root)


def main():
    """Entry point for the CLI application."""
    cli()
