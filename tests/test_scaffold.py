from datetime import datetime, timedelta, timezone

import pytest
import yaml

from presskit.config import ConfigDocument, ConfigStore, ConfigView
from presskit.scaffold import (
    ThemeNotFound,
    install_theme,
    page_path,
    post_path,
    render_page,
    render_post,
    scaffold_project,
)

WHEN = datetime(2024, 1, 15, 9, 30, tzinfo=timezone(timedelta(hours=-5)))


def _view(**overrides):
    values = {
        "source_dir": "source",
        "posts_dir": "_posts",
        "themes_dir": ".themes",
        "new_post_ext": "markdown",
        "new_page_ext": "md",
    }
    values.update(overrides)
    return ConfigView(ConfigDocument(values))


def test_scaffold_project_writes_loadable_config(tmp_path):
    root = tmp_path / "my-blog"
    written = scaffold_project(root, theme="minimal")

    assert sorted(p.name for p in written) == ["_config.yml", "config.rb", "presskit.yml"]
    assert (root / "source" / "_posts").is_dir()

    view = ConfigView(ConfigStore().load(root / "presskit.yml"))
    assert view.theme == "minimal"
    assert view.public_dir == "public"
    assert view.ssh_port == 22
    assert view.server_port == 4000
    assert view.rsync_args == ""
    assert view.deploy_default == "rsync"
    assert view.generator == "jekyll"

    site = yaml.safe_load((root / "_config.yml").read_text(encoding="utf-8"))
    assert site["title"] == "My Blog"
    assert site["destination"] == "public"
    assert site["root"] == "/"

    compass = (root / "config.rb").read_text(encoding="utf-8")
    assert 'http_path = "/"' in compass
    assert 'css_dir = "public/stylesheets"' in compass


def test_post_path(tmp_path):
    path = post_path(tmp_path, _view(), "Hello, World!", WHEN)
    assert path == tmp_path / "source" / "_posts" / "2024-01-15-hello-world.markdown"


def test_page_path_directory_and_file(tmp_path):
    assert page_path(tmp_path, _view(), "about") == tmp_path / "source" / "about" / "index.md"
    assert page_path(tmp_path, _view(), "/about/team/") == (
        tmp_path / "source" / "about" / "team" / "index.md"
    )
    assert page_path(tmp_path, _view(), "about/me.html") == tmp_path / "source" / "about" / "me.html"


def test_render_post_front_matter():
    text = render_post('Say "hi"', WHEN)
    front = yaml.safe_load(text.split("---")[1])

    assert text.startswith("---\nlayout: post\n")
    assert front["title"] == 'Say "hi"'
    assert front["comments"] is True
    assert "date: 2024-01-15 09:30:00 -0500" in text


def test_render_page_front_matter():
    text = render_page("About", WHEN)
    front = yaml.safe_load(text.split("---")[1])
    assert front["layout"] == "page"
    assert front["title"] == "About"
    assert front["sharing"] is True


def test_install_theme(tmp_path):
    theme = tmp_path / ".themes" / "classic"
    (theme / "source" / "_layouts").mkdir(parents=True)
    (theme / "source" / "_layouts" / "default.html").write_text("layout", encoding="utf-8")
    (theme / "sass").mkdir()
    (theme / "sass" / "screen.scss").write_text("body {}", encoding="utf-8")
    (tmp_path / "source").mkdir()
    (tmp_path / "source" / "index.html").write_text("mine", encoding="utf-8")

    installed = install_theme(tmp_path, _view(), "classic")

    assert installed == [tmp_path / "source", tmp_path / "sass"]
    assert (tmp_path / "source" / "_layouts" / "default.html").exists()
    assert (tmp_path / "source" / "index.html").read_text(encoding="utf-8") == "mine"
    assert (tmp_path / "sass" / "screen.scss").exists()
    assert (tmp_path / "source" / "_posts").is_dir()


def test_install_missing_theme(tmp_path):
    with pytest.raises(ThemeNotFound) as exc_info:
        install_theme(tmp_path, _view(), "fancy")
    assert exc_info.value.theme == "fancy"
