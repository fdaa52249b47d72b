"""Tests for in-place configuration edits."""

from pathlib import Path

import pytest

from presskit.dialects import Dialect
from presskit.errors import (
    InvalidValue,
    ReadFailure,
    UnsupportedDialect,
    WriteFailure,
)
from presskit.patcher import ConfigPatcher, Edit, PatchRequest, patch_file

COMPASS_CONFIG = """\
# Require any additional compass plugins here.
project_type = :stand_alone

# Publishing paths
http_path      = "/blog"
http_images_path = "/blog/images"
css_dir        = "public/stylesheets"

# Local development paths
sass_dir = 'sass'
"""

JEKYLL_CONFIG = """\
url: http://yoursite.com
title: My Blog   # shown in the header
description:

root: /
destination: public
subscribe_rss: /atom.xml
"""


@pytest.fixture
def script_file(tmp_path):
    path = tmp_path / "config.rb"
    path.write_text(COMPASS_CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def data_file(tmp_path):
    path = tmp_path / "_config.yml"
    path.write_text(JEKYLL_CONFIG, encoding="utf-8")
    return path


def _changed_lines(before: str, after: str) -> list[tuple[str, str]]:
    return [
        (old, new)
        for old, new in zip(before.splitlines(), after.splitlines())
        if old != new
    ]


def test_script_edit_preserves_spacing(script_file):
    result = patch_file(script_file, ("css_dir", "public/v2/stylesheets"))

    after = script_file.read_text(encoding="utf-8")
    assert _changed_lines(COMPASS_CONFIG, after) == [
        (
            'css_dir        = "public/stylesheets"',
            'css_dir        = "public/v2/stylesheets"',
        )
    ]
    assert result.dialect is Dialect.SCRIPT
    assert result.modified == ["css_dir"]
    assert result.skipped == []
    assert result.changed


def test_script_edit_keeps_quote_style(script_file):
    patch_file(script_file, {"sass_dir": "styles"})
    assert "sass_dir = 'styles'\n" in script_file.read_text(encoding="utf-8")


def test_data_edit_with_missing_key(data_file):
    result = patch_file(data_file, {"destination": "public/v2", "rss": "/v2"})

    after = data_file.read_text(encoding="utf-8")
    assert _changed_lines(JEKYLL_CONFIG, after) == [
        ("destination: public", "destination: public/v2")
    ]
    assert result.modified == ["destination"]
    assert result.skipped == ["rss"]
    assert not result.complete


def test_data_edit_keeps_trailing_comment(data_file):
    patch_file(data_file, ("title", "Notes"))
    assert "title: Notes   # shown in the header\n" in data_file.read_text(
        encoding="utf-8"
    )


def test_changes_confined_to_value_tokens(script_file):
    edits = {"http_path": "/v2/", "http_images_path": "/v2/images"}
    patch_file(script_file, edits)

    after = script_file.read_text(encoding="utf-8")
    assert len(after.splitlines()) == len(COMPASS_CONFIG.splitlines())
    assert _changed_lines(COMPASS_CONFIG, after) == [
        ('http_path      = "/blog"', 'http_path      = "/v2/"'),
        ('http_images_path = "/blog/images"', 'http_images_path = "/v2/images"'),
    ]


def test_last_edit_of_a_key_wins(tmp_path, data_file):
    other = tmp_path / "other.yml"
    other.write_text(JEKYLL_CONFIG, encoding="utf-8")

    patch_file(data_file, [("root", "/one"), ("root", "/two")])
    patch_file(other, [("root", "/two")])

    assert data_file.read_bytes() == other.read_bytes()


def test_repeated_key_reported_once(data_file):
    result = patch_file(data_file, [Edit("root", "/a"), Edit("root", "/b")])
    assert result.modified == ["root"]


def test_absent_key_leaves_file_identical(script_file):
    before = script_file.read_bytes()
    result = patch_file(script_file, ("fonts_dir", "source/fonts"))

    assert script_file.read_bytes() == before
    assert result.modified == []
    assert result.skipped == ["fonts_dir"]
    assert not result.changed


def test_empty_value_key_is_not_inserted(data_file):
    before = data_file.read_bytes()
    result = patch_file(data_file, ("description", "A blog"))
    assert data_file.read_bytes() == before
    assert result.skipped == ["description"]


def test_idempotent(data_file, tmp_path):
    edits = {"destination": "public/v2", "root": "/v2", "subscribe_rss": "/v2/atom.xml"}
    patch_file(data_file, edits)
    once = data_file.read_bytes()
    patch_file(data_file, edits)
    assert data_file.read_bytes() == once


def test_unsupported_dialect_leaves_file_untouched(tmp_path):
    target = tmp_path / "notes.txt"
    target.write_text("root: /\n", encoding="utf-8")

    with pytest.raises(UnsupportedDialect):
        patch_file(target, ("root", "/v2"))
    assert target.read_text(encoding="utf-8") == "root: /\n"


def test_unsupported_dialect_checked_before_reading(tmp_path):
    with pytest.raises(UnsupportedDialect):
        patch_file(tmp_path / "missing.txt", ("root", "/v2"))


def test_missing_file_is_read_failure(tmp_path):
    target = tmp_path / "missing.yml"
    with pytest.raises(ReadFailure) as exc_info:
        patch_file(target, ("root", "/v2"))
    assert exc_info.value.path == target
    assert not target.exists()


def test_write_failure(monkeypatch, data_file):
    import builtins

    real_open = builtins.open

    def fake_open(file, mode="r", *args, **kwargs):
        if "w" in mode:
            raise PermissionError("read-only filesystem")
        return real_open(file, mode, *args, **kwargs)

    monkeypatch.setattr("presskit.patcher.open", fake_open, raising=False)
    with pytest.raises(WriteFailure):
        patch_file(data_file, ("root", "/v2"))


def test_crlf_line_endings_preserved(tmp_path):
    target = tmp_path / "_config.yml"
    target.write_bytes(b"root: /\r\ndestination: public\r\n")

    patch_file(target, ("destination", "public/v2"))

    assert target.read_bytes() == b"root: /\r\ndestination: public/v2\r\n"


def test_nested_keys_in_data_file(tmp_path):
    target = tmp_path / "presskit.yml"
    target.write_text(
        "presskit:\n  public_dir: public      # compiled site\n  server_port: 4000\n",
        encoding="utf-8",
    )
    patch_file(target, {"public_dir": "public/v2", "server_port": 4001})
    assert target.read_text(encoding="utf-8") == (
        "presskit:\n  public_dir: public/v2      # compiled site\n  server_port: 4001\n"
    )


def test_boolean_values_rendered(tmp_path):
    target = tmp_path / "presskit.yml"
    target.write_text("presskit:\n  rsync_delete: false\n", encoding="utf-8")
    patch_file(target, ("rsync_delete", True))
    assert "rsync_delete: true" in target.read_text(encoding="utf-8")


def test_patch_request_call_shapes():
    single = PatchRequest.of("config.rb", ("css_dir", "x"))
    mapping = PatchRequest.of("config.rb", {"css_dir": "x"})
    pairs = PatchRequest.of("config.rb", [("css_dir", "x")])
    edits = PatchRequest.of("config.rb", [Edit("css_dir", "x")])

    assert single == mapping == pairs == edits
    assert single.path == Path("config.rb")
    assert single.edits == (Edit("css_dir", "x"),)


def test_patch_request_keeps_order():
    request = PatchRequest.of("_config.yml", {"b": 1, "a": 2, "c": 3})
    assert [edit.key for edit in request.edits] == ["b", "a", "c"]


def test_patch_text_without_filesystem():
    patcher = ConfigPatcher()
    text, result = patcher.patch_text(
        JEKYLL_CONFIG, [Edit("root", "/v2")], Dialect.DATA
    )
    assert "root: /v2\n" in text
    assert result.modified == ["root"]


def test_submit_request(script_file):
    result = ConfigPatcher().submit(
        PatchRequest.of(script_file, {"http_path": "/"})
    )
    assert result.path == script_file
    assert 'http_path      = "/"' in script_file.read_text(encoding="utf-8")


@pytest.mark.parametrize(
    "value",
    ["", "#x", "x ", "x\nroot: /evil", "a #b"],
    ids=["empty", "leading-hash", "trailing-space", "newline", "inline-comment"],
)
def test_data_value_that_cannot_be_found_again_is_rejected(data_file, value):
    before = data_file.read_bytes()

    with pytest.raises(InvalidValue) as exc_info:
        patch_file(data_file, ("title", value))

    assert data_file.read_bytes() == before
    assert exc_info.value.key == "title"
    assert exc_info.value.dialect_name == "data"


@pytest.mark.parametrize("value", ["it's", "has space", 'say "hi"', "back\\slash"])
def test_script_value_that_cannot_be_found_again_is_rejected(script_file, value):
    before = script_file.read_bytes()

    with pytest.raises(InvalidValue) as exc_info:
        patch_file(script_file, ("css_dir", value))

    assert script_file.read_bytes() == before
    assert "not a valid script value" in str(exc_info.value)


def test_invalid_value_rejects_whole_batch(data_file):
    before = data_file.read_bytes()
    with pytest.raises(InvalidValue):
        patch_file(data_file, [("root", "/v2"), ("destination", "")])
    assert data_file.read_bytes() == before


def test_none_is_rejected_in_data_file(data_file):
    with pytest.raises(InvalidValue):
        patch_file(data_file, ("root", None))


def test_empty_script_value_allowed(script_file):
    patch_file(script_file, ("http_path", ""))
    assert 'http_path      = ""\n' in script_file.read_text(encoding="utf-8")
    result = patch_file(script_file, ("http_path", "/"))
    assert result.modified == ["http_path"]


def test_quoted_data_value_replaced_with_its_quotes(tmp_path):
    target = tmp_path / "_config.yml"
    target.write_text('date_format: "ordinal"\n', encoding="utf-8")

    patch_file(target, ("date_format", "long"))
    assert target.read_text(encoding="utf-8") == "date_format: long\n"

    patch_file(target, ("date_format", '"%d %b %Y"'))
    assert target.read_text(encoding="utf-8") == 'date_format: "%d %b %Y"\n'
