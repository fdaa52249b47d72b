"""Presskit static site task runner.

Presskit drives a static-site project through its lifecycle: scaffolding
posts and pages, running the site generator, deploying the output, and
editing configuration files.

Configuration is read once per process (config.py) and changed only by
format-preserving, in-place edits to the files on disk (patcher.py), so
comments, spacing and unrelated settings survive every edit.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
