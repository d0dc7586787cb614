"""Locate a site's ``folio.toml``.

A site is the directory holding ``folio.toml``; content, templates and
output paths in the file resolve against it. Lookup order:

1. ``--config`` / ``FOLIO_CONFIG``, naming either the file itself or the
   site directory that contains it.
2. Walk up from the working directory, stopping at the enclosing
   repository root (the first directory with a ``.git`` entry) so a stray
   ``folio.toml`` further up the filesystem is never picked up.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

CONFIG_FILENAME = "folio.toml"
CONFIG_ENV_VAR = "FOLIO_CONFIG"
REPO_MARKER = ".git"


def resolve_config_path(path: Path) -> Path | None:
    """Return the config file *path* names, or None if there is none.

    *path* may be the TOML file or a site directory containing
    ``folio.toml``.
    """
    if path.is_dir():
        path = path / CONFIG_FILENAME
    return path if path.is_file() else None


def find_config(start: Path | None = None) -> Path | None:
    """Find the ``folio.toml`` that governs *start* (default: cwd).

    ``FOLIO_CONFIG`` wins when set, even if it names nothing usable, so a
    misconfigured environment never silently falls back to another site.
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return resolve_config_path(Path(env_path))

    for directory in _walk_up((start or Path.cwd()).resolve()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


def _walk_up(start: Path) -> Iterator[Path]:
    """Yield *start* and its parents, ending at the repository root."""
    for directory in (start, *start.parents):
        yield directory
        if (directory / REPO_MARKER).exists():
            return
