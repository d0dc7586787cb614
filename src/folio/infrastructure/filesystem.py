"""Filesystem operations for content discovery and site output.

INVARIANT: The content tree is read-only. Every write lands under the
output root; :func:`translate` refuses paths that would escape it.

Pure parsing lives in :mod:`folio.domain` and
:mod:`folio.infrastructure.markdown`. This module handles the actual
file I/O, path re-rooting, and directory walking.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Iterable, Iterator
from pathlib import Path, PurePosixPath

from folio.domain.errors import PathError, SiteIOError

MARKUP_EXTENSION = ".md"

# Copied verbatim into the output tree.
STATIC_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp"})


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


def is_static(path: Path) -> bool:
    return path.suffix.lower() in STATIC_EXTENSIONS


def is_document(path: Path) -> bool:
    return path.suffix == MARKUP_EXTENSION


def relative_posix(root: Path, path: Path) -> PurePosixPath:
    """Return *path* relative to *root* as a POSIX path.

    Raises:
        PathError: If *path* is not inside *root*.
    """
    try:
        return PurePosixPath(path.relative_to(root).as_posix())
    except ValueError as exc:
        raise PathError(f"Path is not under {root}", path=path) from exc


def walk_content(root: Path, *, ignored: Iterable[str] = ()) -> Iterator[Path]:
    """Yield every file under *root* in deterministic pre-order.

    Entries are visited in name order, a directory's own files before
    its subdirectories. Directories whose root-relative POSIX path is in
    *ignored* are pruned together with everything below them.

    Raises:
        SiteIOError: If a directory cannot be listed.
    """
    ignored_set = {PurePosixPath(p).as_posix() for p in ignored}
    stack: list[Path] = [root]
    while stack:
        directory = stack.pop()
        if directory != root and relative_posix(root, directory).as_posix() in ignored_set:
            continue
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise SiteIOError(f"Cannot list directory: {exc}", path=directory) from exc

        subdirs: list[Path] = []
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                subdirs.append(Path(entry.path))
            elif entry.is_file():
                yield Path(entry.path)
        stack.extend(reversed(subdirs))


# ---------------------------------------------------------------------------
# Path translation
# ---------------------------------------------------------------------------


def translate(in_root: Path, out_root: Path, path: Path, *, suffix: str | None = None) -> Path:
    """Re-root *path* from *in_root* to *out_root*, optionally swapping its suffix.

    Raises:
        PathError: If *path* is outside *in_root* or the result escapes *out_root*.
    """
    rel = relative_posix(in_root, path)
    if suffix is not None:
        rel = rel.with_suffix(suffix)
    result = out_root.joinpath(*rel.parts)

    # Guard against traversal via crafted names
    if not result.resolve().is_relative_to(out_root.resolve()):
        msg = f"Output path escapes output root: {result}"
        raise PathError(msg, path=path)
    return result


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def write_output(path: Path, content: str) -> None:
    """Write *content* to *path*, creating parent directories.

    The file handle is closed on every exit path.

    Raises:
        SiteIOError: On any write failure.
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as fh:
            fh.write(content)
    except OSError as exc:
        raise SiteIOError(f"Cannot write file: {exc}", path=path, stage="write") from exc


def copy_file(src: Path, dest: Path) -> None:
    """Copy *src* to *dest* byte-for-byte, preserving metadata."""
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, dest)
    except OSError as exc:
        raise SiteIOError(f"Cannot copy file: {exc}", path=src, stage="copy") from exc


def copy_tree(src: Path, dest: Path) -> int:
    """Copy the directory *src* into *dest*, returning the number of files copied."""
    count = 0
    for path in walk_content(src):
        copy_file(path, translate(src, dest, path))
        count += 1
    return count


def read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SiteIOError(f"Cannot read file: {exc}", path=path) from exc
