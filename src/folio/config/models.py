"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, folio.toml only contains overrides.
A fresh site needs no config file at all.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

OnError = Literal["abort", "skip"]


class SiteConfig(BaseModel):
    """[site] section."""

    model_config = {"frozen": True}

    title: str = "folio"


class ContentConfig(BaseModel):
    """[content] section.

    Folder paths are relative to the content directory and use ``/``,
    e.g. ``ignored_folders = ["Drafts/Old"]``.
    """

    model_config = {"frozen": True}

    content_dir: str = "content"
    output_dir: str = "public"
    static_dir: str = "static"
    ignored_folders: list[str] = Field(default_factory=list)
    list_folders: list[str] = Field(default_factory=list)
    slugify_paths: bool = False


class RenderConfig(BaseModel):
    """[render] section."""

    model_config = {"frozen": True}

    math: bool = True
    math_command: list[str] = Field(default_factory=lambda: ["katex"])
    math_timeout: float = 10.0


class BuildConfig(BaseModel):
    """[build] section."""

    model_config = {"frozen": True}

    on_error: OnError = "abort"
    workers: int = Field(default=1, ge=1)
    tag_pages: bool = True
