"""folio — static site generator for linked Markdown notes."""

__version__ = "0.3.0"
