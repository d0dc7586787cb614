"""Click base classes for folio commands.

Every folio command can carry a list of worked examples, shown by an
eager ``--examples`` flag instead of crowding ``--help``. Examples are
``(invocation, what it does)`` pairs and are laid out with Click's own
definition-list formatter, so they wrap the same way help text does.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import click

type Examples = Sequence[tuple[str, str]]


def format_examples(command_path: str, examples: Examples) -> str:
    """Render *examples* as the text ``--examples`` prints."""
    formatter = click.HelpFormatter()
    formatter.write_text(f"Examples for '{command_path}':")
    formatter.write_paragraph()
    with formatter.indentation():
        formatter.write_dl(examples, col_max=40)
    return formatter.getvalue().rstrip("\n")


def _add_examples_option(cmd: click.Command, examples: Examples) -> None:
    def show_examples(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(format_examples(ctx.command_path, examples))
        ctx.exit(0)

    cmd.params.append(
        click.Option(
            ["--examples"],
            is_flag=True,
            expose_value=False,
            is_eager=True,
            callback=show_examples,
            help="Show usage examples and exit.",
        )
    )


class FolioCommand(click.Command):
    """A command that accepts ``examples=[(invocation, description), ...]``."""

    def __init__(self, *args: Any, examples: Examples = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            _add_examples_option(self, self.examples)


class FolioGroup(click.Group):
    """The root group. ``command_class = FolioCommand`` lets subcommands
    take ``examples=`` without ``cls=``.
    """

    command_class = FolioCommand

    def __init__(self, *args: Any, examples: Examples = (), **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = tuple(examples)
        if self.examples:
            _add_examples_option(self, self.examples)
