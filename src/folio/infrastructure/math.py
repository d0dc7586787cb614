"""Math typesetting via an external KaTeX process.

The renderer only needs ``render(expression, display=...) -> markup``
and treats :class:`~folio.domain.errors.MathRenderError` as a signal to
fall back to the raw expression. Nothing here is fatal to a build.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from typing import Protocol

from folio.domain.errors import MathRenderError

logger = logging.getLogger(__name__)


class MathRenderer(Protocol):
    """Anything that can turn a TeX expression into HTML markup."""

    def render(self, expression: str, *, display: bool) -> str: ...


class KatexRenderer:
    """Render TeX by piping it through the ``katex`` command-line tool.

    The command reads the expression on stdin and writes HTML to stdout;
    ``--display-mode`` is appended for block math.
    """

    def __init__(self, command: Sequence[str] = ("katex",), *, timeout: float = 10.0) -> None:
        if not command:
            msg = "Math command must not be empty"
            raise ValueError(msg)
        self._command = list(command)
        self._timeout = timeout

    def render(self, expression: str, *, display: bool) -> str:
        args = [*self._command]
        if display:
            args.append("--display-mode")
        try:
            result = subprocess.run(
                args,
                input=expression,
                capture_output=True,
                text=True,
                check=True,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            msg = f"Math command not found: {self._command[0]}"
            raise MathRenderError(msg) from exc
        except subprocess.CalledProcessError as exc:
            detail = (exc.stderr or "").strip().splitlines()
            msg = detail[-1] if detail else f"exit status {exc.returncode}"
            raise MathRenderError(msg) from exc
        except subprocess.TimeoutExpired as exc:
            msg = f"Math command timed out after {self._timeout}s"
            raise MathRenderError(msg) from exc

        output = result.stdout.strip()
        if not output:
            msg = "Math command produced no output"
            raise MathRenderError(msg)
        return output


class DisabledMathRenderer:
    """Always fails, so every expression takes the verbatim fallback."""

    def render(self, expression: str, *, display: bool) -> str:
        msg = "Math rendering is disabled"
        raise MathRenderError(msg)


def build_math_renderer(*, enabled: bool, command: Sequence[str], timeout: float) -> MathRenderer:
    """Return the configured renderer."""
    if not enabled:
        logger.debug("Math rendering disabled; expressions will be emitted verbatim")
        return DisabledMathRenderer()
    return KatexRenderer(command, timeout=timeout)
