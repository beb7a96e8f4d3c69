"""
Variable interpolation for launcher arguments.

Rewrites $NAME and ${NAME} references using a two-tier VariableScope:
explicit overrides first, then the ambient environment. Unresolved names
become the empty string. A backslash right before the $ keeps the reference
literal (the backslash itself is dropped, and so are any braces).

Interpolation is two passes: scan() splits the text into Literal and
Reference segments, render() resolves them. Output is never re-scanned.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace

import structlog

from relaunch.core.text import NotTextError, as_text

log = structlog.get_logger()

SIGIL = "$"
ESCAPE = "\\"
NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")

NOT_TEXT = "argument is not valid text, passed through unchanged"


def is_name(s: str) -> bool:
    """Check if s is a valid variable name."""
    return NAME_PATTERN.fullmatch(s) is not None


@dataclass(frozen=True)
class VariableScope:
    """Layered name lookup: overrides, then the ambient environment."""

    overrides: Mapping[str, str] = field(default_factory=dict)
    environ: Mapping[str, str] = field(default_factory=lambda: os.environ)

    def lookup(self, name: str) -> str:
        """Resolve name, returning "" when neither tier defines it."""
        if name in self.overrides:
            return self.overrides[name]
        return self.environ.get(name, "")

    def with_override(self, name: str, value: str) -> VariableScope:
        return replace(self, overrides={**self.overrides, name: value})


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Reference:
    name: str
    escaped: bool = False
    braced: bool = False


Segment = Literal | Reference


def _is_name_start(c: str) -> bool:
    return c.isascii() and (c.isalpha() or c == "_")


def _is_name_char(c: str) -> bool:
    return c.isascii() and (c.isalnum() or c == "_")


def _match_reference(text: str, i: int) -> tuple[str, bool, int] | None:
    """Match a reference whose $ is at text[i].

    Returns (name, braced, end) where end is the index just past the
    reference, or None if the $ does not start one.
    """
    n = len(text)
    j = i + 1
    braced = j < n and text[j] == "{"
    if braced:
        j += 1
    start = j
    if j >= n or not _is_name_start(text[j]):
        return None
    j += 1
    while j < n and _is_name_char(text[j]):
        j += 1
    name = text[start:j]
    if braced:
        if j >= n or text[j] != "}":
            return None
        j += 1
    return name, braced, j


def scan(text: str) -> list[Segment]:
    """Split text into Literal and Reference segments in one pass.

    An odd run of backslashes before a reference escapes it: the last
    backslash is the marker and is consumed, the rest stay literal. An even
    run is all literal and the reference expands.
    """
    segments: list[Segment] = []
    literal_start = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] != SIGIL:
            i += 1
            continue
        match = _match_reference(text, i)
        if match is None:
            i += 1
            continue
        name, braced, end = match

        j = i
        while j > literal_start and text[j - 1] == ESCAPE:
            j -= 1
        escaped = (i - j) % 2 == 1
        literal_end = i - 1 if escaped else i
        if literal_end > literal_start:
            segments.append(Literal(text[literal_start:literal_end]))
        segments.append(Reference(name, escaped=escaped, braced=braced))
        i = literal_start = end

    if literal_start < n:
        segments.append(Literal(text[literal_start:]))
    return segments


def render(segments: list[Segment], scope: VariableScope) -> str:
    """Resolve scanned segments into the final string."""
    parts = []
    for segment in segments:
        if isinstance(segment, Literal):
            parts.append(segment.text)
        elif segment.escaped:
            parts.append(SIGIL + segment.name)
        else:
            parts.append(scope.lookup(segment.name))
    return "".join(parts)


def interpolate(text: str | bytes, scope: VariableScope) -> str:
    """Expand references in text. Raises NotTextError on invalid text."""
    return render(scan(as_text(text)), scope)


def interpolate_arg(
    arg: str | bytes,
    scope: VariableScope,
    diagnostics: list[str] | None = None,
) -> str | bytes:
    """Expand references in a launcher argument.

    Arguments that are not valid text are returned unmodified.
    """
    try:
        return interpolate(arg, scope)
    except NotTextError as e:
        log.warning("interpolate", diagnostic=NOT_TEXT, reason=e.reason)
        if diagnostics is not None:
            diagnostics.append(NOT_TEXT)
        return arg
