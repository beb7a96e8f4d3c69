"""Bash quoting utilities for command reconstruction.

Quoted output must read back as the original words both in a POSIX shell and
in relaunch.core.tokenizer, which does no escape processing inside quotes.
Any character that needs escaping is therefore emitted outside the quotes:
the quote is closed, a backslash-escaped character follows, and the quote is
reopened.
"""

from __future__ import annotations

from collections.abc import Iterable

from relaunch.core.text import as_text

# Characters that never need quoting in bash_quote
SAFE_CHARS = frozenset("-_./=@:+,%")


class QuoteStyle:
    """Wraps an argument in one kind of quote."""

    name = ""
    quote_char = ""
    # Characters a shell would still interpret inside this kind of quote
    special = ""

    def quote(self, arg: str) -> str:
        q = self.quote_char
        body = "".join(f"{q}\\{c}{q}" if c in self.special else c for c in arg)
        return f"{q}{body}{q}"


class SingleQuoteStyle(QuoteStyle):
    """Single quotes; an embedded ' becomes '\\''."""

    name = "single"
    quote_char = "'"
    special = "'"


class DoubleQuoteStyle(QuoteStyle):
    """Double quotes; an embedded " becomes "\\"" and likewise for $, ` and \\."""

    name = "double"
    quote_char = '"'
    special = '"$`\\'


STYLES: dict[str, QuoteStyle] = {
    style.name: style for style in (SingleQuoteStyle(), DoubleQuoteStyle())
}
DEFAULT_STYLE = "single"


def get_style(name: str) -> QuoteStyle:
    """Look up a quote style by name. Raises ValueError if unknown."""
    try:
        return STYLES[name]
    except KeyError:
        raise ValueError(
            f"unknown quote style '{name}', expected one of {', '.join(sorted(STYLES))}"
        ) from None


def join_args(args: Iterable[str]) -> str:
    """Join args with single spaces, no quoting.

    For values a consumer reads as-is and never re-tokenizes.
    """
    return " ".join(args)


def quote_args(args: Iterable[str | bytes], style: str | QuoteStyle = DEFAULT_STYLE) -> str:
    """Quote each argument and join into one shell-safe string.

    Raises NotTextError if any argument is not valid text; nothing is
    returned in that case.
    """
    if isinstance(style, str):
        style = get_style(style)
    texts = [as_text(arg) for arg in args]
    return " ".join(style.quote(t) for t in texts)


def bash_quote(s: str) -> str:
    """Quote a string for display, leaving plain words bare.

    Returns '' for empty strings.
    """
    if not s:
        return "''"
    if all(c.isalnum() or c in SAFE_CHARS for c in s):
        return s
    return SingleQuoteStyle().quote(s)


def bash_join(tokens: Iterable[str]) -> str:
    """Join tokens into a bash command string with minimal quoting."""
    return " ".join(bash_quote(t) for t in tokens)
