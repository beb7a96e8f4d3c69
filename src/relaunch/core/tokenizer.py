"""
Shell-style word splitting for script fragments.

Implements a reduced dialect: whitespace separates words, a backslash outside
quotes escapes the next character, and single or double quotes group
characters literally. There is no escape processing inside quotes of either
kind, which keeps the rules the exact inverse of relaunch.core.quoting.
"""

from __future__ import annotations

from collections.abc import Iterator

import structlog

from relaunch.core.text import as_text

log = structlog.get_logger()

QUOTES = frozenset({"'", '"'})
ESCAPE = "\\"

UNCLOSED_QUOTE = "unclosed quote ignored"
DANGLING_ESCAPE = "dangling escape omitted"


def tokenize(text: str | bytes, diagnostics: list[str] | None = None) -> Iterator[str]:
    """Lazily split text into words.

    Raises NotTextError up front if text is not valid UTF-8. Malformed input
    at the end (an unclosed quote, a trailing backslash) never raises: the
    best-effort word is still produced and a message is appended to
    diagnostics.
    """
    return _words(as_text(text), diagnostics)


def split(text: str | bytes, diagnostics: list[str] | None = None) -> list[str]:
    """Split text into a list of words."""
    return list(tokenize(text, diagnostics))


def _report(diagnostics: list[str] | None, message: str, text: str) -> None:
    log.warning("tokenize", diagnostic=message, text=text)
    if diagnostics is not None:
        diagnostics.append(message)


def _words(text: str, diagnostics: list[str] | None) -> Iterator[str]:
    i = 0
    n = len(text)
    while True:
        while i < n and text[i].isspace():
            i += 1
        if i >= n:
            return

        chars: list[str] = []
        quote: str | None = None
        quoted = False  # '' and "" still make a (empty) word
        while i < n:
            c = text[i]
            if quote is not None:
                if c == quote:
                    quote = None
                else:
                    chars.append(c)
                i += 1
            elif c.isspace():
                break
            elif c == ESCAPE:
                if i + 1 >= n:
                    _report(diagnostics, DANGLING_ESCAPE, text)
                    i += 1
                    break
                chars.append(text[i + 1])
                i += 2
            elif c in QUOTES:
                quote = c
                quoted = True
                i += 1
            else:
                chars.append(c)
                i += 1

        if quote is not None:
            _report(diagnostics, UNCLOSED_QUOTE, text)
        if chars or quoted:
            yield "".join(chars)
