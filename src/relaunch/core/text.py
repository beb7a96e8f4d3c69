"""Text validity checks shared by the tokenizer, interpolator and quoter."""

from __future__ import annotations


class NotTextError(ValueError):
    """Raised when an argument is not valid UTF-8 text."""

    def __init__(self, value: str | bytes, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"not valid text: {value!r} ({reason})")


def as_text(value: str | bytes) -> str:
    """Return value as str, or raise NotTextError.

    Bytes must decode as UTF-8. A str must encode back to UTF-8, which rejects
    lone surrogates left behind by surrogateescape-decoded argv entries.
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise NotTextError(value, e.reason) from None
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise NotTextError(value, e.reason) from None
    return value
