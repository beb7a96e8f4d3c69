"""
relaunch - Command launcher with shell-safe argument reconstruction.

Splits script fragments into words, expands $VAR references and re-quotes
argument lists so a child shell reads back exactly what the launcher got.
"""

from __future__ import annotations

__version__ = "0.1.0"

from relaunch.core.interpolate import VariableScope, interpolate, interpolate_arg
from relaunch.core.quoting import join_args, quote_args
from relaunch.core.text import NotTextError
from relaunch.core.tokenizer import split, tokenize

__all__ = [
    "NotTextError",
    "VariableScope",
    "interpolate",
    "interpolate_arg",
    "join_args",
    "quote_args",
    "split",
    "tokenize",
    "__version__",
]
