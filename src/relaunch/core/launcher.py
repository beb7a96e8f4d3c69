"""
Argument-vector handling for relaunch.

Splits the raw argv into variable assignments, launcher options and the
target command, then resolves everything into an Invocation: program, argv,
environment and working directory for the child process.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import bashlex
import structlog

from relaunch.core.config import Config, find_project_root
from relaunch.core.interpolate import VariableScope, interpolate_arg, is_name
from relaunch.core.quoting import DEFAULT_STYLE, join_args, quote_args
from relaunch.core.text import NotTextError
from relaunch.core.tokenizer import tokenize

log = structlog.get_logger()

USAGE = """\
usage: relaunch [NAME=VALUE ...] [-h] [-r] [-w DIR] [-s SHELL] [--] COMMAND [ARG ...]

  NAME=VALUE  set a variable for interpolation and export it to COMMAND
  -h          show this help and exit
  -r          run COMMAND in the project root (nearest .relaunch file)
  -w DIR      run COMMAND in DIR
  -s SHELL    treat COMMAND as a script for SHELL, ARGs become "$@"

$NAME and ${NAME} in COMMAND and ARGs are expanded; \\$NAME keeps it literal.
A single COMMAND containing whitespace is split into words.
"""

ARGS_VAR = "RELAUNCH_ARGS"
ARGS_QUOTED_VAR = "RELAUNCH_ARGS_QUOTED"
ROOT_VAR = "RELAUNCH_ROOT"

# Wrapping the script in a function makes "$@" the script arguments
SCRIPT_TEMPLATE = 'f() {{ {script}; }}; f "$@"'
SCRIPT_ARGV0 = "_"


class UsageError(ValueError):
    """Raised for a malformed launcher command line."""


@dataclass
class Options:
    """Launcher command line, split but not yet resolved."""

    assignments: list[tuple[str, str]] = field(default_factory=list)
    command: list[str] = field(default_factory=list)
    shell: str | None = None
    workdir: str | None = None
    use_root: bool = False
    help: bool = False


@dataclass
class Invocation:
    """A fully resolved process call."""

    program: str
    args: list[str]
    """Full argv, including argv[0]."""

    env: dict[str, str] = field(default_factory=dict)
    cwd: Path | None = None
    diagnostics: list[str] = field(default_factory=list)


def _is_assignment(token: str) -> bool:
    name, sep, _ = token.partition("=")
    return bool(sep) and is_name(name)


def parse_argv(argv: list[str]) -> Options:
    """Split argv into assignments, options and the command.

    Raises UsageError on unknown options or missing option values.
    """
    options = Options()
    i = 0
    n = len(argv)

    while i < n and _is_assignment(argv[i]):
        name, _, value = argv[i].partition("=")
        options.assignments.append((name, value))
        i += 1

    while i < n:
        token = argv[i]
        if token == "--":
            i += 1
            break
        if token == "-h":
            options.help = True
            i += 1
        elif token == "-r":
            options.use_root = True
            i += 1
        elif token == "-w":
            if i + 1 >= n:
                raise UsageError("-w requires a directory")
            options.workdir = argv[i + 1]
            i += 2
        elif token == "-s":
            if i + 1 >= n:
                raise UsageError("-s requires a shell and a command")
            options.shell = argv[i + 1]
            i += 2
        elif token.startswith("-") and token != "-":
            raise UsageError(f"unknown option '{token}'")
        else:
            break

    options.command = argv[i:]
    return options


def check_script(script: str) -> str | None:
    """Parse script with bashlex. Returns a diagnostic, or None if it parses."""
    try:
        bashlex.parse(script)
    except Exception as e:  # bashlex raises several unrelated types
        return f"script may not parse: {e}"
    return None


def _split_fragment(fragment: str, diagnostics: list[str]) -> list[str]:
    """Word-split a single script fragment into command + args."""
    try:
        return list(tokenize(fragment, diagnostics))
    except NotTextError:
        diagnostics.append("command is not valid text, not split")
        log.warning("split", diagnostic="command is not valid text, not split")
        return [fragment]


def build_invocation(
    options: Options,
    config: Config,
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> Invocation:
    """Resolve parsed options into an Invocation.

    Raises UsageError if there is no command, if -s has no script, or if -r
    is given outside a project.
    """
    if environ is None:
        environ = os.environ
    if cwd is None:
        cwd = Path.cwd()
    diagnostics: list[str] = []

    # Assignments see the ones before them
    scope = VariableScope(dict(config.env), environ)
    exported = dict(config.env)
    for name, raw in options.assignments:
        value = interpolate_arg(raw, scope, diagnostics)
        scope = scope.with_override(name, value)
        exported[name] = value

    def expand(words: list[str]) -> list[str]:
        return [interpolate_arg(w, scope, diagnostics) for w in words]

    if options.shell is not None:
        if not options.command:
            raise UsageError("-s requires a shell and a command")
        shell = interpolate_arg(options.shell, scope, diagnostics)
        # The shell expands the script itself
        script, script_args = options.command[0], expand(options.command[1:])
        problem = check_script(script)
        if problem:
            diagnostics.append(problem)
            log.warning("script", diagnostic=problem)
        program = shell
        args = [shell, "-c", SCRIPT_TEMPLATE.format(script=script), SCRIPT_ARGV0, *script_args]
        forwarded = script_args
    else:
        words = options.command
        if len(words) == 1 and any(c.isspace() for c in words[0]):
            words = _split_fragment(words[0], diagnostics)
        words = expand(words)
        if not words:
            raise UsageError("Must specify command to execute")
        program = words[0]
        args = words
        forwarded = words[1:]

    root = config.root if config.root is not None else find_project_root(cwd)
    workdir: Path | None = None
    if options.use_root:
        if root is None:
            raise UsageError("-r requires a project root (no .relaunch file found)")
        workdir = root
    if options.workdir is not None:
        target = Path(interpolate_arg(options.workdir, scope, diagnostics))
        workdir = (workdir or cwd) / target

    exported[ARGS_VAR] = join_args(forwarded)
    try:
        exported[ARGS_QUOTED_VAR] = quote_args(forwarded, config.quote_style or DEFAULT_STYLE)
    except NotTextError as e:
        message = f"arguments are not valid text, {ARGS_QUOTED_VAR} omitted"
        diagnostics.append(message)
        log.warning("quote", diagnostic=message, reason=e.reason)
    if root is not None:
        exported[ROOT_VAR] = str(root)

    return Invocation(
        program=program,
        args=args,
        env={**environ, **exported},
        cwd=workdir,
        diagnostics=diagnostics,
    )
