"""Command launcher with variable interpolation and shell-safe argument export.

Usage:
    relaunch [NAME=VALUE ...] [-h] [-r] [-w DIR] [-s SHELL] [--] COMMAND [ARG ...]

Leading NAME=VALUE tokens become variables: they are available to $NAME and
${NAME} references in later tokens and are exported to the child. The child
also receives:

- RELAUNCH_ARGS: its arguments joined with spaces, unquoted
- RELAUNCH_ARGS_QUOTED: the same arguments shell-quoted, safe to eval
- RELAUNCH_ROOT: the project root, when a .relaunch file is found

With -s, COMMAND is a script fragment run as `SHELL -c 'f() { COMMAND; }; f "$@"'`
so that the remaining ARGs are the script's positional parameters.

The process replaces itself with the child. If that fails, an error is
printed and the exit status is 1.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import structlog

from relaunch.core.config import configure_logging, load_config
from relaunch.core.launcher import USAGE, Invocation, UsageError, build_invocation, parse_argv
from relaunch.core.quoting import bash_join


def _error(message: object) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def execute(invocation: Invocation) -> None:
    """Replace the current process with the invocation. Raises OSError on failure."""
    if invocation.cwd is not None:
        os.chdir(invocation.cwd)
    os.execvpe(invocation.program, invocation.args, invocation.env)


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    cwd = Path.cwd()

    try:
        config = load_config(cwd)
        configure_logging(config)
    except (OSError, ValueError) as e:
        return _error(e)
    log = structlog.get_logger()

    try:
        options = parse_argv(argv)
        if options.help:
            print(USAGE, end="")
            return 0
        invocation = build_invocation(options, config, os.environ, cwd)
    except UsageError as e:
        log.info("usage_error", error=str(e))
        return _error(e)

    log.info(
        "exec",
        command=bash_join(invocation.args),
        cwd=str(invocation.cwd) if invocation.cwd else None,
        diagnostics=invocation.diagnostics,
    )
    try:
        execute(invocation)
    except OSError as e:
        log.warning("exec_failed", program=invocation.program, error=str(e))
        return _error(e)
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
