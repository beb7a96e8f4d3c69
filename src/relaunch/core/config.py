"""relaunch configuration system."""

import logging
import os
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path

import structlog

from relaunch.core.interpolate import is_name
from relaunch.core.quoting import DEFAULT_STYLE, STYLES

USER_CONFIG = Path.home() / ".relaunch" / "config"
PROJECT_CONFIG_NAME = ".relaunch"
ENV_CONFIG = "RELAUNCH_CONFIG"


@dataclass
class Config:
    """Parsed configuration."""

    env: dict[str, str] = field(default_factory=dict)
    """Default variable overrides, exported to the child."""

    quote_style: str | None = None  # None = not set; load_config fills in DEFAULT_STYLE
    verbose: bool = False
    log: Path | None = None  # None = log to stderr
    root: Path | None = None
    """Project root: the directory holding the nearest .relaunch file."""


# === Config Loading ===


def find_project_config(cwd: Path) -> Path | None:
    """Walk up from cwd to find a .relaunch file."""
    current = cwd.resolve()
    while True:
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # reached root
            return None
        current = parent


def find_project_root(cwd: Path) -> Path | None:
    """Return the directory holding the nearest .relaunch file, if any."""
    path = find_project_config(cwd)
    return path.parent if path is not None else None


def _merge_configs(base: Config, overlay: Config) -> Config:
    """Merge overlay config into base. Env entries accumulate, settings override."""
    return replace(
        base,
        env={**base.env, **overlay.env},
        quote_style=overlay.quote_style
        if overlay.quote_style is not None
        else base.quote_style,
        verbose=overlay.verbose if overlay.verbose else base.verbose,
        log=overlay.log if overlay.log is not None else base.log,
        root=overlay.root if overlay.root is not None else base.root,
    )


def _load_file(path: Path) -> Config:
    try:
        return parse_config(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from None


def load_config(cwd: Path) -> Config:
    """Load config from ~/.relaunch/config, .relaunch, and $RELAUNCH_CONFIG. Last match wins."""
    config = Config()

    # 1. User config (lowest priority)
    if USER_CONFIG.is_file():
        config = _merge_configs(config, _load_file(USER_CONFIG))

    # 2. Project config (walk up from cwd)
    project_path = find_project_config(cwd)
    if project_path is not None:
        project_config = replace(_load_file(project_path), root=project_path.parent)
        config = _merge_configs(config, project_config)

    # 3. Env override (highest priority)
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if env_config_path.is_file():
            config = _merge_configs(config, _load_file(env_config_path))

    if config.quote_style is None:
        config = replace(config, quote_style=DEFAULT_STYLE)
    return config


def parse_config(text: str) -> Config:
    """Parse config text into Config object. Raises ValueError on syntax errors."""
    env: dict[str, str] = {}
    settings: dict[str, bool | str | Path] = {}

    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(None, 1)
        directive = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""

        try:
            if directive == "env":
                name, value = _parse_assignment(rest)
                env[name] = value

            elif directive == "set":
                _apply_setting(settings, rest)

            else:
                raise ValueError(f"unknown directive '{directive}'")

        except ValueError as e:
            raise ValueError(f"line {lineno}: {e}") from None

    return Config(
        env=env,
        quote_style=settings.get("quote_style"),
        verbose=settings.get("verbose", False),
        log=settings.get("log"),
    )


def _parse_assignment(rest: str) -> tuple[str, str]:
    """Split NAME=VALUE. Raises ValueError if malformed."""
    if "=" not in rest:
        raise ValueError("'env' requires NAME=VALUE")
    name, value = rest.split("=", 1)
    if not is_name(name):
        raise ValueError(f"invalid variable name '{name}'")
    return name, value


def _apply_setting(settings: dict[str, bool | str | Path], rest: str) -> None:
    """Parse and apply a 'set' directive. Raises ValueError on invalid setting."""
    if not rest:
        raise ValueError("'set' requires a setting name")

    parts = rest.split(None, 1)
    key = parts[0].lower()
    value = parts[1].strip() if len(parts) > 1 else None
    key_normalized = key.replace("-", "_")

    # Boolean settings (no value required)
    if key_normalized == "verbose":
        if value is not None:
            raise ValueError(f"'{key}' takes no value")
        settings[key_normalized] = True

    # Choice settings
    elif key_normalized == "quote_style":
        if value not in STYLES:
            choices = " or ".join(f"'{s}'" for s in sorted(STYLES))
            raise ValueError(f"'quote-style' must be {choices}, got '{value}'")
        settings[key_normalized] = value

    # Path settings
    elif key_normalized == "log":
        if value is None:
            raise ValueError("'log' requires a path")
        settings[key_normalized] = Path(value).expanduser()

    else:
        raise ValueError(f"unknown setting '{key}'")


# === Logging ===


def configure_logging(config: Config) -> None:
    """Configure structlog based on config settings. Call once at startup."""
    if config.log is not None:
        # JSON lines appended to the log file
        config.log.parent.mkdir(parents=True, exist_ok=True)
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso", key="ts"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            logger_factory=structlog.PrintLoggerFactory(file=config.log.open("a")),
        )
        return

    level = logging.INFO if config.verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )
