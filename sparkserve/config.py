"""
Configuration management for sparkserve.

Settings come from, in increasing priority:
1. Built-in defaults
2. The process environment (optionally seeded from a dotenv file)
3. Explicit overrides, typically CLI flags

Environment variables:
    SPARK_HOME                 spark installation (default /opt/spark)
    SPARK_CONF_DIR             directory with <name>.yaml presets (required)
    SPARK_MASTER               cluster master address (required)
    DEBUG_SPARK_SUBMIT         write spark-submit output to the log
    DEBUG                      enable debug logs
    SPARKSERVE_DEV_MODE        human-readable console logs
    SPARKSERVE_HOST            bind address (default 0.0.0.0)
    SPARKSERVE_PORT            bind port (default 7070)
    SUBMIT_MAX_ATTEMPTS        retry attempts per submission (default 10)
    SUBMIT_INITIAL_DELAY       first retry wait in seconds (default 1)
    SUBMIT_BACKOFF_MULTIPLIER  wait multiplier (default 2)
    SUBMIT_MAX_DELAY           wait cap in seconds (default 300)
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv

from sparkserve.errors import ConfigError
from sparkserve.retry import RetryPolicy

DEFAULT_SPARK_HOME = "/opt/spark"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 7070
LAUNCHER_RELPATH = Path("bin") / "spark-submit"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class ServerConfig:
    """Immutable process configuration, fixed at startup."""
    spark_home: Path
    conf_dir: Path
    master: str
    debug_submit: bool = False
    dev_mode: bool = False
    debug: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    @property
    def launcher_path(self) -> Path:
        """Path of the spark-submit binary inside spark_home."""
        return self.spark_home / LAUNCHER_RELPATH

    @property
    def log_level(self) -> str:
        return "DEBUG" if self.debug else "INFO"


def _parse_bool(name: str, value: str) -> bool:
    norm = value.strip().lower()
    if norm in _TRUE_VALUES:
        return True
    if norm in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name}: expected a boolean, got {value!r}")


def _parse_number(name: str, value: Any, kind: type) -> Any:
    try:
        return kind(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name}: expected {kind.__name__}, got {value!r}") from None


def load_config(
    env_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    **overrides: Any,
) -> ServerConfig:
    """
    Build the server configuration.

    Args:
        env_file: Optional dotenv file loaded into os.environ first
            (existing variables are not overwritten)
        environ: Environment mapping, defaults to os.environ
        **overrides: Field values that take precedence over the environment;
            None values are ignored. Accepts the ServerConfig field names plus
            max_attempts, initial_delay, backoff_multiplier and max_delay.

    Returns:
        ServerConfig instance

    Raises:
        ConfigError: If a required setting is missing or a value is invalid
    """
    if env_file is not None:
        env_file = Path(env_file).expanduser()
        if not env_file.exists():
            raise ConfigError(f"env file not found: {env_file}")
        load_dotenv(env_file, override=False)

    env = os.environ if environ is None else environ
    overrides = {k: v for k, v in overrides.items() if v is not None}

    def setting(key: str, env_name: str, default: Any = None) -> Any:
        if key in overrides:
            return overrides[key]
        return env.get(env_name, default)

    def flag(key: str, env_name: str) -> bool:
        value = setting(key, env_name, "")
        if isinstance(value, bool):
            return value
        return _parse_bool(env_name, str(value))

    conf_dir = setting("conf_dir", "SPARK_CONF_DIR")
    if not conf_dir:
        raise ConfigError("missing spark configuration preset directory (SPARK_CONF_DIR)")

    master = setting("master", "SPARK_MASTER")
    if not master:
        raise ConfigError("missing spark master address (SPARK_MASTER)")

    try:
        retry = RetryPolicy(
            max_attempts=_parse_number(
                "SUBMIT_MAX_ATTEMPTS", setting("max_attempts", "SUBMIT_MAX_ATTEMPTS", 10), int
            ),
            initial_delay=_parse_number(
                "SUBMIT_INITIAL_DELAY", setting("initial_delay", "SUBMIT_INITIAL_DELAY", 1.0), float
            ),
            backoff_multiplier=_parse_number(
                "SUBMIT_BACKOFF_MULTIPLIER",
                setting("backoff_multiplier", "SUBMIT_BACKOFF_MULTIPLIER", 2.0),
                float,
            ),
            max_delay=_parse_number(
                "SUBMIT_MAX_DELAY", setting("max_delay", "SUBMIT_MAX_DELAY", 300.0), float
            ),
        )
    except ValueError as e:
        raise ConfigError(f"invalid retry settings: {e}") from e

    port = _parse_number("SPARKSERVE_PORT", setting("port", "SPARKSERVE_PORT", DEFAULT_PORT), int)
    if not 0 < port < 65536:
        raise ConfigError(f"SPARKSERVE_PORT: out of range: {port}")

    return ServerConfig(
        spark_home=Path(setting("spark_home", "SPARK_HOME", DEFAULT_SPARK_HOME)).expanduser(),
        conf_dir=Path(conf_dir).expanduser(),
        master=str(master),
        debug_submit=flag("debug_submit", "DEBUG_SPARK_SUBMIT"),
        dev_mode=flag("dev_mode", "SPARKSERVE_DEV_MODE"),
        debug=flag("debug", "DEBUG"),
        host=str(setting("host", "SPARKSERVE_HOST", DEFAULT_HOST)),
        port=port,
        retry=retry,
    )
