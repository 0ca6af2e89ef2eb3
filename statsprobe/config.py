"""
statsprobe - Configuration

Module-level defaults that can be overridden through environment
variables, surfaced through a process-wide StatsConfig instance.

Usage:
    from statsprobe.config import get_config

    config = get_config()
    domain = config.jmx_domain

Environment Variables:
    STATS_JMX_DOMAIN: Default management domain (default: jboss.datagrid-infinispan)
    STATS_CROSSDC: Backend nodes run the clustered server (default: false)
    STATS_RESET_ATTEMPTS: Construction-time reset attempts (default: 2)
    STATS_RESET_DELAY_MS: Delay between reset attempts (default: 150)
    STATS_POLL_INTERVAL_MS: Availability poll interval (default: 100)
    STATS_LOG_DIR: Directory for JSON Lines event logs (default: unset, no file)
    STATS_LOG_CONSOLE: Echo events to stdout (default: true)
"""

import os
import threading
from dataclasses import dataclass
from typing import Mapping, Optional

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_JMX_DOMAIN = "jboss.datagrid-infinispan"
CROSSDC_JMX_DOMAIN = "org.wildfly.clustering.infinispan"
DEFAULT_RESET_ATTEMPTS = 2
DEFAULT_RESET_DELAY_MS = 150
DEFAULT_POLL_INTERVAL_MS = 100

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_flag(env: Mapping[str, str], name: str, default: bool) -> bool:
    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    value = env.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


# =============================================================================
# Configuration Record
# =============================================================================

@dataclass(frozen=True)
class StatsConfig:
    """Resolved configuration for statistics accessors."""
    jmx_domain: str = DEFAULT_JMX_DOMAIN
    crossdc: bool = False
    reset_attempts: int = DEFAULT_RESET_ATTEMPTS
    reset_delay_ms: int = DEFAULT_RESET_DELAY_MS
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS
    log_dir: Optional[str] = None
    log_console: bool = True

    def __post_init__(self):
        if self.reset_attempts < 1:
            raise ValueError(f"reset_attempts must be >= 1, got {self.reset_attempts}")
        if self.reset_delay_ms < 0:
            raise ValueError(f"reset_delay_ms must be >= 0, got {self.reset_delay_ms}")
        if self.poll_interval_ms < 1:
            raise ValueError(f"poll_interval_ms must be >= 1, got {self.poll_interval_ms}")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "StatsConfig":
        """Build a configuration from environment variables."""
        if env is None:
            env = os.environ
        return cls(
            jmx_domain=env.get("STATS_JMX_DOMAIN") or DEFAULT_JMX_DOMAIN,
            crossdc=_env_flag(env, "STATS_CROSSDC", False),
            reset_attempts=_env_int(env, "STATS_RESET_ATTEMPTS", DEFAULT_RESET_ATTEMPTS),
            reset_delay_ms=_env_int(env, "STATS_RESET_DELAY_MS", DEFAULT_RESET_DELAY_MS),
            poll_interval_ms=_env_int(env, "STATS_POLL_INTERVAL_MS", DEFAULT_POLL_INTERVAL_MS),
            log_dir=env.get("STATS_LOG_DIR") or None,
            log_console=_env_flag(env, "STATS_LOG_CONSOLE", True),
        )


# =============================================================================
# Global Instance
# =============================================================================

_config: Optional[StatsConfig] = None
_config_lock = threading.Lock()


def get_config() -> StatsConfig:
    """
    Get the process-wide configuration.

    Read from the environment on first use.
    """
    global _config

    with _config_lock:
        if _config is None:
            _config = StatsConfig.from_env()
        return _config


def set_config(config: StatsConfig):
    """Replace the process-wide configuration."""
    global _config

    with _config_lock:
        _config = config


def reset_config():
    """Forget the cached configuration so the next get_config() re-reads it."""
    global _config

    with _config_lock:
        _config = None
