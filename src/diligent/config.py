"""Lightweight configuration loader for diligent.

Reads optional settings from ~/.diligent/config.yaml with safe defaults.

Supported keys:
- projects_dir: directory holding <name>.dsl project files (default: ~/.config/diligent/projects)
- log_dir: directory for the monthly event log (default: ~/.diligent/logs)
- wait_timeout: seconds to wait for a spawned window to appear (default: 5.0)
- poll_interval: seconds between client lookups while waiting (default: 0.5)
- host: default host binding - 'awesome' or 'dry-run' (default: 'awesome')
- awesome_client: executable used to talk to the window manager (default: 'awesome-client')
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional
import yaml

_CONFIG_CACHE: Optional[Dict[str, Any]] = None


def _defaults() -> Dict[str, Any]:
    home = Path.home()
    return {
        'projects_dir': str(home / '.config' / 'diligent' / 'projects'),
        'log_dir': str(home / '.diligent' / 'logs'),
        'wait_timeout': 5.0,
        'poll_interval': 0.5,
        'host': 'awesome',
        'awesome_client': 'awesome-client',
    }


def get_config() -> Dict[str, Any]:
    """Load config.yaml once and cache the result."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is not None:
        return _CONFIG_CACHE

    cfg_path = Path.home() / '.diligent' / 'config.yaml'
    data: Dict[str, Any] = {}
    if cfg_path.exists():
        try:
            loaded = yaml.safe_load(cfg_path.read_text())
            if isinstance(loaded, dict):
                data = loaded
        except (OSError, yaml.YAMLError):
            # Ignore malformed configs; fall back to defaults
            data = {}

    merged = {**_defaults(), **data}
    _CONFIG_CACHE = merged
    return merged


def get_projects_dir() -> Path:
    return Path(str(get_config().get('projects_dir', _defaults()['projects_dir']))).expanduser()


def get_log_dir() -> Path:
    return Path(str(get_config().get('log_dir', _defaults()['log_dir']))).expanduser()


def _number(key: str, minimum: float, inclusive: bool = True) -> float:
    """Read a numeric setting, falling back to the default when it is unusable."""
    default = float(_defaults()[key])
    try:
        value = float(get_config().get(key, default))
    except (TypeError, ValueError):
        return default
    if value < minimum or (not inclusive and value == minimum):
        return default
    return value


def get_wait_timeout(cli_timeout: Optional[float] = None) -> float:
    """
    Get the window wait timeout with priority: CLI flag > config file > default.

    Args:
        cli_timeout: Timeout given via the --timeout flag (highest priority)

    Returns:
        Timeout in seconds
    """
    if cli_timeout is not None:
        return float(cli_timeout)
    return _number('wait_timeout', 0.0)


def get_poll_interval() -> float:
    return _number('poll_interval', 0.0, inclusive=False)


def get_host_mode() -> str:
    return str(get_config().get('host', _defaults()['host']))


def get_awesome_client() -> str:
    return str(get_config().get('awesome_client', _defaults()['awesome_client']))
