"""Session host abstraction (live Awesome binding, dry-run simulator, test double)."""

from typing import Optional

from .base import Client, Host, Placement, SessionContext, SpawnResult, Tag
from .dry_run import DryRunHost, ExecutionLogEntry
from .mock import MockHost

HOST_MODES = ('awesome', 'dry-run', 'mock')


def create_host(mode: str, awesome_client: Optional[str] = None) -> Host:
    """
    Build a host for the given mode.

    Args:
        mode: 'awesome', 'dry-run' or 'mock'
        awesome_client: awesome-client executable (awesome mode only)

    Raises:
        ValueError: Unknown mode
        HostUnavailableError: The live window manager cannot be reached
    """
    if mode == 'dry-run':
        return DryRunHost()
    if mode == 'mock':
        return MockHost()
    if mode == 'awesome':
        from .awesome import AwesomeHost
        from diligent.config import get_awesome_client

        return AwesomeHost(awesome_client or get_awesome_client())
    raise ValueError(f"unknown host mode: {mode} (valid: {', '.join(HOST_MODES)})")


__all__ = [
    "Client",
    "DryRunHost",
    "ExecutionLogEntry",
    "Host",
    "HOST_MODES",
    "MockHost",
    "Placement",
    "SessionContext",
    "SpawnResult",
    "Tag",
    "create_host",
]
