"""Read-only client lookups: by pid, environment, property, or name/class."""

import logging
from typing import Any, List, Optional

from diligent.exceptions import InvalidPidError
from diligent.hosts.base import Client, Host

from .properties import ENV_PREFIX, OWNERSHIP_PROPERTIES

logger = logging.getLogger(__name__)


def normalize_pid(pid: Any) -> int:
    """
    Accept an int or a numeric string as a pid.

    Raises:
        InvalidPidError: Anything else
    """
    if isinstance(pid, bool):
        raise InvalidPidError(f"Invalid PID format: {pid!r}")
    if isinstance(pid, int):
        return pid
    if isinstance(pid, str) and pid.strip().isdigit():
        return int(pid.strip())
    raise InvalidPidError(f"Invalid PID format: {pid!r}")


class ClientTracker:
    """Finds clients on a host. Never modifies them."""

    def __init__(self, host: Host):
        self.host = host

    def find_by_pid(self, pid: Any) -> Optional[Client]:
        """
        Find the client owned by a process.

        Args:
            pid: int or numeric string

        Returns:
            The client, or None if no client has that pid

        Raises:
            InvalidPidError: pid is not an integer
        """
        target = normalize_pid(pid)
        for client in self.host.list_clients():
            if client.pid == target:
                return client
        return None

    def find_by_env(self, key: str, value: str) -> List[Client]:
        matches = []
        for client in self.host.list_clients():
            if client.pid is None:
                continue
            env = self.host.read_process_env(client.pid)
            if env and env.get(key) == value:
                matches.append(client)
        return matches

    def find_by_property(self, key: str, value: Any) -> List[Client]:
        return [c for c in self.host.list_clients() if c.properties.get(key) == value]

    def find_by_name_or_class(self, term: str) -> List[Client]:
        """Case-insensitive substring match on window name or class."""
        needle = term.lower()
        return [
            c for c in self.host.list_clients()
            if needle in (c.name or "").lower() or needle in (c.class_name or "").lower()
        ]

    def all_tracked(self) -> List[Client]:
        """Clients launched by diligent: DILIGENT_* env vars or any ownership property."""
        tracked = []
        for client in self.host.list_clients():
            if any(key in client.properties for key in OWNERSHIP_PROPERTIES):
                tracked.append(client)
                continue
            if client.pid is None:
                continue
            env = self.host.read_process_env(client.pid) or {}
            if any(key.startswith(ENV_PREFIX) for key in env):
                tracked.append(client)
        return tracked
