"""Client details for display."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from diligent.hosts.base import Client, Host

from .properties import ENV_PREFIX


@dataclass
class ProcessEnv:
    all_vars: Dict[str, str] = field(default_factory=dict)
    diligent_vars: Dict[str, str] = field(default_factory=dict)

    @property
    def total_count(self) -> int:
        return len(self.all_vars)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "all_vars": self.all_vars,
            "diligent_vars": self.diligent_vars,
            "total_count": self.total_count,
        }


def get_client_info(client: Client) -> Dict[str, Any]:
    geometry = client.geometry or {}
    return {
        "pid": client.pid,
        "name": client.name or "unnamed",
        "class": client.class_name or "unknown",
        "instance": client.instance or "unknown",
        "window_title": client.name or "untitled",
        "tag_index": client.tag.index if client.tag else 0,
        "tag_name": client.tag.name if client.tag else "no tag",
        "screen_index": client.tag.screen if client.tag and client.tag.screen else 0,
        "floating": bool(client.floating),
        "minimized": bool(client.minimized),
        "maximized": bool(client.maximized),
        "geometry": {
            "x": geometry.get("x", 0),
            "y": geometry.get("y", 0),
            "width": geometry.get("width", 0),
            "height": geometry.get("height", 0),
        },
        "properties": dict(client.properties),
    }


def read_process_env(host: Host, pid: int) -> Optional[ProcessEnv]:
    """Read a process environment and split out the DILIGENT_* variables."""
    env = host.read_process_env(pid)
    if env is None:
        return None
    return ProcessEnv(
        all_vars=dict(env),
        diligent_vars={k: v for k, v in env.items() if k.startswith(ENV_PREFIX)},
    )
