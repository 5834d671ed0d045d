"""Client ownership properties and property setting with value coercion."""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

from diligent.exceptions import InvalidPidError
from diligent.hosts.base import Client, Host, Tag

if TYPE_CHECKING:
    from .tracker import ClientTracker

ENV_PREFIX = "DILIGENT_"

OWNERSHIP_PROPERTIES = (
    "diligent_project",
    "diligent_role",
    "diligent_resource_id",
    "diligent_workspace",
    "diligent_start_time",
    "diligent_managed",
)


def resource_id(project: str, resource: str) -> str:
    return f"{project}/{resource}"


def ownership_properties(project: str, resource: str, tag: Optional[Tag], start_time: int) -> Dict[str, Any]:
    return {
        "diligent_project": project,
        "diligent_role": resource,
        "diligent_resource_id": resource_id(project, resource),
        "diligent_workspace": tag.name if tag is not None else "",
        "diligent_start_time": start_time,
        "diligent_managed": True,
    }


def ownership_env(project: str, resource: str, tag: Optional[Tag], start_time: int) -> Dict[str, str]:
    """DILIGENT_* variables matching ownership_properties()."""
    return {
        f"{ENV_PREFIX}PROJECT": project,
        f"{ENV_PREFIX}ROLE": resource,
        f"{ENV_PREFIX}RESOURCE_ID": resource_id(project, resource),
        f"{ENV_PREFIX}WORKSPACE": tag.name if tag is not None else "",
        f"{ENV_PREFIX}START_TIME": str(start_time),
    }


def coerce_value(value: Any) -> Any:
    """
    Best-effort conversion of string values.

    "true"/"false" become booleans, numeric strings become int or float,
    everything else is returned unchanged.
    """
    if not isinstance(value, str):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        number = float(value)
    except ValueError:
        return value
    return number if math.isfinite(number) else value


@dataclass(frozen=True)
class PropertyResult:
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


class ClientProperties:
    """Reads and writes client properties through a host."""

    def __init__(self, host: Host, tracker: "ClientTracker"):
        self.host = host
        self.tracker = tracker

    def get_client_properties(self, client: Client) -> Dict[str, Any]:
        return {k: client.properties[k] for k in OWNERSHIP_PROPERTIES if k in client.properties}

    def set_on_client(self, client: Client, key: str, value: Any) -> PropertyResult:
        value = coerce_value(value)
        try:
            self.host.set_client_property(client, key, value)
        except Exception as e:
            return PropertyResult(False, f"Failed to set property {key}: {e}")
        return PropertyResult(True, f"Property {key} set to {value}")

    def set_client_property(self, pid: Any, key: str, value: Any) -> PropertyResult:
        """
        Set a property on the client owned by `pid`.

        An invalid pid and an unknown pid produce different messages.
        """
        try:
            client = self.tracker.find_by_pid(pid)
        except InvalidPidError as e:
            return PropertyResult(False, str(e))
        if client is None:
            return PropertyResult(False, f"No client found with PID {pid}")
        return self.set_on_client(client, key, value)
