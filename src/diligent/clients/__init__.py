"""Client tracking: lookups, property setting, process environment and the wait loop."""

from .info import ProcessEnv, get_client_info, read_process_env
from .properties import (
    ENV_PREFIX,
    OWNERSHIP_PROPERTIES,
    ClientProperties,
    PropertyResult,
    coerce_value,
    ownership_env,
    ownership_properties,
    resource_id,
)
from .tracker import ClientTracker, normalize_pid
from .wait import WaitCoordinator, WaitResult, WaitState

__all__ = [
    "ENV_PREFIX",
    "OWNERSHIP_PROPERTIES",
    "ClientProperties",
    "ClientTracker",
    "ProcessEnv",
    "PropertyResult",
    "WaitCoordinator",
    "WaitResult",
    "WaitState",
    "coerce_value",
    "get_client_info",
    "normalize_pid",
    "ownership_env",
    "ownership_properties",
    "read_process_env",
    "resource_id",
]
