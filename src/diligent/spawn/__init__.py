"""Spawn orchestration: command environment, spawn properties and the spawner."""

from .configuration import PropertyBuilder
from .environment import build_command
from .spawner import SpawnOutcome, Spawner, app_name

__all__ = ["PropertyBuilder", "SpawnOutcome", "Spawner", "app_name", "build_command"]
