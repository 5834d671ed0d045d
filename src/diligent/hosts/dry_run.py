"""Dry-run host: simulates every host operation and records it instead of executing it."""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .base import Client, Host, Placement, SessionContext, SpawnResult, Tag

logger = logging.getLogger(__name__)

DEFAULT_TAG_COUNT = 9
FIRST_NAMED_TAG_INDEX = DEFAULT_TAG_COUNT + 1
FIRST_DRY_RUN_PID = 10001

DRY_RUN_PLACEMENTS = {
    'centered': Placement('centered', anchor='center'),
    'top_left': Placement('top_left', x=0, y=0, anchor='top_left'),
    'bottom_right': Placement('bottom_right', anchor='bottom_right'),
}


@dataclass
class ExecutionLogEntry:
    """One simulated host operation."""

    operation: str
    details: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'operation': self.operation,
            'details': self.details,
            'timestamp': self.timestamp,
        }


class DryRunHost(Host):
    """
    Host that answers like a fresh session (tags 1-9, tag 1 focused) without side effects.

    Named tags created during the session are remembered so repeated resolution finds them
    again. Spawns return synthetic, increasing pids. All state lives on the instance and is
    reset with clear_execution_log().
    """

    def __init__(self) -> None:
        self.execution_log: List[ExecutionLogEntry] = []
        self._named_tags: List[Tag] = []
        self._next_tag_index = FIRST_NAMED_TAG_INDEX
        self._next_pid = FIRST_DRY_RUN_PID
        self._spawn_count = 0

    @property
    def name(self) -> str:
        return 'dry-run'

    def _log(self, operation: str, **details: Any) -> None:
        self.execution_log.append(ExecutionLogEntry(operation, details))
        logger.debug("dry-run %s %s", operation, details)

    def get_execution_log(self) -> List[ExecutionLogEntry]:
        return list(self.execution_log)

    def clear_execution_log(self) -> None:
        """Reset the log along with simulated tags and counters."""
        self.execution_log = []
        self._named_tags = []
        self._next_tag_index = FIRST_NAMED_TAG_INDEX
        self._next_pid = FIRST_DRY_RUN_PID
        self._spawn_count = 0

    def get_session_context(self, screen: Optional[int] = None) -> SessionContext:
        screen_index = 1 if screen is None else screen
        tags = tuple(
            Tag(str(i), i, screen_index) for i in range(1, DEFAULT_TAG_COUNT + 1)
        )
        return SessionContext(
            current_tag_index=1,
            available_tags=tags + tuple(self._named_tags),
            screen=screen_index,
        )

    def _find_named(self, name: str) -> Optional[Tag]:
        for tag in self._named_tags:
            if tag.name == name:
                return tag
        return None

    def find_tag_by_name(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        self._log('find_tag', tag_name=name)
        if not name:
            return None
        return self._find_named(name)

    def create_named_tag(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        if not name:
            return None

        existing = self._find_named(name)
        if existing is not None:
            self._log('create_tag', tag_name=name, result='existing_found', tag_index=existing.index)
            return existing

        tag = Tag(name, self._next_tag_index, 1 if screen is None else screen)
        self._next_tag_index += 1
        self._named_tags.append(tag)
        self._log('create_tag', tag_name=name, result='created', tag_index=tag.index)
        return tag

    def list_clients(self) -> List[Client]:
        self._log('get_clients', result='simulated_empty_list')
        return []

    def read_process_env(self, pid: int) -> Optional[Dict[str, str]]:
        self._log('get_process_env', pid=pid)
        if pid and pid > 0:
            return {
                'USER': 'dry_run_user',
                'HOME': '/home/dry_run_user',
                'PATH': '/usr/bin:/bin',
                'DISPLAY': ':0',
            }
        return None

    def spawn(self, command: str, properties: Dict[str, Any]) -> SpawnResult:
        pid = self._next_pid
        self._next_pid += 1
        self._spawn_count += 1
        snid = f"dry-run-snid-{self._spawn_count}"

        logged_props = dict(properties)
        if isinstance(logged_props.get('tag'), Tag):
            tag = logged_props['tag']
            logged_props['tag'] = f"{tag.name}[{tag.index}]"
        if isinstance(logged_props.get('placement'), Placement):
            logged_props['placement'] = logged_props['placement'].name

        self._log('spawn', command=command, properties=logged_props, result='simulated', pid=pid)
        return pid, snid

    def get_placement(self, name: str) -> Optional[Placement]:
        self._log('get_placement', placement_name=name)
        return DRY_RUN_PLACEMENTS.get(name)

    def set_client_property(self, client: Client, key: str, value: Any) -> None:
        self._log('set_client_property', pid=client.pid, key=key, value=value)
        client.properties[key] = value
