"""Scriptable host for tests: state is set up explicitly and every call is recorded."""

from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple

from .base import Client, Host, Placement, SessionContext, SpawnResult, Tag

FIRST_MOCK_PID = 1000


def _default_context() -> SessionContext:
    return SessionContext(
        current_tag_index=1,
        available_tags=tuple(Tag(str(i), i, 1) for i in range(1, 10)),
        screen=1,
    )


class MockHost(Host):
    """
    Deterministic host double.

    Spawns succeed with increasing pids starting at 1000 unless results are queued
    with set_spawn_result(). Spawned processes do not produce clients on their own;
    add them with add_client()/set_clients().
    """

    def __init__(self) -> None:
        self.reset()

    @property
    def name(self) -> str:
        return 'mock'

    def reset(self) -> None:
        self._context = _default_context()
        self._clients: List[Client] = []
        self._process_env: Dict[int, Dict[str, str]] = {}
        self._spawn_results: Deque[SpawnResult] = deque()
        self._next_pid = FIRST_MOCK_PID
        self._placements: Dict[str, Placement] = {
            'centered': Placement('centered', anchor='center'),
        }
        self.spawn_calls: List[Tuple[str, Dict[str, Any]]] = []
        self.property_calls: List[Tuple[Optional[int], str, Any]] = []
        self.created_tags: List[Tag] = []
        self.fail_session_context: Optional[Exception] = None

    # -- scripting -------------------------------------------------------

    def set_session_context(self, context: SessionContext) -> None:
        self._context = context

    def set_clients(self, clients: List[Client]) -> None:
        self._clients = list(clients)

    def add_client(self, client: Client) -> None:
        self._clients.append(client)

    def set_process_env(self, pid: int, env: Dict[str, str]) -> None:
        self._process_env[pid] = dict(env)

    def set_spawn_result(self, result: SpawnResult) -> None:
        """Queue the result of the next spawn() call."""
        self._spawn_results.append(result)

    def set_placements(self, placements: Dict[str, Placement]) -> None:
        self._placements = dict(placements)

    # -- Host ------------------------------------------------------------

    def get_session_context(self, screen: Optional[int] = None) -> SessionContext:
        if self.fail_session_context is not None:
            raise self.fail_session_context
        return self._context

    def find_tag_by_name(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        for tag in self._context.available_tags:
            if tag.name == name:
                return tag
        return None

    def create_named_tag(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        existing = self.find_tag_by_name(name, screen)
        if existing is not None:
            return existing

        next_index = max((t.index for t in self._context.available_tags), default=0) + 1
        tag = Tag(name, next_index, self._context.screen)
        self._context = SessionContext(
            current_tag_index=self._context.current_tag_index,
            available_tags=self._context.available_tags + (tag,),
            screen=self._context.screen,
        )
        self.created_tags.append(tag)
        return tag

    def list_clients(self) -> List[Client]:
        return list(self._clients)

    def read_process_env(self, pid: int) -> Optional[Dict[str, str]]:
        env = self._process_env.get(pid)
        return dict(env) if env is not None else None

    def spawn(self, command: str, properties: Dict[str, Any]) -> SpawnResult:
        self.spawn_calls.append((command, dict(properties)))
        if self._spawn_results:
            return self._spawn_results.popleft()

        pid = self._next_pid
        self._next_pid += 1
        return pid, f"mock-snid-{pid}"

    def get_placement(self, name: str) -> Optional[Placement]:
        return self._placements.get(name)

    def set_client_property(self, client: Client, key: str, value: Any) -> None:
        self.property_calls.append((client.pid, key, value))
        client.properties[key] = value
