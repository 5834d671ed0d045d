"""Abstract base class for session host implementations (live window manager, dry-run, mock)."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union


@dataclass(frozen=True)
class Tag:
    """A live tag handle as seen by the host."""

    name: str
    index: int
    screen: Optional[int] = None


@dataclass(frozen=True)
class SessionContext:
    """Snapshot of the focused screen's tag state."""

    current_tag_index: int
    available_tags: Tuple[Tag, ...]
    screen: Optional[int] = None

    @property
    def tag_count(self) -> int:
        return len(self.available_tags)

    @property
    def current_tag(self) -> Optional[Tag]:
        return self.tag_at(self.current_tag_index)

    def tag_at(self, index: int) -> Optional[Tag]:
        for tag in self.available_tags:
            if tag.index == index:
                return tag
        return None


@dataclass
class Client:
    """A window known to the host."""

    pid: Optional[int]
    window_id: Optional[str] = None
    name: str = ""
    class_name: str = ""
    instance: str = ""
    tag: Optional[Tag] = None
    floating: bool = False
    minimized: bool = False
    maximized: bool = False
    geometry: Dict[str, int] = field(default_factory=dict)
    properties: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Placement:
    """A named window placement rule."""

    name: str
    x: Optional[int] = None
    y: Optional[int] = None
    anchor: Optional[str] = None


# (pid, startup notification id) on success, error text on failure
SpawnResult = Union[Tuple[int, Optional[str]], str]


class Host(ABC):
    """
    Abstract base class defining the capabilities the launch pipeline needs from a session.

    Each host (the live Awesome binding, the dry-run simulator, the test double) is passed
    into the components that use it. There is no process-wide current host.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short host identifier used in logs ('awesome', 'dry-run', 'mock')."""
        pass

    @abstractmethod
    def get_session_context(self, screen: Optional[int] = None) -> SessionContext:
        """
        Read the current tag state.

        Args:
            screen: Screen index, or None for the focused screen

        Returns:
            SessionContext with the current tag index and all tags on that screen
        """
        pass

    @abstractmethod
    def find_tag_by_name(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        pass

    @abstractmethod
    def create_named_tag(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        """Create a tag with the given name. Returns None if the host refused."""
        pass

    @abstractmethod
    def list_clients(self) -> List[Client]:
        pass

    @abstractmethod
    def read_process_env(self, pid: int) -> Optional[Dict[str, str]]:
        """
        Read the environment of a running process.

        Returns:
            Mapping of variable names to values, or None if unreadable
        """
        pass

    @abstractmethod
    def spawn(self, command: str, properties: Dict[str, Any]) -> SpawnResult:
        """
        Launch a command with initial window properties.

        Args:
            command: Shell command line (may carry an env prefix)
            properties: Window properties (tag, floating, placement, width, height)

        Returns:
            (pid, notification_id) on success, or an error string on failure
        """
        pass

    @abstractmethod
    def get_placement(self, name: str) -> Optional[Placement]:
        pass

    @abstractmethod
    def set_client_property(self, client: Client, key: str, value: Any) -> None:
        pass
