"""Wait for a spawned process's window to appear, then tag it."""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from .properties import ClientProperties, PropertyResult
from .tracker import ClientTracker

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0
DEFAULT_POLL_INTERVAL = 0.5


class WaitState(Enum):
    POLLING = "polling"
    FOUND = "found"
    TAGGED = "tagged"
    TIMED_OUT = "timed_out"


@dataclass
class WaitResult:
    success: bool
    state: WaitState
    message: str
    results: Dict[str, PropertyResult] = field(default_factory=dict)
    elapsed: float = 0.0
    polls: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "state": self.state.value,
            "message": self.message,
            "results": {k: r.to_dict() for k, r in self.results.items()},
            "elapsed": round(self.elapsed, 3),
            "polls": self.polls,
        }

    @property
    def all_set(self) -> bool:
        """True when the client was found and every property was set."""
        return self.success and all(r.success for r in self.results.values())


class WaitCoordinator:
    """
    Bounded poll loop: look the pid up, sleep, repeat until found or timed out.

    States move POLLING -> FOUND -> TAGGED, or POLLING -> TIMED_OUT. The loop
    never gives up before `timeout` seconds have elapsed on `clock`.
    """

    def __init__(
        self,
        tracker: ClientTracker,
        properties: ClientProperties,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if timeout < 0:
            raise ValueError("timeout must not be negative")
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        self.tracker = tracker
        self.properties = properties
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep

    def wait_for_client(self, pid: Any) -> WaitResult:
        """Poll until a client with `pid` exists. Does not set anything."""
        return self.wait_and_tag(pid, {})

    def wait_and_tag(self, pid: Any, props: Mapping[str, Any]) -> WaitResult:
        """
        Wait for the client owned by `pid` and set every property in `props` on it.

        Args:
            pid: Process id returned by the spawn
            props: Properties to set once the client appears

        Returns:
            WaitResult with per-property results when found, or a timeout message

        Raises:
            InvalidPidError: pid is not an integer
        """
        start = self.clock()
        polls = 0
        state = WaitState.POLLING

        while True:
            polls += 1
            client = self.tracker.find_by_pid(pid)
            elapsed = self.clock() - start

            if client is not None:
                state = WaitState.FOUND
                logger.debug("client for pid %s appeared after %.2fs", pid, elapsed)
                results = {
                    key: self.properties.set_on_client(client, key, value)
                    for key, value in props.items()
                }
                state = WaitState.TAGGED
                message = f"Client found for PID {pid}"
                failed = sorted(k for k, r in results.items() if not r.success)
                if failed:
                    message = f"Client found for PID {pid}, failed to set: {', '.join(failed)}"
                return WaitResult(True, state, message, results, elapsed, polls)

            if elapsed >= self.timeout:
                state = WaitState.TIMED_OUT
                return WaitResult(
                    success=False,
                    state=state,
                    message=f"Timeout waiting for client to appear (PID {pid}, {self.timeout:g}s)",
                    elapsed=elapsed,
                    polls=polls,
                )

            self.sleep(min(self.poll_interval, self.timeout - elapsed))
