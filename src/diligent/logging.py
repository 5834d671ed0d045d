"""Event log for diligent commands with hybrid format.

Logs are written in hybrid format:
    YYYY-MM-DD HH:MM:SS LEVEL [command] Human message | {"json": "data"}

The left side is for people, the right side for scripts.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


class DiligentLogger:
    """Logger for diligent commands with hybrid format output.

    Logs are written to monthly files: diligent-YYYY-MM.log
    Default location: the configured log_dir (~/.diligent/logs/)
    """

    def __init__(self, log_dir: Optional[Path] = None):
        """Initialize logger with log directory.

        Args:
            log_dir: Directory for log files. Defaults to config log_dir.
        """
        if log_dir is None:
            from diligent.config import get_log_dir
            log_dir = get_log_dir()

        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def _get_log_file(self) -> Path:
        month_str = datetime.now().strftime("%Y-%m")
        return self.log_dir / f"diligent-{month_str}.log"

    def _format_log_line(
        self,
        level: str,
        command: str,
        message: str,
        data: Dict[str, Any]
    ) -> str:
        """Format log line in hybrid format.

        Args:
            level: Log level (DEBUG, INFO, WARNING, ERROR)
            command: Command name (start, validate, clients)
            message: Human-readable message
            data: Structured data as dict

        Returns:
            Formatted log line with newline
        """
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level_padded = level.ljust(5)
        json_str = json.dumps(data, ensure_ascii=False, default=str)
        return f"{timestamp} {level_padded} [{command}] {message} | {json_str}\n"

    def log_event(
        self,
        command: str,
        message: str,
        data: Dict[str, Any],
        level: str = "INFO"
    ) -> None:
        """Append one event to the current month's log file."""
        log_line = self._format_log_line(level, command, message, data)
        with open(self._get_log_file(), "a") as f:
            f.write(log_line)

    def log_command_start(self, command: str, data: Dict[str, Any]) -> None:
        project = data.get("project", "")
        message = "Starting command"
        if project:
            message = f"Starting command: {project}"
        self.log_event(command, message, data, level="INFO")

    def log_command_complete(
        self,
        command: str,
        duration_ms: int,
        data: Dict[str, Any]
    ) -> None:
        """Log command completion event.

        Args:
            command: Command name
            duration_ms: Command duration in milliseconds
            data: Result data
        """
        project = data.get("project", "")
        message = f"Command complete ({duration_ms}ms)"
        if project:
            message = f"Command complete: {project} ({duration_ms}ms)"

        if "duration_ms" not in data:
            data = {**data, "duration_ms": duration_ms}

        self.log_event(command, message, data, level="INFO")

    def log_warning(self, command: str, message: str, data: Dict[str, Any]) -> None:
        self.log_event(command, message, data, level="WARN")

    def log_error(
        self,
        command: str,
        message: str,
        data: Dict[str, Any]
    ) -> None:
        """Log error event, appending data['reason'] to the message when present."""
        reason = data.get("reason", "")
        if reason:
            full_message = f"{message}: {reason}"
        else:
            full_message = message

        self.log_event(command, full_message, data, level="ERROR")

    def read_logs(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Parse the current month's log back into dicts.

        Args:
            limit: Only return the most recent N entries

        Returns:
            List of {timestamp, level, command, message, data}
        """
        log_file = self._get_log_file()
        if not log_file.exists():
            return []

        entries = []
        for line in log_file.read_text().splitlines():
            entry = _parse_log_line(line)
            if entry is not None:
                entries.append(entry)

        if limit is not None:
            entries = entries[-limit:]
        return entries


def _parse_log_line(line: str) -> Optional[Dict[str, Any]]:
    try:
        head, json_str = line.split(" | ", 1)
        date, time_, level, rest = head.split(None, 3)
        command, message = rest.split("] ", 1)
        data = json.loads(json_str)
    except ValueError:
        return None

    return {
        "timestamp": f"{date} {time_}",
        "level": level,
        "command": command.lstrip("["),
        "message": message,
        "data": data,
    }
