"""Live host binding for the Awesome window manager.

Talks to the running window manager by piping Lua snippets through
``awesome-client`` and parsing the string it prints back. Snippets return
tab-separated records, one per line, so no Lua-side serializer is needed.
"""

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Any, Dict, List, Optional

from diligent.clients.properties import OWNERSHIP_PROPERTIES
from diligent.exceptions import HostCommandError, HostUnavailableError

from .base import Client, Host, Placement, SessionContext, SpawnResult, Tag

logger = logging.getLogger(__name__)

CLIENT_TIMEOUT = 10

# Client properties read back from the window manager on every listing
TRACKED_PROPERTIES = OWNERSHIP_PROPERTIES

_PRELUDE = '''
local awful = require("awful")
local function clean(v)
  if v == nil then return "" end
  return (tostring(v):gsub("[\\t\\n]", " "))
end
local function target_screen(n)
  if n then return screen[n] end
  return awful.screen.focused()
end
local function tag_record(t)
  if not t then return "" end
  return table.concat({"tag", t.index, clean(t.name), t.screen and t.screen.index or ""}, "\\t")
end
'''


def lua_literal(value: Any) -> str:
    """Render a Python scalar as a Lua literal."""
    if value is None:
        return 'nil'
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (int, float)):
        return repr(value)
    text = str(value)
    escaped = (
        text.replace('\\', '\\\\')
        .replace('"', '\\"')
        .replace('\n', '\\n')
        .replace('\r', '\\r')
        .replace('\0', '\\0')
    )
    return f'"{escaped}"'


def parse_client_output(stdout: str) -> str:
    """
    Extract the returned value from awesome-client output.

    awesome-client prints results as e.g. ``   string "text"`` or ``   double 3``.
    """
    text = stdout.strip()
    if not text:
        return ''
    if text.startswith('string "') and text.endswith('"'):
        return text[len('string "'):-1]
    kind, _, rest = text.partition(' ')
    if kind in ('double', 'int32', 'int64', 'uint32', 'boolean'):
        return rest.strip()
    return text


def _parse_tag(fields: List[str]) -> Optional[Tag]:
    if len(fields) < 3 or fields[0] != 'tag':
        return None
    screen = int(fields[3]) if len(fields) > 3 and fields[3] else None
    return Tag(name=fields[2], index=int(fields[1]), screen=screen)


def _to_bool(value: str) -> bool:
    return value == 'true'


def read_proc_environ(pid: int, proc_root: Path = Path('/proc')) -> Optional[Dict[str, str]]:
    """Read /proc/<pid>/environ (NUL-separated KEY=VALUE pairs)."""
    try:
        content = (proc_root / str(pid) / 'environ').read_bytes()
    except OSError:
        return None

    env: Dict[str, str] = {}
    for item in content.split(b'\0'):
        if not item or b'=' not in item:
            continue
        key, _, value = item.partition(b'=')
        env[key.decode(errors='replace')] = value.decode(errors='replace')
    return env


class AwesomeHost(Host):
    """Host backed by a running Awesome session."""

    def __init__(self, executable: str = 'awesome-client', check: bool = True):
        """
        Bind to the window manager.

        Args:
            executable: awesome-client binary name or path
            check: Verify the window manager answers before returning

        Raises:
            HostUnavailableError: If awesome-client is missing or gets no answer
        """
        resolved = shutil.which(executable)
        if resolved is None:
            raise HostUnavailableError(
                f"'{executable}' not found in PATH; is the Awesome window manager installed?"
            )
        self.executable = resolved

        if check:
            try:
                answer = self.run_lua('return "pong"')
            except HostCommandError as e:
                raise HostUnavailableError(f"Awesome window manager is not responding: {e}")
            if answer != 'pong':
                raise HostUnavailableError(
                    f"Awesome window manager is not responding (got {answer!r})"
                )

    @property
    def name(self) -> str:
        return 'awesome'

    def run_lua(self, snippet: str) -> str:
        """
        Evaluate a Lua snippet inside the window manager.

        Returns:
            The snippet's return value as text

        Raises:
            HostCommandError: If awesome-client fails or reports a Lua error
        """
        try:
            result = subprocess.run(
                [self.executable],
                input=_PRELUDE + snippet,
                capture_output=True,
                text=True,
                timeout=CLIENT_TIMEOUT,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise HostCommandError(f"awesome-client failed: {e}")

        if result.returncode != 0:
            raise HostCommandError(
                f"awesome-client exited with {result.returncode}: {result.stderr.strip()}"
            )
        if result.stderr.strip().lower().startswith('error'):
            raise HostCommandError(result.stderr.strip())

        return parse_client_output(result.stdout)

    def get_session_context(self, screen: Optional[int] = None) -> SessionContext:
        output = self.run_lua(f'''
local s = target_screen({lua_literal(screen)})
if not s then return "" end
local out = {{"ctx\\t" .. s.index .. "\\t" .. (s.selected_tag and s.selected_tag.index or 1)}}
for _, t in ipairs(s.tags) do out[#out + 1] = tag_record(t) end
return table.concat(out, "\\n")
''')
        lines = output.splitlines()
        if not lines or not lines[0].startswith('ctx'):
            raise HostCommandError("no screen available from the window manager")

        header = lines[0].split('\t')
        tags = [tag for tag in (_parse_tag(line.split('\t')) for line in lines[1:]) if tag]
        return SessionContext(
            current_tag_index=int(header[2]),
            available_tags=tuple(tags),
            screen=int(header[1]),
        )

    def find_tag_by_name(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        if not name:
            return None
        output = self.run_lua(f'''
local s = target_screen({lua_literal(screen)})
if not s then return "" end
for _, t in ipairs(s.tags) do
  if t.name == {lua_literal(name)} then return tag_record(t) end
end
return ""
''')
        return _parse_tag(output.split('\t'))

    def create_named_tag(self, name: str, screen: Optional[int] = None) -> Optional[Tag]:
        if not name:
            return None
        output = self.run_lua(f'''
local s = target_screen({lua_literal(screen)})
if not s then return "" end
local t = awful.tag.add({lua_literal(name)}, {{screen = s, layout = awful.layout.layouts[1]}})
return tag_record(t)
''')
        return _parse_tag(output.split('\t'))

    def list_clients(self) -> List[Client]:
        props = ', '.join(lua_literal(p) for p in TRACKED_PROPERTIES)
        output = self.run_lua(f'''
local out = {{}}
for _, c in ipairs(client.get()) do
  local g = c:geometry()
  local t = c.first_tag
  local fields = {{
    c.pid or "", c.window or "", clean(c.name), clean(c.class), clean(c.instance),
    t and t.index or "", t and clean(t.name) or "", c.screen and c.screen.index or "",
    tostring(c.floating), tostring(c.minimized), tostring(c.maximized),
    g.x, g.y, g.width, g.height,
  }}
  for _, key in ipairs({{{props}}}) do
    local v = c[key]
    fields[#fields + 1] = v == nil and "" or (type(v) .. ":" .. clean(v))
  end
  out[#out + 1] = table.concat(fields, "\\t")
end
return table.concat(out, "\\n")
''')
        lines = output.splitlines()
        return [client for client in (self._parse_client(line) for line in lines if line) if client]

    @staticmethod
    def _parse_client(line: str) -> Optional[Client]:
        fields = line.split('\t')
        if len(fields) < 15:
            logger.debug("skipping malformed client record: %r", line)
            return None

        tag = None
        if fields[5]:
            tag = Tag(name=fields[6], index=int(fields[5]), screen=int(fields[7]) if fields[7] else None)

        properties: Dict[str, Any] = {}
        for key, raw in zip(TRACKED_PROPERTIES, fields[15:]):
            if not raw:
                continue
            kind, _, value = raw.partition(':')
            if kind == 'boolean':
                properties[key] = value == 'true'
            elif kind == 'number':
                properties[key] = float(value) if '.' in value else int(value)
            else:
                properties[key] = value

        return Client(
            pid=int(fields[0]) if fields[0] else None,
            window_id=fields[1] or None,
            name=fields[2],
            class_name=fields[3],
            instance=fields[4],
            tag=tag,
            floating=_to_bool(fields[8]),
            minimized=_to_bool(fields[9]),
            maximized=_to_bool(fields[10]),
            geometry={
                'x': int(float(fields[11])),
                'y': int(float(fields[12])),
                'width': int(float(fields[13])),
                'height': int(float(fields[14])),
            },
            properties=properties,
        )

    def read_process_env(self, pid: int) -> Optional[Dict[str, str]]:
        return read_proc_environ(pid)

    def spawn(self, command: str, properties: Dict[str, Any]) -> SpawnResult:
        assignments = []
        tag = properties.get('tag')
        if isinstance(tag, Tag):
            assignments.append(
                f'props.tag = target_screen({lua_literal(tag.screen)}).tags[{tag.index}]'
            )
        placement = properties.get('placement')
        if isinstance(placement, Placement):
            assignments.append(f'props.placement = awful.placement[{lua_literal(placement.name)}]')
        for key in ('floating', 'width', 'height'):
            if key in properties:
                assignments.append(f'props.{key} = {lua_literal(properties[key])}')

        body = '\n'.join(assignments)
        try:
            output = self.run_lua(f'''
local props = {{}}
{body}
local pid, snid = awful.spawn({lua_literal(command)}, props)
if type(pid) == "string" then return "error\\t" .. pid end
return "ok\\t" .. pid .. "\\t" .. tostring(snid or "")
''')
        except HostCommandError as e:
            return str(e)

        status, _, rest = output.partition('\t')
        if status != 'ok':
            return rest or output or "spawn failed"
        pid_text, _, snid = rest.partition('\t')
        return int(pid_text), snid or None

    def get_placement(self, name: str) -> Optional[Placement]:
        output = self.run_lua(
            f'return awful.placement[{lua_literal(name)}] and "yes" or "no"'
        )
        return Placement(name) if output == 'yes' else None

    def set_client_property(self, client: Client, key: str, value: Any) -> None:
        if client.window_id is None:
            raise HostCommandError(f"client with PID {client.pid} has no window id")
        self.run_lua(f'''
for _, c in ipairs(client.get()) do
  if tostring(c.window) == {lua_literal(client.window_id)} then
    c[{lua_literal(key)}] = {lua_literal(value)}
  end
end
return "ok"
''')
        client.properties[key] = value
