"""Tests for the dry-run, mock and Awesome hosts."""

import subprocess

import pytest

from diligent.exceptions import HostCommandError, HostUnavailableError
from diligent.hosts import Client, DryRunHost, MockHost, Placement, Tag, create_host
from diligent.hosts.awesome import (
    AwesomeHost,
    lua_literal,
    parse_client_output,
    read_proc_environ,
)


class TestDryRunHost:
    def test_fresh_session(self, dry_run_host):
        context = dry_run_host.get_session_context()

        assert context.current_tag_index == 1
        assert context.tag_count == 9
        assert context.screen == 1

    def test_named_tags_start_after_defaults(self, dry_run_host):
        tag = dry_run_host.create_named_tag("docs")

        assert tag == Tag("docs", 10, 1)
        assert dry_run_host.find_tag_by_name("docs") == tag
        assert dry_run_host.create_named_tag("docs") == tag
        assert dry_run_host.get_session_context().tag_at(10) == tag

    def test_spawn_is_simulated(self, dry_run_host):
        first = dry_run_host.spawn("firefox", {"tag": Tag("3", 3, 1)})
        second = dry_run_host.spawn("zed", {})

        assert first == (10001, "dry-run-snid-1")
        assert second == (10002, "dry-run-snid-2")
        entry = dry_run_host.get_execution_log()[0]
        assert entry.operation == "spawn"
        assert entry.details["properties"] == {"tag": "3[3]"}
        assert entry.to_dict()["details"]["command"] == "firefox"

    def test_operations_are_logged(self, dry_run_host):
        dry_run_host.list_clients()
        dry_run_host.get_placement("centered")
        dry_run_host.read_process_env(5)
        client = Client(pid=5)
        dry_run_host.set_client_property(client, "diligent_role", "x")

        operations = [e.operation for e in dry_run_host.get_execution_log()]
        assert operations == ["get_clients", "get_placement", "get_process_env", "set_client_property"]
        assert client.properties == {"diligent_role": "x"}

    def test_process_env_is_synthetic(self, dry_run_host):
        assert dry_run_host.read_process_env(5)["USER"] == "dry_run_user"
        assert dry_run_host.read_process_env(0) is None

    def test_clear_resets_everything(self, dry_run_host):
        dry_run_host.create_named_tag("docs")
        dry_run_host.spawn("x", {})

        dry_run_host.clear_execution_log()

        assert dry_run_host.get_execution_log() == []
        assert dry_run_host.spawn("x", {})[0] == 10001
        assert dry_run_host.create_named_tag("other").index == 10

    def test_instances_do_not_share_state(self):
        one, two = DryRunHost(), DryRunHost()
        one.spawn("x", {})

        assert two.get_execution_log() == []

    def test_log_is_a_copy(self, dry_run_host):
        dry_run_host.get_execution_log().append("junk")
        assert dry_run_host.get_execution_log() == []


class TestMockHost:
    def test_spawn_results_are_queued(self, mock_host):
        mock_host.set_spawn_result("boom")

        assert mock_host.spawn("a", {}) == "boom"
        assert mock_host.spawn("b", {}) == (1000, "mock-snid-1000")
        assert [c[0] for c in mock_host.spawn_calls] == ["a", "b"]

    def test_reset(self, mock_host):
        mock_host.spawn("a", {})
        mock_host.create_named_tag("docs")

        mock_host.reset()

        assert mock_host.spawn_calls == []
        assert mock_host.find_tag_by_name("docs") is None

    def test_placements(self, mock_host):
        assert mock_host.get_placement("centered") == Placement("centered", anchor="center")
        mock_host.set_placements({})
        assert mock_host.get_placement("centered") is None


class TestCreateHost:
    def test_modes(self):
        assert isinstance(create_host("dry-run"), DryRunHost)
        assert isinstance(create_host("mock"), MockHost)

    def test_unknown_mode(self):
        with pytest.raises(ValueError, match="unknown host mode: x"):
            create_host("x")

    def test_awesome_unavailable(self, mocker):
        mocker.patch("diligent.hosts.awesome.shutil.which", return_value=None)

        with pytest.raises(HostUnavailableError, match="not found in PATH"):
            create_host("awesome")


class TestLuaHelpers:
    @pytest.mark.parametrize("value, expected", [
        (None, "nil"),
        (True, "true"),
        (3, "3"),
        ("a\"b\nc", '"a\\"b\\nc"'),
    ])
    def test_lua_literal(self, value, expected):
        assert lua_literal(value) == expected

    @pytest.mark.parametrize("stdout, expected", [
        ('   string "pong"\n', "pong"),
        ("   double 3\n", "3"),
        ("", ""),
    ])
    def test_parse_client_output(self, stdout, expected):
        assert parse_client_output(stdout) == expected

    def test_read_proc_environ(self, tmp_path):
        (tmp_path / "42").mkdir()
        (tmp_path / "42" / "environ").write_bytes(b"HOME=/h\0DILIGENT_ROLE=editor\0\0")

        assert read_proc_environ(42, tmp_path) == {"HOME": "/h", "DILIGENT_ROLE": "editor"}
        assert read_proc_environ(43, tmp_path) is None


def _completed(stdout="", returncode=0, stderr=""):
    return subprocess.CompletedProcess(args=["awesome-client"], returncode=returncode,
                                       stdout=stdout, stderr=stderr)


@pytest.fixture
def awesome(mocker):
    """AwesomeHost with awesome-client faked out."""
    mocker.patch("diligent.hosts.awesome.shutil.which", return_value="/usr/bin/awesome-client")
    run = mocker.patch("diligent.hosts.awesome.subprocess.run", return_value=_completed())
    host = AwesomeHost(check=False)
    return host, run


class TestAwesomeHost:
    def test_ping_on_construction(self, mocker):
        mocker.patch("diligent.hosts.awesome.shutil.which", return_value="/usr/bin/awesome-client")
        mocker.patch("diligent.hosts.awesome.subprocess.run",
                     return_value=_completed(stdout='   string "pong"'))

        assert AwesomeHost().name == "awesome"

    def test_no_answer(self, mocker):
        mocker.patch("diligent.hosts.awesome.shutil.which", return_value="/usr/bin/awesome-client")
        mocker.patch("diligent.hosts.awesome.subprocess.run",
                     return_value=_completed(returncode=1, stderr="no connection"))

        with pytest.raises(HostUnavailableError, match="not responding"):
            AwesomeHost()

    def test_lua_error(self, awesome):
        host, run = awesome
        run.return_value = _completed(stderr="error: attempt to index nil")

        with pytest.raises(HostCommandError, match="attempt to index nil"):
            host.run_lua("return x.y")

    def test_session_context(self, awesome):
        host, run = awesome
        run.return_value = _completed(stdout='string "ctx\t1\t2\ntag\t1\t1\t1\ntag\t2\t2\t1"')

        context = host.get_session_context()

        assert context.current_tag_index == 2
        assert context.available_tags == (Tag("1", 1, 1), Tag("2", 2, 1))
        sent = run.call_args.kwargs["input"]
        assert "awful.screen.focused()" in sent

    def test_find_tag_missing(self, awesome):
        host, run = awesome
        run.return_value = _completed(stdout='string ""')

        assert host.find_tag_by_name("docs") is None

    def test_spawn(self, awesome):
        host, run = awesome
        run.return_value = _completed(stdout='string "ok\t4242\tsnid-1"')

        result = host.spawn("firefox", {"tag": Tag("3", 3, 1), "floating": True})

        assert result == (4242, "snid-1")
        sent = run.call_args.kwargs["input"]
        assert 'awful.spawn("firefox", props)' in sent
        assert "props.floating = true" in sent
        assert "tags[3]" in sent

    def test_spawn_error_is_returned(self, awesome):
        host, run = awesome
        run.return_value = _completed(stdout='string "error\tNo such file or directory"')

        assert host.spawn("nope", {}) == "No such file or directory"

    def test_list_clients(self, awesome):
        host, run = awesome
        record = "\t".join([
            "1234", "0x1", "Firefox", "firefox", "Navigator",
            "3", "3", "1", "false", "false", "true",
            "0", "0", "1920", "1080",
            "string:web", "", "", "", "", "boolean:true",
        ])
        run.return_value = _completed(stdout=f'string "{record}"')

        clients = host.list_clients()

        assert len(clients) == 1
        client = clients[0]
        assert client.pid == 1234
        assert client.tag == Tag("3", 3, 1)
        assert client.maximized is True
        assert client.geometry["width"] == 1920
        assert client.properties == {"diligent_project": "web", "diligent_managed": True}

    def test_set_property_needs_window(self, awesome):
        host, _ = awesome

        with pytest.raises(HostCommandError, match="no window id"):
            host.set_client_property(Client(pid=1), "k", "v")

    def test_subprocess_timeout(self, awesome):
        host, run = awesome
        run.side_effect = subprocess.TimeoutExpired(cmd="awesome-client", timeout=10)

        with pytest.raises(HostCommandError, match="awesome-client failed"):
            host.run_lua("return 1")
