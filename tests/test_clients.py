"""Tests for client lookup, ownership properties and client info."""

import pytest

from diligent.clients import (
    ClientProperties,
    ClientTracker,
    coerce_value,
    get_client_info,
    normalize_pid,
    ownership_env,
    ownership_properties,
    read_process_env,
    resource_id,
)
from diligent.exceptions import InvalidPidError
from diligent.hosts import Client, Tag


@pytest.fixture
def tracker(mock_host):
    return ClientTracker(mock_host)


@pytest.fixture
def properties(mock_host, tracker):
    return ClientProperties(mock_host, tracker)


class TestNormalizePid:
    def test_int(self):
        assert normalize_pid(42) == 42

    def test_numeric_string(self):
        assert normalize_pid(" 42 ") == 42

    @pytest.mark.parametrize("pid", ["abc", "4.2", None, True, 4.0])
    def test_invalid(self, pid):
        with pytest.raises(InvalidPidError, match="Invalid PID format"):
            normalize_pid(pid)


class TestClientTracker:
    def test_find_by_pid(self, mock_host, tracker):
        client = Client(pid=1234, name="Firefox")
        mock_host.add_client(client)

        assert tracker.find_by_pid(1234) is client
        assert tracker.find_by_pid("1234") is client

    def test_absent_pid_is_none(self, tracker):
        assert tracker.find_by_pid(9999) is None

    def test_invalid_pid_raises(self, tracker):
        with pytest.raises(InvalidPidError):
            tracker.find_by_pid("abc")

    def test_find_by_env(self, mock_host, tracker):
        mock_host.set_clients([Client(pid=1), Client(pid=2), Client(pid=None)])
        mock_host.set_process_env(1, {"DILIGENT_PROJECT": "web"})
        mock_host.set_process_env(2, {"DILIGENT_PROJECT": "other"})

        assert [c.pid for c in tracker.find_by_env("DILIGENT_PROJECT", "web")] == [1]

    def test_find_by_property(self, mock_host, tracker):
        mock_host.set_clients([
            Client(pid=1, properties={"diligent_role": "editor"}),
            Client(pid=2),
        ])

        assert [c.pid for c in tracker.find_by_property("diligent_role", "editor")] == [1]

    def test_find_by_name_or_class(self, mock_host, tracker):
        mock_host.set_clients([
            Client(pid=1, name="Mozilla Firefox", class_name="firefox"),
            Client(pid=2, name="notes.txt - gedit", class_name="Gedit"),
        ])

        assert [c.pid for c in tracker.find_by_name_or_class("FIREFOX")] == [1]
        assert [c.pid for c in tracker.find_by_name_or_class("gedit")] == [2]

    def test_all_tracked(self, mock_host, tracker):
        mock_host.set_clients([
            Client(pid=1, properties={"diligent_managed": True}),
            Client(pid=2),
            Client(pid=3),
        ])
        mock_host.set_process_env(2, {"DILIGENT_ROLE": "editor", "HOME": "/home/u"})
        mock_host.set_process_env(3, {"HOME": "/home/u"})

        assert [c.pid for c in tracker.all_tracked()] == [1, 2]


class TestOwnership:
    def test_resource_id(self):
        assert resource_id("web", "editor") == "web/editor"

    def test_properties_and_env_agree(self):
        tag = Tag("docs", 10, 1)
        props = ownership_properties("web", "editor", tag, 1700000000)
        env = ownership_env("web", "editor", tag, 1700000000)

        assert props["diligent_resource_id"] == env["DILIGENT_RESOURCE_ID"] == "web/editor"
        assert props["diligent_workspace"] == env["DILIGENT_WORKSPACE"] == "docs"
        assert props["diligent_managed"] is True
        assert env["DILIGENT_START_TIME"] == "1700000000"
        assert all(isinstance(v, str) for v in env.values())


class TestCoerceValue:
    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("false", False),
        ("42", 42),
        ("1.5", 1.5),
        ("web", "web"),
        ("nan", "nan"),
        (7, 7),
    ])
    def test_coercion(self, raw, expected):
        assert coerce_value(raw) == expected
        assert type(coerce_value(raw)) is type(expected)


class TestClientProperties:
    def test_set_by_pid(self, mock_host, properties):
        client = Client(pid=1000)
        mock_host.add_client(client)

        result = properties.set_client_property(1000, "diligent_managed", "true")

        assert result.success
        assert result.message == "Property diligent_managed set to True"
        assert client.properties["diligent_managed"] is True
        assert mock_host.property_calls == [(1000, "diligent_managed", True)]

    def test_invalid_pid(self, properties):
        result = properties.set_client_property("abc", "k", "v")

        assert not result.success
        assert result.message.startswith("Invalid PID format")

    def test_unknown_pid(self, properties):
        result = properties.set_client_property(555, "k", "v")

        assert not result.success
        assert result.message == "No client found with PID 555"

    def test_host_failure(self, mock_host, properties, mocker):
        client = Client(pid=1)
        mocker.patch.object(mock_host, "set_client_property", side_effect=RuntimeError("gone"))

        result = properties.set_on_client(client, "diligent_role", "editor")

        assert not result.success
        assert result.message == "Failed to set property diligent_role: gone"

    def test_get_client_properties_only_ownership_keys(self, properties):
        client = Client(pid=1, properties={"diligent_role": "editor", "other": 1})

        assert properties.get_client_properties(client) == {"diligent_role": "editor"}


class TestClientInfo:
    def test_defaults_for_missing_fields(self):
        info = get_client_info(Client(pid=5))

        assert info["name"] == "unnamed"
        assert info["class"] == "unknown"
        assert info["window_title"] == "untitled"
        assert info["tag_name"] == "no tag"
        assert info["tag_index"] == 0
        assert info["geometry"] == {"x": 0, "y": 0, "width": 0, "height": 0}

    def test_full_client(self):
        client = Client(
            pid=5,
            name="Firefox",
            class_name="firefox",
            tag=Tag("3", 3, 2),
            floating=True,
            geometry={"x": 10, "y": 20, "width": 800, "height": 600},
        )

        info = get_client_info(client)

        assert info["tag_index"] == 3
        assert info["screen_index"] == 2
        assert info["floating"] is True
        assert info["geometry"]["width"] == 800

    def test_read_process_env_splits_diligent_vars(self, mock_host):
        mock_host.set_process_env(7, {"HOME": "/h", "DILIGENT_ROLE": "editor"})

        env = read_process_env(mock_host, 7)

        assert env.total_count == 2
        assert env.diligent_vars == {"DILIGENT_ROLE": "editor"}

    def test_read_process_env_unreadable(self, mock_host):
        assert read_process_env(mock_host, 7) is None
