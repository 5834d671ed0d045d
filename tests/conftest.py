"""
Shared pytest fixtures for diligent tests.

Fixtures are automatically discovered by pytest when placed in conftest.py.
"""

from pathlib import Path

import pytest
from click.testing import CliRunner

from diligent import config
from diligent.hosts import DryRunHost, MockHost

PROJECTS_DIR = Path(__file__).resolve().parent.parent / "projects"


# =============================================================================
# ISOLATION
# =============================================================================

@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """
    Point HOME at a temp dir and reset the config cache.

    Keeps tests from reading ~/.diligent/config.yaml or writing event logs
    into the real home directory.
    """
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    config._CONFIG_CACHE = None
    yield home
    config._CONFIG_CACHE = None


# =============================================================================
# HOST FIXTURES
# =============================================================================

@pytest.fixture
def mock_host():
    """Scriptable host with tags 1-9 on screen 1, tag 1 focused."""
    return MockHost()


@pytest.fixture
def dry_run_host():
    host = DryRunHost()
    yield host
    host.clear_execution_log()


class FakeClock:
    """Manual clock: time only moves when sleep() is called."""

    def __init__(self, start: float = 100.0):
        self.now = start
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def fake_clock():
    """
    Provide a FakeClock.

    Usage:
        coordinator = WaitCoordinator(..., clock=fake_clock, sleep=fake_clock.sleep)
    """
    return FakeClock()


# =============================================================================
# CLI FIXTURES
# =============================================================================

@pytest.fixture
def cli_runner():
    """
    Provide Click CLI test runner.

    Usage:
        def test_my_command(cli_runner):
            from diligent.cli import cli
            result = cli_runner.invoke(cli, ['validate', '-f', path])
            assert result.exit_code == 0
    """
    return CliRunner()


# =============================================================================
# PROJECT FILES
# =============================================================================

DEMO_PROJECT = '''
{
    "name": "demo",
    "resources": {
        "editor": app(cmd="gedit notes.txt", tag=0),
        "browser": app(cmd="firefox", tag="3"),
    },
}
'''


@pytest.fixture
def demo_source():
    return DEMO_PROJECT


@pytest.fixture
def write_project(tmp_path):
    """
    Write project source to a .dsl file and return its path.

    Usage:
        path = write_project(DEMO_PROJECT)             # tmp_path/project.dsl
        path = write_project(source, name="webapp")    # tmp_path/webapp.dsl
    """
    def _write(source: str, name: str = "project") -> Path:
        path = tmp_path / f"{name}.dsl"
        path.write_text(source)
        return path

    return _write


@pytest.fixture
def sample_projects_dir():
    """Directory holding the sample projects shipped with the repo."""
    return PROJECTS_DIR
