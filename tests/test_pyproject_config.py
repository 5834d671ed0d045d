"""Tests for pyproject.toml configuration.

Verifies packaging metadata and that code quality tools are configured.
"""

import tomllib
from pathlib import Path
from typing import Any, Dict

import pytest


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def pyproject(project_root: Path) -> Dict[str, Any]:
    """Parsed pyproject.toml."""
    with open(project_root / "pyproject.toml", "rb") as f:
        return tomllib.load(f)


class TestPackaging:
    """Test project metadata and entry points."""

    def test_console_script(self, pyproject: Dict[str, Any]) -> None:
        """The workon command should point at the click group."""
        assert pyproject["project"]["scripts"]["workon"] == "diligent.cli:cli"

    def test_runtime_dependencies(self, pyproject: Dict[str, Any]) -> None:
        deps = " ".join(pyproject["project"]["dependencies"])
        for name in ("click", "pyyaml", "rich"):
            assert name in deps, f"Missing runtime dependency {name}"

    def test_test_extra(self, pyproject: Dict[str, Any]) -> None:
        """Test-only libraries should live in the test extra."""
        test_deps = " ".join(pyproject["project"]["optional-dependencies"]["test"])
        for name in ("pytest", "pytest-mock", "time-machine"):
            assert name in test_deps, f"Missing test dependency {name}"

    def test_version_matches_package(self, pyproject: Dict[str, Any]) -> None:
        from diligent import __version__

        assert pyproject["project"]["version"] == __version__

    def test_src_layout(self, pyproject: Dict[str, Any]) -> None:
        assert pyproject["tool"]["setuptools"]["packages"]["find"]["where"] == ["src"]


class TestToolConfiguration:
    """Test mypy, black and flake8 configuration."""

    def test_mypy_python_version(self, pyproject: Dict[str, Any]) -> None:
        """mypy should target the minimum supported Python."""
        assert pyproject["tool"]["mypy"]["python_version"] >= "3.11"

    def test_black_line_length(self, pyproject: Dict[str, Any]) -> None:
        """black should have a line length configured."""
        assert 79 <= pyproject["tool"]["black"]["line-length"] <= 120

    def test_flake8_matches_black(self, pyproject: Dict[str, Any]) -> None:
        """flake8 max-line-length should match black's line-length."""
        assert (
            pyproject["tool"]["flake8"]["max-line-length"]
            == pyproject["tool"]["black"]["line-length"]
        )

    def test_pytest_testpaths(self, pyproject: Dict[str, Any]) -> None:
        assert pyproject["tool"]["pytest"]["ini_options"]["testpaths"] == ["tests"]
