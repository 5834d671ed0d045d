"""Tests for project schema validation."""

import pytest

from diligent.dsl.validator import (
    validate_hooks,
    validate_layouts,
    validate_project,
    validation_summary,
)
from diligent.exceptions import ProjectValidationError


def _app(cmd="firefox", **fields):
    return {"type": "app", "cmd": cmd, **fields}


def _project(**overrides):
    raw = {"name": "demo", "resources": {"browser": _app()}}
    raw.update(overrides)
    return raw


class TestValidateProject:
    def test_valid_project(self):
        validate_project(_project())

    @pytest.mark.parametrize("raw, message", [
        ({"resources": {"a": _app()}}, "name field is required"),
        (_project(name=5), "name must be a string"),
        (_project(name="  "), "name cannot be empty"),
        ({"name": "demo"}, "resources field is required"),
        (_project(resources=[_app()]), "resources must be a table"),
        (_project(resources={}), "at least one resource is required"),
        ([], "project must be a table, got list"),
    ])
    def test_top_level_errors(self, raw, message):
        with pytest.raises(ProjectValidationError, match=message):
            validate_project(raw)

    def test_resource_errors_name_the_resource(self):
        raw = _project(resources={"editor": _app(cmd="")})

        with pytest.raises(ProjectValidationError, match="resource 'editor': cmd cannot be empty"):
            validate_project(raw)

    def test_unknown_resource_type(self):
        raw = _project(resources={"db": {"type": "database", "cmd": "psql"}})

        with pytest.raises(ProjectValidationError, match="resource 'db': unknown resource type: database"):
            validate_project(raw)

    def test_first_error_in_name_order(self):
        raw = _project(resources={"b": _app(cmd=""), "a": _app(tag="99")})

        with pytest.raises(ProjectValidationError, match="resource 'a'"):
            validate_project(raw)


class TestHooks:
    def test_valid(self):
        validate_hooks({"start": "make up", "stop": "make down"})

    def test_unknown_hook(self):
        with pytest.raises(ProjectValidationError, match=r"unknown hook type: restart \(valid: start, stop\)"):
            validate_hooks({"restart": "x"})

    def test_hook_must_be_string(self):
        with pytest.raises(ProjectValidationError, match="hooks.start must be a string"):
            validate_hooks({"start": 1})

    def test_hook_cannot_be_empty(self):
        with pytest.raises(ProjectValidationError, match="hooks.stop cannot be empty"):
            validate_hooks({"stop": " "})

    def test_hooks_must_be_table(self):
        with pytest.raises(ProjectValidationError, match="hooks must be a table, got string"):
            validate_project(_project(hooks="make up"))


class TestLayouts:
    def test_valid(self):
        validate_layouts({"focus": {"browser": "3", "editor": 0}})

    def test_empty_layouts_table(self):
        with pytest.raises(ProjectValidationError, match="at least one layout is required"):
            validate_layouts({})

    def test_layout_must_be_table(self):
        with pytest.raises(ProjectValidationError, match="layout 'focus' must be a table"):
            validate_layouts({"focus": "3"})

    def test_layout_tag_is_checked(self):
        with pytest.raises(ProjectValidationError, match="layout 'focus': resource 'browser'"):
            validate_layouts({"focus": {"browser": "0"}})


class TestValidationSummary:
    def test_collects_every_resource_error(self):
        raw = _project(resources={"a": _app(cmd=""), "b": _app(tag=-1), "c": _app()})

        summary = validation_summary(raw)

        assert summary.valid is False
        assert summary.resource_count == 3
        assert [r.valid for r in summary.resources] == [False, False, True]
        assert len(summary.errors) == 2
        assert summary.resources[2].description == "app: firefox"

    def test_top_level_error_comes_first(self):
        raw = {"name": "", "resources": {"a": _app(cmd="")}}

        summary = validation_summary(raw)

        assert summary.errors[0] == "name cannot be empty"
        assert "resource 'a': cmd cannot be empty" in summary.errors

    def test_valid_summary(self):
        summary = validation_summary(_project(hooks={"start": "make up"}))

        assert summary.valid
        assert summary.project_name == "demo"
        assert summary.has_hooks is True
        assert summary.to_dict()["resource_count"] == 1

    def test_non_table(self):
        summary = validation_summary("nope")

        assert summary.errors == ["project must be a table, got string"]
        assert summary.project_name is None
