"""Project file language: restricted evaluator, helper registry, validator and compiler."""

from .compiler import (
    PROJECT_SUFFIX,
    compile_project,
    evaluate_source,
    load_project_file,
    resolve_project_path,
)
from .helpers import AppHelper, HelperRegistry, ResourceHelper, default_registry
from .validator import ValidationSummary, validate_project, validation_summary

__all__ = [
    "AppHelper",
    "HelperRegistry",
    "PROJECT_SUFFIX",
    "ResourceHelper",
    "ValidationSummary",
    "compile_project",
    "default_registry",
    "evaluate_source",
    "load_project_file",
    "resolve_project_path",
    "validate_project",
    "validation_summary",
]
