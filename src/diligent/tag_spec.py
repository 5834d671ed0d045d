"""Tag specifications: the three ways a resource can address a tag.

A raw tag value from a project file is one of:

- a non-negative int: offset from the current tag (``0`` is the current tag)
- a digit-only string: absolute tag number 1-9 (``"3"``)
- any other string: a named tag (``"docs"``), created on demand

The shape of the raw value alone decides the variant.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

from diligent.exceptions import TagSpecError

TAG_NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_-]*$")
DIGITS_PATTERN = re.compile(r"^[0-9]+$")
MIN_ABSOLUTE_TAG = 1
MAX_ABSOLUTE_TAG = 9


@dataclass(frozen=True)
class RelativeTag:
    offset: int = 0

    @property
    def raw(self) -> int:
        return self.offset


@dataclass(frozen=True)
class AbsoluteTag:
    index: int

    @property
    def raw(self) -> str:
        return str(self.index)


@dataclass(frozen=True)
class NamedTag:
    name: str

    @property
    def raw(self) -> str:
        return self.name


TagSpec = Union[RelativeTag, AbsoluteTag, NamedTag]

DEFAULT_TAG: TagSpec = RelativeTag(0)


def parse(raw: Any) -> TagSpec:
    """
    Parse a raw tag value into a TagSpec.

    Args:
        raw: int, str, or an already-parsed TagSpec

    Returns:
        RelativeTag, AbsoluteTag or NamedTag

    Raises:
        TagSpecError: If the value has the wrong type or is out of range
    """
    if isinstance(raw, (RelativeTag, AbsoluteTag, NamedTag)):
        return raw

    if isinstance(raw, float):
        if not raw.is_integer():
            raise TagSpecError(f"relative offset must be a whole number, got {raw:g}")
        raw = int(raw)

    # bool is an int subclass but never a tag
    if isinstance(raw, int) and not isinstance(raw, bool):
        if raw < 0:
            raise TagSpecError("negative tag offsets not supported")
        return RelativeTag(raw)

    if isinstance(raw, str):
        if raw == "":
            raise TagSpecError("tag specification cannot be empty string")

        if DIGITS_PATTERN.fullmatch(raw):
            index = int(raw)
            if index < MIN_ABSOLUTE_TAG or index > MAX_ABSOLUTE_TAG:
                raise TagSpecError(
                    f"absolute tag must be between {MIN_ABSOLUTE_TAG} and {MAX_ABSOLUTE_TAG}, got {index}"
                )
            return AbsoluteTag(index)

        if not TAG_NAME_PATTERN.fullmatch(raw):
            raise TagSpecError(
                "invalid tag name format: must start with letter and contain only "
                "letters, numbers, underscore, or dash"
            )
        return NamedTag(raw)

    raise TagSpecError(f"tag must be a number or string, got {type(raw).__name__}")


def validate(raw: Any) -> Tuple[bool, Optional[str]]:
    """Check a raw tag value without raising. Returns (ok, error)."""
    try:
        parse(raw)
    except TagSpecError as e:
        return False, str(e)
    return True, None


def describe(spec: TagSpec) -> str:
    if isinstance(spec, RelativeTag):
        if spec.offset == 0:
            return "current tag (relative offset 0)"
        return f"relative offset +{spec.offset}"
    if isinstance(spec, AbsoluteTag):
        return f"absolute tag {spec.index}"
    if isinstance(spec, NamedTag):
        return f"named tag '{spec.name}'"
    raise TagSpecError(f"not a tag specification: {spec!r}")
