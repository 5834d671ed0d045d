"""Resolve tag specifications against live session state."""

import logging
from typing import Optional

from diligent.exceptions import TagResolutionError
from diligent.hosts.base import Host, SessionContext, Tag
from diligent.tag_spec import AbsoluteTag, NamedTag, RelativeTag, TagSpec, describe

logger = logging.getLogger(__name__)


def current_session(host: Host, screen: Optional[int] = None) -> SessionContext:
    """Fetch the session context, wrapping host failures."""
    try:
        return host.get_session_context(screen)
    except Exception as e:
        raise TagResolutionError(f"could not read session state: {e}")


def _tag_by_index(context: SessionContext, index: int, spec: TagSpec) -> Tag:
    tag = context.tag_at(index)
    if tag is None:
        raise TagResolutionError(
            f"{describe(spec)} is out of range: tag {index} does not exist "
            f"({context.tag_count} tags available)"
        )
    return tag


def resolve(spec: TagSpec, context: SessionContext, host: Host) -> Tag:
    """
    Map a tag specification onto a live tag.

    Relative offsets count from the current tag, absolute indices address a tag
    directly, and named tags are looked up and created when missing. Resolving the
    same named tag twice returns the same tag and creates nothing new.

    Args:
        spec: Parsed tag specification
        context: Session state used for relative and absolute lookups
        host: Host used for named tag lookup and creation

    Returns:
        The resolved Tag

    Raises:
        TagResolutionError: Index out of range, or the named tag could not be created
    """
    if isinstance(spec, RelativeTag):
        return _tag_by_index(context, context.current_tag_index + spec.offset, spec)

    if isinstance(spec, AbsoluteTag):
        return _tag_by_index(context, spec.index, spec)

    if isinstance(spec, NamedTag):
        try:
            tag = host.find_tag_by_name(spec.name, context.screen)
            if tag is not None:
                return tag
            logger.debug("creating named tag %r", spec.name)
            tag = host.create_named_tag(spec.name, context.screen)
        except Exception as e:
            raise TagResolutionError(f"could not create tag '{spec.name}': {e}")
        if tag is None:
            raise TagResolutionError(f"could not create tag '{spec.name}'")
        return tag

    raise TagResolutionError(f"unsupported tag specification: {spec!r}")
