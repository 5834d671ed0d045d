"""Command construction: environment variables and working directory."""

import os
import shlex
from typing import Mapping, Optional, Union


def build_command(
    app: str,
    env_vars: Optional[Union[Mapping[str, object], bool]] = None,
    working_dir: Optional[str] = None,
) -> str:
    """
    Prefix a command with an ``env`` wrapper.

    Args:
        app: Command line to run
        env_vars: Variables to set; None, False or {} adds none
        working_dir: Directory to run in (``env -C``); ``~`` is expanded

    Returns:
        ``app`` unchanged when there is nothing to add, otherwise
        ``env [-C DIR] K1=V1 K2=V2 ... app`` with keys sorted and values shell-quoted

    Example:
        >>> build_command("firefox", {"B": "2", "A": "1"})
        'env A=1 B=2 firefox'
    """
    env_vars = env_vars or {}
    if not env_vars and not working_dir:
        return app

    parts = ["env"]
    if working_dir:
        parts.extend(["-C", shlex.quote(os.path.expanduser(working_dir))])
    for key in sorted(env_vars):
        parts.append(f"{key}={shlex.quote(str(env_vars[key]))}")
    parts.append(app)
    return " ".join(parts)
