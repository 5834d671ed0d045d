"""diligent: launch project workspaces on the Awesome window manager."""

__version__ = "0.3.0"
