"""Tournament host package: wraps the room engines with networking."""

from .server import HostServer

__all__ = ["HostServer"]
