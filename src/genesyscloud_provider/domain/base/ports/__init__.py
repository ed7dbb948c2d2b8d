"""Domain ports for infrastructure concerns."""

from .remote_object_port import Page, RemoteObjectAPI

__all__ = [
    "Page",
    "RemoteObjectAPI",
]
