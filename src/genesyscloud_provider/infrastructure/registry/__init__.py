"""Registry of resources, data sources and exporters."""

from .resource_registry import ResourceRegistry, UnsupportedResourceError

__all__ = ["ResourceRegistry", "UnsupportedResourceError"]
