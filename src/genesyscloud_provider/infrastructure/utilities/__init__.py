"""Infrastructure utilities."""

from .pagination import DEFAULT_PAGE_SIZE, PageFetchError, enumerate_all, find_by_name

__all__ = ["DEFAULT_PAGE_SIZE", "PageFetchError", "enumerate_all", "find_by_name"]
