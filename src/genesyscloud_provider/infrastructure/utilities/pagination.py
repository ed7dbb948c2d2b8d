"""
Paginated enumeration over the remote object API.

Listings are requested page by page starting at page 1 until a page comes
back empty or absent. A failed page fetch aborts the enumeration.
"""

from typing import Any, Callable, Dict, Iterator, Optional

from genesyscloud_provider.domain.base.ports import Page
from genesyscloud_provider.domain.resource.resource_data import ResourceData
from genesyscloud_provider.infrastructure.logging.logger import get_logger
from genesyscloud_provider.infrastructure.resilience import (
    DEFAULT_BACKOFF,
    DONE,
    LOOKUP_TIMEOUT,
    OperationContext,
    Outcome,
    non_retryable_error,
    retryable_error,
    with_retries,
)

logger = get_logger(__name__)

DEFAULT_PAGE_SIZE = 100

PageFetcher = Callable[[int, int], Optional[Page]]


class PageFetchError(Exception):
    """A page of a listing could not be fetched."""

    def __init__(self, page_number: int, cause: BaseException):
        super().__init__(f"failed to get page {page_number}: {cause}")
        self.page_number = page_number
        self.cause = cause


def enumerate_all(fetch_page: PageFetcher, page_size: int = DEFAULT_PAGE_SIZE) -> Iterator[Dict[str, Any]]:
    """
    Lazily yield every entity of a paginated listing.

    Args:
        fetch_page: Callable taking (page_number, page_size)
        page_size: Entities per page

    Yields:
        Entities in listing order

    Raises:
        PageFetchError: If a page cannot be fetched
    """
    page_number = 1
    while True:
        try:
            page = fetch_page(page_number, page_size)
        except Exception as e:
            raise PageFetchError(page_number, e) from e

        if page is None or page.is_empty():
            logger.debug("Listing exhausted after %s pages", page_number - 1)
            return

        yield from page.entities
        page_number += 1


def find_by_name(ctx: Optional[OperationContext], d: ResourceData, fetch_page: PageFetcher,
                 name: str, label: str, timeout: float = LOOKUP_TIMEOUT,
                 backoff: float = DEFAULT_BACKOFF,
                 match: Optional[Callable[[Dict[str, Any]], bool]] = None,
                 page_size: int = DEFAULT_PAGE_SIZE) -> None:
    """
    Scan a listing for an entity and set its ID on the resource data.

    Running out of pages is retryable: a freshly created object may not have
    reached the listing index yet, so a missing name is only reported once
    the lookup deadline passes.

    Args:
        ctx: Caller's cancellation context
        d: Data source resource data
        fetch_page: Callable taking (page_number, page_size)
        name: Name to look for
        label: Human-readable object label for messages
        timeout: Lookup deadline in seconds
        backoff: Seconds between listing scans
        match: Predicate selecting the entity, defaults to exact name equality
        page_size: Entities per page

    Raises:
        RetryError: If the lookup fails or times out
    """
    match = match or (lambda entity: entity.get("name") == name)

    def lookup() -> Outcome:
        try:
            for entity in enumerate_all(fetch_page, page_size):
                if match(entity):
                    d.set_id(entity["id"])
                    logger.debug("Found %s %s with name %s", label, entity["id"], name)
                    return DONE
        except PageFetchError as e:
            return non_retryable_error(f"failed to get page of {label}s: {e.cause}")
        return retryable_error(f"no {label} found with name: {name}")

    with_retries(ctx, timeout, lookup, backoff=backoff)
