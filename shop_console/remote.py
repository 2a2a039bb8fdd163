"""
Remote collection state shared by every list and detail view.

A collection moves from LOADING to LOADED or ERROR each time it is loaded.
Filtering is a pure function over the loaded data and never reorders it.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Generic, Hashable, Iterable, List, Optional, TypeVar

import structlog

from shop_console.exceptions import ShopConsoleError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


class LoadStatus(str, Enum):
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass
class RemoteCollection(Generic[T]):
    status: LoadStatus = LoadStatus.LOADING
    data: List[T] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def is_loading(self) -> bool:
        return self.status is LoadStatus.LOADING

    @property
    def is_loaded(self) -> bool:
        return self.status is LoadStatus.LOADED

    def load(self, fetcher: Callable[[], Iterable[T]], error_message: str) -> "RemoteCollection[T]":
        """Run fetcher once. Failures keep the previous data and record error_message."""
        self.status = LoadStatus.LOADING
        try:
            data = list(fetcher())
        except ShopConsoleError as e:
            logger.warning("Load failed", error=e.message, shown=error_message)
            self.status = LoadStatus.ERROR
            self.error = error_message
            return self
        self.data = data
        self.error = None
        self.status = LoadStatus.LOADED
        return self


def filter_items(items: Iterable[T], query: str, predicate: Callable[[T, str], bool]) -> List[T]:
    """
    Items for which predicate(item, lowered_query) holds, in their original order.

    A blank query returns every item.
    """
    if not query or not query.strip():
        return list(items)
    needle = query.lower()
    return [item for item in items if predicate(item, needle)]


def fan_out(
    keys: Iterable[K],
    fetch: Callable[[K], R],
    default: Callable[[], R],
    max_workers: int = 8,
    initializer: Optional[Callable[[], None]] = None,
) -> Dict[K, R]:
    """
    Call fetch(key) for every key concurrently and wait for all of them.

    A branch that fails with ShopConsoleError gets default() instead, so one
    bad key never fails the whole batch.
    """
    keys = list(keys)
    results: Dict[K, R] = {}
    if not keys:
        return results

    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(keys))), initializer=initializer) as executor:
        future_to_key = {executor.submit(fetch, key): key for key in keys}

        for future in as_completed(future_to_key):
            key = future_to_key[future]
            try:
                results[key] = future.result()
            except ShopConsoleError as e:
                logger.warning("Fan-out branch failed", key=key, error=e.message)
                results[key] = default()

    return results
