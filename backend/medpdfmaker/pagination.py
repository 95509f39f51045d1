"""
Pagination of a member's service records into claim form pages.

A claim form holds ``PAGE_CAPACITY`` service lines. Members with more trips
get several pages; every page repeats the member header and only the last one
carries the total charge.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterator, List, Sequence, Tuple, TypeVar

PAGE_CAPACITY = 6

T = TypeVar("T")


def page_count(records_count: int, capacity: int = PAGE_CAPACITY) -> int:
    """Number of pages needed for ``records_count`` rows (ceiling division)."""
    if capacity <= 0:
        raise ValueError(f"page capacity must be positive, got {capacity}")
    if records_count < 0:
        raise ValueError(f"records count must not be negative, got {records_count}")
    return -(-records_count // capacity)


@dataclass(frozen=True)
class PageInfo:
    page_num: int
    records_count: int
    page_count: int

    @classmethod
    def first(cls, records_count: int, capacity: int = PAGE_CAPACITY) -> "PageInfo":
        return cls(page_num=1, records_count=records_count, page_count=page_count(records_count, capacity))

    @property
    def multi_paged(self) -> bool:
        return self.page_count > 1

    def next_page(self) -> "PageInfo":
        return replace(self, page_num=self.page_num + 1)

    def is_last_page(self) -> bool:
        return self.page_num == self.page_count

    def is_multi_page(self) -> bool:
        return self.multi_paged

    def page_suffix(self) -> str:
        return f"_{self.page_num}"


def paginate(records: Sequence[T], capacity: int = PAGE_CAPACITY) -> Iterator[Tuple[PageInfo, List[T]]]:
    """
    Split ``records`` into consecutive page groups.

    Yields ``(PageInfo, group)`` pairs in page order. Every group holds at most
    ``capacity`` records in input order; only the last one may be shorter.
    Nothing is yielded for an empty input.
    """
    records = list(records)
    info = PageInfo.first(len(records), capacity)
    for start in range(0, len(records), capacity):
        yield info, records[start:start + capacity]
        info = info.next_page()
