from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import TypeVar

from actnames.constants import SEARCH_LIMIT
from actnames.ranking import SearchFilters, SearchScope, SortMode

T = TypeVar("T")


@dataclass
class SearchContext:
    """Interactive search state for one session. Never persisted."""

    page_size: int = SEARCH_LIMIT
    query: str = ""
    categories: frozenset[str] = frozenset()
    division: str | None = None
    scope: SearchScope = SearchScope.ALL
    sort: SortMode = SortMode.RELEVANCE
    visible_count: int = field(default=0)

    def __post_init__(self):
        if self.page_size < 1:
            raise ValueError(f"page_size must be positive, got {self.page_size}")
        if not self.visible_count:
            self.visible_count = self.page_size

    @property
    def filters(self) -> SearchFilters:
        return SearchFilters(categories=self.categories, division=self.division, scope=self.scope)

    @property
    def is_default(self) -> bool:
        return (
            not self.query
            and not self.categories
            and self.division is None
            and self.scope == SearchScope.ALL
            and self.sort == SortMode.RELEVANCE
        )

    def _restart_paging(self) -> None:
        self.visible_count = self.page_size

    def set_query(self, query: str) -> None:
        self.query = query.strip()
        self._restart_paging()

    def set_categories(self, categories: Iterable[str]) -> None:
        self.categories = frozenset(c.strip() for c in categories if c and c.strip())
        self._restart_paging()

    def toggle_category(self, category: str) -> None:
        self.set_categories(self.categories ^ {category})

    def set_division(self, division: str | None) -> None:
        self.division = division.strip() if division and division.strip() else None
        self._restart_paging()

    def set_scope(self, scope: SearchScope | str) -> None:
        self.scope = SearchScope(scope)
        self._restart_paging()

    def set_sort(self, sort: SortMode | str) -> None:
        self.sort = SortMode(sort)
        self._restart_paging()

    def show_more(self, pages: int = 1) -> None:
        self.visible_count += self.page_size * max(pages, 0)

    def reset(self) -> None:
        self.query = ""
        self.categories = frozenset()
        self.division = None
        self.scope = SearchScope.ALL
        self.sort = SortMode.RELEVANCE
        self._restart_paging()

    def visible(self, results: Sequence[T]) -> list[T]:
        return list(results[: self.visible_count])

    def has_more(self, results: Sequence) -> bool:
        return len(results) > self.visible_count
