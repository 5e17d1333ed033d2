"""Relevance scoring, filtering and ordering of place-name records.

All functions are pure: the caller hands in the record collection it holds and
gets a freshly ordered list back. Nothing is cached between calls.
"""

import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from actnames.constants import (
    DESCRIPTION_COMMEMORATED,
    DESCRIPTION_CONTAINS,
    DESCRIPTION_FEATURE_NAME,
    NAME_CONTAINS,
    NAME_EXACT,
    NAME_PREFIX,
    OTHER_NAME_CONTAINS,
    OTHER_NAME_EXACT,
    OTHER_NAME_PREFIX,
)
from actnames.description import trim
from actnames.models import FeatureRecord


class SearchScope(StrEnum):
    """Which text fields a query may match for a record to be eligible."""

    ALL = "all"
    NAME = "name"
    BIOGRAPHY = "biography"


class SortMode(StrEnum):
    RELEVANCE = "relevance"
    NAME = "name"
    CATEGORY = "category"


@dataclass(frozen=True)
class SearchFilters:
    categories: frozenset[str] = frozenset()
    division: str | None = None
    scope: SearchScope = SearchScope.ALL


@dataclass(frozen=True)
class ScoredResult:
    feature: FeatureRecord
    score: int
    index: int


def normalize_text(value: Any) -> str:
    """Trim and lower-case. Internal whitespace is left alone."""
    if value is None:
        return ""
    return trim(str(value)).lower()


def _field_score(value: str, query: str, exact: int, prefix: int, contains: int) -> int:
    if value == query:
        return exact
    if value.startswith(query):
        return prefix
    if query in value:
        return contains
    return 0


def score_feature_relevance(feature: FeatureRecord, normalized_query: str) -> int:
    """Additive relevance of ``feature`` for an already normalized query.

    NAME and OTHER_NAME each award only their strongest of exact, prefix and
    substring matches. The DESCRIPTION checks are independent of each other,
    so a commemorated-name hit also collects the plain substring points.
    """
    if not isinstance(feature, FeatureRecord):
        raise TypeError(f"Expected FeatureRecord, got {type(feature).__name__}")
    if not normalized_query:
        return 0

    name = normalize_text(feature.name)
    other_name = normalize_text(feature.other_name)
    description = normalize_text(feature.description)

    score = _field_score(name, normalized_query, NAME_EXACT, NAME_PREFIX, NAME_CONTAINS)
    score += _field_score(other_name, normalized_query, OTHER_NAME_EXACT, OTHER_NAME_PREFIX, OTHER_NAME_CONTAINS)

    if f"commemorated name: {normalized_query}" in description:
        score += DESCRIPTION_COMMEMORATED
    if f"feature name: {normalized_query}" in description:
        score += DESCRIPTION_FEATURE_NAME
    if normalized_query in description:
        score += DESCRIPTION_CONTAINS

    return score


def name_sort_key(name: str | None) -> tuple[str, str]:
    """Collation key approximating a locale-aware comparison.

    Primary ordering ignores case and accents; ties are broken with lower case
    before upper case so the order is total and stable across runs.
    """
    text = name or ""
    decomposed = unicodedata.normalize("NFKD", text)
    primary = "".join(ch for ch in decomposed if not unicodedata.combining(ch)).casefold()
    return primary, text.swapcase()


def _name_id_key(feature: FeatureRecord) -> tuple:
    return name_sort_key(feature.name), feature.object_id


def compare_by_name_then_id(a: FeatureRecord, b: FeatureRecord) -> int:
    key_a, key_b = _name_id_key(a), _name_id_key(b)
    return (key_a > key_b) - (key_a < key_b)


def sort_by_name_then_id(features: Iterable[FeatureRecord]) -> list[FeatureRecord]:
    """Default ordering used when there is no query."""
    return sorted(features, key=_name_id_key)


def _relevance_key(result: ScoredResult) -> tuple:
    return -result.score, _name_id_key(result.feature), result.index


def _name_key(result: ScoredResult) -> tuple:
    return _name_id_key(result.feature), result.index


def _category_key(result: ScoredResult) -> tuple:
    return name_sort_key(result.feature.category_bucket), _relevance_key(result)


_SORT_KEYS = {
    SortMode.RELEVANCE: _relevance_key,
    SortMode.NAME: _name_key,
    SortMode.CATEGORY: _category_key,
}


def _score_all(features: Iterable[FeatureRecord], normalized_query: str) -> list[ScoredResult]:
    return [
        ScoredResult(feature=feature, score=score_feature_relevance(feature, normalized_query), index=index)
        for index, feature in enumerate(features)
    ]


def rank_features(features: Sequence[FeatureRecord], query: str) -> list[ScoredResult]:
    """Order ``features`` by descending score, then name, object id and input position.

    With an empty query every score is 0 and this is the name/id ordering.
    """
    scored = _score_all(features, normalize_text(query))
    return sorted(scored, key=_relevance_key)


def matches_filters(feature: FeatureRecord, filters: SearchFilters) -> bool:
    if filters.categories and feature.category_bucket not in filters.categories:
        return False
    if filters.division and feature.division_bucket != filters.division:
        return False
    return True


def _scoped_fields(feature: FeatureRecord, scope: SearchScope) -> tuple[str | None, ...]:
    match scope:
        case SearchScope.NAME:
            return (feature.name,)
        case SearchScope.BIOGRAPHY:
            return (feature.description,)
        case _:
            return (feature.name, feature.other_name, feature.description)


def matches_query(feature: FeatureRecord, normalized_query: str, scope: SearchScope = SearchScope.ALL) -> bool:
    if not normalized_query:
        return True
    return any(normalized_query in normalize_text(value) for value in _scoped_fields(feature, scope))


def rank_scored(
    features: Iterable[FeatureRecord],
    query: str = "",
    filters: SearchFilters | None = None,
    sort: SortMode = SortMode.RELEVANCE,
) -> list[ScoredResult]:
    """Filter and order a record collection, keeping scores for display.

    Scope restricts which fields make a record eligible. The score itself
    always comes from the all-field scorer.
    """
    filters = filters or SearchFilters()
    normalized_query = normalize_text(query)

    # index is the position in the caller's collection, before filtering
    scored = [
        ScoredResult(feature=feature, score=score_feature_relevance(feature, normalized_query), index=index)
        for index, feature in enumerate(features)
        if matches_filters(feature, filters) and matches_query(feature, normalized_query, filters.scope)
    ]
    return sorted(scored, key=_SORT_KEYS[SortMode(sort)])


def rank(
    features: Iterable[FeatureRecord],
    query: str = "",
    filters: SearchFilters | None = None,
    sort: SortMode = SortMode.RELEVANCE,
) -> list[FeatureRecord]:
    return [result.feature for result in rank_scored(features, query, filters, sort)]
