from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

from actnames.constants import STATS_TOP_N
from actnames.description import parse_description
from actnames.models import FeatureRecord


@dataclass(frozen=True)
class CountEntry:
    name: str
    count: int


@dataclass(frozen=True)
class DatasetStats:
    total_features: int = 0
    total_categories: int = 0
    total_divisions: int = 0
    category_distribution: list[CountEntry] = field(default_factory=list)
    top_divisions: list[CountEntry] = field(default_factory=list)
    top_commemorated_names: list[CountEntry] = field(default_factory=list)


def _count(values: Iterable[str | None]) -> list[CountEntry]:
    counts = Counter(v.strip() for v in values if isinstance(v, str) and v.strip())
    # most_common keeps first-seen order among equal counts
    return [CountEntry(name=name, count=count) for name, count in counts.most_common()]


def _commemorated_names(features: Iterable[FeatureRecord]) -> Iterable[str]:
    for feature in features:
        name = parse_description(feature.description or "").commemorated_name.strip()
        if name and name.lower() != "none":
            yield name


def compute_stats(features: Sequence[FeatureRecord], top_n: int = STATS_TOP_N) -> DatasetStats:
    if not features:
        return DatasetStats()

    categories = _count(f.category_name for f in features)
    divisions = _count(f.division_code for f in features)
    commemorated = _count(_commemorated_names(features))

    return DatasetStats(
        total_features=len(features),
        total_categories=len(categories),
        total_divisions=len(divisions),
        category_distribution=categories,
        top_divisions=divisions[:top_n],
        top_commemorated_names=commemorated[:top_n],
    )
