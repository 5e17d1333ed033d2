from collections.abc import Callable
from typing import Any, TypeAlias

import httpx

from actnames.constants import (
    DEFAULT_LAYER_URL,
    FETCH_PAGE_SIZE,
    HTTP_TIMEOUT,
    OUT_FIELDS,
    OUT_SPATIAL_REFERENCE,
    SEARCH_LIMIT,
    SEARCH_OVERFETCH_FACTOR,
    SEARCH_OVERFETCH_MIN,
)
from actnames.logging import get_logger
from actnames.models import FeatureRecord, LayerInfo, SearchResponse
from actnames.ranking import normalize_text, rank_features, sort_by_name_then_id
from actnames.sources.base import ActNamesError, Source

_logger = get_logger(__name__)

DEFAULT_ORDER = "NAME ASC, OBJECTID ASC"

ProgressFn: TypeAlias = Callable[[int], None]


class ArcGISError(ActNamesError):
    pass


def escape_sql_literal(value: str) -> str:
    return str(value).replace("'", "''")


def _is_non_empty(value: str | None) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _error_message(error: Any, default: str) -> str:
    if not isinstance(error, dict):
        return default
    details = error.get("details")
    if isinstance(details, list):
        joined = "; ".join(str(d) for d in details if d)
        if joined:
            return joined
    return error.get("message") or default


def _records(result: dict) -> list[FeatureRecord]:
    try:
        return [FeatureRecord.from_arcgis(f) for f in result.get("features") or []]
    except TypeError as e:
        raise ArcGISError(f"Malformed feature in response: {e}") from e


def build_where_clause(query: str = "", category: str = "") -> str:
    parts = ["1=1"]
    if _is_non_empty(query):
        safe = escape_sql_literal(query.strip())
        parts.append(
            f"(UPPER(NAME) LIKE UPPER('%{safe}%') OR "
            f"UPPER(DESCRIPTION) LIKE UPPER('%{safe}%') OR "
            f"UPPER(OTHER_NAME) LIKE UPPER('%{safe}%'))"
        )
    if _is_non_empty(category):
        parts.append(f"CATEGORY_NAME = '{escape_sql_literal(category.strip())}'")
    return " AND ".join(parts)


class FeatureService(Source):
    """Read-only client for the ACT place names FeatureServer layer."""

    name = "arcgis"

    def __init__(
        self,
        layer_url: str = DEFAULT_LAYER_URL,
        timeout: float = HTTP_TIMEOUT,
        page_size: int = FETCH_PAGE_SIZE,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.layer_url = layer_url.rstrip("/")
        self.page_size = page_size

    async def _get_json(self, url: str, params: dict[str, str], failure: str, default_error: str) -> dict:
        try:
            async with self._client() as client:
                resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ArcGISError(f"{failure}: {e}") from e

        if resp.is_error:
            raise ArcGISError(f"{failure} ({resp.status_code})")

        try:
            data = resp.json()
        except ValueError as e:
            raise ArcGISError(f"{failure}: invalid JSON") from e

        if not isinstance(data, dict):
            raise ArcGISError(f"{failure}: unexpected response")
        if data.get("error"):
            raise ArcGISError(_error_message(data["error"], default_error))
        return data

    async def query_raw(self, params: dict[str, Any]) -> dict:
        cleaned = {k: str(v) for k, v in params.items() if v is not None and v != ""}
        return await self._get_json(
            f"{self.layer_url}/query", cleaned, failure="Query failed", default_error="ArcGIS query error"
        )

    async def get_layer_info(self) -> LayerInfo:
        data = await self._get_json(
            self.layer_url, {"f": "json"}, failure="Failed to load layer info", default_error="ArcGIS layer info error"
        )
        return LayerInfo.model_validate(data)

    async def get_categories(self) -> list[str]:
        result = await self.query_raw(
            {
                "where": "CATEGORY_NAME IS NOT NULL",
                "outFields": "CATEGORY_NAME",
                "orderByFields": "CATEGORY_NAME ASC",
                "returnDistinctValues": "true",
                "returnGeometry": "false",
                "f": "json",
            }
        )
        values = (
            (feature.get("attributes") or {}).get("CATEGORY_NAME")
            for feature in result.get("features") or []
            if isinstance(feature, dict)
        )
        # dict preserves the server's ordering while dropping duplicates
        return list(dict.fromkeys(v.strip() for v in values if _is_non_empty(v)))

    async def search_places(
        self,
        query: str = "",
        category: str = "",
        limit: int = SEARCH_LIMIT,
        offset: int = 0,
        include_geometry: bool = True,
    ) -> SearchResponse:
        has_query = _is_non_empty(query)
        record_count = max(limit * SEARCH_OVERFETCH_FACTOR, SEARCH_OVERFETCH_MIN) if has_query else limit

        result = await self.query_raw(
            {
                "where": build_where_clause(query, category),
                "outFields": ",".join(OUT_FIELDS),
                "orderByFields": DEFAULT_ORDER,
                "resultRecordCount": record_count,
                "resultOffset": offset,
                "returnGeometry": "true" if include_geometry else "false",
                "outSR": OUT_SPATIAL_REFERENCE if include_geometry else None,
                "f": "json",
            }
        )

        features = _records(result)
        if normalize_text(query):
            features = [r.feature for r in rank_features(features, query)]
        else:
            features = sort_by_name_then_id(features)
        features = features[:limit]

        _logger.debug("search_places", query=query, category=category, returned=len(features))
        return SearchResponse(
            features=features,
            count=len(features),
            exceeded_transfer_limit=bool(result.get("exceededTransferLimit")),
        )

    async def get_feature(self, object_id: int) -> FeatureRecord | None:
        result = await self.query_raw(
            {
                "where": f"OBJECTID = {int(object_id)}",
                "outFields": ",".join(OUT_FIELDS),
                "returnGeometry": "true",
                "outSR": OUT_SPATIAL_REFERENCE,
                "f": "json",
            }
        )
        records = _records(result)
        return records[0] if records else None

    async def fetch_all_features(self, on_progress: ProgressFn | None = None) -> list[FeatureRecord]:
        """Download the whole layer, one page at a time, while the server reports more.

        The server may cap a page below ``page_size`` (its maxRecordCount), so the
        offset advances by what actually arrived.
        """
        offset = 0
        pages = 0
        records: list[FeatureRecord] = []

        while True:
            result = await self.query_raw(
                {
                    "where": "1=1",
                    "outFields": ",".join(OUT_FIELDS),
                    "orderByFields": DEFAULT_ORDER,
                    "resultRecordCount": self.page_size,
                    "resultOffset": offset,
                    "returnGeometry": "true",
                    "outSR": OUT_SPATIAL_REFERENCE,
                    "f": "json",
                }
            )
            pages += 1

            page = _records(result)
            records.extend(page)
            if on_progress is not None:
                on_progress(len(records))

            if not page or not result.get("exceededTransferLimit"):
                break
            offset += len(page)

        _logger.info("Fetched full dataset", features=len(records), pages=pages)
        return records
