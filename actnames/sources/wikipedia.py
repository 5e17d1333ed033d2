from dataclasses import dataclass
from enum import StrEnum
from urllib.parse import quote

import httpx

from actnames.constants import DEFAULT_SUMMARY_URL, HTTP_TIMEOUT, NOT_SPECIFIED
from actnames.logging import get_logger
from actnames.sources.base import Source

_logger = get_logger(__name__)


class SummaryStatus(StrEnum):
    SUCCESS = "success"
    NOT_FOUND = "not-found"
    DISAMBIGUATION = "disambiguation"
    ERROR = "error"


@dataclass(frozen=True)
class PageSummary:
    title: str
    extract: str
    thumbnail: str | None
    page_url: str
    description: str


@dataclass(frozen=True)
class SummaryLookup:
    status: SummaryStatus
    summary: PageSummary | None = None
    error: str | None = None
    term: str | None = None


class _SummaryFailed(Exception):
    pass


def _page_summary(data: dict) -> PageSummary:
    thumbnail = data.get("thumbnail") or {}
    urls = (data.get("content_urls") or {}).get("desktop") or {}
    return PageSummary(
        title=data.get("title") or "",
        extract=data.get("extract") or "",
        thumbnail=thumbnail.get("source"),
        page_url=urls.get("page") or "",
        description=data.get("description") or "",
    )


class SummaryService(Source):
    """Page summaries from the Wikipedia REST API, used to enrich a place's namesake."""

    name = "wikipedia"

    def __init__(
        self,
        base_url: str = DEFAULT_SUMMARY_URL,
        timeout: float = HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(timeout=timeout, transport=transport)
        self.base_url = base_url.rstrip("/")

    async def _fetch(self, client: httpx.AsyncClient, term: str) -> dict | None:
        resp = await client.get(f"{self.base_url}/{quote(term, safe='')}", params={"redirect": "true"})
        if resp.status_code == 404:
            return None
        if resp.is_error:
            raise _SummaryFailed(f"Wikipedia request failed ({resp.status_code})")
        try:
            return resp.json()
        except ValueError as e:
            raise _SummaryFailed("Wikipedia returned invalid JSON") from e

    async def lookup(self, primary_term: str, fallback_term: str = "") -> SummaryLookup:
        """Summary for ``primary_term``, retrying ``fallback_term`` on a 404.

        Never raises for upstream trouble; failures come back as an ``error`` status.
        """
        if not primary_term or primary_term == NOT_SPECIFIED:
            return SummaryLookup(status=SummaryStatus.NOT_FOUND)

        term = primary_term
        try:
            async with self._client() as client:
                data = await self._fetch(client, term)
                if data is None and fallback_term and fallback_term != primary_term:
                    term = fallback_term
                    data = await self._fetch(client, term)
        except (httpx.HTTPError, _SummaryFailed) as e:
            _logger.warning("summary lookup failed", term=term, error=str(e))
            return SummaryLookup(status=SummaryStatus.ERROR, error=str(e), term=term)

        if not isinstance(data, dict):
            return SummaryLookup(status=SummaryStatus.NOT_FOUND, term=term)
        if data.get("type") == "disambiguation":
            return SummaryLookup(status=SummaryStatus.DISAMBIGUATION, term=term)
        return SummaryLookup(status=SummaryStatus.SUCCESS, summary=_page_summary(data), term=term)
