from fastapi import APIRouter, Depends, HTTPException, Query

from actnames.constants import MAX_RECORD_COUNT
from actnames.models import FeatureRecord
from actnames.ranking import SearchFilters, SearchScope, SortMode, rank_scored
from actnames.server.runtime import Runtime, get_runtime
from actnames.stats import compute_stats
from actnames.views import build_card, build_markers, marker_bounds, status_message, summary_terms

router = APIRouter(tags=["places"])


async def _require_feature(object_id: int, rt: Runtime) -> FeatureRecord:
    feature = await rt.get_feature(object_id)
    if feature is None:
        raise HTTPException(status_code=404, detail="Feature not found")
    return feature


@router.get("/layer")
async def layer(rt: Runtime = Depends(get_runtime)):
    info = await rt.features.get_layer_info()
    return {
        "name": info.name or "ACT place names",
        "description": info.description,
        "copyright": info.copyright_text,
        "source_url": rt.config.layer_url,
    }


@router.get("/categories")
async def categories(rt: Runtime = Depends(get_runtime)):
    return {"categories": await rt.features.get_categories()}


@router.get("/search")
async def search(
    q: str = "",
    category: str = "",
    limit: int | None = Query(default=None, ge=1, le=MAX_RECORD_COUNT),
    rt: Runtime = Depends(get_runtime),
):
    """Server-side filtered query, ranked locally."""
    query = q.strip()
    result = await rt.features.search_places(query=query, category=category, limit=limit or rt.config.search_limit)
    return {
        "results": [build_card(f, rt.config.preview_length) for f in result.features],
        "count": result.count,
        "exceeded_transfer_limit": result.exceeded_transfer_limit,
        "status": status_message(result.count, query, category),
    }


@router.get("/explore")
async def explore(
    q: str = "",
    category: list[str] = Query(default=[]),
    division: str | None = None,
    scope: SearchScope = SearchScope.ALL,
    sort: SortMode = SortMode.RELEVANCE,
    offset: int = Query(default=0, ge=0),
    limit: int | None = Query(default=None, ge=1, le=MAX_RECORD_COUNT),
    rt: Runtime = Depends(get_runtime),
):
    """Filter and rank the full dataset in memory."""
    dataset = await rt.get_dataset()
    filters = SearchFilters(
        categories=frozenset(c.strip() for c in category if c.strip()),
        division=division.strip() if division and division.strip() else None,
        scope=scope,
    )
    ranked = rank_scored(dataset, q, filters, sort)

    limit = limit or rt.config.search_limit
    page = ranked[offset : offset + limit]
    markers = build_markers((r.feature for r in page), rt.config.popup_preview_length)
    return {
        "results": [build_card(r.feature, rt.config.preview_length, score=r.score) for r in page],
        "markers": markers,
        "bounds": marker_bounds(markers),
        "total": len(ranked),
        "offset": offset,
        "has_more": offset + limit < len(ranked),
    }


@router.get("/features/{object_id}")
async def feature_detail(object_id: int, rt: Runtime = Depends(get_runtime)):
    feature = await _require_feature(object_id, rt)
    return build_card(feature, rt.config.preview_length)


@router.get("/features/{object_id}/summary")
async def feature_summary(object_id: int, rt: Runtime = Depends(get_runtime)):
    feature = await _require_feature(object_id, rt)
    primary, fallback = summary_terms(feature)
    lookup = await rt.summaries.lookup(primary, fallback)
    return {
        "status": lookup.status,
        "term": lookup.term,
        "summary": lookup.summary,
        "error": lookup.error,
    }


@router.get("/stats")
async def stats(rt: Runtime = Depends(get_runtime)):
    return compute_stats(await rt.get_dataset())
