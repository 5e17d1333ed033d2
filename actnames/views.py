"""Display-ready views of place-name records, shared by the CLI and the API."""

from collections.abc import Iterable

from pydantic import BaseModel

from actnames.constants import BIOGRAPHY_PREVIEW_LENGTH, GOOGLE_MAPS_URL, POPUP_PREVIEW_LENGTH
from actnames.description import (
    LABEL_GIVEN_NAMES,
    LABEL_TITLE,
    ParsedDescription,
    build_named_after_label,
    format_biography_preview,
    get_label_value,
    parse_description,
)
from actnames.models import FeatureRecord


class LabelledValueView(BaseModel):
    label: str
    value: str


class ResultCard(BaseModel):
    object_id: int
    name: str
    category: str
    named_after: str
    feature_name: str
    details: list[LabelledValueView]
    biography_preview: str
    biography: str
    gazettal_information: str | None = None
    other_name: str | None = None
    division_code: str | None = None
    lat: float | None = None
    lng: float | None = None
    maps_url: str | None = None
    score: int | None = None


class MapMarker(BaseModel):
    object_id: int
    lat: float
    lng: float
    title: str
    named_after: str
    preview: str


class Bounds(BaseModel):
    south: float
    west: float
    north: float
    east: float


def named_after(feature: FeatureRecord, parsed: ParsedDescription | None = None) -> str:
    parsed = parsed or parse_description(feature.description or "")
    return build_named_after_label(
        commemorated_name=parsed.commemorated_name,
        given_names=get_label_value(parsed, LABEL_GIVEN_NAMES),
        title=get_label_value(parsed, LABEL_TITLE),
        fallback_name=feature.other_name or feature.name or "",
    )


def summary_terms(feature: FeatureRecord) -> tuple[str, str]:
    """(primary, fallback) terms for the encyclopedia lookup of a feature's namesake."""
    parsed = parse_description(feature.description or "")
    return named_after(feature, parsed), parsed.commemorated_name or feature.other_name or ""


def build_card(
    feature: FeatureRecord,
    preview_length: int = BIOGRAPHY_PREVIEW_LENGTH,
    score: int | None = None,
) -> ResultCard:
    parsed = parse_description(feature.description or "")
    geometry = feature.valid_geometry

    return ResultCard(
        object_id=feature.object_id,
        name=feature.display_name,
        category=feature.display_category,
        named_after=named_after(feature, parsed),
        feature_name=parsed.feature_name,
        details=[LabelledValueView(label=v.label, value=v.value) for v in parsed.labelled_values],
        biography_preview=format_biography_preview(parsed.biography, preview_length),
        biography=parsed.biography,
        gazettal_information=feature.gazettal_information or None,
        other_name=feature.other_name or None,
        division_code=feature.division_code or None,
        lat=geometry.lat if geometry else None,
        lng=geometry.lng if geometry else None,
        maps_url=GOOGLE_MAPS_URL.format(lat=geometry.lat, lng=geometry.lng) if geometry else None,
        score=score,
    )


def build_marker(feature: FeatureRecord, preview_length: int = POPUP_PREVIEW_LENGTH) -> MapMarker | None:
    geometry = feature.valid_geometry
    if geometry is None:
        return None

    parsed = parse_description(feature.description or "")
    return MapMarker(
        object_id=feature.object_id,
        lat=geometry.lat,
        lng=geometry.lng,
        title=feature.display_name,
        named_after=named_after(feature, parsed),
        preview=format_biography_preview(parsed.biography, preview_length),
    )


def build_markers(features: Iterable[FeatureRecord], preview_length: int = POPUP_PREVIEW_LENGTH) -> list[MapMarker]:
    markers = (build_marker(f, preview_length) for f in features)
    return [m for m in markers if m is not None]


def marker_bounds(markers: list[MapMarker]) -> Bounds | None:
    if not markers:
        return None
    lats = [m.lat for m in markers]
    lngs = [m.lng for m in markers]
    return Bounds(south=min(lats), west=min(lngs), north=max(lats), east=max(lngs))


def status_message(count: int, query: str = "", category: str = "") -> str:
    plural = "" if count == 1 else "s"
    query_part = f' for "{query}"' if query else ""
    category_part = f" in {category}" if category else ""
    return f"Showing {count} result{plural}{query_part}{category_part}."
