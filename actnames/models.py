from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from actnames.constants import UNCATEGORISED, UNKNOWN_DIVISION, UNKNOWN_NAME


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Geometry(_FrozenModel):
    """Point geometry in WGS84: x is longitude, y is latitude."""

    x: float
    y: float

    @property
    def is_valid(self) -> bool:
        return -180 <= self.x <= 180 and -90 <= self.y <= 90

    @property
    def lat(self) -> float:
        return self.y

    @property
    def lng(self) -> float:
        return self.x


def _parse_geometry(raw: Any) -> Geometry | None:
    if not isinstance(raw, Mapping):
        return None
    x, y = raw.get("x"), raw.get("y")
    # bool is an int subclass; ArcGIS never sends it for coordinates
    if not all(isinstance(v, int | float) and not isinstance(v, bool) for v in (x, y)):
        return None
    return Geometry(x=x, y=y)


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def _bucket(value: str | None, fallback: str) -> str:
    if value is None:
        return fallback
    return value.strip() or fallback


class FeatureRecord(_FrozenModel):
    """One place-name entry from the ACT place names layer."""

    object_id: int = Field(alias="OBJECTID")
    name: str | None = Field(default=None, alias="NAME")
    category_name: str | None = Field(default=None, alias="CATEGORY_NAME")
    other_name: str | None = Field(default=None, alias="OTHER_NAME")
    division_code: str | None = Field(default=None, alias="DIVISION_CODE")
    description: str | None = Field(default=None, alias="DESCRIPTION")
    gazettal_information: str | None = Field(default=None, alias="GAZETTAL_INFORMATION")
    geometry: Geometry | None = None

    @classmethod
    def from_arcgis(cls, feature: Mapping[str, Any]) -> "FeatureRecord":
        """Build a record from one ArcGIS feature (``{"attributes": ..., "geometry": ...}``).

        Missing attributes become None and malformed geometry is dropped. Anything
        other than a mapping, or an OBJECTID that is not an integer, raises TypeError.
        """
        if not isinstance(feature, Mapping):
            raise TypeError(f"Expected an ArcGIS feature mapping, got {type(feature).__name__}")

        attrs = feature.get("attributes") or {}
        if not isinstance(attrs, Mapping):
            raise TypeError(f"Expected feature attributes mapping, got {type(attrs).__name__}")

        raw_id = attrs.get("OBJECTID")
        try:
            object_id = int(raw_id) if raw_id is not None else 0
        except (TypeError, ValueError) as e:
            raise TypeError(f"Expected an integer OBJECTID, got {raw_id!r}") from e

        return cls(
            object_id=object_id,
            name=_optional_str(attrs.get("NAME")),
            category_name=_optional_str(attrs.get("CATEGORY_NAME")),
            other_name=_optional_str(attrs.get("OTHER_NAME")),
            division_code=_optional_str(attrs.get("DIVISION_CODE")),
            description=_optional_str(attrs.get("DESCRIPTION")),
            gazettal_information=_optional_str(attrs.get("GAZETTAL_INFORMATION")),
            geometry=_parse_geometry(feature.get("geometry")),
        )

    @property
    def display_name(self) -> str:
        return self.name or UNKNOWN_NAME

    @property
    def display_category(self) -> str:
        return self.category_name or UNCATEGORISED

    @property
    def category_bucket(self) -> str:
        return _bucket(self.category_name, UNCATEGORISED)

    @property
    def division_bucket(self) -> str:
        return _bucket(self.division_code, UNKNOWN_DIVISION)

    @property
    def valid_geometry(self) -> Geometry | None:
        if self.geometry is not None and self.geometry.is_valid:
            return self.geometry
        return None


class LayerInfo(_FrozenModel):
    name: str | None = None
    description: str | None = None
    max_record_count: int | None = Field(default=None, alias="maxRecordCount")
    copyright_text: str | None = Field(default=None, alias="copyrightText")


class SearchResponse(_FrozenModel):
    features: list[FeatureRecord]
    count: int
    exceeded_transfer_limit: bool = False
