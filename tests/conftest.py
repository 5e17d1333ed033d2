import json
import os
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import httpx
import pytest
import structlog

import actnames.config
from actnames.models import FeatureRecord


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch) -> Path:
    """Keep ~/.actnames and ACTNAMES_* env vars out of every test."""
    settings_dir = tmp_path / "home" / ".actnames"
    monkeypatch.setattr(actnames.config, "ACTNAMES_DIR", settings_dir)
    monkeypatch.setattr(actnames.config, "SETTINGS_PATH", settings_dir / "settings.json")
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("ACTNAMES_"):
            monkeypatch.delenv(key)
    return settings_dir / "settings.json"


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


def make_feature(
    object_id: int,
    name: str | None = None,
    *,
    category: str | None = None,
    other_name: str | None = None,
    division: str | None = None,
    description: str | None = None,
    gazettal: str | None = None,
    x: float | None = None,
    y: float | None = None,
) -> dict:
    """ArcGIS-shaped feature JSON."""
    attributes = {
        "OBJECTID": object_id,
        "NAME": name,
        "CATEGORY_NAME": category,
        "OTHER_NAME": other_name,
        "DIVISION_CODE": division,
        "DESCRIPTION": description,
        "GAZETTAL_INFORMATION": gazettal,
    }
    feature: dict = {"attributes": attributes}
    if x is not None and y is not None:
        feature["geometry"] = {"x": x, "y": y}
    return feature


def make_record(object_id: int, name: str | None = None, **kwargs) -> FeatureRecord:
    return FeatureRecord.from_arcgis(make_feature(object_id, name, **kwargs))


MAWSON_DESCRIPTION = (
    "Feature name: Mawson Drive\n"
    "Commemorated name: Mawson\n"
    "Given names: Douglas\n"
    "Title: Sir\n"
    "Biography: Antarctic explorer and geologist who led the Australasian Antarctic Expedition."
)

SAMPLE_FEATURES = [
    make_feature(
        1,
        "Mawson Drive",
        category="STREET",
        division="MAWSON",
        description=MAWSON_DESCRIPTION,
        x=149.0987,
        y=-35.3628,
    ),
    make_feature(
        2,
        "Cook Street",
        category="STREET",
        division="TURNER",
        description="Commemorated name: Cook\nBiography: Navigator.",
        x=149.12,
        y=-35.27,
    ),
    make_feature(
        3,
        "Ainslie",
        category="SUBURB",
        description="Named after James Ainslie, a shepherd.",
        x=149.14,
        y=-35.26,
    ),
    make_feature(4, "Banks Place", category="PLACE", other_name="Cook Reserve", division="TURNER"),
    make_feature(5, "Zed Lane", description="Alias: None\nTitle: None"),
]


@pytest.fixture
def sample_features() -> list[dict]:
    return [json.loads(json.dumps(f)) for f in SAMPLE_FEATURES]


@pytest.fixture
def sample_records(sample_features) -> list[FeatureRecord]:
    return [FeatureRecord.from_arcgis(f) for f in sample_features]


Handler: TypeAlias = Callable[[httpx.Request], httpx.Response]


def arcgis_handler(features: list[dict], *, layer_name: str = "ACT Place Names") -> Handler:
    """A tiny stand-in for the FeatureServer layer.

    Honours OBJECTID lookups, CATEGORY_NAME IS NOT NULL and paging; everything
    else returns the whole feature list.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if not request.url.path.endswith("/query"):
            return httpx.Response(200, json={"name": layer_name, "maxRecordCount": 2000})

        where = params.get("where", "")
        selected = features
        if where.startswith("OBJECTID = "):
            wanted = int(where.removeprefix("OBJECTID = "))
            selected = [f for f in features if f["attributes"]["OBJECTID"] == wanted]
        elif where == "CATEGORY_NAME IS NOT NULL":
            selected = [
                {"attributes": {"CATEGORY_NAME": f["attributes"]["CATEGORY_NAME"]}}
                for f in features
                if f["attributes"].get("CATEGORY_NAME") is not None
            ]

        offset = int(params.get("resultOffset", "0"))
        count = int(params.get("resultRecordCount", str(len(selected) or 1)))
        page = selected[offset : offset + count]
        return httpx.Response(
            200,
            json={"features": page, "exceededTransferLimit": offset + count < len(selected)},
        )

    return handler
