# --- Data sources ---

DEFAULT_LAYER_URL = (
    "https://services1.arcgis.com/E5n4f1VY84i0xSjy/ArcGIS/rest/services/ACTGOV_PLACENAMES/FeatureServer/0"
)
DEFAULT_SUMMARY_URL = "https://en.wikipedia.org/api/rest_v1/page/summary"

OUT_FIELDS = (
    "OBJECTID",
    "NAME",
    "CATEGORY_NAME",
    "DESCRIPTION",
    "GAZETTAL_INFORMATION",
    "OTHER_NAME",
    "DIVISION_CODE",
)

# WGS84, so geometry arrives as lon/lat
OUT_SPATIAL_REFERENCE = "4326"


# --- Pagination ---

SEARCH_LIMIT = 80
FETCH_PAGE_SIZE = 1000
# Server-side searches over-fetch so local ranking can promote strong matches
# ahead of incidental description hits.
SEARCH_OVERFETCH_FACTOR = 4
SEARCH_OVERFETCH_MIN = 200
MAX_RECORD_COUNT = 2000


# --- Display ---

BIOGRAPHY_PREVIEW_LENGTH = 340
POPUP_PREVIEW_LENGTH = 220
STATS_TOP_N = 15

UNKNOWN_NAME = "Unknown"
UNCATEGORISED = "Uncategorised"
UNKNOWN_DIVISION = "Unknown"
NOT_SPECIFIED = "Not specified"

GOOGLE_MAPS_URL = "https://www.google.com/maps?q={lat},{lng}"


# --- Relevance weights ---
# Within one field only the strongest of exact/prefix/contains applies;
# fields add up.

NAME_EXACT = 1000
NAME_PREFIX = 800
NAME_CONTAINS = 600

OTHER_NAME_EXACT = 550
OTHER_NAME_PREFIX = 350
OTHER_NAME_CONTAINS = 250

DESCRIPTION_COMMEMORATED = 300
DESCRIPTION_FEATURE_NAME = 250
DESCRIPTION_CONTAINS = 100


# --- HTTP ---

HTTP_TIMEOUT = 30.0
