"""Parsing of the semi-structured DESCRIPTION field.

Descriptions in the place names layer are loosely formatted blocks such as::

    Feature name: Mawson Park
    Commemorated Name: Sir Mawson
    Biography: A noted explorer.

Some records follow that layout, some mix it with prose and some are prose
only. Everything here degrades to empty fields instead of raising, so one odd
record never stops a result list from rendering.
"""

import re
from dataclasses import dataclass
from typing import Any

from actnames.constants import BIOGRAPHY_PREVIEW_LENGTH, NOT_SPECIFIED

_LINE_BREAK = re.compile(r"\r?\n")

# The data's whitespace set: includes the BOM (U+FEFF) but not NEL (U+0085)
# or the ASCII separators U+001C..U+001F, unlike str.strip() and re's \s.
_SPACE_CHARS = r"\t\n\v\f\r \u00a0\u1680\u2000-\u200a\u2028\u2029\u202f\u205f\u3000\ufeff"
_WHITESPACE = re.compile(f"[{_SPACE_CHARS}]+")
_EDGE_WHITESPACE = re.compile(rf"\A[{_SPACE_CHARS}]+|[{_SPACE_CHARS}]+\Z")

# Keys outside this length range are colons inside prose, not field labels.
_MIN_KEY_LENGTH = 2
_MAX_KEY_LENGTH = 40

_ELLIPSIS = "..."

LABEL_FEATURE_NAME = "Feature name"
LABEL_COMMEMORATED_NAME = "Commemorated name"
LABEL_GIVEN_NAMES = "Given names"
LABEL_TITLE = "Title"
LABEL_ALIAS = "Alias"


@dataclass(frozen=True)
class LabelledValue:
    label: str
    value: str


@dataclass(frozen=True)
class ParsedDescription:
    feature_name: str = ""
    commemorated_name: str = ""
    biography: str = ""
    given_names: str = ""
    title: str = ""
    alias: str = ""
    labelled_values: tuple[LabelledValue, ...] = ()


def trim(value: str) -> str:
    return _EDGE_WHITESPACE.sub("", value)


def clean_value(value: Any) -> str:
    """Collapse whitespace runs to single spaces and trim. Non-strings give ""."""
    if not isinstance(value, str):
        return ""
    return trim(_WHITESPACE.sub(" ", value))


def _is_meaningful(value: str) -> bool:
    return bool(value) and value.lower() != "none"


def _extract_fields(raw_text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    for line in _LINE_BREAK.split(raw_text):
        line = trim(line)
        if not line:
            continue

        key, sep, value = line.partition(":")
        if not sep:
            continue

        key = clean_value(key).lower()
        value = clean_value(value)
        if _MIN_KEY_LENGTH <= len(key) < _MAX_KEY_LENGTH and value:
            # later lines overwrite earlier ones
            fields[key] = value
    return fields


def parse_description(description: Any) -> ParsedDescription:
    """Split a DESCRIPTION value into labelled fields and a biography.

    Each ``key: value`` line contributes one field, keyed by its lower-cased
    label. The biography falls back to the whole cleaned text when no
    ``Biography:`` line exists, which covers prose-only records.
    ``labelled_values`` keeps a fixed label order and drops empty values and
    the literal ``none``.
    """
    raw_text = description if isinstance(description, str) else ""
    fields = _extract_fields(raw_text)

    feature_name = fields.get("feature name", "")
    commemorated_name = fields.get("commemorated name", "")
    biography = fields.get("biography") or clean_value(raw_text)
    given_names = fields.get("given names", "")
    title = fields.get("title", "")
    alias = fields.get("alias", "")

    candidates = (
        (LABEL_FEATURE_NAME, feature_name),
        (LABEL_COMMEMORATED_NAME, commemorated_name),
        (LABEL_GIVEN_NAMES, given_names),
        (LABEL_TITLE, title),
        (LABEL_ALIAS, alias),
    )
    labelled_values = tuple(
        LabelledValue(label=label, value=value) for label, value in candidates if _is_meaningful(value)
    )

    return ParsedDescription(
        feature_name=feature_name,
        commemorated_name=commemorated_name,
        biography=biography,
        given_names=given_names,
        title=title,
        alias=alias,
        labelled_values=labelled_values,
    )


def get_label_value(parsed: ParsedDescription, label: str) -> str:
    for entry in parsed.labelled_values:
        if entry.label == label:
            return entry.value
    return ""


def build_named_after_label(
    commemorated_name: str = "",
    given_names: str = "",
    title: str = "",
    fallback_name: str = "",
) -> str:
    """Best human-readable subject for a place: "Title Given Names Surname".

    Falls back to ``fallback_name`` and finally to ``NOT_SPECIFIED``, which
    callers treat as "no subject, skip enrichment".
    """
    pieces = (clean_value(piece) for piece in (title, given_names, commemorated_name))
    full_name = " ".join(piece for piece in pieces if piece)
    return full_name or clean_value(fallback_name) or NOT_SPECIFIED


def format_biography_preview(text: Any, max_length: int = BIOGRAPHY_PREVIEW_LENGTH) -> str:
    cleaned = clean_value(text)
    if len(cleaned) <= max_length:
        return cleaned
    return f"{trim(cleaned[:max_length])}{_ELLIPSIS}"
