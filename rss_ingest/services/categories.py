from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from rss_ingest.services.exceptions import CategoryNormalizationError

logger = logging.getLogger(__name__)

# xml2js-style tag objects keep their text under "_" next to attributes
TAG_TEXT_KEY = "_"


def _to_json(value: Any) -> str:
    try:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError, RecursionError) as e:
        raise CategoryNormalizationError(
            f"Cannot serialize category of type {type(value).__name__}"
        ) from e


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else _to_json(value)


def _coerce_list(raw: Any) -> list[Any]:
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except (ValueError, RecursionError):
            return [raw]
        return parsed if isinstance(parsed, list) else [raw]
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return [raw]


def _tag_text(value: Any) -> str:
    if isinstance(value, Mapping) and value.get(TAG_TEXT_KEY):
        return _as_text(value[TAG_TEXT_KEY])
    return _as_text(value)


def normalize_categories(raw: Any) -> list[str]:
    """
    Turn whatever a feed put in "categories" into an ordered list of strings.

    - None -> []
    - a string is tried as a JSON array first, else kept as one category
    - a list whose first element is a string is a plain string list
    - any other list is a list of tag objects: "_" text if present,
      otherwise the element serialized as compact JSON

    The first element decides how the whole list is read. If any element
    cannot be turned into text the whole field becomes [].
    """
    if raw is None:
        return []

    values = _coerce_list(raw)
    if not values:
        return []

    try:
        if isinstance(values[0], str):
            return [_as_text(v) for v in values]
        return [_tag_text(v) for v in values]
    except CategoryNormalizationError as e:
        logger.debug("Dropping categories: %s", e)
        return []
