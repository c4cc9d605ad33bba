from __future__ import annotations

import re
from typing import Iterable

# the merchant console joins tags with the full-width comma
TAG_SEPARATOR = "，"
# width of hotels.tags
MAX_TAGS_LENGTH = 500
_SPLIT_RE = re.compile(r"[,，]")


def parse_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    return _dedupe(part.strip() for part in _SPLIT_RE.split(raw))


def encode_tags(tags: str | Iterable[str] | None) -> str | None:
    """Accept a delimited string or a list; store the set as one string, None when empty."""
    if tags is None:
        return None
    if isinstance(tags, str):
        items = parse_tags(tags)
    else:
        items = _dedupe(part for tag in tags for part in parse_tags(tag))
    return TAG_SEPARATOR.join(items) or None


def _dedupe(parts: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for p in parts:
        if p and p not in seen:
            seen.add(p)
            out.append(p)
    return out
